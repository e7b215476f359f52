"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Store-imposed cap on the size of an `in` predicate.
DEFAULT_QUERY_BATCH_LIMIT = 30
DEFAULT_POLL_INTERVAL_SECONDS = 2.0
DEFAULT_STORE_TIMEOUT_SECONDS = 10.0
DEFAULT_STORE_RETRIES = 2

# Display value for anything the catalog cannot resolve.
PLACEHOLDER = "—"

# Indexed by date.weekday() (Monday == 0).
DAY_NAMES = ("Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu")

CLASS_OPTIONS = (0, 1, 2, 3, 4, 5, 6)

ACTIVE_STUDENT_STATUS = "Aktif"

# Collection names in the document store.
TEACHERS_COLLECTION = "gurus"
STUDENTS_COLLECTION = "siswa"
SUBJECTS_COLLECTION = "kurikulum"
SLOTS_COLLECTION = "jadwal"
TEACHER_ATTENDANCE_COLLECTION = "absensiGuru"
STUDENT_ATTENDANCE_COLLECTION = "absensiSiswa"
