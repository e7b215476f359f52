from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles stored in the session; only admins may record attendance."""

    ADMIN = "admin"
    STAFF = "staff"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the dataset (source-locale values)."""

    PRESENT = "Hadir"
    EXCUSED_LEAVE = "Izin"
    SICK = "Sakit"
    UNEXCUSED = "Alpha"


class PersonKind(str, Enum):
    """Who an attendance record is about. Values are the URL slugs."""

    TEACHER = "guru"
    STUDENT = "siswa"


class WriteResult(str, Enum):
    OK = "OK"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    INVALID = "INVALID"
    FAILED = "FAILED"


class AggregatorState(str, Enum):
    IDLE = "IDLE"
    FETCHING = "FETCHING"
    COMPUTING = "COMPUTING"
    FAILED = "FAILED"
