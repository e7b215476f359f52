from __future__ import annotations

import asyncio

from school_attendance.attendance.document_repository import DocumentAttendanceRepository
from school_attendance.attendance.model import AttendanceKey, ViewFilter
from school_attendance.core.enums import AttendanceStatus, PersonKind


def test_incomplete_and_unknown_status_documents_are_skipped(store):
    store.put("absensiSiswa", "ok", {"jadwalId": "J1", "siswaId": "S1", "tanggal": "2026-10-05", "status": "Hadir"})
    store.put("absensiSiswa", "no-person", {"jadwalId": "J1", "tanggal": "2026-10-05", "status": "Hadir"})
    store.put("absensiSiswa", "odd", {"jadwalId": "J1", "siswaId": "S2", "tanggal": "2026-10-05", "status": "Telat"})
    repo = DocumentAttendanceRepository(store, PersonKind.STUDENT)

    events = asyncio.run(repo.list_for_day(ViewFilter("2026-10-05")))

    assert [e.record_id for e in events] == ["ok"]
    assert events[0].status == AttendanceStatus.PRESENT


def test_upsert_writes_wire_fields_and_keeps_unmentioned_ones(store):
    repo = DocumentAttendanceRepository(store, PersonKind.TEACHER)
    key = AttendanceKey("J1", "G1", "2026-10-05")

    async def scenario():
        await repo.upsert("J1|G1|2026-10-05", key, status=AttendanceStatus.SICK, note="Demam", class_number=1)
        await repo.upsert("J1|G1|2026-10-05", key, status=AttendanceStatus.PRESENT)

    asyncio.run(scenario())

    assert store.get("absensiGuru", "J1|G1|2026-10-05") == {
        "jadwalId": "J1",
        "guruId": "G1",
        "tanggal": "2026-10-05",
        "status": "Hadir",
        "kelas": 1,
        "keterangan": "Demam",
    }


def test_class_stored_as_text_is_read_as_number(store):
    store.put(
        "absensiSiswa",
        "legacy",
        {"jadwalId": "J1", "siswaId": "S1", "tanggal": "2026-10-05", "status": "Izin", "kelas": "1"},
    )
    repo = DocumentAttendanceRepository(store, PersonKind.STUDENT)

    (event,) = asyncio.run(repo.find_by_key(AttendanceKey("J1", "S1", "2026-10-05")))

    assert event.class_number == 1
    assert event.record_id == "legacy"
