from __future__ import annotations

import asyncio

import pytest

from school_attendance.attendance.document_repository import DocumentAttendanceRepository
from school_attendance.attendance.live_view import LiveAttendanceView
from school_attendance.attendance.model import AttendanceKey, ViewFilter
from school_attendance.attendance.service import AttendanceService
from school_attendance.catalog.document_repository import DocumentCatalogRepository
from school_attendance.catalog.service import EntityCatalog
from school_attendance.common.access import StaticAccessControl
from school_attendance.core.enums import AttendanceStatus, PersonKind, WriteResult
from school_attendance.core.exceptions import StoreError
from school_attendance.store.memory_store import InMemoryDocumentStore

KEY = AttendanceKey("J1", "S1", "2026-10-05")


class SpyStore(InMemoryDocumentStore):
    def __init__(self):
        super().__init__()
        self.upserts: list[tuple[str, str]] = []
        self.queries = 0

    async def query(self, collection, predicates=()):
        self.queries += 1
        return await super().query(collection, predicates)

    async def upsert(self, collection, doc_id, fields, *, merge=True):
        self.upserts.append((collection, doc_id))
        await super().upsert(collection, doc_id, fields, merge=merge)


class BrokenWritesStore(InMemoryDocumentStore):
    async def upsert(self, collection, doc_id, fields, *, merge=True):
        raise StoreError("write quota exceeded")


def _writer(store, kind=PersonKind.STUDENT, *, allowed=True, notifier=None, view=None, legacy_lookup=True):
    catalog = EntityCatalog(DocumentCatalogRepository(store))
    asyncio.run(catalog.reload())
    return AttendanceService(
        DocumentAttendanceRepository(store, kind),
        StaticAccessControl(allowed),
        catalog=catalog,
        view=view,
        notifier=notifier,
        legacy_lookup=legacy_lookup,
    )


def test_write_creates_record_under_deterministic_id(store):
    writer = _writer(store)

    outcome = asyncio.run(writer.set_status(KEY, AttendanceStatus.PRESENT))

    assert outcome.ok
    assert outcome.record_id == "J1|S1|2026-10-05"
    assert store.get("absensiSiswa", "J1|S1|2026-10-05") == {
        "jadwalId": "J1",
        "siswaId": "S1",
        "tanggal": "2026-10-05",
        "status": "Hadir",
        "kelas": 1,
    }


def test_status_change_keeps_existing_note(store):
    writer = _writer(store)

    async def scenario():
        await writer.set_status(KEY, AttendanceStatus.SICK, note="Surat dokter")
        return await writer.set_status(KEY, "Izin")

    outcome = asyncio.run(scenario())

    assert outcome.result == WriteResult.OK
    docs = store.documents("absensiSiswa")
    assert list(docs) == ["J1|S1|2026-10-05"]
    assert docs["J1|S1|2026-10-05"]["status"] == "Izin"
    assert docs["J1|S1|2026-10-05"]["keterangan"] == "Surat dokter"


def test_repeating_a_write_changes_nothing(store):
    writer = _writer(store)

    asyncio.run(writer.set_status(KEY, AttendanceStatus.UNEXCUSED))
    first = store.documents("absensiSiswa")
    asyncio.run(writer.set_status(KEY, AttendanceStatus.UNEXCUSED))

    assert store.documents("absensiSiswa") == first


def test_caller_without_privilege_never_reaches_the_store(notifier):
    store = SpyStore()
    writer = _writer(store, allowed=False, notifier=notifier)
    queries_after_catalog = store.queries

    outcome = asyncio.run(writer.set_status(KEY, AttendanceStatus.PRESENT))

    assert outcome.result == WriteResult.PERMISSION_DENIED
    assert store.upserts == []
    assert store.queries == queries_after_catalog
    assert notifier.messages == []


@pytest.mark.parametrize(
    "key, status",
    [
        (AttendanceKey("", "S1", "2026-10-05"), "Hadir"),
        (AttendanceKey("J1", "  ", "2026-10-05"), "Hadir"),
        (AttendanceKey("J1", "S1", ""), "Hadir"),
        (KEY, "Telat"),
    ],
)
def test_invalid_writes_are_rejected(store, key, status):
    writer = _writer(store)

    outcome = asyncio.run(writer.set_status(key, status))

    assert outcome.result == WriteResult.INVALID
    assert outcome.error is not None
    assert store.documents("absensiSiswa") == {}


def test_store_failure_is_reported_not_raised(notifier):
    store = BrokenWritesStore()
    writer = _writer(store, notifier=notifier)

    outcome = asyncio.run(writer.set_status(KEY, AttendanceStatus.PRESENT))

    assert outcome.result == WriteResult.FAILED
    assert isinstance(outcome.error, StoreError)
    assert notifier.messages == [("error", "Gagal menyimpan absensi siswa", "write quota exceeded")]


def test_fire_and_forget_write_still_reports_failure(notifier):
    store = BrokenWritesStore()
    writer = _writer(store, PersonKind.TEACHER, notifier=notifier)

    async def scenario():
        writer.submit_status(AttendanceKey("J1", "G1", "2026-10-05"), AttendanceStatus.PRESENT)
        for _ in range(10):
            await asyncio.sleep(0)

    asyncio.run(scenario())

    assert notifier.of_level("error") == [("error", "Gagal menyimpan absensi guru", "write quota exceeded")]


def test_submitted_write_can_be_awaited(store):
    writer = _writer(store)

    async def scenario():
        task = writer.submit_status(KEY, AttendanceStatus.SICK)
        return await task

    assert asyncio.run(scenario()).ok
    assert store.get("absensiSiswa", "J1|S1|2026-10-05")["status"] == "Sakit"


def test_teacher_write_announces_the_change(store, notifier):
    writer = _writer(store, PersonKind.TEACHER, notifier=notifier)

    asyncio.run(writer.set_status(AttendanceKey("J1", "G1", "2026-10-05"), "Sakit"))

    assert notifier.of_level("success") == [
        ("success", "Absensi diperbarui", "Status guru Budi Santoso diubah menjadi Sakit.")
    ]
    assert store.get("absensiGuru", "J1|G1|2026-10-05")["status"] == "Sakit"


def test_legacy_record_is_updated_in_place(store):
    store.put("absensiSiswa", "Qw7AutoGenerated", {"jadwalId": "J1", "siswaId": "S1", "tanggal": "2026-10-05", "status": "Alpha"})
    writer = _writer(store)

    outcome = asyncio.run(writer.set_status(KEY, AttendanceStatus.PRESENT))

    assert outcome.record_id == "Qw7AutoGenerated"
    docs = store.documents("absensiSiswa")
    assert list(docs) == ["Qw7AutoGenerated"]
    assert docs["Qw7AutoGenerated"]["status"] == "Hadir"


def test_legacy_lookup_can_be_switched_off(store):
    store.put("absensiSiswa", "Qw7AutoGenerated", {"jadwalId": "J1", "siswaId": "S1", "tanggal": "2026-10-05", "status": "Alpha"})
    writer = _writer(store, legacy_lookup=False)

    outcome = asyncio.run(writer.set_status(KEY, AttendanceStatus.PRESENT))

    assert outcome.record_id == "J1|S1|2026-10-05"
    assert store.get("absensiSiswa", "Qw7AutoGenerated")["status"] == "Alpha"


def test_id_shown_in_live_view_is_reused(store, settle):
    store.put(
        "absensiSiswa",
        "FromOldScreen",
        {"jadwalId": "J1", "siswaId": "S1", "tanggal": "2026-10-05", "status": "Alpha", "kelas": 1},
    )
    repo = DocumentAttendanceRepository(store, PersonKind.STUDENT)

    async def scenario():
        view = LiveAttendanceView(repo)
        await view.observe(ViewFilter("2026-10-05", 1, "J1"))
        await settle()
        catalog = EntityCatalog(DocumentCatalogRepository(store))
        await catalog.reload()
        writer = AttendanceService(repo, StaticAccessControl(True), catalog=catalog, view=view, legacy_lookup=False)

        outcome = await writer.set_status(KEY, AttendanceStatus.SICK)
        await settle()
        shown = view.status_of(KEY)
        await view.close()
        return outcome, shown

    outcome, shown = asyncio.run(scenario())
    assert outcome.record_id == "FromOldScreen"
    assert shown == AttendanceStatus.SICK
    assert list(store.documents("absensiSiswa")) == ["FromOldScreen"]


def test_view_of_other_kind_is_rejected(store):
    view = LiveAttendanceView(DocumentAttendanceRepository(store, PersonKind.TEACHER))

    with pytest.raises(ValueError):
        AttendanceService(
            DocumentAttendanceRepository(store, PersonKind.STUDENT),
            StaticAccessControl(True),
            view=view,
        )
