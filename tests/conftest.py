from __future__ import annotations

import asyncio
from datetime import date

import pytest

from school_attendance.store.memory_store import InMemoryDocumentStore

MONDAY = date(2026, 10, 5)


class RecordingNotifier:
    def __init__(self):
        self.messages: list[tuple[str, str, str]] = []

    def success(self, title: str, message: str = "") -> None:
        self.messages.append(("success", title, message))

    def error(self, title: str, message: str = "") -> None:
        self.messages.append(("error", title, message))

    def of_level(self, level: str) -> list[tuple[str, str, str]]:
        return [m for m in self.messages if m[0] == level]


def seed_school(store: InMemoryDocumentStore) -> None:
    store.put("gurus", "G1", {"name": "Budi Santoso"})
    store.put("gurus", "G2", {"name": "Siti Aminah"})

    store.put("kurikulum", "K1", {"mataPelajaran": "Matematika"})
    store.put("kurikulum", "K2", {"mataPelajaran": "IPA"})

    store.put("jadwal", "J1", {"hari": "Senin", "jam": "07:30", "kelas": "1", "kurikulumId": "K1", "guruId": "G1"})
    store.put("jadwal", "J2", {"hari": "Senin", "jam": "08:40", "kelas": "1", "kurikulumId": "K2", "guruId": "G2"})
    store.put("jadwal", "J3", {"hari": "Selasa", "jam": "07:30", "kelas": "2", "kurikulumId": "K2", "guruId": "G1"})

    store.put("siswa", "S1", {"nama": "Andi Pratama", "nis": "001", "kelas": 1, "status": "Aktif"})
    store.put("siswa", "S2", {"nama": "Bunga Lestari", "nis": "002", "kelas": 1, "status": "Aktif"})
    store.put("siswa", "S3", {"nama": "Citra Dewi", "nis": "003", "kelas": 2, "status": "Aktif"})
    store.put("siswa", "S4", {"nama": "Dimas Saputra", "nis": "004", "kelas": 1, "status": "Lulus"})


@pytest.fixture
def store() -> InMemoryDocumentStore:
    s = InMemoryDocumentStore()
    seed_school(s)
    return s


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def monday() -> date:
    return MONDAY


@pytest.fixture
def settle():
    """Let the event loop run pending callbacks (subscription deliveries)."""

    async def _settle(rounds: int = 10) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _settle
