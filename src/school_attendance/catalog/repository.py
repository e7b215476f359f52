from __future__ import annotations

from typing import Protocol, Sequence

from .model import ScheduleSlot, Student, Subject, Teacher


class CatalogRepository(Protocol):
    """Bulk reads of reference data; one call per entity type."""

    async def list_teachers(self) -> Sequence[Teacher]:
        raise NotImplementedError

    async def list_students(self) -> Sequence[Student]:
        raise NotImplementedError

    async def list_subjects(self) -> Sequence[Subject]:
        raise NotImplementedError

    async def list_slots(self) -> Sequence[ScheduleSlot]:
        raise NotImplementedError
