from __future__ import annotations

from typing import Sequence

from ..common.validators import coerce_int
from ..core.constants import (
    SLOTS_COLLECTION,
    STUDENTS_COLLECTION,
    SUBJECTS_COLLECTION,
    TEACHERS_COLLECTION,
)
from ..store.base import DocumentStore
from .model import ScheduleSlot, Student, Subject, Teacher
from .repository import CatalogRepository


def _text(value) -> str:
    return "" if value is None else str(value)


class DocumentCatalogRepository(CatalogRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    async def list_teachers(self) -> Sequence[Teacher]:
        docs = await self._store.query(TEACHERS_COLLECTION)
        return [Teacher(teacher_id=d.id, name=_text(d.data.get("name"))) for d in docs]

    async def list_students(self) -> Sequence[Student]:
        docs = await self._store.query(STUDENTS_COLLECTION)
        return [
            Student(
                student_id=d.id,
                name=_text(d.data.get("nama")),
                nis=_text(d.data.get("nis")) or None,
                class_number=coerce_int(d.data.get("kelas")),
                status=_text(d.data.get("status")),
            )
            for d in docs
        ]

    async def list_subjects(self) -> Sequence[Subject]:
        docs = await self._store.query(SUBJECTS_COLLECTION)
        return [Subject(subject_id=d.id, name=_text(d.data.get("mataPelajaran"))) for d in docs]

    async def list_slots(self) -> Sequence[ScheduleSlot]:
        docs = await self._store.query(SLOTS_COLLECTION)
        return [
            ScheduleSlot(
                slot_id=d.id,
                day_name=_text(d.data.get("hari")),
                time_label=_text(d.data.get("jam")),
                class_number=coerce_int(d.data.get("kelas")),
                subject_id=_text(d.data.get("kurikulumId")) or None,
                teacher_id=_text(d.data.get("guruId")) or None,
            )
            for d in docs
        ]
