from __future__ import annotations

import logging
from typing import Optional

from ..core.constants import PLACEHOLDER
from ..core.exceptions import CatalogLoadError, StoreError
from .model import CatalogSnapshot, ScheduleSlot, Student, Subject, Teacher
from .repository import CatalogRepository

logger = logging.getLogger(__name__)

ENTITY_TYPES = ("teachers", "students", "subjects", "slots")


def class_label(class_number: Optional[int]) -> str:
    return PLACEHOLDER if class_number is None else f"Kelas {class_number}"


class EntityCatalog:
    """Owned snapshot of the school's reference data.

    Each entity type is replaced as a whole by reload(); a type whose fetch
    fails keeps what it had. Lookups never raise: anything unresolved comes
    back as the placeholder (names) or None (objects).
    """

    def __init__(self, source: CatalogRepository):
        self._source = source
        self._teachers: dict[str, Teacher] = {}
        self._students: dict[str, Student] = {}
        self._subjects: dict[str, Subject] = {}
        self._slots: dict[str, ScheduleSlot] = {}
        self._loaded: set[str] = set()

    async def reload(self) -> CatalogSnapshot:
        loaders = {
            "teachers": (self._source.list_teachers, lambda item: item.teacher_id),
            "students": (self._source.list_students, lambda item: item.student_id),
            "subjects": (self._source.list_subjects, lambda item: item.subject_id),
            "slots": (self._source.list_slots, lambda item: item.slot_id),
        }
        failures: dict[str, Exception] = {}

        for name, (load, key_of) in loaders.items():
            try:
                items = await load()
            except StoreError as exc:
                logger.warning("Catalog reload of %s failed, keeping previous snapshot: %s", name, exc)
                failures[name] = exc
                continue
            setattr(self, f"_{name}", {key_of(item): item for item in items})
            self._loaded.add(name)

        logger.info(
            "Catalog reloaded: teachers=%d students=%d subjects=%d slots=%d",
            len(self._teachers),
            len(self._students),
            len(self._subjects),
            len(self._slots),
        )
        if failures:
            raise CatalogLoadError(list(failures), failures)
        return self.snapshot()

    async def ensure_loaded(self) -> None:
        if len(self._loaded) < len(ENTITY_TYPES):
            await self.reload()

    def snapshot(self) -> CatalogSnapshot:
        return CatalogSnapshot(
            teachers=tuple(self._teachers.values()),
            students=tuple(self._students.values()),
            subjects=tuple(self._subjects.values()),
            slots=tuple(self._slots.values()),
        )

    @property
    def loaded_types(self) -> frozenset[str]:
        return frozenset(self._loaded)

    def is_loaded(self, entity_type: str) -> bool:
        return entity_type in self._loaded

    # Lookups

    def person_name(self, person_id: Optional[str]) -> str:
        person = self._teachers.get(person_id) or self._students.get(person_id)
        return person.name if person and person.name else PLACEHOLDER

    def teacher_name_by_id(self, teacher_id: Optional[str]) -> str:
        teacher = self._teachers.get(teacher_id)
        return teacher.name if teacher and teacher.name else PLACEHOLDER

    def slot_by_id(self, slot_id: Optional[str]) -> Optional[ScheduleSlot]:
        return self._slots.get(slot_id)

    def subject_name(self, slot_id: Optional[str]) -> str:
        slot = self._slots.get(slot_id)
        subject = self._subjects.get(slot.subject_id) if slot else None
        return subject.name if subject and subject.name else PLACEHOLDER

    def teacher_name(self, slot_id: Optional[str]) -> str:
        slot = self._slots.get(slot_id)
        return self.teacher_name_by_id(slot.teacher_id if slot else None)

    def class_label(self, slot_id: Optional[str]) -> str:
        slot = self._slots.get(slot_id)
        return class_label(slot.class_number if slot else None)

    def time_label(self, slot_id: Optional[str]) -> str:
        slot = self._slots.get(slot_id)
        return slot.time_label if slot and slot.time_label else PLACEHOLDER

    # Populations

    def teachers(self) -> list[Teacher]:
        return sorted(self._teachers.values(), key=lambda t: t.name.casefold())

    def students(self, class_number: Optional[int] = None, *, active_only: bool = True) -> list[Student]:
        items = [
            s
            for s in self._students.values()
            if (class_number is None or s.class_number == class_number) and (s.is_active or not active_only)
        ]
        return sorted(items, key=lambda s: s.name.casefold())

    def slots_for_day(self, day_name: str, class_number: Optional[int] = None) -> list[ScheduleSlot]:
        items = [
            s
            for s in self._slots.values()
            if s.day_name == day_name and (class_number is None or s.class_number == class_number)
        ]
        return sorted(items, key=lambda s: (s.time_label, s.class_number if s.class_number is not None else -1))
