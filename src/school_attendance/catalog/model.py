from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..core.constants import ACTIVE_STUDENT_STATUS


@dataclass(frozen=True)
class Teacher:
    """Domain entity: teacher (`gurus`)."""

    teacher_id: str
    name: str

    @property
    def person_id(self) -> str:
        return self.teacher_id


@dataclass(frozen=True)
class Student:
    """Domain entity: student (`siswa`)."""

    student_id: str
    name: str
    nis: Optional[str] = None
    class_number: Optional[int] = None
    status: str = ACTIVE_STUDENT_STATUS

    @property
    def person_id(self) -> str:
        return self.student_id

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE_STUDENT_STATUS


Person = Union[Teacher, Student]


@dataclass(frozen=True)
class Subject:
    """Curriculum entry (`kurikulum`)."""

    subject_id: str
    name: str


@dataclass(frozen=True)
class ScheduleSlot:
    """One recurring teaching period (`jadwal`)."""

    slot_id: str
    day_name: str
    time_label: str
    class_number: Optional[int]
    subject_id: Optional[str]
    teacher_id: Optional[str]


@dataclass(frozen=True)
class CatalogSnapshot:
    teachers: tuple[Teacher, ...] = ()
    students: tuple[Student, ...] = ()
    subjects: tuple[Subject, ...] = ()
    slots: tuple[ScheduleSlot, ...] = ()

    @property
    def persons(self) -> tuple[Person, ...]:
        return self.teachers + self.students
