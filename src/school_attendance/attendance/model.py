from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..common.datetime_utils import iso_date
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceKey:
    """Logical identity of an attendance record: slot x person x day."""

    slot_id: str
    person_id: str
    date_iso: str

    @classmethod
    def for_date(cls, slot_id: str, person_id: str, day: date) -> "AttendanceKey":
        return cls(slot_id=slot_id, person_id=person_id, date_iso=iso_date(day))


@dataclass(frozen=True)
class AttendanceEvent:
    """Domain entity: one attendance record (`absensiGuru` / `absensiSiswa`)."""

    record_id: str
    key: AttendanceKey
    status: AttendanceStatus
    note: Optional[str] = None
    class_number: Optional[int] = None

    @property
    def slot_id(self) -> str:
        return self.key.slot_id

    @property
    def person_id(self) -> str:
        return self.key.person_id

    @property
    def date_iso(self) -> str:
        return self.key.date_iso


@dataclass(frozen=True)
class ViewFilter:
    """Selection a live view is subscribed for."""

    date_iso: str
    class_number: Optional[int] = None
    slot_id: Optional[str] = None

    @classmethod
    def for_date(cls, day: date, class_number: Optional[int] = None, slot_id: Optional[str] = None) -> "ViewFilter":
        return cls(date_iso=iso_date(day), class_number=class_number, slot_id=slot_id)
