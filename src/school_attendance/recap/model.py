from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class RecapDetailRow:
    date_iso: str
    time_label: str
    subject_name: str
    teacher_name: str
    class_label: str
    status: AttendanceStatus


@dataclass(frozen=True)
class MonthlyRecap:
    """Read-model for the monthly report: one row per person."""

    person_id: str
    person_name: str
    counts: Mapping[AttendanceStatus, int]
    total: int
    details: tuple[RecapDetailRow, ...] = field(default_factory=tuple)

    def count(self, status: AttendanceStatus) -> int:
        return int(self.counts.get(AttendanceStatus(status), 0))

    def as_dict(self, *, include_details: bool = True) -> dict[str, Any]:
        out: dict[str, Any] = {
            "person_id": self.person_id,
            "name": self.person_name,
            "counts": {status.value: self.count(status) for status in AttendanceStatus},
            "total": self.total,
        }
        if include_details:
            out["details"] = [
                {
                    "date": d.date_iso,
                    "time": d.time_label,
                    "subject": d.subject_name,
                    "teacher": d.teacher_name,
                    "class": d.class_label,
                    "status": d.status.value,
                }
                for d in self.details
            ]
        return out
