from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, PersonKind
from ..store.base import Subscription
from .model import AttendanceEvent, AttendanceKey, ViewFilter


class AttendanceRepository(Protocol):
    """Attendance records of one person kind (teachers or students)."""

    kind: PersonKind

    async def subscribe(self, view_filter: ViewFilter) -> Subscription[list[AttendanceEvent]]:
        raise NotImplementedError

    async def list_for_day(self, view_filter: ViewFilter) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    async def find_by_key(self, key: AttendanceKey) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    async def list_range(
        self,
        *,
        start_iso: str,
        end_iso: str,
        person_ids: Sequence[str],
        class_number: Optional[int] = None,
    ) -> Sequence[AttendanceEvent]:
        """Events dated within [start_iso, end_iso] for one batch of persons."""

        raise NotImplementedError

    async def upsert(
        self,
        record_id: str,
        key: AttendanceKey,
        *,
        status: AttendanceStatus,
        note: Optional[str] = None,
        class_number: Optional[int] = None,
    ) -> None:
        """Merge-write; fields passed as None are left untouched."""

        raise NotImplementedError
