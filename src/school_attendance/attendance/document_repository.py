from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..catalog.service import EntityCatalog
from ..common.datetime_utils import day_name, parse_iso_date
from ..common.validators import coerce_int
from ..core.constants import STUDENT_ATTENDANCE_COLLECTION, TEACHER_ATTENDANCE_COLLECTION
from ..core.enums import AttendanceStatus, PersonKind
from ..core.exceptions import ValidationError
from ..store.base import Document, DocumentStore, MappedSubscription, Predicate
from .model import AttendanceEvent, AttendanceKey, ViewFilter
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_COLLECTIONS = {
    PersonKind.TEACHER: TEACHER_ATTENDANCE_COLLECTION,
    PersonKind.STUDENT: STUDENT_ATTENDANCE_COLLECTION,
}
_PERSON_FIELDS = {
    PersonKind.TEACHER: "guruId",
    PersonKind.STUDENT: "siswaId",
}


class DocumentAttendanceRepository(AttendanceRepository):
    def __init__(self, store: DocumentStore, kind: PersonKind, *, catalog: Optional[EntityCatalog] = None):
        self._store = store
        self._catalog = catalog
        self.kind = PersonKind(kind)
        self.collection = _COLLECTIONS[self.kind]
        self._person_field = _PERSON_FIELDS[self.kind]

    async def subscribe(self, view_filter: ViewFilter) -> MappedSubscription:
        inner = await self._store.subscribe(self.collection, self._day_predicates(view_filter))
        return MappedSubscription(inner, self._to_events)

    async def list_for_day(self, view_filter: ViewFilter) -> Sequence[AttendanceEvent]:
        docs = await self._store.query(self.collection, self._day_predicates(view_filter))
        return self._to_events(docs)

    async def find_by_key(self, key: AttendanceKey) -> Sequence[AttendanceEvent]:
        docs = await self._store.query(
            self.collection,
            [
                Predicate.eq("jadwalId", key.slot_id),
                Predicate.eq(self._person_field, key.person_id),
                Predicate.eq("tanggal", key.date_iso),
            ],
        )
        return self._to_events(docs)

    async def list_range(
        self,
        *,
        start_iso: str,
        end_iso: str,
        person_ids: Sequence[str],
        class_number: Optional[int] = None,
    ) -> Sequence[AttendanceEvent]:
        predicates = [
            Predicate.gte("tanggal", start_iso),
            Predicate.lte("tanggal", end_iso),
            Predicate.is_in(self._person_field, person_ids),
        ]
        if class_number is not None:
            predicates.append(Predicate.eq("kelas", int(class_number)))
        docs = await self._store.query(self.collection, predicates)
        return self._to_events(docs)

    async def upsert(
        self,
        record_id: str,
        key: AttendanceKey,
        *,
        status: AttendanceStatus,
        note: Optional[str] = None,
        class_number: Optional[int] = None,
    ) -> None:
        fields: dict[str, Any] = {
            "jadwalId": key.slot_id,
            self._person_field: key.person_id,
            "tanggal": key.date_iso,
            "status": AttendanceStatus(status).value,
        }
        if class_number is not None:
            fields["kelas"] = int(class_number)
        if note is not None:
            fields["keterangan"] = note
        await self._store.upsert(self.collection, record_id, fields, merge=True)

    def _day_predicates(self, view_filter: ViewFilter) -> list[Predicate]:
        # Records written before `kelas` was denormalized carry no class, so the
        # class is resolved through the schedule whenever possible.
        predicates = [Predicate.eq("tanggal", view_filter.date_iso)]
        if view_filter.slot_id:
            predicates.append(Predicate.eq("jadwalId", view_filter.slot_id))
        elif view_filter.class_number is not None:
            slot_ids = self._class_slot_ids(view_filter)
            if slot_ids is None:
                predicates.append(Predicate.eq("kelas", int(view_filter.class_number)))
            else:
                predicates.append(Predicate.is_in("jadwalId", slot_ids))
        return predicates

    def _class_slot_ids(self, view_filter: ViewFilter) -> Optional[list[str]]:
        if self._catalog is None or not self._catalog.is_loaded("slots"):
            return None
        try:
            weekday = day_name(parse_iso_date(view_filter.date_iso))
        except ValueError:
            raise ValidationError(f"Invalid date: {view_filter.date_iso!r}") from None
        return [s.slot_id for s in self._catalog.slots_for_day(weekday, int(view_filter.class_number))]

    def _to_events(self, docs: Sequence[Document]) -> list[AttendanceEvent]:
        events = []
        for doc in docs:
            event = self._to_event(doc)
            if event is not None:
                events.append(event)
        return events

    def _to_event(self, doc: Document) -> Optional[AttendanceEvent]:
        data = doc.data
        slot_id = data.get("jadwalId")
        person_id = data.get(self._person_field)
        date_iso = data.get("tanggal")
        if not (slot_id and person_id and date_iso):
            logger.warning("Skipping %s/%s: incomplete logical key", self.collection, doc.id)
            return None

        try:
            status = AttendanceStatus(data.get("status"))
        except ValueError:
            logger.warning("Skipping %s/%s: unknown status %r", self.collection, doc.id, data.get("status"))
            return None

        return AttendanceEvent(
            record_id=doc.id,
            key=AttendanceKey(slot_id=str(slot_id), person_id=str(person_id), date_iso=str(date_iso)),
            status=status,
            note=data.get("keterangan") or None,
            class_number=coerce_int(data.get("kelas")),
        )
