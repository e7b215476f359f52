from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Mapping, Optional, Sequence

from ..attendance.model import AttendanceEvent
from ..attendance.repository import AttendanceRepository
from ..catalog.model import Person
from ..catalog.service import EntityCatalog
from ..common.datetime_utils import YearMonth, iso_date, month_range
from ..common.notifications import LoggingNotifier, Notifier
from ..core.constants import DEFAULT_QUERY_BATCH_LIMIT
from ..core.enums import AggregatorState, AttendanceStatus, PersonKind
from ..core.exceptions import AggregationError, CatalogLoadError, StoreError, ValidationError
from .model import MonthlyRecap, RecapDetailRow

logger = logging.getLogger(__name__)

StateListener = Callable[[AggregatorState], None]


class MonthlyAggregator:
    """Turns a month of attendance events into per-person recaps.

    State machine: IDLE -> FETCHING -> (COMPUTING | FAILED) -> IDLE.
    A run either returns every recap or raises AggregationError; there is
    no partial result.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        catalog: EntityCatalog,
        *,
        batch_limit: int = DEFAULT_QUERY_BATCH_LIMIT,
        notifier: Optional[Notifier] = None,
    ):
        if int(batch_limit) <= 0:
            raise ValueError("batch_limit must be positive")
        self._attendance = attendance
        self._catalog = catalog
        self._batch_limit = int(batch_limit)
        self._notifier = notifier or LoggingNotifier()
        self._state = AggregatorState.IDLE
        self._listeners: list[StateListener] = []

    @property
    def kind(self) -> PersonKind:
        return self._attendance.kind

    @property
    def state(self) -> AggregatorState:
        return self._state

    def on_state_change(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    async def aggregate(
        self,
        population: Sequence[Person],
        year_month: YearMonth,
        *,
        class_number: Optional[int] = None,
        detail: bool = False,
    ) -> list[MonthlyRecap]:
        first, last = month_range(year_month)

        people: dict[str, Person] = {}
        for person in population:
            people.setdefault(person.person_id, person)
        if not people:
            return []

        self._transition(AggregatorState.FETCHING)
        try:
            events = await self._fetch(list(people), first, last, class_number)
        except StoreError as exc:
            self._transition(AggregatorState.FAILED)
            logger.error("Recap %s for %s failed: %s", self.kind.value, iso_date(first)[:7], exc)
            self._notifier.error("Gagal membuat rekap absensi", str(exc))
            self._transition(AggregatorState.IDLE)
            raise AggregationError(f"Could not fetch attendance for {iso_date(first)[:7]}") from exc

        self._transition(AggregatorState.COMPUTING)
        try:
            return self._compute(people, events, first, last, detail)
        finally:
            self._transition(AggregatorState.IDLE)

    async def _fetch(
        self,
        person_ids: list[str],
        first: date,
        last: date,
        class_number: Optional[int],
    ) -> list[AttendanceEvent]:
        merged: dict[str, AttendanceEvent] = {}
        batches = 0
        for start in range(0, len(person_ids), self._batch_limit):
            batch = person_ids[start : start + self._batch_limit]
            events = await self._attendance.list_range(
                start_iso=iso_date(first),
                end_iso=iso_date(last),
                person_ids=batch,
                class_number=class_number,
            )
            for event in events:
                merged[event.record_id] = event
            batches += 1

        logger.debug("Fetched %d %s events in %d batch(es)", len(merged), self.kind.value, batches)
        return list(merged.values())

    def _compute(
        self,
        people: Mapping[str, Person],
        events: Sequence[AttendanceEvent],
        first: date,
        last: date,
        detail: bool,
    ) -> list[MonthlyRecap]:
        start_iso, end_iso = iso_date(first), iso_date(last)
        counts = {person_id: {status: 0 for status in AttendanceStatus} for person_id in people}
        details: dict[str, list[RecapDetailRow]] = {person_id: [] for person_id in people}

        ignored = 0
        for event in events:
            if event.person_id not in counts or not (start_iso <= event.date_iso <= end_iso):
                ignored += 1
                continue
            counts[event.person_id][event.status] += 1
            if detail:
                details[event.person_id].append(self._detail_row(event))
        if ignored:
            logger.info("Ignored %d event(s) outside the population or month", ignored)

        recaps = []
        for person_id, person in people.items():
            rows = sorted(details[person_id], key=lambda r: (r.date_iso, r.time_label))
            recaps.append(
                MonthlyRecap(
                    person_id=person_id,
                    person_name=person.name,
                    counts=counts[person_id],
                    total=sum(counts[person_id].values()),
                    details=tuple(rows),
                )
            )
        return recaps

    def _detail_row(self, event: AttendanceEvent) -> RecapDetailRow:
        return RecapDetailRow(
            date_iso=event.date_iso,
            time_label=self._catalog.time_label(event.slot_id),
            subject_name=self._catalog.subject_name(event.slot_id),
            teacher_name=self._catalog.teacher_name(event.slot_id),
            class_label=self._catalog.class_label(event.slot_id),
            status=event.status,
        )

    def _transition(self, state: AggregatorState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)


class MonthlyRecapService:
    """Use case: monthly recap for all teachers or one class of students."""

    def __init__(self, catalog: EntityCatalog, aggregators: Mapping[PersonKind, MonthlyAggregator]):
        self._catalog = catalog
        self._aggregators = dict(aggregators)

    async def _load_catalog(self, population_type: str) -> None:
        """Reload what is missing; only the population itself is required.

        Names joined in detail rows fall back to the placeholder when their
        entity type is unavailable.
        """

        try:
            await self._catalog.ensure_loaded()
        except CatalogLoadError as exc:
            if not self._catalog.is_loaded(population_type):
                raise
            logger.warning("Building recap with a partial catalog: %s", exc)

    async def teachers(self, year_month: YearMonth, *, detail: bool = False) -> list[MonthlyRecap]:
        await self._load_catalog("teachers")
        return await self._aggregators[PersonKind.TEACHER].aggregate(
            self._catalog.teachers(), year_month, detail=detail
        )

    async def students(
        self,
        year_month: YearMonth,
        *,
        class_number: Optional[int] = None,
        detail: bool = False,
    ) -> list[MonthlyRecap]:
        await self._load_catalog("students")
        # The class is applied through the population; events written before
        # `kelas` was denormalized carry no class field.
        population = self._catalog.students(class_number)
        return await self._aggregators[PersonKind.STUDENT].aggregate(population, year_month, detail=detail)

    async def for_kind(
        self,
        kind: PersonKind,
        year_month: YearMonth,
        *,
        class_number: Optional[int] = None,
        detail: bool = False,
    ) -> list[MonthlyRecap]:
        kind = PersonKind(kind)
        if kind == PersonKind.TEACHER:
            if class_number is not None:
                raise ValidationError("Teacher recaps are not split by class")
            return await self.teachers(year_month, detail=detail)
        return await self.students(year_month, class_number=class_number, detail=detail)
