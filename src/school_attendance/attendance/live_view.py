from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import date
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import iso_date
from ..common.notifications import LoggingNotifier, Notifier
from ..core.enums import AttendanceStatus, PersonKind
from ..core.exceptions import StoreError, ValidationError
from ..store.base import Subscription
from .keys import derive_record_id
from .model import AttendanceEvent, AttendanceKey, ViewFilter
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

Listener = Callable[[Mapping[AttendanceKey, AttendanceEvent]], Any]

_UNSET: Any = object()


def next_filter(
    current: Optional[ViewFilter],
    *,
    day: Any = _UNSET,
    class_number: Any = _UNSET,
    slot_id: Any = _UNSET,
) -> ViewFilter:
    """Apply a selection change to the current filter.

    Slot options depend on the date and the class, so changing either one
    clears the selected slot unless a slot is given in the same change.
    """

    if current is None and day is _UNSET:
        raise ValidationError("A date must be selected first")

    if isinstance(day, date):
        day = iso_date(day)

    base = current or ViewFilter(date_iso=day)
    new_date = base.date_iso if day is _UNSET else day
    new_class = base.class_number if class_number is _UNSET else class_number
    new_slot = base.slot_id if slot_id is _UNSET else slot_id

    if slot_id is _UNSET and (new_date != base.date_iso or new_class != base.class_number):
        new_slot = None

    return ViewFilter(date_iso=new_date, class_number=new_class, slot_id=new_slot or None)


class LiveAttendanceView:
    """Current attendance for one filter, kept in sync with the store.

    One consumer task reads one subscription channel. observe() tears both
    down before subscribing again, and every snapshot is checked against the
    generation it was subscribed under, so a late delivery from an old
    subscription can never touch the current map.
    """

    def __init__(self, attendance: AttendanceRepository, *, notifier: Optional[Notifier] = None):
        self._attendance = attendance
        self._notifier = notifier or LoggingNotifier()
        self._entries: dict[AttendanceKey, AttendanceEvent] = {}
        self._filter: Optional[ViewFilter] = None
        self._subscription: Optional[Subscription] = None
        self._task: Optional[asyncio.Task] = None
        self._generation = 0
        self._listeners: list[Listener] = []
        self.error: Optional[Exception] = None
        self.version = 0

    @property
    def kind(self) -> PersonKind:
        return self._attendance.kind

    @property
    def filter(self) -> Optional[ViewFilter]:
        return self._filter

    @property
    def entries(self) -> Mapping[AttendanceKey, AttendanceEvent]:
        return MappingProxyType(self._entries)

    @property
    def is_live(self) -> bool:
        return self._task is not None and not self._task.done()

    def get(self, key: AttendanceKey) -> Optional[AttendanceEvent]:
        return self._entries.get(key)

    def status_of(self, key: AttendanceKey) -> Optional[AttendanceStatus]:
        event = self._entries.get(key)
        return event.status if event else None

    def find(self, *, slot_id: Optional[str] = None, person_id: Optional[str] = None) -> Optional[AttendanceEvent]:
        for event in self._entries.values():
            if (slot_id is None or event.slot_id == slot_id) and (person_id is None or event.person_id == person_id):
                return event
        return None

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def observe(self, view_filter: ViewFilter) -> None:
        self._generation += 1
        generation = self._generation
        await self._teardown()
        if generation != self._generation:
            return

        self._filter = view_filter
        self._entries = {}
        self.error = None
        self._emit()

        try:
            subscription = await self._attendance.subscribe(view_filter)
        except StoreError as exc:
            if generation == self._generation:
                self._fail(exc)
            return

        if generation != self._generation:
            # Superseded while subscribing.
            await subscription.close()
            return

        self._subscription = subscription
        self._task = asyncio.create_task(self._consume(generation, subscription))
        logger.debug("Observing %s attendance for %s", self.kind.value, view_filter)

    async def select(self, *, day: Any = _UNSET, class_number: Any = _UNSET, slot_id: Any = _UNSET) -> ViewFilter:
        """Change the selection and re-subscribe (see next_filter)."""

        view_filter = next_filter(self._filter, day=day, class_number=class_number, slot_id=slot_id)
        await self.observe(view_filter)
        return view_filter

    async def close(self) -> None:
        self._generation += 1
        await self._teardown()

    async def _teardown(self) -> None:
        task, subscription = self._task, self._subscription
        self._task = None
        self._subscription = None

        if subscription is not None:
            await subscription.close()
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _consume(self, generation: int, subscription: Subscription) -> None:
        try:
            async for events in subscription:
                if generation != self._generation:
                    return
                self._apply(events)
        except StoreError as exc:
            if generation == self._generation:
                self._fail(exc)

    def _apply(self, events: Sequence[AttendanceEvent]) -> None:
        entries: dict[AttendanceKey, AttendanceEvent] = {}
        for event in events:
            existing = entries.get(event.key)
            if existing is not None:
                logger.warning("Two records for %s: %s and %s", event.key, existing.record_id, event.record_id)
                # Prefer the record stored under the deterministic id.
                if existing.record_id == derive_record_id(event.key) or event.record_id != derive_record_id(event.key):
                    continue
            entries[event.key] = event

        self._entries = entries
        self.version += 1
        self._emit()

    def _emit(self) -> None:
        view = self.entries
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                logger.exception("Live view listener failed")

    def _fail(self, exc: Exception) -> None:
        self.error = exc
        logger.error("Live %s attendance feed stopped: %s", self.kind.value, exc)
        self._notifier.error("Gagal memuat absensi", str(exc))
