from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..catalog.service import EntityCatalog
from ..common.access import AccessControl
from ..common.notifications import LoggingNotifier, Notifier
from ..common.validators import require_non_empty
from ..core.enums import AttendanceStatus, PersonKind, WriteResult
from ..core.exceptions import StoreError, ValidationError
from .keys import derive_record_id, resolve_record_id
from .live_view import LiveAttendanceView
from .model import AttendanceEvent, AttendanceKey
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteOutcome:
    result: WriteResult
    record_id: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.result == WriteResult.OK


class AttendanceService:
    """Use case: change the status recorded for one logical key.

    Writes are merge-upserts against a deterministic record id, so repeating
    a call, or two admins recording the same key, converges on one record.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        access: AccessControl,
        *,
        catalog: Optional[EntityCatalog] = None,
        view: Optional[LiveAttendanceView] = None,
        notifier: Optional[Notifier] = None,
        legacy_lookup: bool = True,
    ):
        if view is not None and view.kind != attendance.kind:
            raise ValueError("Live view and repository must track the same person kind")
        self._attendance = attendance
        self._access = access
        self._catalog = catalog
        self._view = view
        self._notifier = notifier or LoggingNotifier()
        self._legacy_lookup = bool(legacy_lookup)

    @property
    def kind(self) -> PersonKind:
        return self._attendance.kind

    async def set_status(
        self,
        key: AttendanceKey,
        status: Union[AttendanceStatus, str],
        note: Optional[str] = None,
    ) -> WriteOutcome:
        if not self._access.has_write_privilege():
            logger.debug("Write for %s suppressed: caller has no write privilege", key)
            return WriteOutcome(WriteResult.PERMISSION_DENIED)

        try:
            key = AttendanceKey(
                slot_id=require_non_empty(key.slot_id, "Schedule slot"),
                person_id=require_non_empty(key.person_id, "Person"),
                date_iso=require_non_empty(key.date_iso, "Date"),
            )
            status = AttendanceStatus(status)
        except (ValidationError, ValueError) as exc:
            logger.info("Rejected %s attendance write: %s", self.kind.value, exc)
            return WriteOutcome(WriteResult.INVALID, error=exc)

        try:
            record_id = await self._resolve_record_id(key)
            await self._attendance.upsert(
                record_id,
                key,
                status=status,
                note=note,
                class_number=self._class_number(key),
            )
        except StoreError as exc:
            logger.error("Saving %s attendance %s failed: %s", self.kind.value, key, exc)
            title = "Gagal menyimpan absensi guru" if self.kind == PersonKind.TEACHER else "Gagal menyimpan absensi siswa"
            self._notifier.error(title, str(exc))
            return WriteOutcome(WriteResult.FAILED, error=exc)

        logger.info("Saved %s attendance %s -> %s (%s)", self.kind.value, key, status.value, record_id)
        if self.kind == PersonKind.TEACHER:
            name = self._catalog.person_name(key.person_id) if self._catalog else key.person_id
            self._notifier.success("Absensi diperbarui", f"Status guru {name} diubah menjadi {status.value}.")
        return WriteOutcome(WriteResult.OK, record_id=record_id)

    def submit_status(
        self,
        key: AttendanceKey,
        status: Union[AttendanceStatus, str],
        note: Optional[str] = None,
    ) -> "asyncio.Task[WriteOutcome]":
        """Fire-and-forget variant; must be called from a running event loop.

        Failures are still reported through the notifier; awaiting the task
        is optional.
        """

        return asyncio.create_task(self.set_status(key, status, note))

    async def _resolve_record_id(self, key: AttendanceKey) -> str:
        existing: Optional[AttendanceEvent] = self._view.get(key) if self._view is not None else None

        if existing is None and self._legacy_lookup:
            matches = await self._attendance.find_by_key(key)
            if matches:
                derived = derive_record_id(key)
                existing = next((e for e in matches if e.record_id == derived), matches[0])

        return resolve_record_id(key, existing)

    def _class_number(self, key: AttendanceKey) -> Optional[int]:
        slot = self._catalog.slot_by_id(key.slot_id) if self._catalog else None
        if slot is not None and slot.class_number is not None:
            return slot.class_number
        existing = self._view.get(key) if self._view is not None else None
        if existing is not None and existing.class_number is not None:
            return existing.class_number
        if self._view is not None and self._view.filter is not None:
            return self._view.filter.class_number
        return None
