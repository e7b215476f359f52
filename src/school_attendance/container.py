from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Optional

from .attendance.document_repository import DocumentAttendanceRepository
from .attendance.live_view import LiveAttendanceView
from .attendance.service import AttendanceService
from .catalog.document_repository import DocumentCatalogRepository
from .catalog.service import EntityCatalog
from .common.access import AccessControl, SessionAccessControl
from .common.notifications import FlashNotifier, Notifier
from .core.constants import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_QUERY_BATCH_LIMIT,
    DEFAULT_STORE_RETRIES,
    DEFAULT_STORE_TIMEOUT_SECONDS,
)
from .core.enums import PersonKind
from .recap.service import MonthlyAggregator, MonthlyRecapService
from .store.base import DocumentStore
from .store.connection import DBConfig, DatabaseConnection
from .store.memory_store import InMemoryDocumentStore
from .store.mysql_store import MySQLDocumentStore


@dataclass(frozen=True)
class Container:
    store: DocumentStore
    access: AccessControl
    notifier: Notifier

    catalog: EntityCatalog
    teacher_attendance: DocumentAttendanceRepository
    student_attendance: DocumentAttendanceRepository

    teacher_service: AttendanceService
    student_service: AttendanceService
    teacher_aggregator: MonthlyAggregator
    student_aggregator: MonthlyAggregator
    recap_service: MonthlyRecapService

    legacy_lookup: bool = True

    def attendance_repo(self, kind: PersonKind) -> DocumentAttendanceRepository:
        return self.teacher_attendance if PersonKind(kind) == PersonKind.TEACHER else self.student_attendance

    def attendance_service(self, kind: PersonKind) -> AttendanceService:
        return self.teacher_service if PersonKind(kind) == PersonKind.TEACHER else self.student_service

    def live_view(self, kind: PersonKind) -> LiveAttendanceView:
        return LiveAttendanceView(self.attendance_repo(kind), notifier=self.notifier)

    def service_for_view(self, view: LiveAttendanceView) -> AttendanceService:
        """Writer that resolves record ids through an open live view."""

        return AttendanceService(
            self.attendance_repo(view.kind),
            self.access,
            catalog=self.catalog,
            view=view,
            notifier=self.notifier,
            legacy_lookup=self.legacy_lookup,
        )


def build_store(settings: ModuleType) -> DocumentStore:
    backend = str(getattr(settings, "STORE_BACKEND", "mysql")).lower()
    batch_limit = int(getattr(settings, "QUERY_BATCH_LIMIT", DEFAULT_QUERY_BATCH_LIMIT))

    if backend == "memory":
        return InMemoryDocumentStore(max_in_values=batch_limit)
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
        return MySQLDocumentStore(
            conn,
            poll_interval=float(getattr(settings, "POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS)),
            timeout=float(getattr(settings, "STORE_TIMEOUT_SECONDS", DEFAULT_STORE_TIMEOUT_SECONDS)),
            retries=int(getattr(settings, "STORE_RETRIES", DEFAULT_STORE_RETRIES)),
        )
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def build_container(
    settings: ModuleType,
    *,
    store: Optional[DocumentStore] = None,
    access: Optional[AccessControl] = None,
    notifier: Optional[Notifier] = None,
) -> Container:
    store = store or build_store(settings)
    access = access or SessionAccessControl()
    notifier = notifier or FlashNotifier()
    batch_limit = int(getattr(settings, "QUERY_BATCH_LIMIT", DEFAULT_QUERY_BATCH_LIMIT))
    legacy_lookup = bool(getattr(settings, "LEGACY_ID_LOOKUP", True))

    catalog = EntityCatalog(DocumentCatalogRepository(store))
    teacher_attendance = DocumentAttendanceRepository(store, PersonKind.TEACHER, catalog=catalog)
    student_attendance = DocumentAttendanceRepository(store, PersonKind.STUDENT, catalog=catalog)

    teacher_service = AttendanceService(
        teacher_attendance, access, catalog=catalog, notifier=notifier, legacy_lookup=legacy_lookup
    )
    student_service = AttendanceService(
        student_attendance, access, catalog=catalog, notifier=notifier, legacy_lookup=legacy_lookup
    )
    teacher_aggregator = MonthlyAggregator(teacher_attendance, catalog, batch_limit=batch_limit, notifier=notifier)
    student_aggregator = MonthlyAggregator(student_attendance, catalog, batch_limit=batch_limit, notifier=notifier)
    recap_service = MonthlyRecapService(
        catalog,
        {PersonKind.TEACHER: teacher_aggregator, PersonKind.STUDENT: student_aggregator},
    )

    return Container(
        store=store,
        access=access,
        notifier=notifier,
        catalog=catalog,
        teacher_attendance=teacher_attendance,
        student_attendance=student_attendance,
        teacher_service=teacher_service,
        student_service=student_service,
        teacher_aggregator=teacher_aggregator,
        student_aggregator=student_aggregator,
        recap_service=recap_service,
        legacy_lookup=legacy_lookup,
    )
