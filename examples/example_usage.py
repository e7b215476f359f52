"""Example: drive the engine without Flask.

Seeds an in-memory store, records attendance through a live view, then
prints the student recap for the month.
"""

import asyncio
import json
from datetime import date
from pathlib import Path

from school_attendance.attendance.model import AttendanceKey
from school_attendance.common.access import StaticAccessControl
from school_attendance.common.notifications import LoggingNotifier
from school_attendance.container import build_container
from school_attendance.core.enums import AttendanceStatus, PersonKind
from school_attendance.settings import load_settings
from school_attendance.store.memory_store import InMemoryDocumentStore

SEED_PATH = Path(__file__).resolve().parents[1] / "database" / "seed.json"


async def main():
    store = InMemoryDocumentStore()
    for collection, docs in json.loads(SEED_PATH.read_text(encoding="utf-8")).items():
        for doc_id, fields in docs.items():
            store.put(collection, doc_id, fields)

    container = build_container(
        load_settings("school_attendance.settings.testing"),
        store=store,
        access=StaticAccessControl(True),
        notifier=LoggingNotifier(),
    )
    await container.catalog.reload()

    monday = date(2026, 10, 5)
    view = container.live_view(PersonKind.STUDENT)
    writer = container.service_for_view(view)
    await view.select(day=monday, class_number=1, slot_id="J01")

    await writer.set_status(AttendanceKey.for_date("J01", "S001", monday), AttendanceStatus.PRESENT)
    await writer.set_status(AttendanceKey.for_date("J01", "S002", monday), AttendanceStatus.SICK, "Demam")
    await asyncio.sleep(0.01)
    print({k.person_id: e.status.value for k, e in view.entries.items()})
    await view.close()

    for recap in await container.recap_service.students("2026-10", class_number=1, detail=True):
        print(recap.as_dict())


if __name__ == "__main__":
    asyncio.run(main())
