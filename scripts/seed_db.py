"""Load demo reference data (teachers, students, subjects, schedule) into the store."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from school_attendance.container import build_store
from school_attendance.settings import load_settings
from school_attendance.store.base import DocumentStore

SEED_PATH = Path(__file__).resolve().parents[1] / "database" / "seed.json"


async def seed(store: DocumentStore, data: dict) -> int:
    count = 0
    for collection, docs in data.items():
        for doc_id, fields in docs.items():
            await store.upsert(collection, doc_id, fields, merge=False)
            count += 1
    return count


def main() -> None:
    settings = load_settings()
    data = json.loads(SEED_PATH.read_text(encoding="utf-8"))
    count = asyncio.run(seed(build_store(settings), data))
    print(f"OK: Seeded {count} documents into {settings.STORE_BACKEND} store")


if __name__ == "__main__":
    main()
