"""Deterministic record identifiers.

Two writers recording the same slot, person and day must land on the same
document, so the identifier is a pure function of the logical key. Each
component is percent-encoded before joining, which keeps the separator out
of the components and makes the mapping injective. Store ids and ISO dates
contain no reserved characters and pass through unchanged:

    derive_record_id("J1", "S7", "2026-10-01") == "J1|S7|2026-10-01"
"""

from __future__ import annotations

from typing import Optional, Union, overload
from urllib.parse import quote

from .model import AttendanceEvent, AttendanceKey

SEPARATOR = "|"


def _component(value: object) -> str:
    return quote(str(value), safe="")


@overload
def derive_record_id(slot_id: str, person_id: str, date_iso: str) -> str: ...


@overload
def derive_record_id(source: Union[AttendanceKey, AttendanceEvent]) -> str: ...


def derive_record_id(source, person_id=None, date_iso=None) -> str:
    if isinstance(source, AttendanceEvent):
        # Keep whatever id the record was created under.
        return source.record_id
    if isinstance(source, AttendanceKey):
        source, person_id, date_iso = source.slot_id, source.person_id, source.date_iso
    return SEPARATOR.join(_component(v) for v in (source, person_id, date_iso))


def resolve_record_id(key: AttendanceKey, existing: Optional[AttendanceEvent] = None) -> str:
    if existing is not None and existing.record_id:
        return derive_record_id(existing)
    return derive_record_id(key)
