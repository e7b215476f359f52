from __future__ import annotations

import logging
from datetime import date

from flask import Flask, abort, get_flashed_messages, jsonify, request

from ..common.datetime_utils import iso_date, parse_iso_date
from ..common.validators import optional_int
from ..container import Container
from ..core.enums import PersonKind, WriteResult
from ..core.exceptions import CatalogLoadError, ValidationError
from .model import AttendanceEvent, AttendanceKey, ViewFilter

logger = logging.getLogger(__name__)

_HTTP_STATUS = {
    WriteResult.OK: 200,
    WriteResult.INVALID: 400,
    WriteResult.PERMISSION_DENIED: 403,
    WriteResult.FAILED: 502,
}


def _kind_or_404(kind: str) -> PersonKind:
    try:
        return PersonKind(kind)
    except ValueError:
        abort(404)


def _parse_day(value: str | None) -> date:
    try:
        return parse_iso_date(value) if value else date.today()
    except ValueError:
        raise ValidationError("tanggal must be YYYY-MM-DD") from None


async def _load_catalog(container: Container) -> None:
    # Schedule slots only refine class filters and the stored class number.
    try:
        await container.catalog.ensure_loaded()
    except CatalogLoadError as exc:
        logger.warning("Using a partial catalog: %s", exc)


def event_to_json(event: AttendanceEvent) -> dict:
    return {
        "id": event.record_id,
        "jadwalId": event.slot_id,
        "personId": event.person_id,
        "tanggal": event.date_iso,
        "status": event.status.value,
        "keterangan": event.note,
        "kelas": event.class_number,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/<kind>", methods=["GET"], endpoint="attendance_day")
    async def attendance_day(kind: str):
        person_kind = _kind_or_404(kind)
        view_filter = ViewFilter.for_date(
            _parse_day(request.args.get("date")),
            class_number=optional_int(request.args.get("kelas"), "kelas"),
            slot_id=request.args.get("jadwal") or None,
        )
        await _load_catalog(container)
        events = await container.attendance_repo(person_kind).list_for_day(view_filter)
        return jsonify(
            {
                "filter": {
                    "tanggal": view_filter.date_iso,
                    "kelas": view_filter.class_number,
                    "jadwalId": view_filter.slot_id,
                },
                "records": [event_to_json(e) for e in events],
            }
        )

    @app.route("/api/attendance/<kind>/status", methods=["POST"], endpoint="attendance_set_status")
    async def attendance_set_status(kind: str):
        person_kind = _kind_or_404(kind)
        payload = request.get_json(silent=True) or {}

        day = _parse_day(str(payload.get("tanggal") or "")) if payload.get("tanggal") else None
        key = AttendanceKey(
            slot_id=str(payload.get("jadwalId") or ""),
            person_id=str(payload.get("personId") or ""),
            date_iso=iso_date(day) if day else "",
        )
        note = payload.get("keterangan")

        await _load_catalog(container)
        outcome = await container.attendance_service(person_kind).set_status(
            key,
            str(payload.get("status") or ""),
            None if note is None else str(note),
        )
        return (
            jsonify(
                {
                    "result": outcome.result.value,
                    "record_id": outcome.record_id,
                    "error": str(outcome.error) if outcome.error else None,
                    "messages": get_flashed_messages(with_categories=True),
                }
            ),
            _HTTP_STATUS[outcome.result],
        )
