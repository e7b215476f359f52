from __future__ import annotations

from datetime import date

from flask import Flask, get_flashed_messages, jsonify, request

from ..common.datetime_utils import day_name, iso_date, parse_iso_date
from ..common.validators import optional_int
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    catalog = container.catalog

    @app.route("/api/catalog", methods=["GET"], endpoint="catalog_status")
    async def catalog_status():
        snapshot = catalog.snapshot()
        return jsonify(
            {
                "loaded": sorted(catalog.loaded_types),
                "counts": {
                    "teachers": len(snapshot.teachers),
                    "students": len(snapshot.students),
                    "subjects": len(snapshot.subjects),
                    "slots": len(snapshot.slots),
                },
            }
        )

    @app.route("/api/catalog/reload", methods=["POST"], endpoint="catalog_reload")
    async def catalog_reload():
        snapshot = await catalog.reload()
        return jsonify(
            {
                "loaded": sorted(catalog.loaded_types),
                "persons": len(snapshot.persons),
                "slots": len(snapshot.slots),
                "messages": get_flashed_messages(with_categories=True),
            }
        )

    @app.route("/api/catalog/slots", methods=["GET"], endpoint="catalog_slots")
    async def catalog_slots():
        try:
            day = parse_iso_date(request.args.get("date") or iso_date(date.today()))
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD") from None
        class_number = optional_int(request.args.get("kelas"), "kelas")

        await catalog.ensure_loaded()
        slots = catalog.slots_for_day(day_name(day), class_number)
        return jsonify(
            {
                "date": iso_date(day),
                "day": day_name(day),
                "slots": [
                    {
                        "id": s.slot_id,
                        "time": s.time_label,
                        "class": catalog.class_label(s.slot_id),
                        "subject": catalog.subject_name(s.slot_id),
                        "teacher": catalog.teacher_name(s.slot_id),
                        "label": f"{s.time_label} - {catalog.subject_name(s.slot_id)} ({catalog.teacher_name(s.slot_id)})",
                    }
                    for s in slots
                ],
            }
        )
