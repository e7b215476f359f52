from __future__ import annotations

from datetime import date

from flask import Flask, abort, jsonify, request

from ..common.validators import optional_int
from ..container import Container
from ..core.enums import PersonKind


def register(app: Flask, container: Container) -> None:
    @app.route("/api/recap/<kind>", methods=["GET"], endpoint="recap_month")
    async def recap_month(kind: str):
        try:
            person_kind = PersonKind(kind)
        except ValueError:
            abort(404)

        month = request.args.get("month") or date.today().strftime("%Y-%m")
        class_number = optional_int(request.args.get("kelas"), "kelas")
        detail = request.args.get("detail", "0").lower() in {"1", "true", "yes"}

        recaps = await container.recap_service.for_kind(
            person_kind, month, class_number=class_number, detail=detail
        )
        return jsonify(
            {
                "kind": person_kind.value,
                "month": month,
                "kelas": class_number,
                "recaps": [r.as_dict(include_details=detail) for r in recaps],
            }
        )
