from __future__ import annotations

import logging

from flask import Flask, get_flashed_messages, jsonify

from ..core.exceptions import (
    AggregationError,
    CatalogLoadError,
    DomainError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def json_error(message: str, status_code: int, **extra):
    body = {"error": message, "messages": get_flashed_messages(with_categories=True)}
    body.update(extra)
    return jsonify(body), status_code


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(exc: ValidationError):
        return json_error(str(exc), 400)

    @app.errorhandler(CatalogLoadError)
    def _catalog(exc: CatalogLoadError):
        logger.warning("Catalog unavailable: %s", exc)
        return json_error(str(exc), 502, failed_types=exc.failed_types)

    @app.errorhandler(AggregationError)
    def _aggregation(exc: AggregationError):
        return json_error(str(exc), 502)

    @app.errorhandler(StoreError)
    def _store(exc: StoreError):
        logger.error("Store error: %s", exc)
        return json_error(str(exc), 502)

    @app.errorhandler(DomainError)
    def _domain(exc: DomainError):
        return json_error(str(exc), 400)
