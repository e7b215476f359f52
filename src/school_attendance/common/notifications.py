from __future__ import annotations

import logging
from typing import Protocol

from flask import flash, has_request_context

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """User-visible reporting channel (toasts in the original screens)."""

    def success(self, title: str, message: str = "") -> None:
        raise NotImplementedError

    def error(self, title: str, message: str = "") -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    def success(self, title: str, message: str = "") -> None:
        logger.info("%s %s", title, message)

    def error(self, title: str, message: str = "") -> None:
        logger.error("%s %s", title, message)


class FlashNotifier(LoggingNotifier):
    """Logs, and flashes the message when called inside a Flask request."""

    def success(self, title: str, message: str = "") -> None:
        super().success(title, message)
        if has_request_context():
            flash(f"{title}. {message}".strip(), "success")

    def error(self, title: str, message: str = "") -> None:
        super().error(title, message)
        if has_request_context():
            flash(f"{title}. {message}".strip(), "danger")
