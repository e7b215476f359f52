from __future__ import annotations

from typing import Protocol

from flask import has_request_context, session

from ..core.enums import Role


class AccessControl(Protocol):
    def has_write_privilege(self) -> bool:
        raise NotImplementedError


class StaticAccessControl(AccessControl):
    """Fixed answer; used by scripts and examples."""

    def __init__(self, allowed: bool):
        self._allowed = bool(allowed)

    def has_write_privilege(self) -> bool:
        return self._allowed


class SessionAccessControl(AccessControl):
    """Only admins recorded in the Flask session may write attendance."""

    def has_write_privilege(self) -> bool:
        if not has_request_context():
            return False
        return session.get("role") == Role.ADMIN.value
