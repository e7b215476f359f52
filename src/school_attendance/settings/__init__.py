from __future__ import annotations

import importlib
import os
from types import ModuleType


def get_settings_module() -> str:
    # APP_ENV picks the settings module; default is development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "school_attendance.settings.production"

    if env in {"test", "testing"}:
        return "school_attendance.settings.testing"

    return "school_attendance.settings.development"


def load_settings(module_name: str | None = None) -> ModuleType:
    return importlib.import_module(module_name or get_settings_module())
