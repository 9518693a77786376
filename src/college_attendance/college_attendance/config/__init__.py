import importlib
import os
from types import ModuleType


def get_settings_module() -> str:
    # APP_ENV selects the settings module, default is 'development'
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "production"

    if env in {"test", "testing"}:
        return "testing"

    return "development"


def load_settings(name: str | None = None) -> ModuleType:
    return importlib.import_module(f".{name or get_settings_module()}", __name__)
