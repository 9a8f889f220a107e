"""Settings modules, one per environment; APP_ENV picks which one is loaded."""

import os

DEFAULT_ENV = "development"

SETTINGS_MODULES = {
    "development": "config.development",
    "dev": "config.development",
    "testing": "config.testing",
    "test": "config.testing",
    "production": "config.production",
    "prod": "config.production",
}


def get_settings_module(env=None) -> str:
    """Dotted path of the settings module; unknown names fall back to development."""
    name = (env or os.getenv("APP_ENV") or DEFAULT_ENV).strip().lower()
    return SETTINGS_MODULES.get(name, SETTINGS_MODULES[DEFAULT_ENV])
