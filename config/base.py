"""Settings shared by every environment (overridable via environment variables)."""

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


def db_config_from_env(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", ""),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "turno_db"),
    }


# mysql | json | auto
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "auto")
JSON_SNAPSHOT_PATH = os.getenv("JSON_SNAPSHOT_PATH", str(PROJECT_ROOT / "data" / "turno.json"))
USE_JSON_PROXY = env_flag("USE_JSON_PROXY")

TIMEZONE = os.getenv("TZ_NAME", "America/Argentina/Buenos_Aires")
LOCALE = os.getenv("LOCALE", "es-AR")

MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "5"))
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")
