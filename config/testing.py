import os

from config.base import *  # noqa: F401,F403
from config.base import PROJECT_ROOT, db_config_from_env

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env()

STORAGE_BACKEND = "json"
JSON_SNAPSHOT_PATH = os.getenv("JSON_SNAPSHOT_PATH", str(PROJECT_ROOT / "data" / "turno.json"))

DEBUG = False
TESTING = True
DEVELOPMENT = False
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
