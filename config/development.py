import os

from config.base import *  # noqa: F401,F403
from config.base import db_config_from_env, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env()

DEBUG = True
DEVELOPMENT = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled (and the MySQL backend is selected), apply schema.sql on startup
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
