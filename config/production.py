import os

from config.base import *  # noqa: F401,F403
from config.base import db_config_from_env, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config_from_env()
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")

DEBUG = False
DEVELOPMENT = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB")
