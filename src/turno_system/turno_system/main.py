from __future__ import annotations

import importlib
import logging
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import NotFound, RequestEntityTooLarge

from config import get_settings_module

from .common.datetime_utils import LocaleConfig
from .container import build_container
from .core.constants import APP_VERSION, DEFAULT_MAX_UPLOAD_MB
from .core.enums import StorageBackend
from .database.bootstrap import apply_schema, default_schema_path, list_tables
from .turnos.controller import register as register_turnos
from .turnos.repository import TurnoRepository

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = {
    "GET /health": "Health check",
    "GET /api/turnos": "Turnos por rango de fechas",
    "GET /api/turnos/today": "Turno de hoy",
    "GET /api/turnos/stats": "Estadísticas de turnos",
    "GET /api/turnos/search": "Búsqueda con filtros",
    "GET /api/turnos/<fecha>": "Turno por fecha",
    "POST /api/turnos": "Crear/actualizar turno",
    "POST /api/turnos/excel": "Subir archivo Excel",
    "DELETE /api/turnos/cleanup": "Limpiar datos antiguos",
}


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level_name).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings_module: Optional[str] = None, *, turnos_repo: Optional[TurnoRepository] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    max_upload_mb = int(getattr(settings, "MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB))
    # Leave room for multipart overhead; the exact limit is enforced on the file itself.
    app.config["MAX_CONTENT_LENGTH"] = (max_upload_mb + 1) * 1024 * 1024

    db_config = getattr(settings, "DB_CONFIG", None)
    locale = LocaleConfig().with_overrides(
        timezone=getattr(settings, "TIMEZONE", None),
        locale=getattr(settings, "LOCALE", None),
    )

    container = build_container(
        storage_backend=getattr(settings, "STORAGE_BACKEND", StorageBackend.AUTO.value),
        db_config=db_config,
        json_path=getattr(settings, "JSON_SNAPSHOT_PATH", None),
        development=bool(getattr(settings, "DEVELOPMENT", False)),
        use_json_proxy=bool(getattr(settings, "USE_JSON_PROXY", False)),
        locale=locale,
        max_upload_mb=max_upload_mb,
        turnos_repo=turnos_repo,
    )
    app.extensions["turno_container"] = container

    storage = container.turno_service.storage_name
    logger.info("settings=%s storage=%s", settings_module, storage)

    if storage == StorageBackend.MYSQL.value and bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=default_schema_path())
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    register_turnos(app, container)

    cors_origin = getattr(settings, "CORS_ORIGIN", None)
    if cors_origin:
        CORS(
            app,
            origins=[cors_origin],
            supports_credentials=True,
            allow_headers=["Content-Type"],
            methods=["GET", "POST", "DELETE", "OPTIONS"],
        )

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify(
            {
                "status": "ok",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "version": APP_VERSION,
                "storage": storage,
            }
        )

    @app.errorhandler(NotFound)
    def not_found(_):
        return jsonify(
            {
                "error": "Endpoint no encontrado",
                "message": f"La ruta {request.method} {request.path} no existe",
                "availableEndpoints": AVAILABLE_ENDPOINTS,
            }
        ), 404

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_):
        return jsonify(
            {
                "error": "Archivo demasiado grande",
                "message": f"El archivo debe ser menor a {max_upload_mb}MB",
            }
        ), 400

    return app
