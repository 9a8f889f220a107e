from __future__ import annotations

import logging
import os
from functools import wraps
from typing import Optional

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.constants import DEFAULT_CLEANUP_DAYS
from ..core.enums import ShiftType
from ..core.exceptions import NotFoundError, ReadOnlyModeError, StorageUnavailableError, ValidationError
from ..common.validators import require_iso_date
from ..container import Container
from .model import TurnoFilters

logger = logging.getLogger(__name__)


def _person_id() -> Optional[str]:
    value = (request.args.get("personId") or "").strip()
    return value or None


def _parse_bool_arg(name: str) -> Optional[bool]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    lowered = raw.strip().lower()
    if lowered in ("true", "1", "si", "sí"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValidationError("Debe ser true o false", field=name)


def _internal_error(message: str, exc: Exception):
    body = {"error": message}
    if current_app.config.get("DEBUG"):
        body["message"] = str(exc)
    return jsonify(body), 500


def register(app: Flask, container: Container) -> None:
    service = container.turno_service

    def json_errors(view):
        """Map domain errors to JSON responses; anything unexpected is logged and hidden."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"error": e.message, "details": e.issues}), 400
            except NotFoundError as e:
                return jsonify({"error": str(e)}), 404
            except ReadOnlyModeError as e:
                return jsonify({"error": str(e)}), 409
            except StorageUnavailableError as e:
                logger.error("Storage unavailable in %s: %s", request.path, e)
                return jsonify({"error": "Servicio de almacenamiento no disponible"}), 503
            except HTTPException:
                raise
            except Exception as e:
                logger.exception("Error en %s %s", request.method, request.path)
                return _internal_error("Error interno del servidor", e)

        return wrapper

    @app.route("/api/turnos", methods=["GET"], endpoint="turnos_list")
    @json_errors
    def turnos_list():
        date_from = request.args.get("from")
        date_to = request.args.get("to")
        if not date_from or not date_to:
            return jsonify(
                {
                    "error": "Parámetros requeridos: from y to (formato YYYY-MM-DD)",
                    "example": "/api/turnos?from=2025-01-01&to=2025-01-31",
                }
            ), 400

        result = service.get_range(date_from, date_to, _person_id())
        return jsonify({"items": [r.to_dict() for r in result["items"]], "total": result["total"]})

    @app.route("/api/turnos/today", methods=["GET"], endpoint="turnos_today")
    @json_errors
    def turnos_today():
        try:
            record = service.get_today(_person_id())
        except NotFoundError:
            return jsonify({"error": "No se encontró turno para el día de hoy"}), 404
        return jsonify(record.to_dict())

    @app.route("/api/turnos/stats", methods=["GET"], endpoint="turnos_stats")
    @json_errors
    def turnos_stats():
        stats = service.stats(request.args.get("from") or None, request.args.get("to") or None)
        return jsonify(stats.to_dict())

    @app.route("/api/turnos/search", methods=["GET"], endpoint="turnos_search")
    @json_errors
    def turnos_search():
        shift = request.args.get("shiftType") or None
        if shift is not None:
            try:
                shift = ShiftType.parse(shift).value
            except ValueError:
                raise ValidationError(f"Tipo de turno no válido: {shift}", field="shiftType") from None

        filters = TurnoFilters(
            date=request.args.get("date") or None,
            shift_type=shift,
            is_vacation=_parse_bool_arg("isVacation"),
            person_id=_person_id(),
            date_from=request.args.get("from") or None,
            date_to=request.args.get("to") or None,
        )
        result = service.search(filters)
        return jsonify({"items": [r.to_dict() for r in result["items"]], "total": result["total"]})

    @app.route("/api/turnos/<fecha>", methods=["GET"], endpoint="turnos_by_date")
    @json_errors
    def turnos_by_date(fecha: str):
        try:
            require_iso_date(fecha, "date")
        except ValidationError:
            return jsonify({"error": "Formato de fecha inválido. Use YYYY-MM-DD"}), 400

        try:
            record = service.get_by_date(fecha, _person_id())
        except NotFoundError:
            return jsonify({"error": "No se encontró turno para la fecha especificada"}), 404
        return jsonify(record.to_dict())

    @app.route("/api/turnos", methods=["POST"], endpoint="turnos_upsert")
    @json_errors
    def turnos_upsert():
        body = request.get_json(silent=True)
        if body is None:
            raise ValidationError("Se esperaba un cuerpo JSON", field="body")
        record = service.upsert(body, person_id=_person_id())
        return jsonify(record.to_dict()), 201

    @app.route("/api/turnos/excel", methods=["POST"], endpoint="turnos_excel")
    @json_errors
    def turnos_excel():
        upload = request.files.get("file")
        if upload is None:
            return jsonify({"error": "No se encontró archivo en la solicitud"}), 400

        upload.stream.seek(0, os.SEEK_END)
        size = upload.stream.tell()
        upload.stream.seek(0)

        errors = service.validate_upload(upload.filename, size)
        if errors:
            return jsonify({"error": "Archivo inválido", "details": errors}), 400

        report = service.import_excel(upload.stream, person_id=_person_id())
        result = report.result
        details = result.to_dict()
        details["headerWarnings"] = report.header_warnings
        return jsonify(
            {
                "success": True,
                "message": (
                    f"Procesamiento completado: {result.inserted} insertados, "
                    f"{result.updated} actualizados, {result.skipped} omitidos"
                ),
                "details": details,
            }
        )

    @app.route("/api/turnos/cleanup", methods=["DELETE"], endpoint="turnos_cleanup")
    @json_errors
    def turnos_cleanup():
        raw = request.args.get("daysOld")
        try:
            days = int(raw) if raw not in (None, "") else DEFAULT_CLEANUP_DAYS
        except ValueError:
            raise ValidationError("daysOld debe ser un número entero", field="daysOld") from None

        deleted = service.cleanup_old_data(days)
        return jsonify({"success": True, "message": f"{deleted} registros eliminados", "deletedCount": deleted})
