from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import IO, Any, Optional

from ..common.datetime_utils import LocaleConfig, LocalizedDate, normalize_date_input
from ..common.validators import require_iso_date
from ..core.constants import DEFAULT_CLEANUP_DAYS, DEFAULT_MAX_UPLOAD_MB
from ..core.exceptions import NotFoundError, ValidationError
from . import validator
from .excel_reader import HeaderCheck, read_excel_rows, validate_headers
from .importer import BulkImportReconciler
from .model import BulkResult, TurnoCandidate, TurnoFilters, TurnoRecord, TurnoStats
from .repository import TurnoRepository
from .schema import parse_turno_payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExcelImportReport:
    result: BulkResult
    header_warnings: list[str]


class TurnoService:
    def __init__(
        self,
        turnos: TurnoRepository,
        *,
        locale: Optional[LocaleConfig] = None,
        max_upload_mb: int = DEFAULT_MAX_UPLOAD_MB,
        importer: Optional[BulkImportReconciler] = None,
    ):
        self._turnos = turnos
        self._locale = locale or LocaleConfig()
        self._max_upload_mb = int(max_upload_mb)
        self._importer = importer or BulkImportReconciler(turnos)

    @property
    def storage_name(self) -> str:
        return getattr(self._turnos, "name", type(self._turnos).__name__)

    def today(self) -> LocalizedDate:
        return LocalizedDate.now(self._locale)

    def get_by_date(self, date: str, person_id: Optional[str] = None) -> TurnoRecord:
        require_iso_date(date, "date")
        record = self._turnos.find_by_key(date, person_id)
        if not record:
            raise NotFoundError(f"No se encontró turno para la fecha {date}")
        return record

    def get_range(self, date_from: str, date_to: str, person_id: Optional[str] = None) -> dict[str, Any]:
        require_iso_date(date_from, "from")
        require_iso_date(date_to, "to")
        items = list(self._turnos.find_by_range(date_from, date_to, person_id))
        return {"items": items, "total": len(items)}

    def get_today(self, person_id: Optional[str] = None) -> TurnoRecord:
        return self.get_by_date(self.today().format_iso(), person_id)

    def search(self, filters: TurnoFilters) -> dict[str, Any]:
        items = list(self._turnos.search(filters))
        return {"items": items, "total": len(items)}

    def check_date_conflict(self, date: str, person_id: Optional[str] = None) -> dict[str, Any]:
        existing = self._turnos.find_by_key(date, person_id)
        return {"hasConflict": existing is not None, "existingTurno": existing}

    def build_candidate(self, body: Any, *, person_id: Optional[str] = None) -> TurnoCandidate:
        """Parse a JSON body, normalize its date and apply the business rules."""

        parsed = parse_turno_payload(body, person_id=person_id)
        if not parsed.ok:
            raise ValidationError("Datos inválidos", issues=[i.to_dict() for i in parsed.issues])

        candidate = parsed.value
        normalized_date = normalize_date_input(candidate.date, self._locale)
        if normalized_date != candidate.date:
            candidate = replace(candidate, date=normalized_date)
        return validator.validate(candidate)

    def upsert(self, body: Any, *, person_id: Optional[str] = None) -> TurnoRecord:
        candidate = self.build_candidate(body, person_id=person_id)
        return self._turnos.upsert(candidate)

    def validate_upload(self, filename: Optional[str], size: int) -> list[str]:
        errors: list[str] = []
        if size > self._max_upload_mb * 1024 * 1024:
            errors.append(f"El archivo es demasiado grande. Máximo permitido: {self._max_upload_mb}MB")
        if not (filename or "").lower().endswith(".xlsx"):
            errors.append("Solo se permiten archivos Excel (.xlsx)")
        if size == 0:
            errors.append("El archivo está vacío")
        return errors

    def import_rows(self, rows: list[dict[str, Any]], *, person_id: Optional[str] = None) -> BulkResult:
        return self._importer.import_batch(rows, person_id=person_id)

    def import_excel(self, stream: IO[bytes], *, person_id: Optional[str] = None) -> ExcelImportReport:
        headers, rows = read_excel_rows(stream)
        check: HeaderCheck = validate_headers(headers)
        if not check.valid:
            raise ValidationError(
                f"Faltan columnas requeridas: {', '.join(check.missing)}",
                field="file",
                issues=[{"path": "file", "message": f"Header requerido faltante: {h}"} for h in check.missing],
            )
        result = self.import_rows(rows, person_id=person_id)
        return ExcelImportReport(result=result, header_warnings=check.warnings)

    def stats(self, date_from: Optional[str] = None, date_to: Optional[str] = None) -> TurnoStats:
        if date_from:
            require_iso_date(date_from, "from")
        if date_to:
            require_iso_date(date_to, "to")
        return self._turnos.aggregate_stats(date_from, date_to)

    def cleanup_old_data(self, days_old: int = DEFAULT_CLEANUP_DAYS) -> int:
        if days_old < 0:
            raise ValidationError("daysOld debe ser un número positivo", field="daysOld")
        cutoff = self.today().subtract_days(days_old).format_iso()
        deleted = self._turnos.delete_older_than(cutoff)
        logger.info("Cleanup removed %d turnos older than %s", deleted, cutoff)
        return deleted
