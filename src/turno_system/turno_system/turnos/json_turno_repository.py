from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from ..common.datetime_utils import utc_now_iso
from ..core.exceptions import ReadOnlyModeError, StorageError
from .model import BulkResult, TurnoCandidate, TurnoFilters, TurnoRecord, TurnoStats, make_turno_id
from .repository import TurnoRepository

logger = logging.getLogger(__name__)

_READ_ONLY = "{} no está disponible en modo JSON de desarrollo: los datos son de solo lectura."


def _first(item: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if item.get(key) not in (None, ""):
            return item[key]
    return None


class JsonTurnoRepository(TurnoRepository):
    """Read-only backend over a JSON snapshot file.

    The file is parsed lazily and cached; the cache is reloaded whenever the
    file's modification time moves past the cached one.
    """

    name = "json"

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._cache: Optional[list[TurnoRecord]] = None
        self._last_modified: float = 0.0

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> list[TurnoRecord]:
        try:
            mtime = self._path.stat().st_mtime
            if self._cache is not None and self._last_modified >= mtime:
                return self._cache

            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Error loading turno snapshot %s: %s", self._path, e)
            raise StorageError("No se pudieron cargar los turnos desde el archivo JSON") from e

        loaded_at = utc_now_iso()
        self._cache = [self._to_record(item, loaded_at) for item in raw]
        self._last_modified = mtime
        logger.info("Loaded %d turnos from %s", len(self._cache), self._path)
        return self._cache

    @staticmethod
    def _to_record(item: dict[str, Any], loaded_at: str) -> TurnoRecord:
        fecha = str(_first(item, "fecha", "date"))
        person_id = _first(item, "personaId", "personId")
        return TurnoRecord(
            id=make_turno_id(fecha, person_id),
            date=fecha,
            shift_type=_first(item, "turno", "shiftType"),
            start_time=_first(item, "startShift", "startTime"),
            end_time=_first(item, "endShift", "endTime"),
            is_vacation=bool(_first(item, "esVacaciones", "isVacation")),
            notes=_first(item, "notas", "notes") or "",
            person_id=person_id,
            created_at=item.get("createdAt") or loaded_at,
            updated_at=item.get("updatedAt") or loaded_at,
        )

    def create(self, candidate: TurnoCandidate) -> TurnoRecord:
        raise ReadOnlyModeError(_READ_ONLY.format("Crear"))

    def update(self, turno_id: str, candidate: TurnoCandidate) -> Optional[TurnoRecord]:
        raise ReadOnlyModeError(_READ_ONLY.format("Actualizar"))

    def delete(self, turno_id: str, date: str) -> bool:
        raise ReadOnlyModeError(_READ_ONLY.format("Eliminar"))

    def upsert(self, candidate: TurnoCandidate) -> TurnoRecord:
        raise ReadOnlyModeError(_READ_ONLY.format("Upsert"))

    def bulk_upsert(self, candidates: Sequence[TurnoCandidate]) -> BulkResult:
        raise ReadOnlyModeError(_READ_ONLY.format("La carga masiva"))

    def delete_older_than(self, date: str) -> int:
        raise ReadOnlyModeError(_READ_ONLY.format("Eliminar"))

    def find_by_id(self, turno_id: str, date: str) -> Optional[TurnoRecord]:
        return next((r for r in self._load() if r.id == turno_id), None)

    def find_by_key(self, date: str, person_id: Optional[str] = None) -> Optional[TurnoRecord]:
        return self.find_by_id(make_turno_id(date, person_id), date)

    def find_by_range(
        self,
        date_from: str,
        date_to: str,
        person_id: Optional[str] = None,
        *,
        descending: bool = False,
    ) -> Sequence[TurnoRecord]:
        filters = TurnoFilters(date_from=date_from, date_to=date_to, person_id=person_id)
        items = [r for r in self._load() if filters.matches(r)]
        return sorted(items, key=lambda r: r.date, reverse=descending)

    def search(self, filters: TurnoFilters) -> Sequence[TurnoRecord]:
        items = [r for r in self._load() if filters.matches(r)]
        return sorted(items, key=lambda r: r.date, reverse=True)

    def aggregate_stats(self, date_from: Optional[str] = None, date_to: Optional[str] = None) -> TurnoStats:
        filters = TurnoFilters(date_from=date_from, date_to=date_to)
        return TurnoStats.from_records(r for r in self._load() if filters.matches(r))
