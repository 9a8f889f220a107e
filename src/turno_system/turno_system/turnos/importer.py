from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ..core.constants import HEADER_ROW_OFFSET
from . import validator
from .model import BulkResult, TurnoCandidate
from .repository import TurnoRepository
from .schema import parse_import_row

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowOutcome:
    """Result of preparing one spreadsheet row: a candidate or the reasons it was dropped."""

    row_number: int
    candidate: Optional[TurnoCandidate] = None
    warnings: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.candidate is not None


class BulkImportReconciler:
    """Turns raw spreadsheet rows into stored turnos.

    Rows never abort the batch: every per-row problem becomes a warning and
    the row is left out. Only a failure of the storage backend as a whole
    propagates.
    """

    def __init__(self, turnos: TurnoRepository):
        self._turnos = turnos

    def prepare_row(self, raw: dict[str, Any], row_number: int, *, person_id: Optional[str] = None) -> RowOutcome:
        parsed = parse_import_row(raw)
        if not parsed.ok:
            return RowOutcome(row_number, warnings=(f"Fila {row_number}: {parsed.describe()}",))

        row = parsed.value
        notes: list[str] = []
        if row.is_vacation and row.shift_type:
            notes.append(f"Fila {row_number}: Se especificó turno y vacaciones, se priorizarán las vacaciones")

        checked = validator.check(row.to_candidate(person_id=person_id))
        if not checked.ok:
            notes.extend(f"Fila {row_number}: {issue}" for issue in checked.issues)
            return RowOutcome(row_number, warnings=tuple(notes))

        return RowOutcome(row_number, candidate=checked.value, warnings=tuple(notes))

    def prepare(self, rows: Iterable[dict[str, Any]], *, person_id: Optional[str] = None) -> tuple[list[TurnoCandidate], list[str]]:
        """Normalize, validate and de-duplicate (first occurrence of a date wins)."""

        warnings: list[str] = []
        outcomes: list[RowOutcome] = []
        for index, raw in enumerate(rows):
            outcome = self.prepare_row(raw, index + HEADER_ROW_OFFSET, person_id=person_id)
            warnings.extend(outcome.warnings)
            if outcome.ok:
                outcomes.append(outcome)

        seen: set[str] = set()
        unique: list[TurnoCandidate] = []
        for outcome in outcomes:
            candidate = outcome.candidate
            if candidate.key in seen:
                warnings.append(f"Fila {outcome.row_number}: Fecha duplicada en archivo: {candidate.date}")
                continue
            seen.add(candidate.key)
            unique.append(candidate)

        return unique, warnings

    def import_batch(self, rows: Iterable[dict[str, Any]], *, person_id: Optional[str] = None) -> BulkResult:
        unique, warnings = self.prepare(rows, person_id=person_id)

        stored = self._turnos.bulk_upsert(unique)
        result = BulkResult(
            inserted=stored.inserted,
            updated=stored.updated,
            skipped=stored.skipped,
            warnings=warnings + list(stored.warnings),
            items=list(stored.items),
        )
        logger.info(
            "Excel import: %d inserted, %d updated, %d skipped, %d warnings",
            result.inserted,
            result.updated,
            result.skipped,
            len(result.warnings),
        )
        return result
