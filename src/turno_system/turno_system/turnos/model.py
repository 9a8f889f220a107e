from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional


def make_turno_id(date: str, person_id: Optional[str] = None) -> str:
    """Composite key: the date alone, or `date_personId`."""
    return f"{date}_{person_id}" if person_id else date


@dataclass(frozen=True)
class TurnoCandidate:
    """Datos de un turno antes de persistir (entrada de upsert/importación)."""

    date: str
    shift_type: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_vacation: bool = False
    notes: str = ""
    person_id: Optional[str] = None

    @property
    def key(self) -> str:
        return make_turno_id(self.date, self.person_id)

    def cleared_for_vacation(self) -> "TurnoCandidate":
        return replace(self, shift_type=None, start_time=None, end_time=None)


@dataclass(frozen=True)
class TurnoRecord:
    """Entidad de dominio: un turno almacenado."""

    id: str
    date: str
    is_vacation: bool
    created_at: str
    updated_at: str
    shift_type: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    notes: str = ""
    person_id: Optional[str] = None

    @classmethod
    def from_candidate(cls, candidate: TurnoCandidate, *, created_at: str, updated_at: str) -> "TurnoRecord":
        return cls(
            id=candidate.key,
            date=candidate.date,
            shift_type=candidate.shift_type,
            start_time=candidate.start_time,
            end_time=candidate.end_time,
            is_vacation=candidate.is_vacation,
            notes=candidate.notes or "",
            person_id=candidate.person_id,
            created_at=created_at,
            updated_at=updated_at,
        )

    def to_candidate(self) -> TurnoCandidate:
        return TurnoCandidate(
            date=self.date,
            shift_type=self.shift_type,
            start_time=self.start_time,
            end_time=self.end_time,
            is_vacation=self.is_vacation,
            notes=self.notes,
            person_id=self.person_id,
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON shape returned by the API; absent optionals are omitted."""

        out: dict[str, Any] = {"id": self.id, "date": self.date}
        if self.shift_type:
            out["shiftType"] = self.shift_type
        if self.start_time:
            out["startTime"] = self.start_time
        if self.end_time:
            out["endTime"] = self.end_time
        out["isVacation"] = self.is_vacation
        out["notes"] = self.notes or ""
        if self.person_id:
            out["personId"] = self.person_id
        out["createdAt"] = self.created_at
        out["updatedAt"] = self.updated_at
        return out


@dataclass(frozen=True)
class TurnoFilters:
    date: Optional[str] = None
    shift_type: Optional[str] = None
    is_vacation: Optional[bool] = None
    person_id: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None

    def matches(self, record: TurnoRecord) -> bool:
        if self.date and record.date != self.date:
            return False
        if self.shift_type and record.shift_type != self.shift_type:
            return False
        if self.is_vacation is not None and record.is_vacation != self.is_vacation:
            return False
        if self.person_id and record.person_id != self.person_id:
            return False
        if self.date_from and record.date < self.date_from:
            return False
        if self.date_to and record.date > self.date_to:
            return False
        return True


@dataclass(frozen=True)
class TurnoStats:
    total: int
    count_by_shift_type: dict[str, int]
    vacation_count: int

    @classmethod
    def from_records(cls, records) -> "TurnoStats":
        total = 0
        vacations = 0
        by_shift: dict[str, int] = {}
        for r in records:
            total += 1
            if r.is_vacation:
                vacations += 1
            elif r.shift_type:
                by_shift[r.shift_type] = by_shift.get(r.shift_type, 0) + 1
        return cls(total=total, count_by_shift_type=by_shift, vacation_count=vacations)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "countByShiftType": dict(self.count_by_shift_type),
            "vacationCount": self.vacation_count,
        }


@dataclass
class BulkResult:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    warnings: list[str] = field(default_factory=list)
    items: list[TurnoRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "insertedCount": self.inserted,
            "updatedCount": self.updated,
            "skippedCount": self.skipped,
            "warnings": list(self.warnings),
            "storedRecords": [r.to_dict() for r in self.items],
        }
