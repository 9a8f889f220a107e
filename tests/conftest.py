from __future__ import annotations

from typing import Optional, Sequence

import pytest

from src.turno_system.turno_system.core.exceptions import StorageUnavailableError
from src.turno_system.turno_system.turnos.model import (
    BulkResult,
    TurnoCandidate,
    TurnoFilters,
    TurnoRecord,
    TurnoStats,
)


class InMemoryTurnos:
    name = "memory"

    def __init__(self, records: Sequence[TurnoRecord] = ()):
        self._by_id: dict[str, TurnoRecord] = {r.id: r for r in records}
        self._clock = 0
        self.available = True
        self.failing_dates: set[str] = set()

    def _now(self) -> str:
        self._clock += 1
        return f"2025-01-01T00:00:{self._clock:02d}.000Z"

    def _check(self) -> None:
        if not self.available:
            raise StorageUnavailableError("store offline")

    def create(self, candidate: TurnoCandidate) -> TurnoRecord:
        self._check()
        ts = self._now()
        rec = TurnoRecord.from_candidate(candidate, created_at=ts, updated_at=ts)
        self._by_id[rec.id] = rec
        return rec

    def update(self, turno_id: str, candidate: TurnoCandidate) -> Optional[TurnoRecord]:
        self._check()
        existing = self._by_id.get(turno_id)
        if existing is None:
            return None
        rec = TurnoRecord.from_candidate(candidate, created_at=existing.created_at, updated_at=self._now())
        self._by_id[turno_id] = rec
        return rec

    def delete(self, turno_id: str, date: str) -> bool:
        self._check()
        return self._by_id.pop(turno_id, None) is not None

    def find_by_id(self, turno_id: str, date: str) -> Optional[TurnoRecord]:
        self._check()
        return self._by_id.get(turno_id)

    def find_by_key(self, date: str, person_id: Optional[str] = None) -> Optional[TurnoRecord]:
        return self.find_by_id(TurnoCandidate(date=date, person_id=person_id).key, date)

    def find_by_range(self, date_from, date_to, person_id=None, *, descending=False):
        self._check()
        filters = TurnoFilters(date_from=date_from, date_to=date_to, person_id=person_id)
        items = [r for r in self._by_id.values() if filters.matches(r)]
        return sorted(items, key=lambda r: r.date, reverse=descending)

    def search(self, filters: TurnoFilters):
        self._check()
        items = [r for r in self._by_id.values() if filters.matches(r)]
        return sorted(items, key=lambda r: r.date, reverse=True)

    def upsert(self, candidate: TurnoCandidate) -> TurnoRecord:
        if self.find_by_key(candidate.date, candidate.person_id):
            return self.update(candidate.key, candidate)
        return self.create(candidate)

    def bulk_upsert(self, candidates: Sequence[TurnoCandidate]) -> BulkResult:
        result = BulkResult()
        for c in candidates:
            if c.date in self.failing_dates:
                result.skipped += 1
                result.warnings.append(f"Error procesando turno para fecha {c.date}: boom")
                continue
            existed = self.find_by_key(c.date, c.person_id) is not None
            result.items.append(self.upsert(c))
            if existed:
                result.updated += 1
            else:
                result.inserted += 1
        return result

    def aggregate_stats(self, date_from=None, date_to=None) -> TurnoStats:
        self._check()
        filters = TurnoFilters(date_from=date_from, date_to=date_to)
        return TurnoStats.from_records(r for r in self._by_id.values() if filters.matches(r))

    def delete_older_than(self, date: str) -> int:
        self._check()
        old = [k for k, r in self._by_id.items() if r.date < date]
        for k in old:
            del self._by_id[k]
        return len(old)


@pytest.fixture
def turnos_repo() -> InMemoryTurnos:
    return InMemoryTurnos()
