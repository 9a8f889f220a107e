from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import BulkResult, TurnoCandidate, TurnoFilters, TurnoRecord, TurnoStats


class TurnoRepository(Protocol):
    """Storage port for turnos, keyed by (date, person_id)."""

    name: str

    def create(self, candidate: TurnoCandidate) -> TurnoRecord:
        raise NotImplementedError

    def update(self, turno_id: str, candidate: TurnoCandidate) -> Optional[TurnoRecord]:
        """Replace every field of an existing record.

        Keeps created_at, refreshes updated_at. Returns None if the id is unknown.
        """

        raise NotImplementedError

    def delete(self, turno_id: str, date: str) -> bool:
        raise NotImplementedError

    def find_by_id(self, turno_id: str, date: str) -> Optional[TurnoRecord]:
        raise NotImplementedError

    def find_by_key(self, date: str, person_id: Optional[str] = None) -> Optional[TurnoRecord]:
        raise NotImplementedError

    def find_by_range(
        self,
        date_from: str,
        date_to: str,
        person_id: Optional[str] = None,
        *,
        descending: bool = False,
    ) -> Sequence[TurnoRecord]:
        """Inclusive bounds on both ends."""

        raise NotImplementedError

    def search(self, filters: TurnoFilters) -> Sequence[TurnoRecord]:
        """Newest date first."""

        raise NotImplementedError

    def upsert(self, candidate: TurnoCandidate) -> TurnoRecord:
        raise NotImplementedError

    def bulk_upsert(self, candidates: Sequence[TurnoCandidate]) -> BulkResult:
        raise NotImplementedError

    def aggregate_stats(self, date_from: Optional[str] = None, date_to: Optional[str] = None) -> TurnoStats:
        raise NotImplementedError

    def delete_older_than(self, date: str) -> int:
        """Delete records whose date is strictly before `date`; return the count."""

        raise NotImplementedError
