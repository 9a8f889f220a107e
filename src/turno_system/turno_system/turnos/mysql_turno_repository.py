from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..common.datetime_utils import utc_now_iso
from ..core.exceptions import DomainError, StorageError, StorageUnavailableError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    date_to_iso,
    db_cursor,
    fetchall,
    fetchone,
    from_db_timestamp,
    time_to_hhmm,
    to_db_timestamp,
)
from .model import BulkResult, TurnoCandidate, TurnoFilters, TurnoRecord, TurnoStats, make_turno_id
from .repository import TurnoRepository

logger = logging.getLogger(__name__)

_COLUMNS = "id, fecha, persona_id, turno, start_shift, end_shift, es_vacaciones, notas, created_at, updated_at"

_UNREACHABLE_ERRNOS = {
    errorcode.CR_CONNECTION_ERROR,
    errorcode.CR_CONN_HOST_ERROR,
    errorcode.CR_SERVER_GONE_ERROR,
    errorcode.CR_SERVER_LOST,
    errorcode.ER_ACCESS_DENIED_ERROR,
    errorcode.ER_BAD_DB_ERROR,
}


def _row_to_record(r: dict[str, Any]) -> TurnoRecord:
    return TurnoRecord(
        id=str(r["id"]),
        date=date_to_iso(r["fecha"]),
        person_id=r.get("persona_id") or None,
        shift_type=r.get("turno") or None,
        start_time=time_to_hhmm(r.get("start_shift")),
        end_time=time_to_hhmm(r.get("end_shift")),
        is_vacation=bool(r["es_vacaciones"]),
        notes=r.get("notas") or "",
        created_at=from_db_timestamp(r["created_at"]),
        updated_at=from_db_timestamp(r["updated_at"]),
    )


class MySQLTurnoRepository(TurnoRepository):
    """Document-style store: one `turnos` row per (fecha, persona_id)."""

    name = "mysql"

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def _cursor(self):
        try:
            with db_cursor(self._conn_factory) as (conn, cur):
                yield conn, cur
        except mysql.connector.Error as e:
            if isinstance(e, mysql.connector.InterfaceError) or e.errno in _UNREACHABLE_ERRNOS:
                raise StorageUnavailableError(f"Base de datos no disponible: {e.msg}") from e
            raise StorageError(f"Error de base de datos: {e.msg}") from e

    def _params(self, record: TurnoRecord) -> tuple:
        return (
            record.date,
            record.person_id,
            record.shift_type,
            record.start_time,
            record.end_time,
            int(record.is_vacation),
            record.notes,
            to_db_timestamp(record.created_at),
            to_db_timestamp(record.updated_at),
        )

    def create(self, candidate: TurnoCandidate) -> TurnoRecord:
        now = utc_now_iso()
        record = TurnoRecord.from_candidate(candidate, created_at=now, updated_at=now)
        try:
            with self._cursor() as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO turnos({_COLUMNS})
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (record.id, *self._params(record)),
                )
        except StorageError as e:
            if isinstance(e.__cause__, mysql.connector.IntegrityError):
                raise StorageError(f"Ya existe un turno para la fecha {candidate.date}") from e
            raise
        return record

    def update(self, turno_id: str, candidate: TurnoCandidate) -> Optional[TurnoRecord]:
        existing = self.find_by_id(turno_id, candidate.date)
        if not existing:
            return None

        record = TurnoRecord.from_candidate(candidate, created_at=existing.created_at, updated_at=utc_now_iso())
        with self._cursor() as (_, cur):
            cur.execute(
                """
                UPDATE turnos
                SET fecha=%s, persona_id=%s, turno=%s, start_shift=%s, end_shift=%s,
                    es_vacaciones=%s, notas=%s, created_at=%s, updated_at=%s
                WHERE id=%s
                """,
                (*self._params(record), turno_id),
            )
        return record

    def delete(self, turno_id: str, date: str) -> bool:
        with self._cursor() as (_, cur):
            cur.execute("DELETE FROM turnos WHERE id=%s AND fecha=%s", (turno_id, date))
            return cur.rowcount > 0

    def find_by_id(self, turno_id: str, date: str) -> Optional[TurnoRecord]:
        with self._cursor() as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM turnos WHERE id=%s AND fecha=%s", (turno_id, date))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

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
        return self.search(
            TurnoFilters(date_from=date_from, date_to=date_to, person_id=person_id),
            descending=descending,
        )

    def search(self, filters: TurnoFilters, *, descending: bool = True) -> Sequence[TurnoRecord]:
        clauses = ["1=1"]
        params: list[object] = []
        if filters.date:
            clauses.append("fecha=%s")
            params.append(filters.date)
        if filters.shift_type:
            clauses.append("turno=%s")
            params.append(filters.shift_type)
        if filters.is_vacation is not None:
            clauses.append("es_vacaciones=%s")
            params.append(int(filters.is_vacation))
        if filters.person_id:
            clauses.append("persona_id=%s")
            params.append(filters.person_id)
        if filters.date_from:
            clauses.append("fecha>=%s")
            params.append(filters.date_from)
        if filters.date_to:
            clauses.append("fecha<=%s")
            params.append(filters.date_to)

        where = " AND ".join(clauses)
        order = "DESC" if descending else "ASC"

        with self._cursor() as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM turnos WHERE {where} ORDER BY fecha {order}, id {order}",
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def upsert(self, candidate: TurnoCandidate) -> TurnoRecord:
        existing = self.find_by_key(candidate.date, candidate.person_id)
        if existing:
            updated = self.update(existing.id, candidate)
            if updated is not None:
                return updated
        return self.create(candidate)

    def bulk_upsert(self, candidates: Sequence[TurnoCandidate]) -> BulkResult:
        result = BulkResult()
        for candidate in candidates:
            try:
                existing = self.find_by_key(candidate.date, candidate.person_id)
                stored = self.upsert(candidate)
            except StorageUnavailableError:
                raise
            except DomainError as e:
                logger.warning("bulk upsert skipped %s: %s", candidate.key, e)
                result.skipped += 1
                result.warnings.append(f"Error procesando turno para fecha {candidate.date}: {e}")
                continue

            result.items.append(stored)
            if existing:
                result.updated += 1
            else:
                result.inserted += 1
        return result

    def aggregate_stats(self, date_from: Optional[str] = None, date_to: Optional[str] = None) -> TurnoStats:
        clauses = ["1=1"]
        params: list[object] = []
        if date_from:
            clauses.append("fecha>=%s")
            params.append(date_from)
        if date_to:
            clauses.append("fecha<=%s")
            params.append(date_to)

        with self._cursor() as (_, cur):
            cur.execute(
                f"""
                SELECT turno, es_vacaciones, COUNT(*) AS n
                FROM turnos
                WHERE {' AND '.join(clauses)}
                GROUP BY turno, es_vacaciones
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        total = 0
        vacations = 0
        by_shift: dict[str, int] = {}
        for r in rows:
            n = int(r["n"])
            total += n
            if r["es_vacaciones"]:
                vacations += n
            elif r.get("turno"):
                by_shift[r["turno"]] = by_shift.get(r["turno"], 0) + n
        return TurnoStats(total=total, count_by_shift_type=by_shift, vacation_count=vacations)

    def delete_older_than(self, date: str) -> int:
        with self._cursor() as (_, cur):
            cur.execute("SELECT id, fecha FROM turnos WHERE fecha < %s", (date,))
            targets = fetchall(cur)

        deleted = 0
        for item in targets:
            try:
                if self.delete(str(item["id"]), date_to_iso(item["fecha"])):
                    deleted += 1
            except StorageUnavailableError:
                raise
            except StorageError:
                logger.exception("Error deleting turno %s", item["id"])
        return deleted
