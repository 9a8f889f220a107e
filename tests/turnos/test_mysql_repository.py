from __future__ import annotations

from datetime import date, datetime, timedelta

import mysql.connector
import pytest

from src.turno_system.turno_system.core.exceptions import StorageError, StorageUnavailableError
from src.turno_system.turno_system.turnos.model import TurnoCandidate
from src.turno_system.turno_system.turnos.mysql_turno_repository import MySQLTurnoRepository


class FakeCursor:
    def __init__(self, rows):
        self._rows = rows
        self.executed = []
        self.rowcount = 0

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class FakeFactory:
    def __init__(self, rows=(), error=None):
        self.cursor = FakeCursor(list(rows))
        self.error = error

    def connect(self, *, with_database=True):
        if self.error is not None:
            raise self.error
        return FakeConnection(self.cursor)


def test_row_mapping_handles_timedelta_times():
    row = {
        "id": "2025-01-04",
        "fecha": date(2025, 1, 4),
        "persona_id": None,
        "turno": "noche",
        "start_shift": timedelta(hours=22),
        "end_shift": timedelta(0),
        "es_vacaciones": 0,
        "notas": None,
        "created_at": datetime(2025, 1, 1, 12, 0, 0, 250000),
        "updated_at": datetime(2025, 1, 1, 12, 0, 0, 250000),
    }
    repo = MySQLTurnoRepository(FakeFactory([row]))
    rec = repo.find_by_key("2025-01-04")
    assert (rec.start_time, rec.end_time) == ("22:00", "00:00")
    assert rec.is_vacation is False
    assert rec.notes == ""
    assert rec.created_at == "2025-01-01T12:00:00.250Z"


def test_range_orders_oldest_first_and_binds_params():
    factory = FakeFactory([])
    MySQLTurnoRepository(factory).find_by_range("2025-01-01", "2025-01-31", "ana")
    sql, params = factory.cursor.executed[-1]
    assert "persona_id=%s" in sql
    assert sql.endswith("ORDER BY fecha ASC, id ASC")
    assert params == ("ana", "2025-01-01", "2025-01-31")


def test_stats_from_grouped_rows():
    rows = [
        {"turno": "mañana", "es_vacaciones": 0, "n": 3},
        {"turno": None, "es_vacaciones": 1, "n": 2},
        {"turno": None, "es_vacaciones": 0, "n": 1},
    ]
    stats = MySQLTurnoRepository(FakeFactory(rows)).aggregate_stats("2025-01-01", None)
    assert stats.total == 6
    assert stats.vacation_count == 2
    assert stats.count_by_shift_type == {"mañana": 3}


def test_unreachable_server_is_unavailable():
    error = mysql.connector.InterfaceError(msg="Can't connect")
    repo = MySQLTurnoRepository(FakeFactory(error=error))
    with pytest.raises(StorageUnavailableError):
        repo.find_by_key("2025-01-01")
    with pytest.raises(StorageUnavailableError):
        repo.bulk_upsert([TurnoCandidate(date="2025-01-01")])


def test_other_database_errors_are_storage_errors():
    error = mysql.connector.ProgrammingError(msg="bad sql", errno=1064)
    with pytest.raises(StorageError) as exc:
        MySQLTurnoRepository(FakeFactory(error=error)).find_by_key("2025-01-01")
    assert not isinstance(exc.value, StorageUnavailableError)


class FakeTurnosTable:
    """Enough of the `turnos` table to drive the repository's write paths."""

    def __init__(self):
        self.rows: dict[str, dict] = {}
        self.failing_inserts: set[str] = set()
        self.failing_deletes: set[str] = set()

    def connect(self, *, with_database=True):
        return FakeConnection(TableCursor(self))


class TableCursor(FakeCursor):
    _FIELDS = ("fecha", "persona_id", "turno", "start_shift", "end_shift", "es_vacaciones", "notas", "created_at", "updated_at")

    def __init__(self, table: FakeTurnosTable):
        super().__init__([])
        self._table = table

    def execute(self, sql, params=()):
        super().execute(sql, params)
        sql = " ".join(sql.split())
        rows = self._table.rows
        if sql.startswith("INSERT INTO turnos"):
            turno_id, fecha = params[0], params[1]
            if fecha in self._table.failing_inserts:
                raise mysql.connector.DataError(msg="bad")
            if turno_id in rows:
                raise mysql.connector.IntegrityError(msg="Duplicate entry", errno=1062)
            rows[turno_id] = {"id": turno_id, **dict(zip(self._FIELDS, params[1:]))}
        elif sql.startswith("UPDATE turnos"):
            rows[params[-1]] = {"id": params[-1], **dict(zip(self._FIELDS, params[:-1]))}
            self.rowcount = 1
        elif sql.startswith("DELETE FROM turnos"):
            if params[1] in self._table.failing_deletes:
                raise mysql.connector.DataError(msg="locked")
            self.rowcount = 1 if rows.pop(params[0], None) else 0
        elif sql.startswith("SELECT id, fecha FROM turnos WHERE fecha <"):
            self._rows = [{"id": r["id"], "fecha": r["fecha"]} for r in rows.values() if r["fecha"] < params[0]]
        elif "WHERE id=%s AND fecha=%s" in sql:
            row = rows.get(params[0])
            self._rows = [row] if row and row["fecha"] == params[1] else []


@pytest.fixture
def clock(monkeypatch):
    ticks = iter(f"2025-01-01T10:00:{s:02d}.000Z" for s in range(60))
    monkeypatch.setattr(
        "src.turno_system.turno_system.turnos.mysql_turno_repository.utc_now_iso",
        lambda: next(ticks),
    )


def test_upsert_replaces_the_record_and_keeps_created_at(clock):
    repo = MySQLTurnoRepository(FakeTurnosTable())
    first = repo.upsert(TurnoCandidate(date="2025-01-02", shift_type="mañana", start_time="07:00", end_time="15:00", notes="x"))
    second = repo.upsert(TurnoCandidate(date="2025-01-02", is_vacation=True))

    assert second.created_at == first.created_at == "2025-01-01T10:00:00.000Z"
    assert second.updated_at == "2025-01-01T10:00:01.000Z"

    stored = repo.find_by_key("2025-01-02")
    assert stored.is_vacation is True
    assert (stored.shift_type, stored.start_time, stored.end_time, stored.notes) == (None, None, None, "")
    assert stored.created_at == first.created_at


def test_update_of_unknown_id_returns_none(clock):
    assert MySQLTurnoRepository(FakeTurnosTable()).update("2025-01-02", TurnoCandidate(date="2025-01-02")) is None


def test_create_twice_reports_existing_date(clock):
    repo = MySQLTurnoRepository(FakeTurnosTable())
    repo.create(TurnoCandidate(date="2025-01-02"))
    with pytest.raises(StorageError, match="Ya existe un turno para la fecha 2025-01-02"):
        repo.create(TurnoCandidate(date="2025-01-02"))


def test_bulk_upsert_skips_rows_the_database_rejects(clock):
    table = FakeTurnosTable()
    table.failing_inserts.add("2025-01-02")
    repo = MySQLTurnoRepository(table)
    repo.create(TurnoCandidate(date="2025-01-03", shift_type="tarde"))

    result = repo.bulk_upsert(
        [
            TurnoCandidate(date="2025-01-01", is_vacation=True),
            TurnoCandidate(date="2025-01-02", shift_type="mañana"),
            TurnoCandidate(date="2025-01-03", shift_type="noche"),
        ]
    )

    assert (result.inserted, result.updated, result.skipped) == (1, 1, 1)
    assert result.warnings == ["Error procesando turno para fecha 2025-01-02: Error de base de datos: bad"]
    assert [r.date for r in result.items] == ["2025-01-01", "2025-01-03"]
    assert repo.find_by_key("2025-01-03").shift_type == "noche"


def test_delete_older_than_skips_failed_deletes(clock):
    table = FakeTurnosTable()
    repo = MySQLTurnoRepository(table)
    for d in ("2025-01-01", "2025-01-02", "2025-01-03", "2025-02-01"):
        repo.create(TurnoCandidate(date=d))
    table.failing_deletes.add("2025-01-02")

    assert repo.delete_older_than("2025-01-10") == 2
    assert sorted(table.rows) == ["2025-01-02", "2025-02-01"]
