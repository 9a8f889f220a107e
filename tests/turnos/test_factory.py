from __future__ import annotations

import pytest

from src.turno_system.turno_system.core.enums import StorageBackend
from src.turno_system.turno_system.turnos.factory import TurnoRepositoryFactory
from src.turno_system.turno_system.turnos.json_turno_repository import JsonTurnoRepository
from src.turno_system.turno_system.turnos.mysql_turno_repository import MySQLTurnoRepository

DB = {"host": "db.local", "port": 3306, "user": "turnos", "password": "x", "database": "turno_db"}


@pytest.mark.parametrize(
    "development, db_config, proxy, expected",
    [
        (True, None, False, StorageBackend.JSON),
        (True, {"host": ""}, False, StorageBackend.JSON),
        (True, DB, True, StorageBackend.JSON),
        (True, DB, False, StorageBackend.MYSQL),
        (False, None, True, StorageBackend.MYSQL),
    ],
)
def test_auto_resolution(development, db_config, proxy, expected):
    chosen = TurnoRepositoryFactory().resolve("auto", development=development, db_config=db_config, use_json_proxy=proxy)
    assert chosen == expected


def test_explicit_backend_wins():
    factory = TurnoRepositoryFactory()
    assert factory.resolve("JSON", development=False, db_config=DB) == StorageBackend.JSON
    assert factory.resolve(StorageBackend.MYSQL, development=True, db_config=None) == StorageBackend.MYSQL


def test_create_builds_the_right_repository(tmp_path):
    factory = TurnoRepositoryFactory()
    assert isinstance(factory.create("json", json_path=tmp_path / "t.json"), JsonTurnoRepository)
    assert isinstance(factory.create("mysql", db_config=DB), MySQLTurnoRepository)


def test_create_requires_its_settings():
    factory = TurnoRepositoryFactory()
    with pytest.raises(ValueError):
        factory.create("json")
    with pytest.raises(ValueError):
        factory.create("mysql")
    with pytest.raises(ValueError):
        factory.create("cosmos")
