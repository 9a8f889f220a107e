from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from src.turno_system.turno_system.core.exceptions import ReadOnlyModeError, StorageError
from src.turno_system.turno_system.turnos.json_turno_repository import JsonTurnoRepository
from src.turno_system.turno_system.turnos.model import TurnoCandidate, TurnoFilters

SAMPLE = Path(__file__).resolve().parents[2] / "data" / "turno.json"


def _write(path: Path, items: list[dict], mtime: float) -> None:
    path.write_text(json.dumps(items), encoding="utf-8")
    os.utime(path, (mtime, mtime))


def test_reads_sample_snapshot():
    repo = JsonTurnoRepository(SAMPLE)
    jan2 = repo.find_by_key("2025-01-02")
    assert jan2.shift_type == "mañana"
    assert (jan2.start_time, jan2.end_time) == ("07:00", "15:00")
    assert repo.find_by_key("2025-01-01").is_vacation is True
    assert repo.find_by_key("2024-12-31") is None


def test_range_is_inclusive_and_ascending():
    repo = JsonTurnoRepository(SAMPLE)
    assert [r.date for r in repo.find_by_range("2025-01-02", "2025-01-04")] == ["2025-01-02", "2025-01-03", "2025-01-04"]
    assert [r.date for r in repo.find_by_range("2025-01-02", "2025-01-03", descending=True)] == ["2025-01-03", "2025-01-02"]


def test_search_newest_first():
    repo = JsonTurnoRepository(SAMPLE)
    items = repo.search(TurnoFilters(is_vacation=False))
    assert [r.date for r in items] == ["2025-01-05", "2025-01-04", "2025-01-03", "2025-01-02"]


def test_stats_partition_total():
    stats = JsonTurnoRepository(SAMPLE).aggregate_stats()
    assert stats.total == 5
    assert stats.vacation_count == 1
    assert stats.count_by_shift_type == {"mañana": 1, "tarde": 1, "noche": 1}
    # Jan 5 has neither a shift nor a vacation.
    assert stats.vacation_count + sum(stats.count_by_shift_type.values()) <= stats.total


def test_cache_reloads_when_file_changes(tmp_path):
    path = tmp_path / "turno.json"
    _write(path, [{"fecha": "2025-02-01", "turno": "tarde", "esVacaciones": False}], 1_700_000_000)
    repo = JsonTurnoRepository(path)
    assert repo.find_by_key("2025-02-01").shift_type == "tarde"

    _write(path, [{"date": "2025-02-01", "shiftType": "noche", "isVacation": False}], 1_700_000_100)
    assert repo.find_by_key("2025-02-01").shift_type == "noche"


def test_cache_kept_while_mtime_unchanged(tmp_path):
    path = tmp_path / "turno.json"
    _write(path, [{"fecha": "2025-02-01", "turno": "tarde"}], 1_700_000_000)
    repo = JsonTurnoRepository(path)
    repo.find_by_key("2025-02-01")

    _write(path, [], 1_700_000_000)
    assert repo.find_by_key("2025-02-01") is not None


def test_person_scoped_records(tmp_path):
    path = tmp_path / "turno.json"
    _write(path, [{"fecha": "2025-02-01", "turno": "tarde", "personaId": "ana"}], 1_700_000_000)
    repo = JsonTurnoRepository(path)
    assert repo.find_by_key("2025-02-01") is None
    assert repo.find_by_key("2025-02-01", "ana").id == "2025-02-01_ana"


@pytest.mark.parametrize(
    "call",
    [
        lambda r: r.create(TurnoCandidate(date="2025-01-09")),
        lambda r: r.update("2025-01-02", TurnoCandidate(date="2025-01-02")),
        lambda r: r.delete("2025-01-02", "2025-01-02"),
        lambda r: r.upsert(TurnoCandidate(date="2025-01-09")),
        lambda r: r.bulk_upsert([TurnoCandidate(date="2025-01-09")]),
        lambda r: r.delete_older_than("2030-01-01"),
    ],
)
def test_mutations_are_rejected(call):
    with pytest.raises(ReadOnlyModeError):
        call(JsonTurnoRepository(SAMPLE))


def test_missing_or_broken_file_is_storage_error(tmp_path):
    with pytest.raises(StorageError):
        JsonTurnoRepository(tmp_path / "nope.json").find_by_key("2025-01-01")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonTurnoRepository(broken).search(TurnoFilters())
