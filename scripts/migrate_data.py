"""Migrate the JSON snapshot (data/turno.json) into MySQL.

Usage:
    python scripts/migrate_data.py [--dry-run] [--overwrite] [--person-id ID] [--source PATH]

Existing records are skipped unless --overwrite is given; overwriting keeps
their createdAt.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from dataclasses import dataclass, replace
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.turno_system.turno_system.core.exceptions import DomainError
from src.turno_system.turno_system.database.connection import DatabaseConnection, DBConfig
from src.turno_system.turno_system.turnos import validator
from src.turno_system.turno_system.turnos.json_turno_repository import JsonTurnoRepository
from src.turno_system.turno_system.turnos.model import TurnoFilters
from src.turno_system.turno_system.turnos.mysql_turno_repository import MySQLTurnoRepository


@dataclass
class MigrationCounts:
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Migrate turnos from the JSON snapshot into MySQL")
    parser.add_argument("--dry-run", action="store_true", help="show what would be migrated")
    parser.add_argument("--overwrite", action="store_true", help="replace records that already exist")
    parser.add_argument("--person-id", default=None, help="assign every migrated record to this person")
    parser.add_argument("--source", default=None, help="snapshot path (default: JSON_SNAPSHOT_PATH)")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    settings = importlib.import_module(get_settings_module())
    source = Path(args.source or settings.JSON_SNAPSHOT_PATH)
    if not source.exists():
        raise SystemExit(f"Data file not found: {source}")

    snapshot = JsonTurnoRepository(source)
    candidates = []
    for record in sorted(snapshot.search(TurnoFilters()), key=lambda r: r.date):
        candidate = replace(record.to_candidate(), person_id=args.person_id or record.person_id)
        try:
            candidates.append(validator.validate(candidate))
        except DomainError as e:
            raise SystemExit(f"Invalid record {record.id}: {e}")
    print(f"Loaded {len(candidates)} records from {source}")

    counts = MigrationCounts()
    if args.dry_run:
        for c in candidates:
            print(f"   [DRY RUN] Would process: {c.key} ({c.date})")
        counts.created = len(candidates)
    else:
        config = DBConfig.from_dict(settings.DB_CONFIG)
        target = MySQLTurnoRepository(DatabaseConnection(config))
        print(f"Target: {config.describe()}")
        for c in candidates:
            try:
                existing = target.find_by_key(c.date, c.person_id)
                if existing and not args.overwrite:
                    counts.skipped += 1
                    print(f"   Skipped: {c.key} (already exists)")
                elif existing:
                    target.update(existing.id, c)
                    counts.updated += 1
                    print(f"   Updated: {c.key}")
                else:
                    target.create(c)
                    counts.created += 1
                    print(f"   Created: {c.key}")
            except DomainError as e:
                counts.errors += 1
                print(f"   Error processing {c.key}: {e}")

    print(
        f"OK: created={counts.created} updated={counts.updated} "
        f"skipped={counts.skipped} errors={counts.errors}"
    )
    if counts.errors:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
