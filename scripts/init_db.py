"""Create the database (if needed) and apply database/schema.sql.

Usage:
    python scripts/init_db.py [--schema PATH] [--list]
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.turno_system.turno_system.database.bootstrap import apply_schema, default_schema_path, list_tables
from src.turno_system.turno_system.database.connection import DBConfig


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply the turnos schema to the configured MySQL database")
    parser.add_argument("--schema", default=None, help="schema file (default: database/schema.sql)")
    parser.add_argument("--list", action="store_true", help="only list existing tables")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    settings = importlib.import_module(get_settings_module())
    if not settings.DB_CONFIG.get("host"):
        raise SystemExit("DB_HOST is not set; nothing to initialize")

    target = DBConfig.from_dict(settings.DB_CONFIG).describe()
    if not args.list:
        schema_path = Path(args.schema) if args.schema else default_schema_path()
        apply_schema(settings.DB_CONFIG, schema_path=schema_path)
        print(f"Schema applied: {schema_path.name} -> {target}")

    tables = list_tables(settings.DB_CONFIG)
    print(f"Tables in {target}: {', '.join(tables) or '(none)'}")


if __name__ == "__main__":
    main()
