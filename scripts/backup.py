"""Backup de turnos a un archivo JSON con marca de tiempo.

Lee del backend configurado (MySQL o snapshot JSON), así que sirve también
para congelar una base en un snapshot usable con STORAGE_BACKEND=json.
"""

from __future__ import annotations

import importlib
import json
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.turno_system.turno_system.core.exceptions import StorageError
from src.turno_system.turno_system.turnos.factory import TurnoRepositoryFactory
from src.turno_system.turno_system.turnos.model import TurnoFilters


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    repo = TurnoRepositoryFactory().create(
        settings.STORAGE_BACKEND,
        development=bool(getattr(settings, "DEVELOPMENT", False)),
        db_config=settings.DB_CONFIG,
        json_path=settings.JSON_SNAPSHOT_PATH,
        use_json_proxy=bool(getattr(settings, "USE_JSON_PROXY", False)),
    )

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"turnos_{ts}.json"

    try:
        records = sorted(repo.search(TurnoFilters()), key=lambda r: r.id)
    except StorageError as e:
        raise SystemExit(f"No se pudo leer el almacenamiento: {e}")

    out_file.write_text(
        json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    print(f"OK: Backup created: {out_file} ({len(records)} turnos)")


if __name__ == "__main__":
    main()
