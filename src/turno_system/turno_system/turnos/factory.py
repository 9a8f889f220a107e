from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.enums import StorageBackend
from ..database.connection import DatabaseConnection, DBConfig
from .json_turno_repository import JsonTurnoRepository
from .mysql_turno_repository import MySQLTurnoRepository
from .repository import TurnoRepository

logger = logging.getLogger(__name__)


@dataclass
class TurnoRepositoryFactory:
    """Factory Pattern: pick the storage backend once, at startup."""

    def resolve(
        self,
        backend: StorageBackend | str,
        *,
        development: bool,
        db_config: Optional[dict],
        use_json_proxy: bool = False,
    ) -> StorageBackend:
        backend = StorageBackend(str(backend).lower())
        if backend != StorageBackend.AUTO:
            return backend

        db_missing = not db_config or not db_config.get("host")
        if development and (use_json_proxy or db_missing):
            return StorageBackend.JSON
        return StorageBackend.MYSQL

    def create(
        self,
        backend: StorageBackend | str,
        *,
        development: bool = False,
        db_config: Optional[dict] = None,
        json_path: Optional[str | Path] = None,
        use_json_proxy: bool = False,
    ) -> TurnoRepository:
        chosen = self.resolve(backend, development=development, db_config=db_config, use_json_proxy=use_json_proxy)

        if chosen == StorageBackend.JSON:
            if not json_path:
                raise ValueError("JSON_SNAPSHOT_PATH is required for the json storage backend")
            logger.info("Using JSON turno repository (%s); write operations are disabled", json_path)
            return JsonTurnoRepository(json_path)

        if not db_config:
            raise ValueError("DB_CONFIG is required for the mysql storage backend")
        config = DBConfig.from_dict(db_config)
        logger.info("Using MySQL turno repository (%s)", config.describe())
        return MySQLTurnoRepository(DatabaseConnection(config))
