from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .common.datetime_utils import LocaleConfig
from .core.constants import DEFAULT_MAX_UPLOAD_MB
from .turnos.factory import TurnoRepositoryFactory
from .turnos.repository import TurnoRepository
from .turnos.service import TurnoService


@dataclass(frozen=True)
class Container:
    turnos_repo: TurnoRepository
    turno_service: TurnoService
    locale: LocaleConfig


def build_container(
    *,
    storage_backend: str = "auto",
    db_config: Optional[dict] = None,
    json_path: Optional[str | Path] = None,
    development: bool = False,
    use_json_proxy: bool = False,
    locale: Optional[LocaleConfig] = None,
    max_upload_mb: int = DEFAULT_MAX_UPLOAD_MB,
    turnos_repo: Optional[TurnoRepository] = None,
) -> Container:
    """Build one repository and one service and wire them together.

    `turnos_repo` overrides backend selection (tests pass an in-memory store).
    """

    locale = locale or LocaleConfig()
    if turnos_repo is None:
        turnos_repo = TurnoRepositoryFactory().create(
            storage_backend,
            development=development,
            db_config=db_config,
            json_path=json_path,
            use_json_proxy=use_json_proxy,
        )

    turno_service = TurnoService(turnos_repo, locale=locale, max_upload_mb=max_upload_mb)

    return Container(
        turnos_repo=turnos_repo,
        turno_service=turno_service,
        locale=locale,
    )
