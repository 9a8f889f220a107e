"""Ejemplo: usar la capa de servicio sin pasar por Flask.

Los controllers son una capa fina; la lógica vive en los services.
"""

import importlib

from config import get_settings_module

from src.turno_system.turno_system.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        storage_backend="json",
        json_path=settings.JSON_SNAPSHOT_PATH,
    )
    service = container.turno_service

    result = service.get_range("2025-01-01", "2025-01-31")
    for turno in result["items"]:
        print(turno.to_dict())
    print(service.stats().to_dict())

    # Validation without touching storage
    candidate = service.build_candidate({"date": "15/1/2025", "shiftType": "noche", "startTime": "22:00", "endTime": "00:00"})
    print(candidate)


if __name__ == "__main__":
    main()
