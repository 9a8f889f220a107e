from __future__ import annotations

from enum import Enum
from typing import Optional


class ShiftType(str, Enum):
    """Tipo de turno; los valores son los que se persisten."""

    MORNING = "mañana"
    AFTERNOON = "tarde"
    NIGHT = "noche"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["ShiftType"]:
        """Map free text (Spanish value or English name) to a member.

        Returns None for blank input; raises ValueError for anything else.
        """

        if raw is None:
            return None
        text = str(raw).strip().lower()
        if not text:
            return None
        for member in cls:
            if text in (member.value, member.name.lower()):
                return member
        if text == "manana":
            return cls.MORNING
        raise ValueError(text)


class StorageBackend(str, Enum):
    MYSQL = "mysql"
    JSON = "json"
    AUTO = "auto"
