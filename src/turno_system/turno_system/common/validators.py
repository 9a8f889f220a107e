from __future__ import annotations

import re
from typing import Any, Optional

from ..core.constants import HHMM_PATTERN
from ..core.exceptions import InvalidDate
from .datetime_utils import is_iso_date

_HHMM_RE = re.compile(HHMM_PATTERN)


def is_hhmm(value: object) -> bool:
    return isinstance(value, str) and bool(_HHMM_RE.match(value))


def to_minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def require_iso_date(value: Any, field_name: str) -> str:
    if not is_iso_date(value):
        raise InvalidDate("Formato de fecha debe ser YYYY-MM-DD", field=field_name)
    return value


def optional_text(value: Any) -> Optional[str]:
    """Blank strings and None both mean "absent"."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None
