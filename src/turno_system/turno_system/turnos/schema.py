"""Parsing of raw turno input.

Two entry points, both returning a `ParseResult` instead of raising:

- `parse_turno_payload`: JSON body of POST /api/turnos (structural checks only;
  business rules live in `validator`).
- `parse_import_row`: one spreadsheet row, with the relaxed notations accepted
  by the Excel import (D/M/YYYY dates, 12-hour clock, "sí"/"no" flags...).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Generic, Optional, TypeVar

from ..common.validators import optional_text
from ..core.enums import ShiftType
from .model import TurnoCandidate

T = TypeVar("T")

_IMPORT_DATE_RE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(\d{1,2}):?(\d{2})?\s*(am|pm)?$", re.IGNORECASE)
_TRUE_STRINGS = {"sí", "si", "true", "1"}

# Spreadsheet header aliases -> internal field name.
IMPORT_HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("fecha", "date"),
    "shift_type": ("turno", "shifttype", "shift"),
    "start_time": ("startshift", "starttime", "inicio"),
    "end_time": ("endshift", "endtime", "fin"),
    "is_vacation": ("vacaciones", "isvacation", "vacation"),
    "notes": ("notas", "notes"),
}

# JSON body aliases (English first, original Spanish names accepted too).
PAYLOAD_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("date", "fecha"),
    "shift_type": ("shiftType", "turno"),
    "start_time": ("startTime", "startShift"),
    "end_time": ("endTime", "endShift"),
    "is_vacation": ("isVacation", "esVacaciones"),
    "notes": ("notes", "notas"),
    "person_id": ("personId", "personaId"),
}


@dataclass(frozen=True)
class Issue:
    path: str
    message: str

    def to_dict(self) -> dict:
        return {"path": self.path, "message": self.message}

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Tagged result: `value` on success, `issues` on failure."""

    value: Optional[T] = None
    issues: tuple[Issue, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.issues

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, *issues: Issue) -> "ParseResult[T]":
        return cls(issues=tuple(issues))

    def describe(self) -> str:
        return ", ".join(str(i) for i in self.issues)


@dataclass(frozen=True)
class ImportRow:
    """A spreadsheet row after normalization (not yet validated)."""

    date: str
    is_vacation: bool
    shift_type: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    notes: str = ""

    def to_candidate(self, *, person_id: Optional[str] = None) -> TurnoCandidate:
        """Vacation rows drop their shift fields."""

        candidate = TurnoCandidate(
            date=self.date,
            shift_type=self.shift_type,
            start_time=self.start_time,
            end_time=self.end_time,
            is_vacation=self.is_vacation,
            notes=self.notes,
            person_id=person_id,
        )
        return candidate.cleared_for_vacation() if self.is_vacation else candidate


def normalize_import_date(value: Any) -> str:
    """D/M/YYYY (slash or dash) or YYYY-MM-DD -> YYYY-MM-DD."""

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if value is None:
        raise ValueError("Fecha faltante")

    cleaned = str(value).strip()
    match = _IMPORT_DATE_RE.match(cleaned)
    if match:
        day, month, year = match.groups()
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    if _ISO_DATE_RE.match(cleaned):
        return cleaned
    # pandas renders date cells as "YYYY-MM-DD 00:00:00"
    if _ISO_DATE_RE.match(cleaned[:10]) and cleaned[10:].strip() in ("00:00:00", ""):
        return cleaned[:10]
    raise ValueError(f"Formato de fecha no válido: {cleaned}")


def normalize_time(value: Any) -> Optional[str]:
    """Accept H, H:MM, HMM and H[:MM] am/pm; return HH:MM or None if blank."""

    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.time()
    if isinstance(value, time):
        return f"{value.hour:02d}:{value.minute:02d}"
    if isinstance(value, float) and value.is_integer():
        value = int(value)

    cleaned = str(value).strip()
    if not cleaned:
        return None

    match = _TIME_RE.match(cleaned)
    if not match:
        raise ValueError(f"Formato de hora no válido: {cleaned}")

    hours, minutes, ampm = match.groups()
    hour = int(hours)
    minute = int(minutes or "00")
    if ampm:
        is_am = ampm.lower() == "am"
        if is_am and hour == 12:
            hour = 0
        elif not is_am and hour != 12:
            hour += 12

    if hour > 23 or minute > 59:
        raise ValueError(f"Formato de hora no válido: {cleaned}")
    return f"{hour:02d}:{minute:02d}"


def coerce_vacation(value: Any) -> bool:
    """None (an empty cell) is an error; any present value is coerced."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if value is None:
        raise ValueError("Requerido")
    raise ValueError(f"Valor no reconocido: {value!r}")


def normalize_shift_text(value: Any) -> Optional[str]:
    """Lower-case/trim; English names map to the stored values.

    Unknown text is returned as-is so the validator can report it.
    """

    text = optional_text(value)
    if text is None:
        return None
    text = text.lower()
    try:
        member = ShiftType.parse(text)
    except ValueError:
        return text
    return member.value if member else None


def canonical_row(raw: dict[str, Any]) -> dict[str, Any]:
    """Map spreadsheet headers (any alias, any case) to internal field names."""

    lowered = {str(k).strip().lower(): v for k, v in raw.items() if k is not None}
    out: dict[str, Any] = {}
    for name, aliases in IMPORT_HEADER_ALIASES.items():
        for alias in aliases:
            if alias in lowered:
                out[name] = lowered[alias]
                break
    return out


def parse_import_row(raw: dict[str, Any]) -> ParseResult[ImportRow]:
    row = canonical_row(raw)
    issues: list[Issue] = []

    def _step(path: str, fn, value):
        try:
            return fn(value)
        except ValueError as e:
            issues.append(Issue(path, str(e)))
            return None

    fecha = _step("fecha", normalize_import_date, row.get("date"))
    start = _step("startshift", normalize_time, row.get("start_time"))
    end = _step("endshift", normalize_time, row.get("end_time"))
    vacation = _step("vacaciones", coerce_vacation, row.get("is_vacation"))
    shift = normalize_shift_text(row.get("shift_type"))
    notes = optional_text(row.get("notes")) or ""

    if issues:
        return ParseResult.failure(*issues)

    return ParseResult.success(
        ImportRow(
            date=fecha,
            shift_type=shift,
            start_time=start,
            end_time=end,
            is_vacation=bool(vacation),
            notes=notes,
        )
    )


def _pick(body: dict[str, Any], name: str) -> Any:
    for alias in PAYLOAD_ALIASES[name]:
        if alias in body:
            return body[alias]
    return None


def parse_turno_payload(body: Any, *, person_id: Optional[str] = None) -> ParseResult[TurnoCandidate]:
    """Structural checks for a JSON body: types and presence only."""

    if not isinstance(body, dict):
        return ParseResult.failure(Issue("body", "Se esperaba un objeto JSON"))

    issues: list[Issue] = []

    raw_date = _pick(body, "date")
    if not isinstance(raw_date, str) or not raw_date.strip():
        issues.append(Issue("date", "Requerido (formato YYYY-MM-DD)"))

    def _optional_str(name: str) -> Optional[str]:
        value = _pick(body, name)
        if value is None:
            return None
        if not isinstance(value, str):
            issues.append(Issue(PAYLOAD_ALIASES[name][0], "Debe ser texto"))
            return None
        return value.strip() or None

    shift = _optional_str("shift_type")
    start = _optional_str("start_time")
    end = _optional_str("end_time")
    person = _optional_str("person_id") or person_id

    vacation = _pick(body, "is_vacation")
    if vacation is None:
        vacation = False
    elif not isinstance(vacation, bool):
        issues.append(Issue("isVacation", "Debe ser verdadero o falso"))
        vacation = False

    notes = _pick(body, "notes")
    if notes is None:
        notes = ""
    elif not isinstance(notes, str):
        issues.append(Issue("notes", "Debe ser texto"))
        notes = ""

    if issues:
        return ParseResult.failure(*issues)

    return ParseResult.success(
        TurnoCandidate(
            date=raw_date.strip(),
            shift_type=shift,
            start_time=start,
            end_time=end,
            is_vacation=vacation,
            notes=notes,
            person_id=person,
        )
    )
