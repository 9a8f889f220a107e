"""Business rules for a turno, applied in a fixed order.

clear-on-vacation -> exclusivity -> time pairing -> time ordering
"""

from __future__ import annotations

from ..common.validators import is_hhmm, require_iso_date, to_minutes
from ..core.constants import MIDNIGHT
from ..core.enums import ShiftType
from ..core.exceptions import (
    ConflictingState,
    IncompleteTimeRange,
    InvalidEnum,
    InvalidTime,
    InvalidTimeOrder,
    ValidationError,
)
from .model import TurnoCandidate
from .schema import Issue, ParseResult


def check_fields(candidate: TurnoCandidate) -> None:
    require_iso_date(candidate.date, "date")

    if candidate.shift_type is not None and candidate.shift_type not in ShiftType.values():
        raise InvalidEnum(
            f"Tipo de turno no válido: {candidate.shift_type} (use {', '.join(ShiftType.values())})",
            field="shiftType",
        )

    for name, value in (("startTime", candidate.start_time), ("endTime", candidate.end_time)):
        if value is not None and not is_hhmm(value):
            raise InvalidTime("Formato de hora debe ser HH:MM (24 horas)", field=name)


def clear_on_vacation(candidate: TurnoCandidate) -> TurnoCandidate:
    if candidate.is_vacation:
        return candidate.cleared_for_vacation()
    return candidate


def check_exclusivity(candidate: TurnoCandidate) -> None:
    if candidate.is_vacation and candidate.shift_type:
        raise ConflictingState(
            "No se puede tener un turno específico y marcar como vacaciones al mismo tiempo",
            field="shiftType",
        )


def check_time_pairing(candidate: TurnoCandidate) -> None:
    if bool(candidate.start_time) != bool(candidate.end_time):
        raise IncompleteTimeRange(
            "Debe proporcionar tanto la hora de inicio como la hora de fin del turno, o ninguna de las dos",
            field="endTime" if candidate.start_time else "startTime",
        )


def check_time_order(candidate: TurnoCandidate) -> None:
    if not (candidate.start_time and candidate.end_time):
        return

    # An end time of exactly midnight is an overnight shift.
    if candidate.end_time == MIDNIGHT:
        return
    if to_minutes(candidate.start_time) >= to_minutes(candidate.end_time):
        raise InvalidTimeOrder(
            "La hora de inicio debe ser anterior a la hora de fin "
            "(excepto para turnos nocturnos que terminan a medianoche)",
            field="startTime",
        )


def validate(candidate: TurnoCandidate) -> TurnoCandidate:
    """Return the normalized candidate or raise a ValidationError subtype."""

    check_fields(candidate)
    normalized = clear_on_vacation(candidate)
    check_exclusivity(normalized)
    check_time_pairing(normalized)
    check_time_order(normalized)
    return normalized


def check(candidate: TurnoCandidate) -> ParseResult[TurnoCandidate]:
    try:
        return ParseResult.success(validate(candidate))
    except ValidationError as e:
        return ParseResult.failure(*(Issue(i.get("path") or "turno", i["message"]) for i in e.issues))
