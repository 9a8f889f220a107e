from __future__ import annotations

import calendar
import re
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_LOCALE, DEFAULT_TIMEZONE, DEFAULT_WEEK_STARTS_ON, ISO_DATE_PATTERN
from ..core.exceptions import InvalidDateFormat

_SHORT_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO_DATE_RE = re.compile(ISO_DATE_PATTERN)

# Index 0 = Monday, matching date.weekday().
_DAY_NAMES = {
    "es": ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"],
    "en": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
}
_MONTH_NAMES = {
    "es": [
        "enero", "febrero", "marzo", "abril", "mayo", "junio",
        "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
    ],
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
}


@dataclass(frozen=True)
class LocaleConfig:
    timezone: str = DEFAULT_TIMEZONE
    locale: str = DEFAULT_LOCALE
    # 0 = domingo, 1 = lunes
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON

    @property
    def language(self) -> str:
        lang = self.locale.split("-")[0].lower()
        return lang if lang in _DAY_NAMES else "es"

    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def with_overrides(self, **changes) -> "LocaleConfig":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


DateInput = Union[str, int, float, date, datetime, None]


class LocalizedDate:
    """Calendar date bound to a locale/timezone configuration.

    Strings are read as YYYY-MM-DD, numbers as epoch milliseconds, datetimes are
    converted to the configured timezone and None means "today" there.
    """

    def __init__(self, value: DateInput = None, config: Optional[LocaleConfig] = None):
        self._config = config or LocaleConfig()
        tz = self._config.tzinfo()

        if isinstance(value, str):
            text = value.strip()
            if not is_iso_date(text):
                raise InvalidDateFormat(f"Fecha no válida: {value}", field="date")
            self._date = parse_iso_date(text)
        elif isinstance(value, bool):
            raise TypeError("bool is not a valid date value")
        elif isinstance(value, (int, float)):
            self._date = datetime.fromtimestamp(value / 1000, tz=tz).date()
        elif isinstance(value, datetime):
            self._date = value.astimezone(tz).date() if value.tzinfo else value.date()
        elif isinstance(value, date):
            self._date = value
        else:
            self._date = datetime.now(tz).date()

    @classmethod
    def now(cls, config: Optional[LocaleConfig] = None) -> "LocalizedDate":
        return cls(None, config)

    @classmethod
    def from_short(cls, value: str, config: Optional[LocaleConfig] = None) -> "LocalizedDate":
        """Parse D/M/YYYY, or M/D/YYYY for en-US locales."""

        config = config or LocaleConfig()
        match = _SHORT_DATE_RE.match(value.strip())
        if not match:
            raise InvalidDateFormat(f"Formato de fecha no válido: {value}", field="date")

        first, second, year = (int(g) for g in match.groups())
        if config.locale.startswith("en-US"):
            month, day = first, second
        else:
            day, month = first, second

        try:
            return cls(date(year, month, day), config)
        except ValueError:
            raise InvalidDateFormat(f"Fecha inexistente: {value}", field="date") from None

    @property
    def config(self) -> LocaleConfig:
        return self._config

    @property
    def year(self) -> int:
        return self._date.year

    @property
    def month(self) -> int:
        return self._date.month

    @property
    def day(self) -> int:
        return self._date.day

    @property
    def day_of_week(self) -> int:
        # isoweekday: Monday=1 .. Sunday=7
        iso = self._date.isoweekday()
        if self._config.week_starts_on == 1:
            return iso
        return iso % 7

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    def to_date(self) -> date:
        return self._date

    def format_iso(self) -> str:
        return self._date.isoformat()

    def day_name(self) -> str:
        return _DAY_NAMES[self._config.language][self._date.weekday()]

    def month_name(self) -> str:
        return _MONTH_NAMES[self._config.language][self.month - 1]

    def format_for_display(self) -> str:
        if self._config.language == "en":
            return f"{self.day_name()}, {self.month_name()} {self.day}, {self.year}"
        return f"{self.day_name()}, {self.day} de {self.month_name()} de {self.year}"

    def format_short(self) -> str:
        if self._config.language == "en":
            return f"{self.day_name()}, {self.month_name()} {self.day}"
        return f"{self.day_name()}, {self.day} de {self.month_name()}"

    def add_days(self, days: int) -> "LocalizedDate":
        return LocalizedDate(self._date + timedelta(days=days), self._config)

    def subtract_days(self, days: int) -> "LocalizedDate":
        return self.add_days(-days)

    def with_(self, *, year: Optional[int] = None, month: Optional[int] = None, day: Optional[int] = None) -> "LocalizedDate":
        changed = self._date.replace(
            year=year if year is not None else self.year,
            month=month if month is not None else self.month,
            day=day if day is not None else self.day,
        )
        return LocalizedDate(changed, self._config)

    def compare(self, other: "LocalizedDate") -> int:
        """Difference in days; negative when self is earlier."""
        return (self._date - other._date).days

    def is_before(self, other: "LocalizedDate") -> bool:
        return self.compare(other) < 0

    def is_after(self, other: "LocalizedDate") -> bool:
        return self.compare(other) > 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocalizedDate):
            return NotImplemented
        return self._date == other._date

    def __hash__(self) -> int:
        return hash(self._date)

    def __repr__(self) -> str:
        return f"LocalizedDate({self.format_iso()!r}, locale={self._config.locale!r})"


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def is_iso_date(value: object) -> bool:
    """True when value is a YYYY-MM-DD string naming a real calendar day."""
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        return False
    try:
        parse_iso_date(value)
    except ValueError:
        return False
    return True


def is_valid_date(value: str, config: Optional[LocaleConfig] = None) -> bool:
    try:
        normalize_date_input(value, config)
    except InvalidDateFormat:
        return False
    return True


def normalize_date_input(value: str, config: Optional[LocaleConfig] = None) -> str:
    """Return value as YYYY-MM-DD.

    Canonical input is returned as-is; the short form is read according to the
    locale. Anything else raises InvalidDateFormat.
    """

    text = value.strip()
    if _ISO_DATE_RE.match(text):
        return text
    if _SHORT_DATE_RE.match(text):
        return LocalizedDate.from_short(text, config).format_iso()
    raise InvalidDateFormat(
        f"Formato de fecha no válido: {value}. Use YYYY-MM-DD o el formato apropiado para su región",
        field="date",
    )


def utc_now_iso() -> str:
    """Timestamp used for createdAt/updatedAt.

    Wrapped so tests can patch it.
    """
    return datetime.now(ZoneInfo("UTC")).isoformat(timespec="milliseconds").replace("+00:00", "Z")
