from __future__ import annotations

import math
import zipfile
from dataclasses import dataclass, field
from typing import IO, Any

import pandas as pd

from ..core.exceptions import ValidationError
from .schema import IMPORT_HEADER_ALIASES

REQUIRED_FIELDS = ("date", "shift_type", "is_vacation")
OPTIONAL_WARN_FIELDS = ("notes",)


@dataclass(frozen=True)
class HeaderCheck:
    valid: bool
    missing: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _clean_cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    # numpy scalars (numpy.bool_, numpy.int64...) -> plain Python values
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        try:
            return value.item()
        except (TypeError, ValueError):
            return value
    return value


def validate_headers(headers: list[str]) -> HeaderCheck:
    normalized = [str(h).strip().lower() for h in headers]
    known = {alias for aliases in IMPORT_HEADER_ALIASES.values() for alias in aliases}

    missing = [
        IMPORT_HEADER_ALIASES[name][0]
        for name in REQUIRED_FIELDS
        if not any(alias in normalized for alias in IMPORT_HEADER_ALIASES[name])
    ]

    warnings: list[str] = []
    for name in OPTIONAL_WARN_FIELDS:
        if not any(alias in normalized for alias in IMPORT_HEADER_ALIASES[name]):
            warnings.append(f"Header opcional faltante: {IMPORT_HEADER_ALIASES[name][0]}")

    extra = [h for h in normalized if h not in known]
    if extra:
        warnings.append(f"Headers extra encontrados (serán ignorados): {', '.join(extra)}")

    return HeaderCheck(valid=not missing, missing=missing, warnings=warnings)


def read_excel_rows(stream: IO[bytes]) -> tuple[list[str], list[dict[str, Any]]]:
    """Read the first sheet of an .xlsx file.

    Returns the lower-cased headers and one dict per non-empty data row.
    """

    try:
        df = pd.read_excel(stream, sheet_name=0, dtype=object, engine="openpyxl")
    except (ValueError, OSError, KeyError, zipfile.BadZipFile) as e:
        raise ValidationError(f"No se pudo leer el archivo Excel: {e}", field="file") from e

    df = df.dropna(how="all")
    headers = [str(c).strip().lower() for c in df.columns if not str(c).lower().startswith("unnamed:")]
    if not headers or df.empty:
        raise ValidationError(
            "El archivo Excel debe tener al menos una fila de headers y una fila de datos",
            field="file",
        )

    df.columns = [str(c).strip().lower() for c in df.columns]
    rows = [
        {k: _clean_cell(v) for k, v in record.items() if not k.startswith("unnamed:")}
        for record in df.to_dict(orient="records")
    ]
    return headers, rows
