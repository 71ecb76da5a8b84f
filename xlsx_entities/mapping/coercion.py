from __future__ import annotations

import math
import uuid
import warnings
from collections.abc import Callable
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

import numpy as np
import pandas as pd

from xlsx_entities.models.config_models import INVARIANT_CULTURE, CultureSettings
from xlsx_entities.models.entity import FieldType

"""Value coercion: decoded cell text -> typed field value.

coerce_value() is pure: the result depends only on the text, the target
FieldType and the CultureSettings passed in. It never raises; None means
"no value" and leaves the field unset.

Numbers follow the invariant culture by default: surrounding whitespace,
leading or trailing sign, accounting parentheses, group separators, currency
symbols and exponents are accepted. Date fields additionally accept spreadsheet
serial day counts measured from 1899-12-30.
"""

__all__ = [
    "EXCEL_EPOCH",
    "MAX_SERIAL_DAY",
    "coerce_value",
    "from_serial_day",
]

EXCEL_EPOCH = datetime(1899, 12, 30)
MAX_SERIAL_DAY = 2958465  # 9999-12-31
MS_PER_DAY = 86_400_000

_INT_LIMITS = {
    FieldType.INT8: np.iinfo(np.int8),
    FieldType.INT16: np.iinfo(np.int16),
    FieldType.INT32: np.iinfo(np.int32),
    FieldType.INT64: np.iinfo(np.int64),
    FieldType.UINT8: np.iinfo(np.uint8),
}

_TRUE_WORDS = frozenset({"true", "1", "yes"})
_FALSE_WORDS = frozenset({"false", "0", "no"})


def _normalize_number(text: str, culture: CultureSettings) -> str | None:
    """Rewrite culture-formatted numeric text into Python literal syntax."""
    s = text.strip()
    negative = False
    if len(s) > 2 and s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1].strip()
    for symbol in culture.currency_symbols:
        s = s.replace(symbol, "")
    s = s.strip()
    if len(s) > 1 and s[-1] in "+-" and s[-2] not in "eE":
        s = s[-1] + s[:-1].rstrip()
    if culture.group_separator:
        s = s.replace(culture.group_separator, "")
    if culture.decimal_separator != ".":
        s = s.replace(culture.decimal_separator, ".")
    if not s or "_" in s or " " in s:
        return None
    if negative:
        if s[0] in "+-":
            return None
        s = "-" + s
    return s


def _parse_float(text: str, culture: CultureSettings) -> float | None:
    s = _normalize_number(text, culture)
    if s is None:
        return None
    try:
        return float(s)
    except ValueError:
        return None


def _parse_integer(text: str, culture: CultureSettings, field_type: FieldType) -> int | None:
    s = _normalize_number(text, culture)
    if s is None:
        return None
    try:
        value = int(s)
    except ValueError:
        number = _parse_float(text, culture)
        if number is None or not math.isfinite(number):
            return None
        value = math.trunc(number)
    return value if _in_range(value, field_type) else None


def _in_range(value: int, field_type: FieldType) -> bool:
    limits = _INT_LIMITS[field_type]
    return limits.min <= value <= limits.max


def _parse_decimal(text: str, culture: CultureSettings) -> Decimal | None:
    s = _normalize_number(text, culture)
    if s is None:
        return None
    try:
        value = Decimal(s)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def _parse_single(text: str, culture: CultureSettings) -> np.float32 | None:
    number = _parse_float(text, culture)
    if number is None:
        return None
    with np.errstate(over="ignore"):
        return np.float32(number)


def _parse_boolean(text: str, culture: CultureSettings) -> bool | None:
    word = text.strip().casefold()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return None


def from_serial_day(serial: float) -> datetime:
    """Convert a spreadsheet serial day count to a datetime (millisecond precision)."""
    millis = int(serial * MS_PER_DAY + 0.5)
    return EXCEL_EPOCH + timedelta(milliseconds=millis)


def _parse_date_text(text: str, culture: CultureSettings) -> datetime | None:
    for fmt in culture.date_formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    with warnings.catch_warnings():
        # pandas warns when it falls back to dateutil for a single value
        warnings.simplefilter("ignore", UserWarning)
        try:
            parsed = pd.to_datetime(text, errors="coerce", dayfirst=culture.dayfirst)
        except (ValueError, TypeError, OverflowError):
            return None
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def _parse_datetime(text: str, culture: CultureSettings) -> datetime | None:
    serial = _parse_float(text, culture)
    if serial is not None and 0 <= serial <= MAX_SERIAL_DAY:
        return from_serial_day(serial)
    return _parse_date_text(text.strip(), culture)


def _parse_date(text: str, culture: CultureSettings) -> date | None:
    value = _parse_datetime(text, culture)
    return value.date() if value is not None else None


def _parse_identifier(text: str, culture: CultureSettings) -> uuid.UUID | None:
    try:
        return uuid.UUID(text.strip())
    except ValueError:
        return None


def _integer_parser(field_type: FieldType) -> Callable[[str, CultureSettings], int | None]:
    def parse(text: str, culture: CultureSettings) -> int | None:
        return _parse_integer(text, culture, field_type)
    return parse


_PARSERS: dict[FieldType, Callable[[str, CultureSettings], Any]] = {
    FieldType.INT8: _integer_parser(FieldType.INT8),
    FieldType.INT16: _integer_parser(FieldType.INT16),
    FieldType.INT32: _integer_parser(FieldType.INT32),
    FieldType.INT64: _integer_parser(FieldType.INT64),
    FieldType.UINT8: _integer_parser(FieldType.UINT8),
    FieldType.DECIMAL: _parse_decimal,
    FieldType.DOUBLE: _parse_float,
    FieldType.SINGLE: _parse_single,
    FieldType.BOOLEAN: _parse_boolean,
    FieldType.DATETIME: _parse_datetime,
    FieldType.DATE: _parse_date,
    FieldType.IDENTIFIER: _parse_identifier,
}


def _already_typed(value: Any, field_type: FieldType) -> bool:
    if field_type.is_integer:
        return isinstance(value, int) and not isinstance(value, bool) and _in_range(value, field_type)
    if field_type is FieldType.DOUBLE:
        return isinstance(value, float)
    if field_type is FieldType.SINGLE:
        return isinstance(value, np.float32)
    if field_type is FieldType.DECIMAL:
        return isinstance(value, Decimal)
    if field_type is FieldType.BOOLEAN:
        return isinstance(value, bool)
    if field_type is FieldType.DATETIME:
        return isinstance(value, datetime)
    if field_type is FieldType.DATE:
        return type(value) is date
    if field_type is FieldType.IDENTIFIER:
        return isinstance(value, uuid.UUID)
    return False


def coerce_value(
    raw: Any,
    field_type: FieldType,
    culture: CultureSettings = INVARIANT_CULTURE,
) -> Any:
    """Coerce a decoded cell value to ``field_type``.

    Args:
        raw: decoded cell text (any other object is coerced through ``str()``)
        field_type: semantic target type of the field
        culture: numeric/date conventions, invariant by default

    Returns:
        The typed value, or None when the text is blank or does not parse.
        Text fields return the text unchanged (blank text is None); a value
        already of the target type is returned as is. Typed integers outside
        the field range fall through to text parsing and give None.
    """
    if raw is None:
        return None
    if not isinstance(raw, str) and _already_typed(raw, field_type):
        return raw
    text = raw if isinstance(raw, str) else str(raw)
    stripped = text.strip()
    if not stripped:
        return None
    if field_type is FieldType.TEXT:
        return text
    parser = _PARSERS.get(field_type)
    if parser is None:
        return None
    return parser(stripped, culture)
