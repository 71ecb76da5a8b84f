from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the spreadsheet entity reader.

These are separate from the loader implementation in xlsx_entities/config/loader.py
and focus on typing the values that flow into a read: the numeric/date culture
used by value coercion and the per-run reader settings.
"""

__all__ = [
    "CultureSettings",
    "INVARIANT_CULTURE",
    "ReaderConfig",
]


@dataclass(frozen=True)
class CultureSettings:
    """Numeric and date text conventions used when coercing cell text.

    The defaults are the invariant conventions: '.' decimal point, ',' group
    separator, month-first general date parsing. Passing an explicit instance
    keeps reads deterministic regardless of the host locale.
    """
    decimal_separator: str = "."
    group_separator: str = ","
    currency_symbols: tuple[str, ...] = ("¤", "$")
    dayfirst: bool = False
    date_formats: tuple[str, ...] = ()  # strptime formats tried before general parsing


INVARIANT_CULTURE = CultureSettings()


@dataclass(frozen=True)
class ReaderConfig:
    """Root configuration object for a read run (YAML config file)."""
    entity: str  # registered entity name, e.g. "person"
    sheet_index: int = 0
    has_header: bool = True
    honor_cell_references: bool = False  # align sparse rows by cell reference
    column_mapping: dict[str, str] = field(default_factory=dict)  # header text -> field name
    culture: CultureSettings = INVARIANT_CULTURE
