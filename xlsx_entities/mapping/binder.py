from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from xlsx_entities.models.entity import EntitySchema, FieldDescriptor, normalize_key

"""Column binding: header text -> entity field.

A ColumnMapping holds caller overrides (header text -> field name). Binding
resolves each header column once per sheet: first through the override, then
by matching the header text against a field name. Both lookups ignore case.
"""

__all__ = [
    "ColumnBinding",
    "ColumnMapping",
    "bind_columns",
    "resolve_field",
    "synthesize_headers",
]

logger = logging.getLogger(__name__)


class ColumnMapping:
    """Header text -> field name overrides, matched case-insensitively.

    The reader only looks values up; it never modifies a mapping.
    """

    def __init__(self, mapping: Mapping[str, str] | None = None) -> None:
        self._map: dict[str, str] = {}
        self._headers: dict[str, str] = {}
        if mapping:
            for header, field_name in mapping.items():
                self.add(header, field_name)

    def add(self, header: str, field_name: str) -> None:
        key = normalize_key(header)
        self._map[key] = field_name
        self._headers[key] = header

    def get(self, header: str) -> str | None:
        return self._map.get(normalize_key(header))

    def __contains__(self, header: object) -> bool:
        return isinstance(header, str) and normalize_key(header) in self._map

    def __len__(self) -> int:
        return len(self._map)

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers.values())

    def as_dict(self) -> dict[str, str]:
        return {self._headers[k]: v for k, v in self._map.items()}

    def __repr__(self) -> str:
        return f"ColumnMapping({self.as_dict()!r})"


@dataclass(frozen=True)
class ColumnBinding:
    """Column position -> FieldDescriptor for one sheet selection."""
    headers: Mapping[int, str]
    fields: Mapping[int, FieldDescriptor]

    def field_for(self, column: int) -> FieldDescriptor | None:
        return self.fields.get(column)

    @property
    def unbound_headers(self) -> list[str]:
        return [h for col, h in self.headers.items() if col not in self.fields]

    def __len__(self) -> int:
        return len(self.fields)


def synthesize_headers(columns: Iterable[int]) -> dict[int, str]:
    """Names for header-less sheets: Column0, Column1, ... by column position."""
    return {column: f"Column{column}" for column in columns}


def resolve_field(header: str, schema: EntitySchema, mapping: ColumnMapping | None = None) -> FieldDescriptor | None:
    if mapping is not None:
        target = mapping.get(header)
        if target is not None:
            descriptor = schema.find(target)
            if descriptor is not None:
                return descriptor
            logger.debug(f"mapping for header '{header}' names unknown field '{target}'")
    return schema.find(header)


def bind_columns(
    headers: Mapping[int, str] | Sequence[str],
    schema: EntitySchema,
    mapping: ColumnMapping | None = None,
) -> ColumnBinding:
    """Build the column binding for a sheet from its header names.

    Args:
        headers: header text by column position (a sequence is read as positions 0..n-1)
        schema: descriptor table of the target entity type
        mapping: optional header -> field overrides

    Returns:
        ColumnBinding; columns that resolve to no field are left unbound
    """
    items = headers.items() if isinstance(headers, Mapping) else enumerate(headers)
    header_map: dict[int, str] = {}
    fields: dict[int, FieldDescriptor] = {}
    for column, header in items:
        header_map[column] = header
        descriptor = resolve_field(header, schema, mapping)
        if descriptor is not None:
            fields[column] = descriptor
    binding = ColumnBinding(headers=MappingProxyType(header_map), fields=MappingProxyType(fields))
    if binding.unbound_headers:
        logger.debug(f"unbound columns: {binding.unbound_headers}")
    return binding
