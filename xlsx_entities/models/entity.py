from __future__ import annotations

import dataclasses
import logging
import types
import typing
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, TypeVar

import numpy as np

"""Entity field descriptors.

Rows are projected onto plain Python classes (usually dataclasses). Each entity
type is registered once; registration builds an explicit table of
FieldDescriptor entries (name + semantic FieldType) that the column binder and
the assembler use from then on, so binding never inspects the class again.
"""

__all__ = [
    "EntitySchema",
    "FieldDescriptor",
    "FieldType",
    "entity",
    "entity_type_by_name",
    "field_type_for",
    "normalize_key",
    "register_entity",
    "registered_entities",
    "schema_for",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

# dataclasses.field(metadata={FIELD_TYPE_KEY: FieldType.INT16}) overrides the inferred type
FIELD_TYPE_KEY = "field_type"


class FieldType(Enum):
    """Semantic target types a cell value can be coerced to."""
    TEXT = "text"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    DECIMAL = "decimal"
    DOUBLE = "double"
    SINGLE = "single"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    DATE = "date"
    IDENTIFIER = "identifier"

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_TYPES


_INTEGER_TYPES = frozenset(
    {FieldType.INT8, FieldType.INT16, FieldType.INT32, FieldType.INT64, FieldType.UINT8}
)

_ANNOTATION_TYPES: dict[Any, FieldType] = {
    str: FieldType.TEXT,
    int: FieldType.INT64,
    float: FieldType.DOUBLE,
    Decimal: FieldType.DECIMAL,
    bool: FieldType.BOOLEAN,
    datetime: FieldType.DATETIME,
    date: FieldType.DATE,
    uuid.UUID: FieldType.IDENTIFIER,
    np.float32: FieldType.SINGLE,
    np.int8: FieldType.INT8,
    np.int16: FieldType.INT16,
    np.int32: FieldType.INT32,
    np.int64: FieldType.INT64,
    np.uint8: FieldType.UINT8,
}


def normalize_key(name: str) -> str:
    """Canonical form for case-insensitive header/field/mapping comparison."""
    return name.casefold()


def field_type_for(annotation: Any) -> FieldType | None:
    """Map a type annotation to a FieldType; Optional[X] is treated as X."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        members = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(members) != 1:
            return None
        annotation = members[0]
    return _ANNOTATION_TYPES.get(annotation)


@dataclass(frozen=True)
class FieldDescriptor:
    """A named, settable slot on an entity type."""
    name: str
    field_type: FieldType
    attribute: str | None = None  # attribute to set, defaults to name

    @property
    def key(self) -> str:
        return normalize_key(self.name)

    def set(self, entity: Any, value: Any) -> None:
        setattr(entity, self.attribute or self.name, value)

    def get(self, entity: Any) -> Any:
        return getattr(entity, self.attribute or self.name, None)


@dataclass(frozen=True)
class EntitySchema:
    """Descriptor table for one entity type, indexed by normalized field name."""
    entity_type: type
    fields: tuple[FieldDescriptor, ...]
    name: str = ""
    _index: MappingProxyType = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, FieldDescriptor] = {}
        for descriptor in self.fields:
            index.setdefault(descriptor.key, descriptor)
        object.__setattr__(self, "_index", MappingProxyType(index))

    def find(self, name: str) -> FieldDescriptor | None:
        return self._index.get(normalize_key(name))

    def create(self) -> Any:
        return self.entity_type()

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]


_SCHEMAS: dict[type, EntitySchema] = {}
_NAMES: dict[str, type] = {}


def _discover_fields(entity_type: type) -> list[FieldDescriptor]:
    hints = typing.get_type_hints(entity_type)
    if dataclasses.is_dataclass(entity_type):
        candidates = [(f.name, f.metadata.get(FIELD_TYPE_KEY)) for f in dataclasses.fields(entity_type)]
    else:
        candidates = [(name, None) for name in hints if not name.startswith("_")]

    descriptors: list[FieldDescriptor] = []
    for name, explicit in candidates:
        annotation = hints.get(name)
        if typing.get_origin(annotation) is typing.ClassVar:
            continue
        field_type = explicit if isinstance(explicit, FieldType) else field_type_for(annotation)
        if field_type is None:
            logger.debug(f"{entity_type.__name__}.{name}: unsupported annotation {annotation!r}, not bindable")
            continue
        descriptors.append(FieldDescriptor(name=name, field_type=field_type))
    return descriptors


def register_entity(
    entity_type: type,
    fields: Iterable[FieldDescriptor] | None = None,
    *,
    name: str | None = None,
) -> EntitySchema:
    """Register ``entity_type`` and return its descriptor table.

    Args:
        entity_type: default-constructible class whose attributes receive cell values
        fields: explicit descriptors; discovered from annotations when omitted
        name: lookup name for configuration files (defaults to the lowercased class name)
    """
    descriptors = tuple(fields) if fields is not None else tuple(_discover_fields(entity_type))
    schema = EntitySchema(
        entity_type=entity_type,
        fields=descriptors,
        name=name or entity_type.__name__.lower(),
    )
    _SCHEMAS[entity_type] = schema
    _NAMES[normalize_key(schema.name)] = entity_type
    return schema


def entity(cls: type[T] | None = None, *, name: str | None = None) -> Any:
    """Class decorator form of :func:`register_entity`."""
    def wrap(target: type[T]) -> type[T]:
        register_entity(target, name=name)
        return target

    if cls is None:
        return wrap
    return wrap(cls)


def schema_for(entity_type: type) -> EntitySchema:
    """Descriptor table for ``entity_type``, registering it on first use."""
    schema = _SCHEMAS.get(entity_type)
    if schema is None:
        schema = register_entity(entity_type)
    return schema


def entity_type_by_name(name: str) -> type:
    """Resolve a registered entity name. Raises KeyError when unknown."""
    return _NAMES[normalize_key(name)]


def registered_entities() -> dict[str, type]:
    return {schema.name: t for t, schema in _SCHEMAS.items()}

