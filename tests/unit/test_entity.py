from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, Optional

import numpy as np
import pytest

from xlsx_entities.models.entity import (
    FIELD_TYPE_KEY,
    FieldDescriptor,
    FieldType,
    entity,
    entity_type_by_name,
    field_type_for,
    register_entity,
    registered_entities,
    schema_for,
)
from xlsx_entities.models.person import Person


@pytest.mark.parametrize(
    "annotation,expected",
    [
        (str, FieldType.TEXT),
        (int, FieldType.INT64),
        (float, FieldType.DOUBLE),
        (Decimal, FieldType.DECIMAL),
        (bool, FieldType.BOOLEAN),
        (datetime, FieldType.DATETIME),
        (date, FieldType.DATE),
        (uuid.UUID, FieldType.IDENTIFIER),
        (np.float32, FieldType.SINGLE),
        (np.int16, FieldType.INT16),
        (Optional[int], FieldType.INT64),
        (int | None, FieldType.INT64),
        (list, None),
    ],
)
def test_field_type_for(annotation, expected):
    assert field_type_for(annotation) is expected


def test_discovery_from_dataclass_with_metadata_override():
    @dataclass
    class Reading:
        sensor: str | None = None
        level: int = field(default=0, metadata={FIELD_TYPE_KEY: FieldType.INT8})
        tags: list = field(default_factory=list)
        unit: ClassVar[str] = "mm"

    schema = register_entity(Reading)
    assert schema.field_names == ["sensor", "level"]
    assert schema.find("LEVEL").field_type is FieldType.INT8
    assert schema.name == "reading"


def test_discovery_from_annotated_class():
    class Plain:
        code: str
        count: int
        _hidden: int

        def __init__(self) -> None:
            self.code = ""
            self.count = 0

    schema = schema_for(Plain)
    assert schema.field_names == ["code", "count"]
    item = schema.create()
    schema.find("count").set(item, 4)
    assert item.count == 4


def test_explicit_descriptor_table_with_attribute_alias():
    class Legacy:
        def __init__(self) -> None:
            self._title = None

    schema = register_entity(
        Legacy,
        [FieldDescriptor("Title", FieldType.TEXT, attribute="_title")],
        name="legacy",
    )
    item = schema.create()
    schema.find("title").set(item, "x")
    assert item._title == "x"
    assert schema.find("title").get(item) == "x"


def test_entity_decorator_registers_by_name():
    @entity(name="Gadget")
    @dataclass
    class Gadget:
        serial: uuid.UUID | None = None

    assert entity_type_by_name("gadget") is Gadget
    assert "Gadget" in registered_entities()


def test_unknown_entity_name_raises_key_error():
    with pytest.raises(KeyError):
        entity_type_by_name("does-not-exist")


def test_person_is_registered():
    assert entity_type_by_name("person") is Person
    schema = schema_for(Person)
    assert schema.field_names == ["id", "name", "date_of_birth", "job_title"]
    assert schema.find("Date_Of_Birth").field_type is FieldType.DATETIME
