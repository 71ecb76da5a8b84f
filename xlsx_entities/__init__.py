"""Read worksheets of .xlsx packages into typed entity objects.

    >>> from xlsx_entities import Person, read_entities, sample_mapping
    >>> people = read_entities("people.xlsx", Person, mapping=sample_mapping())  # doctest: +SKIP
"""

from .excel.package import MissingPart, PackageCorrupt
from .excel.reader import EntitySequence, SourceNotFound, iter_entities, read_entities
from .mapping.binder import ColumnMapping
from .models.config_models import INVARIANT_CULTURE, CultureSettings
from .models.entity import FieldDescriptor, FieldType, entity, register_entity
from .models.person import Person, sample_mapping

__version__ = "0.1.0"

__all__ = [
    "ColumnMapping",
    "CultureSettings",
    "EntitySequence",
    "FieldDescriptor",
    "FieldType",
    "INVARIANT_CULTURE",
    "MissingPart",
    "PackageCorrupt",
    "Person",
    "SourceNotFound",
    "entity",
    "iter_entities",
    "read_entities",
    "register_entity",
    "sample_mapping",
]
