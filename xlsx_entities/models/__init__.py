"""Domain models for the spreadsheet entity reader.

Entity descriptors and their registry, reader/culture configuration, diagnostic
records and batch result models.
"""

from .config_models import INVARIANT_CULTURE, CultureSettings, ReaderConfig
from .entity import (
    EntitySchema,
    FieldDescriptor,
    FieldType,
    entity,
    entity_type_by_name,
    register_entity,
    schema_for,
)
from .error_record import DiagnosticRecord
from .person import SAMPLE_MAPPING, Person, sample_mapping
from .read_result import BatchResult, FileStat, FileStatus

__all__ = [
    # Configuration models
    "CultureSettings",
    "INVARIANT_CULTURE",
    "ReaderConfig",
    # Entity descriptors
    "EntitySchema",
    "FieldDescriptor",
    "FieldType",
    "entity",
    "entity_type_by_name",
    "register_entity",
    "schema_for",
    # Sample entity
    "Person",
    "SAMPLE_MAPPING",
    "sample_mapping",
    # Results
    "BatchResult",
    "DiagnosticRecord",
    "FileStat",
    "FileStatus",
]
