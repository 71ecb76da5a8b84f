"""OOXML spreadsheet access: package, workbook, shared strings, cells and the entity reader."""

from .package import MissingPart, PackageCorrupt, open_package
from .reader import EntitySequence, SourceNotFound, iter_entities, read_entities

__all__ = [
    "EntitySequence",
    "MissingPart",
    "PackageCorrupt",
    "SourceNotFound",
    "iter_entities",
    "open_package",
    "read_entities",
]
