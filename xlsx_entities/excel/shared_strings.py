from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from xml.etree import ElementTree as ET

from xlsx_entities.logging.error_log import DiagnosticLog
from xlsx_entities.models.error_record import MISSING_PART

from .package import UNREADABLE_PART_ERRORS, Package, local_name

"""Shared string table.

Cells typed ``s`` carry an index into this table instead of their text. The
table is built once per read and indices are assigned in document order from 0.
"""

__all__ = [
    "SharedStrings",
    "item_text",
    "load_shared_strings",
    "SHARED_STRINGS_PART",
]

logger = logging.getLogger(__name__)

SHARED_STRINGS_PART = "xl/sharedStrings.xml"


class SharedStrings(Mapping[int, str]):
    """Immutable index -> text mapping."""

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._items = tuple(items)

    def __getitem__(self, index: int) -> str:
        if not isinstance(index, int) or index < 0 or index >= len(self._items):
            raise KeyError(index)
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[int]:
        return iter(range(len(self._items)))

    def __repr__(self) -> str:
        return f"SharedStrings({len(self._items)} items)"


def item_text(element: ET.Element) -> str:
    """Text of a string item (``si`` or inline ``is``).

    Plain items hold a single ``t``; rich-text items hold ``r`` runs whose
    ``t`` children are concatenated. Phonetic runs (``rPh``) are skipped.
    """
    parts: list[str] = []
    for child in element:
        name = local_name(child.tag)
        if name == "t":
            parts.append(child.text or "")
        elif name == "r":
            for run_child in child:
                if local_name(run_child.tag) == "t":
                    parts.append(run_child.text or "")
    return "".join(parts)


def load_shared_strings(package: Package, diagnostics: DiagnosticLog | None = None) -> SharedStrings:
    """Load the shared string table; an absent or damaged part gives an empty table."""
    if not package.has_part(SHARED_STRINGS_PART):
        logger.debug(f"no shared strings part in {package.name}")
        return SharedStrings()
    try:
        root = package.read_xml(SHARED_STRINGS_PART)
    except UNREADABLE_PART_ERRORS as e:
        logger.warning(f"shared strings part unreadable in {package.name}: {e}")
        if diagnostics is not None:
            diagnostics.record(package.name, MISSING_PART, f"{SHARED_STRINGS_PART}: {e}")
        return SharedStrings()
    return SharedStrings(item_text(si) for si in root if local_name(si.tag) == "si")
