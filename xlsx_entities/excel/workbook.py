from __future__ import annotations

import logging
from dataclasses import dataclass
from xml.etree import ElementTree as ET

from xlsx_entities.logging.error_log import DiagnosticLog
from xlsx_entities.models.error_record import MISSING_PART

from .package import UNREADABLE_PART_ERRORS, MissingPart, Package, local_name

"""Workbook index: resolve the ordered list of worksheet parts.

Sheet entries come from the workbook part in document order; each entry's
relationship id is resolved through the workbook relationships part. Entries
that cannot be resolved are dropped, so the list can be shorter than the
declared sheet count.
"""

__all__ = [
    "SheetRef",
    "list_sheets",
    "normalize_target",
    "WORKBOOK_PART",
    "WORKBOOK_RELS_PART",
]

logger = logging.getLogger(__name__)

WORKBOOK_PART = "xl/workbook.xml"
WORKBOOK_RELS_PART = "xl/_rels/workbook.xml.rels"
SHEET_PARTS_DIR = "xl/"
RELATIONSHIPS_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"


@dataclass(frozen=True)
class SheetRef:
    index: int  # position among resolvable sheets
    name: str
    path: str  # part name inside the container, e.g. xl/worksheets/sheet1.xml


def normalize_target(target: str) -> str:
    """Turn a relationship target into a container part name."""
    path = target.lstrip("/")
    if not path.startswith(SHEET_PARTS_DIR):
        path = SHEET_PARTS_DIR + path
    return path


def _relationships(root: ET.Element) -> dict[str, str]:
    rels: dict[str, str] = {}
    for element in root.iter():
        if local_name(element.tag) != "Relationship":
            continue
        rel_id = element.get("Id")
        target = element.get("Target")
        if rel_id and target:
            rels[rel_id] = target
    return rels


def _relationship_id(sheet: ET.Element) -> str | None:
    return sheet.get("id") or sheet.get(f"{{{RELATIONSHIPS_NS}}}id")


def list_sheets(package: Package, diagnostics: DiagnosticLog | None = None) -> list[SheetRef]:
    """Return the resolvable sheets of ``package`` in workbook order.

    A missing (or damaged) workbook or relationships part yields an empty
    list rather than an error.
    """
    try:
        workbook = package.read_xml(WORKBOOK_PART)
        rels = _relationships(package.read_xml(WORKBOOK_RELS_PART))
    except (MissingPart, *UNREADABLE_PART_ERRORS) as e:
        logger.debug(f"workbook index unavailable in {package.name}: {e}")
        if diagnostics is not None:
            diagnostics.record(package.name, MISSING_PART, str(e))
        return []

    sheets: list[SheetRef] = []
    for element in workbook.iter():
        if local_name(element.tag) != "sheet":
            continue
        rel_id = _relationship_id(element)
        target = rels.get(rel_id) if rel_id else None
        if not target:
            logger.debug(f"dropping sheet '{element.get('name')}' (unresolved relationship {rel_id!r})")
            continue
        sheets.append(
            SheetRef(index=len(sheets), name=element.get("name", ""), path=normalize_target(target))
        )
    return sheets
