from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import IO
from xml.etree import ElementTree as ET

from .package import local_name
from .shared_strings import item_text

"""Cell scanning and decoding.

``iter_rows`` streams the ``row`` elements of a worksheet part; each cell
becomes a RawCell (column position, type tag, raw text). ``decode_cell`` turns
one raw cell into its textual value using the shared string table.
"""

__all__ = [
    "RawCell",
    "SheetRow",
    "column_index",
    "decode_cell",
    "iter_rows",
]

SHARED_STRING = "s"
BOOLEAN = "b"
ERROR = "e"
INLINE_STRING = "inlineStr"

_CELL_REF = re.compile(r"^\$?([A-Za-z]{1,3})\$?[0-9]*$")
_INDEX = re.compile(r"^\s*[+-]?\d+\s*$", re.ASCII)


@dataclass(frozen=True)
class RawCell:
    column: int  # 0-based column position
    type_tag: str  # value of the t attribute, "" when absent
    raw_text: str | None


@dataclass(frozen=True)
class SheetRow:
    number: int  # 1-based sheet row number (r attribute, else document ordinal)
    cells: tuple[RawCell, ...]


def column_index(reference: str) -> int | None:
    """0-based column of an A1-style reference ("C7" -> 2), None if malformed."""
    match = _CELL_REF.match(reference.strip())
    if match is None:
        return None
    index = 0
    for ch in match.group(1).upper():
        index = index * 26 + (ord(ch) - ord("A") + 1)
    return index - 1


def decode_cell(type_tag: str, raw_text: str | None, shared_strings: Mapping[int, str]) -> str | None:
    """Decode a raw cell value to text; None means the cell has no value."""
    if not raw_text:
        return None
    if type_tag == SHARED_STRING:
        if not _INDEX.match(raw_text):
            return raw_text
        return shared_strings.get(int(raw_text), raw_text)
    if type_tag == BOOLEAN:
        return "TRUE" if raw_text == "1" else "FALSE"
    if type_tag == ERROR:
        return None
    return raw_text


def _raw_text(cell: ET.Element, type_tag: str) -> str | None:
    inline: ET.Element | None = None
    for child in cell:
        name = local_name(child.tag)
        if name == "v":
            return child.text
        if name == "is":
            inline = child
    if inline is not None and type_tag == INLINE_STRING:
        return item_text(inline)
    return None


def _row_cells(row: ET.Element, honor_cell_references: bool) -> tuple[RawCell, ...]:
    cells: list[RawCell] = []
    position = 0
    for child in row:
        if local_name(child.tag) != "c":
            continue
        type_tag = child.get("t", "")
        column = position
        if honor_cell_references:
            referenced = column_index(child.get("r", ""))
            if referenced is not None:
                column = referenced
        cells.append(RawCell(column=column, type_tag=type_tag, raw_text=_raw_text(child, type_tag)))
        position += 1
    return tuple(cells)


def iter_rows(stream: IO[bytes], *, honor_cell_references: bool = False) -> Iterator[SheetRow]:
    """Yield the rows of a worksheet part in document order.

    By default a cell's column is its ordinal position within the row, so rows
    that omit empty cells shift left. With ``honor_cell_references`` the
    column comes from each cell's ``r`` reference when it has one.

    Raises:
        xml.etree.ElementTree.ParseError: the part is not well-formed XML
    """
    ordinal = 0
    for _event, element in ET.iterparse(stream, events=("end",)):
        if local_name(element.tag) != "row":
            continue
        ordinal += 1
        try:
            number = int(element.get("r", ordinal))
        except ValueError:
            number = ordinal
        cells = _row_cells(element, honor_cell_references)
        element.clear()
        yield SheetRow(number=number, cells=cells)
