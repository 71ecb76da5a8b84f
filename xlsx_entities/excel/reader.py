from __future__ import annotations

import io
import itertools
import logging
import os
from collections.abc import Iterator, Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Generic, TypeVar

from xlsx_entities.logging.error_log import DiagnosticLog
from xlsx_entities.mapping.binder import ColumnBinding, ColumnMapping, bind_columns, synthesize_headers
from xlsx_entities.mapping.coercion import coerce_value
from xlsx_entities.models.config_models import INVARIANT_CULTURE, CultureSettings
from xlsx_entities.models.entity import EntitySchema, schema_for
from xlsx_entities.models.error_record import (
    CELL_DECODE_FAILURE,
    COERCION_FAILURE,
    GLOBAL_READ_FAILURE,
    MISSING_PART,
    PACKAGE_CORRUPT,
    PACKAGE_LEVEL,
    ROW_FAILURE,
)

from .cells import ERROR, SheetRow, decode_cell, iter_rows
from .package import MissingPart, PackageCorrupt, Source, open_package
from .shared_strings import SharedStrings, load_shared_strings
from .workbook import SheetRef, list_sheets

"""Entity assembler: spreadsheet package -> ordered entities.

read_entities() is the single entry point of the core:

1. open the package, load shared strings, resolve the sheet list
2. read row 0 as header text (or synthesize Column{n} names) and bind columns once
3. for every data row build a fresh entity; each bound cell is decoded then
   coerced and set on success
4. rows with no field set are dropped

Only a missing source path is raised to the caller. Anything else is reported
to the logger (and the optional DiagnosticLog) and the rows read so far are
returned.
"""

__all__ = [
    "EntityPass",
    "EntitySequence",
    "ReadState",
    "SourceNotFound",
    "iter_entities",
    "read_entities",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SourceNotFound(FileNotFoundError):
    """Raised when a path source does not point to an existing file."""


class ReadState(Enum):
    NOT_STARTED = "not_started"
    SHEET_SELECTED = "sheet_selected"
    HEADER_RESOLVED = "header_resolved"
    ROW_ITERATING = "row_iterating"
    DONE = "done"


def _check_source(source: Source) -> None:
    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        if not path.is_file():
            raise SourceNotFound(f"Excel file not found: {path}")


def _rewind(source: Source) -> None:
    if isinstance(source, io.IOBase) and source.seekable():
        source.seek(0)


class EntitySequence(Generic[T]):
    """Lazy, re-iterable sequence of entities read from one sheet.

    Every iteration is an independent ``EntityPass``: it re-opens the source,
    reads from scratch and closes the package when it finishes or is closed.
    ``state``, ``sheet`` and ``binding`` mirror the most recently started pass.
    Interleaved passes over a path or bytes source do not share state; a
    caller-supplied stream is rewound by each pass and should be iterated by
    one pass at a time.
    """

    def __init__(
        self,
        source: Source,
        entity_type: type[T],
        sheet_index: int = 0,
        has_header: bool = True,
        mapping: ColumnMapping | Mapping[str, str] | None = None,
        *,
        honor_cell_references: bool = False,
        culture: CultureSettings | None = None,
        diagnostics: DiagnosticLog | None = None,
    ) -> None:
        self.source = source
        self.schema: EntitySchema = schema_for(entity_type)
        self.sheet_index = sheet_index
        self.has_header = has_header
        if mapping is not None and not isinstance(mapping, ColumnMapping):
            mapping = ColumnMapping(mapping)
        self.mapping = mapping
        self.honor_cell_references = honor_cell_references
        self.culture = culture or INVARIANT_CULTURE
        self.diagnostics = diagnostics
        self.last_pass: EntityPass[T] | None = None

    def __iter__(self) -> EntityPass[T]:
        self.last_pass = EntityPass(self)
        return self.last_pass

    @property
    def state(self) -> ReadState:
        return self.last_pass.state if self.last_pass is not None else ReadState.NOT_STARTED

    @property
    def sheet(self) -> SheetRef | None:
        return self.last_pass.sheet if self.last_pass is not None else None

    @property
    def binding(self) -> ColumnBinding | None:
        return self.last_pass.binding if self.last_pass is not None else None

    @property
    def file_label(self) -> str:
        if isinstance(self.source, (bytes, bytearray)):
            return "<bytes>"
        if isinstance(self.source, (str, os.PathLike)):
            return Path(self.source).name
        return str(getattr(self.source, "name", "<stream>"))


class EntityPass(Generic[T]):
    """One iteration over the sheet of an ``EntitySequence``; owns its read state."""

    def __init__(self, sequence: EntitySequence[T]) -> None:
        self._seq = sequence
        self._file = sequence.file_label
        self.state = ReadState.NOT_STARTED
        self.sheet: SheetRef | None = None
        self.binding: ColumnBinding | None = None
        self._items = self._assemble()

    def __iter__(self) -> EntityPass[T]:
        return self

    def __next__(self) -> T:
        return next(self._items)

    def close(self) -> None:
        self._items.close()
        self.state = ReadState.DONE

    # -- reporting -----------------------------------------------------

    def _report(self, error_type: str, message: str, *, row: int = -1) -> None:
        if self._seq.diagnostics is not None:
            sheet = self.sheet.name if self.sheet is not None else PACKAGE_LEVEL
            self._seq.diagnostics.record(self._file, error_type, message, sheet=sheet, row=row)

    # -- pipeline ------------------------------------------------------

    def _assemble(self) -> Iterator[T]:
        seq = self._seq
        _rewind(seq.source)
        emitted = 0
        try:
            with open_package(seq.source) as package:
                shared_strings = load_shared_strings(package, seq.diagnostics)
                sheets = list_sheets(package, seq.diagnostics)
                if not 0 <= seq.sheet_index < len(sheets):
                    logger.debug(f"{self._file}: sheet index {seq.sheet_index} out of range ({len(sheets)} sheets)")
                    return
                self.sheet = sheets[seq.sheet_index]
                self.state = ReadState.SHEET_SELECTED

                with package.require_part(self.sheet.path) as stream:
                    rows = iter_rows(stream, honor_cell_references=seq.honor_cell_references)
                    first = next(rows, None)
                    if first is None:
                        return
                    self.binding = self._bind(first, shared_strings)
                    self.state = ReadState.HEADER_RESOLVED

                    data_rows = rows if seq.has_header else itertools.chain([first], rows)
                    self.state = ReadState.ROW_ITERATING
                    for row in data_rows:
                        try:
                            item = self._build(row, self.binding, shared_strings)
                        except Exception as e:
                            logger.warning(f"{self._file}: row {row.number} skipped: {e}")
                            self._report(ROW_FAILURE, str(e), row=row.number)
                            continue
                        if item is not None:
                            emitted += 1
                            yield item
        except MissingPart as e:
            logger.warning(f"{self._file}: {e}")
            self._report(MISSING_PART, str(e))
        except PackageCorrupt as e:
            logger.error(f"{self._file}: {e}")
            self._report(PACKAGE_CORRUPT, str(e))
        except Exception as e:
            logger.error(f"Excel reading error in {self._file} after {emitted} rows: {e}")
            self._report(GLOBAL_READ_FAILURE, f"{type(e).__name__}: {e}")
        finally:
            self.state = ReadState.DONE

    def _bind(self, first: SheetRow, shared_strings: SharedStrings) -> ColumnBinding:
        if self._seq.has_header:
            headers = {
                cell.column: decode_cell(cell.type_tag, cell.raw_text, shared_strings) or f"Column{cell.column}"
                for cell in first.cells
            }
        else:
            headers = synthesize_headers(cell.column for cell in first.cells)
        binding = bind_columns(headers, self._seq.schema, self._seq.mapping)
        logger.debug(
            f"{self._file}: bound {len(binding)}/{len(headers)} columns of sheet '{self.sheet.name if self.sheet else ''}'"
        )
        return binding

    def _build(self, row: SheetRow, binding: ColumnBinding, shared_strings: SharedStrings) -> Any:
        item = self._seq.schema.create()
        has_data = False
        for cell in row.cells:
            descriptor = binding.field_for(cell.column)
            if descriptor is None:
                continue
            text = decode_cell(cell.type_tag, cell.raw_text, shared_strings)
            if text is None:
                if cell.type_tag == ERROR and cell.raw_text:
                    logger.debug(f"{CELL_DECODE_FAILURE} row {row.number}: error value {cell.raw_text} for {descriptor.name}")
                continue
            value = coerce_value(text, descriptor.field_type, self._seq.culture)
            if value is None:
                logger.debug(
                    f"{COERCION_FAILURE} row {row.number}: '{text}' is not a valid "
                    f"{descriptor.field_type.value} for {descriptor.name}"
                )
                continue
            try:
                descriptor.set(item, value)
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug(f"row {row.number}: cannot set {descriptor.name}: {e}")
                continue
            has_data = True
        return item if has_data else None


def iter_entities(
    source: Source,
    entity_type: type[T],
    sheet_index: int = 0,
    has_header: bool = True,
    mapping: ColumnMapping | Mapping[str, str] | None = None,
    *,
    honor_cell_references: bool = False,
    culture: CultureSettings | None = None,
    diagnostics: DiagnosticLog | None = None,
) -> EntitySequence[T]:
    """Lazy form of :func:`read_entities`; see there for the parameters.

    Raises:
        SourceNotFound: ``source`` is a path that is not an existing file
    """
    _check_source(source)
    return EntitySequence(
        source,
        entity_type,
        sheet_index,
        has_header,
        mapping,
        honor_cell_references=honor_cell_references,
        culture=culture,
        diagnostics=diagnostics,
    )


def read_entities(
    source: Source,
    entity_type: type[T],
    sheet_index: int = 0,
    has_header: bool = True,
    mapping: ColumnMapping | Mapping[str, str] | None = None,
    *,
    honor_cell_references: bool = False,
    culture: CultureSettings | None = None,
    diagnostics: DiagnosticLog | None = None,
) -> list[T]:
    """Read one sheet of a spreadsheet package into a list of entities.

    Parameters
    ----------
    source: path, bytes, or binary stream of an .xlsx package
    entity_type: default-constructible class to populate (registered on first use)
    sheet_index: 0-based index among the resolvable sheets; out of range gives []
    has_header: when True row 0 supplies column names instead of data
    mapping: header text -> field name overrides, case-insensitive
    honor_cell_references: place cells by their reference instead of their ordinal position
    culture: numeric/date conventions (invariant by default)
    diagnostics: optional sink for recovered failures

    Raises
    ------
    SourceNotFound: ``source`` is a path that is not an existing file
    """
    return list(
        iter_entities(
            source,
            entity_type,
            sheet_index,
            has_header,
            mapping,
            honor_cell_references=honor_cell_references,
            culture=culture,
            diagnostics=diagnostics,
        )
    )
