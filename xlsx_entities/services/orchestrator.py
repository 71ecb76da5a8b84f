from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import ConfigError, resolve_entity
from ..excel.reader import SourceNotFound, read_entities
from ..logging.error_log import DiagnosticLog
from ..models.config_models import ReaderConfig
from ..models.error_record import GLOBAL_READ_FAILURE, PACKAGE_CORRUPT, SOURCE_NOT_FOUND
from ..models.read_result import BatchResult, FileStat, FileStatus
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

"""Batch orchestration for the spreadsheet entity reader.

Reads every workbook of a run with the same ReaderConfig, aggregates per-file
outcomes and returns a BatchResult with the numbers for the SUMMARY line.
A failing workbook never stops the batch.
"""

__all__ = [
    "FAILING_ERROR_TYPES",
    "ProcessingError",
    "read_all",
    "scan_workbooks",
]

# Diagnostics that mark a whole file as failed; anything else was recovered
FAILING_ERROR_TYPES = frozenset({SOURCE_NOT_FOUND, PACKAGE_CORRUPT, GLOBAL_READ_FAILURE})


class ProcessingError(Exception):
    """Fatal error that prevents a batch from running."""


def scan_workbooks(directory: Path) -> list[Path]:
    """List .xlsx files in ``directory`` (non-recursive, sorted by name).

    Lock files Excel leaves behind (``~$name.xlsx``) are skipped.

    Raises:
        ProcessingError: the directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() == ".xlsx" and not p.name.startswith("~$")
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def _read_single_file(
    file_path: Path,
    entity_type: type,
    config: ReaderConfig,
    diagnostics: DiagnosticLog,
) -> FileStat:
    start = datetime.now(UTC)
    recorded_before = len(diagnostics.records)
    entities: list = []
    try:
        entities = read_entities(
            file_path,
            entity_type,
            config.sheet_index,
            config.has_header,
            config.column_mapping,
            honor_cell_references=config.honor_cell_references,
            culture=config.culture,
            diagnostics=diagnostics,
        )
    except SourceNotFound as e:
        logger.error(str(e))
        diagnostics.record(file_path.name, SOURCE_NOT_FOUND, str(e))

    new_records = diagnostics.records[recorded_before:]
    failed = any(r.error_type in FAILING_ERROR_TYPES for r in new_records)
    elapsed = (datetime.now(UTC) - start).total_seconds()
    status = FileStatus.FAILED if failed else FileStatus.SUCCESS
    logger.info(f"{file_path.name}: {status.value} rows={len(entities)} diagnostics={len(new_records)}")
    return FileStat(
        file_name=file_path.name,
        status=status,
        rows=len(entities),
        elapsed_seconds=elapsed,
        diagnostics=len(new_records),
        entities=entities,
    )


def read_all(
    paths: Iterable[Path],
    config: ReaderConfig,
    diagnostics: DiagnosticLog | None = None,
) -> BatchResult:
    """Read every workbook in ``paths`` into entities of the configured type.

    Args:
        paths: workbook files, read in the given order
        config: reader settings shared by every file
        diagnostics: sink for recovered failures; a private buffer is used when omitted

    Returns:
        BatchResult with per-file stats (including the entities) and totals

    Raises:
        ProcessingError: the configured entity is not registered
    """
    start_time = datetime.now(UTC)
    try:
        entity_type = resolve_entity(config)
    except ConfigError as e:
        raise ProcessingError(f"Invalid configuration: {e}") from e

    log = diagnostics if diagnostics is not None else DiagnosticLog()
    file_paths = [Path(p) for p in paths]

    file_stats: list[FileStat] = []
    with ProgressTracker(len(file_paths), description="Reading workbooks") as progress:
        for file_path in file_paths:
            progress.file_started(file_path.name)
            stat = _read_single_file(file_path, entity_type, config, log)
            progress.file_read(stat.rows, success=stat.status is FileStatus.SUCCESS)
            file_stats.append(stat)

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput_rps = progress.rows / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return BatchResult(
        success_files=progress.success,
        failed_files=progress.failed,
        total_rows=progress.rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput_rps,
        file_stats=file_stats,
    )
