from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

"""Batch read result models.

FileStat records the outcome of one workbook; BatchResult aggregates a run and
carries the numbers printed on the SUMMARY line.
"""


class FileStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class FileStat:
    """Per-file read statistics."""
    file_name: str
    status: FileStatus
    rows: int  # entities read
    elapsed_seconds: float
    diagnostics: int = 0  # recovered failures recorded for this file
    entities: list[Any] = field(default_factory=list, repr=False, compare=False)


@dataclass(frozen=True)
class BatchResult:
    """Aggregated results of a batch read (one entry per workbook)."""
    success_files: int
    failed_files: int
    total_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    file_stats: list[FileStat] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files

    def entities(self) -> list[Any]:
        """All entities of the run, in file order."""
        return [item for stat in self.file_stats for item in stat.entities]
