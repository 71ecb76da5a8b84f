from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

from xlsx_entities.models.error_record import PACKAGE_LEVEL, DiagnosticRecord

"""Diagnostic log buffering module.

- JSON Lines with a fixed schema (no extra keys)
- one `logs/diagnostics-YYYYMMDD-HHMMSS.log` (UTC) per buffer, created on first flush
- the reader only appends in memory; writing happens when the caller flushes
"""

__all__ = [
    "DiagnosticRecord",
    "DiagnosticLog",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class DiagnosticLog:
    """In-memory buffer for diagnostic records. Flush writes JSON Lines.

    Appending never touches the filesystem, so recording a diagnostic cannot
    block or fail a read. Not thread safe; one buffer per caller.
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[DiagnosticRecord] = []
        self._logs_dir = logs_dir or LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"diagnostics-{stamp}.log"
        return self._file_path

    def append(self, record: DiagnosticRecord) -> None:
        self._records.append(record)

    def record(
        self,
        file: str,
        error_type: str,
        message: str,
        *,
        sheet: str = PACKAGE_LEVEL,
        row: int = -1,
    ) -> DiagnosticRecord:
        rec = DiagnosticRecord.create(file=file, sheet=sheet, row=row, error_type=error_type, message=message)
        self._records.append(rec)
        return rec

    @property
    def records(self) -> tuple[DiagnosticRecord, ...]:
        return tuple(self._records)

    def count(self, error_type: str) -> int:
        return sum(1 for r in self._records if r.error_type == error_type)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[DiagnosticRecord]:
        return iter(tuple(self._records))

    def flush(self) -> Path:
        if not self._records:
            return self.file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
