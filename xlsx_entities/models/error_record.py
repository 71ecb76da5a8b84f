from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""DiagnosticRecord model for read diagnostics.

This module defines the DiagnosticRecord dataclass used for structured logging
of everything the reader recovers from instead of raising. It supports row=-1
as a sentinel value for package-level problems where no specific row applies.

The record adheres to the JSON schema contract shipped in
xlsx_entities/contracts/diagnostic_record_schema.json.
"""

__all__ = [
    "DiagnosticRecord",
    "SOURCE_NOT_FOUND",
    "PACKAGE_CORRUPT",
    "MISSING_PART",
    "CELL_DECODE_FAILURE",
    "COERCION_FAILURE",
    "ROW_FAILURE",
    "GLOBAL_READ_FAILURE",
]

# error_type values (UPPER_SNAKE)
SOURCE_NOT_FOUND = "SOURCE_NOT_FOUND"
PACKAGE_CORRUPT = "PACKAGE_CORRUPT"
MISSING_PART = "MISSING_PART"
CELL_DECODE_FAILURE = "CELL_DECODE_FAILURE"
COERCION_FAILURE = "COERCION_FAILURE"
ROW_FAILURE = "ROW_FAILURE"
GLOBAL_READ_FAILURE = "GLOBAL_READ_FAILURE"

PACKAGE_LEVEL = "<PACKAGE>"


@dataclass(frozen=True)
class DiagnosticRecord:
    """Structured diagnostic record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: workbook name being read
        sheet: sheet name, or ``<PACKAGE>`` before a sheet is selected
        row: 1-based sheet row number. Use -1 when no row applies
        error_type: classification in UPPER_SNAKE_CASE format
        message: human readable description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    sheet: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> DiagnosticRecord:
        """Create a new DiagnosticRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return DiagnosticRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line with exactly the dataclass keys."""
        return json.dumps(asdict(self), ensure_ascii=False)
