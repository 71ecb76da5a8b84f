from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm

"""Workbook progress bar (tqdm, interactive terminals only).

The bar counts workbooks and shows the running success/failed/rows totals of
the batch. tqdm writes to stderr, so the bar is only created when stderr is a
terminal; piped or CI runs get plain log lines.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stderr.isatty()


class ProgressTracker:
    """Counts workbooks of one batch and mirrors the totals on a tqdm bar."""

    def __init__(self, total_files: int, *, description: str = "Reading workbooks") -> None:
        self.description = description
        self.success = 0
        self.failed = 0
        self.rows = 0
        self.pbar: Any = None
        if is_tty_enabled():
            self.pbar = tqdm(total=total_files, desc=description, unit="workbook", dynamic_ncols=True, leave=False)

    @property
    def enabled(self) -> bool:
        return self.pbar is not None

    @property
    def files_done(self) -> int:
        return self.success + self.failed

    def file_started(self, name: str) -> None:
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} [{name}]")

    def file_read(self, rows: int, success: bool) -> None:
        if success:
            self.success += 1
        else:
            self.failed += 1
        self.rows += rows
        if self.pbar is not None:
            self.pbar.set_description(self.description)
            self.pbar.set_postfix(success=self.success, failed=self.failed, rows=self.rows)
            self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
