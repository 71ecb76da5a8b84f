from __future__ import annotations

from ..models.read_result import BatchResult

"""SUMMARY line rendering.

Format:
SUMMARY files={total}/{total} success={success} failed={failed} rows={rows} elapsed_sec={elapsed} throughput_rps={throughput}
"""

__all__ = ["format_number", "render_summary_line"]


def format_number(value: float) -> str:
    """Render a metric without scientific notation; integral values drop the fraction."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: BatchResult) -> str:
    """Render the SUMMARY line for a finished batch.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = BatchResult(
        ...     success_files=1, failed_files=0, total_rows=1000, start_time=start,
        ...     end_time=end, elapsed_seconds=2.0, throughput_rows_per_sec=500.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=1/1 success=1 failed=0 rows=1000 elapsed_sec=2 throughput_rps=500'
    """
    total = result.total_files
    return (
        f"SUMMARY files={total}/{total} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_rows} "
        f"elapsed_sec={format_number(result.elapsed_seconds)} "
        f"throughput_rps={format_number(result.throughput_rows_per_sec)}"
    )
