#!/usr/bin/env python3
"""Dataset generation script for performance testing.

Generates synthetic Person workbooks (header row + data rows) in the layout of
the sample configuration: myId, Name of the Person, Date of birth, The Job Title.
Optional extra columns are left unbound by the sample mapping and only add
cells to scan.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

from xlsx_entities.models.person import SAMPLE_MAPPING

JOB_TITLES = ["Engineer", "Teacher", "Designer", "Nurse", "Analyst", "Chef", "Pilot"]
FIRST_NAMES = ["Alice", "Bob", "Carol", "Dana", "Eli", "Fay", "Gus", "Ivy", "Jon", "Kim"]


def generate_people(rows: int, extra_cols: int = 0, seed: int = 42, blank_ratio: float = 0.0) -> pd.DataFrame:
    """Generate a Person DataFrame with the sample headers.

    Args:
        rows: Number of data rows to generate
        extra_cols: Additional unmapped numeric columns
        seed: Random seed for reproducible data
        blank_ratio: Share of names left empty (sparse rows)

    Returns:
        DataFrame whose first columns match SAMPLE_MAPPING headers
    """
    rng = np.random.default_rng(seed)
    headers = list(SAMPLE_MAPPING)

    names = [f"{FIRST_NAMES[i % len(FIRST_NAMES)]} {i}" for i in range(rows)]
    if blank_ratio > 0:
        blanks = rng.random(rows) < blank_ratio
        names = [None if blank else name for name, blank in zip(names, blanks)]

    birth_start = pd.Timestamp("1950-01-01")
    data: dict[str, list] = {
        headers[0]: list(range(1, rows + 1)),
        headers[1]: names,
        headers[2]: (birth_start + pd.to_timedelta(rng.integers(0, 365 * 55, rows), unit="D")).tolist(),
        headers[3]: rng.choice(JOB_TITLES, rows).tolist(),
    }
    for i in range(extra_cols):
        data[f"metric_{i}"] = np.round(rng.uniform(0, 10000, rows), 2).tolist()
    return pd.DataFrame(data)


def create_excel_file(
    output_path: Path,
    rows: int,
    extra_cols: int = 0,
    sheets: list[str] | None = None,
    seed: int = 42,
    blank_ratio: float = 0.0,
) -> None:
    """Write a workbook with one Person sheet per name in ``sheets``."""
    if sheets is None:
        sheets = ["People"]

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        for n, sheet_name in enumerate(sheets):
            df = generate_people(rows, extra_cols, seed + n, blank_ratio)
            df.to_excel(writer, sheet_name=sheet_name, index=False)

    print(f"Created Excel file: {output_path}")
    print(f"  Sheets: {len(sheets)} ({', '.join(sheets)})")
    print(f"  Rows per sheet: {rows} (+ 1 header row)")
    print(f"  Columns per sheet: {len(SAMPLE_MAPPING) + extra_cols}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic Person workbooks for performance testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate default 50k rows
  %(prog)s data/people.xlsx

  # Wider sheet with unmapped columns and some empty names
  %(prog)s data/wide.xlsx --rows 20000 --extra-cols 30 --blank-ratio 0.1

  # Multi-sheet workbook (select with --sheet-index on the reader CLI)
  %(prog)s data/multi.xlsx --rows 5000 --sheets People Staff
        """,
    )
    parser.add_argument("output", type=Path, help="Output Excel file path")
    parser.add_argument("--rows", type=int, default=50_000, help="Number of data rows per sheet (default: 50,000)")
    parser.add_argument("--extra-cols", type=int, default=0, help="Unmapped numeric columns to add (default: 0)")
    parser.add_argument("--sheets", nargs="+", default=["People"], help="Sheet names (default: People)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducible data (default: 42)")
    parser.add_argument("--blank-ratio", type=float, default=0.0, help="Share of rows with an empty name (default: 0)")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be generated without creating files")

    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if args.extra_cols < 0:
        print("Error: --extra-cols must not be negative", file=sys.stderr)
        return 1
    if not 0 <= args.blank_ratio < 1:
        print("Error: --blank-ratio must be in [0, 1)", file=sys.stderr)
        return 1

    total_cells = len(args.sheets) * args.rows * (len(SAMPLE_MAPPING) + args.extra_cols)
    print("Dataset generation plan:")
    print(f"  Output file: {args.output}")
    print(f"  Sheets: {len(args.sheets)} ({', '.join(args.sheets)})")
    print(f"  Rows per sheet: {args.rows:,}")
    print(f"  Total data cells: {total_cells:,}")
    print(f"  Random seed: {args.seed}")

    if args.dry_run:
        print("\n[DRY RUN] Would generate files but not creating them.")
        return 0

    try:
        create_excel_file(args.output, args.rows, args.extra_cols, args.sheets, args.seed, args.blank_ratio)
    except OSError as e:
        print(f"\nError generating dataset: {e}", file=sys.stderr)
        return 1
    print("\nDataset generation completed successfully!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
