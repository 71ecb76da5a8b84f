from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

import pandas as pd  # type: ignore

from xlsx_entities.cli.__main__ import main as cli_main

"""Integration: successful multi-file CLI run over a data directory."""

SUMMARY_RE = re.compile(
    r"^SUMMARY\s+files=(\d+)/(\d+)\s+success=(\d+)\s+failed=(\d+)\s+"
    r"rows=(\d+)\s+elapsed_sec=(\d+\.?\d*)\s+throughput_rps=(\d+\.?\d*)$",
    re.MULTILINE,
)


def _write_people(path: Path, count: int, offset: int) -> Path:
    df = pd.DataFrame(
        {
            "myId": [offset + i for i in range(count)],
            "Name of the Person": [f"Person {offset + i}" for i in range(count)],
            "Date of birth": [datetime(1980 + i % 30, 1 + i % 12, 1) for i in range(count)],
            "The Job Title": ["Engineer" if i % 2 else "Teacher" for i in range(count)],
        }
    )
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="People", index=False)
    return path


def test_multi_file_run_success(write_config, temp_workdir: Path, capsys):
    _write_people(temp_workdir / "data" / "a.xlsx", 4, 1)
    _write_people(temp_workdir / "data" / "b.xlsx", 6, 100)

    exit_code = cli_main(["data"])
    output = capsys.readouterr().out

    assert exit_code == 0, output
    match = SUMMARY_RE.search(output)
    assert match is not None, f"SUMMARY line not found or malformed in output: {output}"
    total, detected, success, failed, rows, _elapsed, _throughput = match.groups()
    assert (int(total), int(detected), int(success), int(failed), int(rows)) == (2, 2, 2, 0, 10)
    assert "ERROR" not in output
    assert "WARN" not in output
    assert not list((temp_workdir / "logs").glob("*.log"))
