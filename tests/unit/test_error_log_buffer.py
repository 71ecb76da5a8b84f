from __future__ import annotations

import json
from pathlib import Path

from xlsx_entities.logging.error_log import DiagnosticLog, DiagnosticRecord
from xlsx_entities.models.error_record import MISSING_PART, ROW_FAILURE

KEYS = {"timestamp", "file", "sheet", "row", "error_type", "message"}


def test_record_appends_in_memory_only(temp_workdir: Path):
    log = DiagnosticLog()
    rec = log.record("f.xlsx", MISSING_PART, "part 'xl/workbook.xml' not found")
    assert rec.sheet == "<PACKAGE>"
    assert rec.row == -1
    assert len(log) == 1
    assert list(log) == [rec]
    assert not any((temp_workdir / "logs").iterdir())


def test_flush_writes_json_lines(temp_workdir: Path):
    log = DiagnosticLog()
    log.append(DiagnosticRecord.create("f1.xlsx", "S", 3, ROW_FAILURE, "boom"))
    log.record("f1.xlsx", MISSING_PART, "no sheet", sheet="S")
    path = log.flush()
    assert path.exists()
    assert path.parent == Path("./logs")
    assert path.name.startswith("diagnostics-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == KEYS
    assert len(log) == 0


def test_multiple_flushes_append_to_same_file(tmp_path: Path):
    log = DiagnosticLog(logs_dir=tmp_path / "custom")
    log.record("f.xlsx", ROW_FAILURE, "first", row=2)
    path = log.flush()
    size1 = path.stat().st_size
    log.record("f.xlsx", ROW_FAILURE, "second", row=5)
    path2 = log.flush()
    assert path == path2
    assert path2.stat().st_size > size1


def test_count_by_error_type():
    log = DiagnosticLog()
    log.record("a.xlsx", ROW_FAILURE, "x", row=2)
    log.record("a.xlsx", ROW_FAILURE, "y", row=3)
    log.record("a.xlsx", MISSING_PART, "z")
    assert log.count(ROW_FAILURE) == 2
    assert log.count(MISSING_PART) == 1
    assert log.count("UNKNOWN") == 0
