from __future__ import annotations

import json

import pytest

from xlsx_entities.models.error_record import GLOBAL_READ_FAILURE, DiagnosticRecord


def test_create_stamps_utc_timestamp():
    rec = DiagnosticRecord.create("book.xlsx", "Sheet1", 7, GLOBAL_READ_FAILURE, "mismatched tag")
    assert rec.timestamp.endswith("Z")
    assert "+00:00" not in rec.timestamp


def test_json_line_has_exact_keys_and_keeps_unicode():
    rec = DiagnosticRecord.create("名簿.xlsx", "シート", -1, GLOBAL_READ_FAILURE, "読み込み失敗")
    line = rec.to_json_line()
    assert "\n" not in line
    data = json.loads(line)
    assert list(data.keys()) == ["timestamp", "file", "sheet", "row", "error_type", "message"]
    assert data["file"] == "名簿.xlsx"
    assert "名簿" in line


def test_record_is_frozen():
    rec = DiagnosticRecord.create("a.xlsx", "S", 1, GLOBAL_READ_FAILURE, "m")
    with pytest.raises(AttributeError):
        rec.row = 2  # type: ignore[misc]
