# Shared pytest fixtures
from __future__ import annotations

import io
import tempfile
import zipfile
from pathlib import Path
from xml.sax.saxutils import escape

import pytest

from xlsx_entities.logging.init import reset_logging

MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
WORKSHEET_REL = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/worksheet"


def _col_letters(index: int) -> str:
    letters = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


class XlsxBuilder:
    """Builds minimal .xlsx packages in memory, part by part.

    Low level: ``cell``/``row``/``sheet_xml``/``package``.
    High level: ``workbook({"Sheet1": [[...], ...]})`` interns str values into
    the shared string table and writes one worksheet part per sheet.
    """

    @staticmethod
    def cell(value: str | None = None, t: str | None = None, ref: str | None = None) -> str:
        attrs = ""
        if ref is not None:
            attrs += f' r="{ref}"'
        if t is not None:
            attrs += f' t="{t}"'
        if value is None:
            return f"<c{attrs}/>"
        if t == "inlineStr":
            return f"<c{attrs}><is><t>{escape(value)}</t></is></c>"
        return f"<c{attrs}><v>{escape(value)}</v></c>"

    @staticmethod
    def row(*cells: str, r: int | None = None) -> str:
        attrs = f' r="{r}"' if r is not None else ""
        return f"<row{attrs}>{''.join(cells)}</row>"

    @staticmethod
    def sheet_xml(*rows: str) -> str:
        return f'<?xml version="1.0" encoding="UTF-8"?><worksheet xmlns="{MAIN_NS}"><sheetData>{"".join(rows)}</sheetData></worksheet>'

    @staticmethod
    def workbook_xml(sheets: list[tuple[str, str]]) -> str:
        """``sheets``: (name, relationship id) pairs in workbook order."""
        entries = "".join(
            f'<sheet name="{escape(name)}" sheetId="{i + 1}" r:id="{rid}"/>' for i, (name, rid) in enumerate(sheets)
        )
        return f'<?xml version="1.0" encoding="UTF-8"?><workbook xmlns="{MAIN_NS}" xmlns:r="{REL_NS}"><sheets>{entries}</sheets></workbook>'

    @staticmethod
    def rels_xml(targets: list[tuple[str, str]]) -> str:
        """``targets``: (relationship id, target) pairs."""
        entries = "".join(
            f'<Relationship Id="{rid}" Type="{WORKSHEET_REL}" Target="{escape(target)}"/>' for rid, target in targets
        )
        return f'<?xml version="1.0" encoding="UTF-8"?><Relationships xmlns="{PKG_REL_NS}">{entries}</Relationships>'

    @staticmethod
    def shared_strings_xml(*items: str) -> str:
        """Each item is the inner XML of one ``si`` element (use ``text_item`` for plain text)."""
        body = "".join(f"<si>{item}</si>" for item in items)
        return f'<?xml version="1.0" encoding="UTF-8"?><sst xmlns="{MAIN_NS}" count="{len(items)}" uniqueCount="{len(items)}">{body}</sst>'

    @staticmethod
    def text_item(text: str) -> str:
        return f"<t>{escape(text)}</t>"

    @staticmethod
    def package(parts: dict[str, str | bytes], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", compression) as zf:
            for name, content in parts.items():
                zf.writestr(name, content)
        return buf.getvalue()

    @staticmethod
    def damaged(package: bytes, payload: str) -> bytes:
        """Flip one byte of ``payload`` inside a stored package; the member then fails its CRC check."""
        raw = payload.encode("utf-8")
        assert package.count(raw) == 1
        pos = package.index(raw) + len(raw) // 2
        return package[:pos] + bytes([package[pos] ^ 0x01]) + package[pos + 1 :]

    def workbook(
        self,
        sheets: dict[str, list[list[object]]],
        *,
        shared: bool = True,
        include_shared_strings: bool = True,
    ) -> bytes:
        """Package with one worksheet per entry. None values become empty cells."""
        strings: list[str] = []
        index: dict[str, int] = {}
        parts: dict[str, str | bytes] = {}
        refs: list[tuple[str, str]] = []
        targets: list[tuple[str, str]] = []

        for n, (name, rows) in enumerate(sheets.items(), start=1):
            xml_rows = []
            for r, values in enumerate(rows, start=1):
                cells = []
                for c, value in enumerate(values):
                    ref = f"{_col_letters(c)}{r}"
                    if value is None:
                        cells.append(self.cell(None, ref=ref))
                    elif isinstance(value, bool):
                        cells.append(self.cell("1" if value else "0", t="b", ref=ref))
                    elif isinstance(value, str) and shared:
                        if value not in index:
                            index[value] = len(strings)
                            strings.append(value)
                        cells.append(self.cell(str(index[value]), t="s", ref=ref))
                    elif isinstance(value, str):
                        cells.append(self.cell(value, t="inlineStr", ref=ref))
                    else:
                        cells.append(self.cell(str(value), ref=ref))
                xml_rows.append(self.row(*cells, r=r))
            parts[f"xl/worksheets/sheet{n}.xml"] = self.sheet_xml(*xml_rows)
            refs.append((name, f"rId{n}"))
            targets.append((f"rId{n}", f"worksheets/sheet{n}.xml"))

        parts["xl/workbook.xml"] = self.workbook_xml(refs)
        parts["xl/_rels/workbook.xml.rels"] = self.rels_xml(targets)
        if include_shared_strings and strings:
            parts["xl/sharedStrings.xml"] = self.shared_strings_xml(*(self.text_item(s) for s in strings))
        return self.package(parts)


@pytest.fixture()
def xlsx() -> XlsxBuilder:
    return XlsxBuilder()


@pytest.fixture(autouse=True)
def _reset_app_logger():
    # The app logger stops propagation once configured; restore it so caplog sees records
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        # set first so teardown also removes a value loaded from .env
        monkeypatch.setenv("XLSX_ENTITIES_CONFIG", "")
        monkeypatch.delenv("XLSX_ENTITIES_CONFIG")
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """entity: person
sheet_index: 0
has_header: true
column_mapping:
  myId: id
  Name of the Person: name
  Date of birth: date_of_birth
  The Job Title: job_title
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "reader.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def person_rows() -> list[list[object]]:
    return [
        ["myId", "Name of the Person", "Date of birth", "The Job Title"],
        [1, "Alice", 44197, "Engineer"],
        [2, "Bob", 32874, "Designer"],
        [3, "Carol", 29221.5, "Manager"],
    ]


@pytest.fixture()
def person_workbook(temp_workdir: Path, xlsx: XlsxBuilder, person_rows: list[list[object]]) -> Path:
    path = temp_workdir / "data" / "people.xlsx"
    path.write_bytes(xlsx.workbook({"People": person_rows}))
    return path
