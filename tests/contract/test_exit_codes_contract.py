from __future__ import annotations

from pathlib import Path

from xlsx_entities.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL, main as cli_main

"""Exit code contract: 0 all files read, 2 some files failed, 1 fatal."""


def test_exit_code_values():
    assert (EXIT_SUCCESS_ALL, EXIT_FATAL, EXIT_PARTIAL_FAILURE) == (0, 1, 2)


def test_exit_zero_when_every_file_is_read(write_config, person_workbook: Path):
    assert cli_main([str(person_workbook)]) == EXIT_SUCCESS_ALL


def test_exit_two_when_all_files_fail(write_config, temp_workdir: Path):
    (temp_workdir / "data" / "x.xlsx").write_bytes(b"junk")
    assert cli_main(["data"]) == EXIT_PARTIAL_FAILURE


def test_exit_one_on_invalid_config(write_config):
    write_config.write_text("entity: person\nsheet_index: many\n", encoding="utf-8")
    assert cli_main(["data"]) == EXIT_FATAL


def test_recovered_problems_do_not_fail_a_file(write_config, temp_workdir: Path, xlsx):
    # no worksheet part for the only sheet: empty result, MISSING_PART diagnostic, still a success
    (temp_workdir / "data" / "hollow.xlsx").write_bytes(
        xlsx.package({
            "xl/workbook.xml": xlsx.workbook_xml([("S", "rId1")]),
            "xl/_rels/workbook.xml.rels": xlsx.rels_xml([("rId1", "worksheets/sheet1.xml")]),
        })
    )
    assert cli_main(["data"]) == EXIT_SUCCESS_ALL
