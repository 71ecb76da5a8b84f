from __future__ import annotations

import argparse
import dataclasses
import os
import sys
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from xlsx_entities.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config, resolve_entity
from xlsx_entities.excel.reader import SourceNotFound, read_entities
from xlsx_entities.logging.error_log import DiagnosticLog
from xlsx_entities.logging.init import log_summary, setup_logging
from xlsx_entities.models.config_models import ReaderConfig
from xlsx_entities.models.entity import schema_for
from xlsx_entities.services.orchestrator import ProcessingError, read_all, scan_workbooks
from xlsx_entities.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (python-dotenv), then the YAML reader config
- Expand PATHS (files, or directories scanned for .xlsx)
- Read every workbook into entities, print the SUMMARY line
- Flush recovered failures to logs/diagnostics-*.log

Exit codes: 0 all files read, 2 at least one file failed, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CONFIG_ENV_VAR = "XLSX_ENTITIES_CONFIG"
INSPECT_ROWS = 5


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv; a missing file is not an error."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="python -m xlsx_entities.cli",
        description="Read .xlsx worksheets into typed entities",
    )
    p.add_argument("paths", nargs="*", type=Path, help="Workbook files or directories containing .xlsx files")
    p.add_argument("--config", type=Path, default=None, help=f"Reader config (default: ${CONFIG_ENV_VAR} or {DEFAULT_CONFIG_PATH})")
    p.add_argument("--sheet-index", type=int, default=None, help="Override the configured 0-based sheet index")
    p.add_argument("--no-header", action="store_true", help="Treat the first row as data")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print the first entities of each file as a table then exit")
    return p.parse_args(argv)


def _config_path(args: argparse.Namespace) -> Path:
    if args.config is not None:
        return args.config
    env_path = os.getenv(CONFIG_ENV_VAR)
    return Path(env_path) if env_path else DEFAULT_CONFIG_PATH


def _apply_overrides(cfg: ReaderConfig, args: argparse.Namespace) -> ReaderConfig:
    changes: dict[str, object] = {}
    if args.sheet_index is not None:
        changes["sheet_index"] = args.sheet_index
    if args.no_header:
        changes["has_header"] = False
    return dataclasses.replace(cfg, **changes) if changes else cfg


def _expand_paths(paths: list[Path]) -> list[Path]:
    """Directories become their .xlsx files; files are kept as given (missing ones included)."""
    expanded: list[Path] = []
    for path in paths:
        if path.is_dir():
            expanded.extend(scan_workbooks(path))
        else:
            expanded.append(path)
    return expanded


def _inspect_data(files: list[Path], cfg: ReaderConfig) -> int:
    entity_type = resolve_entity(cfg)
    schema = schema_for(entity_type)
    for f in files:
        print(f"FILE: {f.name}")
        try:
            items = read_entities(
                f,
                entity_type,
                cfg.sheet_index,
                cfg.has_header,
                cfg.column_mapping,
                honor_cell_references=cfg.honor_cell_references,
                culture=cfg.culture,
            )
        except SourceNotFound as e:
            print(f"  read_error: {e}")
            continue
        frame = pd.DataFrame(
            [{d.name: d.get(item) for d in schema.fields} for item in items[:INSPECT_ROWS]],
            columns=schema.field_names,
        )
        print(f"  rows={len(items)} fields={schema.field_names}")
        print(frame.to_string(index=False) if not frame.empty else "  (no rows)")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only read sys.argv when argv is None; an explicit [] means "no arguments"
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        logger = setup_logging(debug=True)
        logger.debug("debug mode enabled")

    config_path = _config_path(args)
    try:
        cfg = _apply_overrides(load_config(config_path), args)
        resolve_entity(cfg)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        files = _expand_paths(args.paths)
    except ProcessingError as e:
        logger.error(str(e))
        return EXIT_FATAL
    if not files:
        logger.error("no input workbooks")
        return EXIT_FATAL

    logger.info(f"Reading {len(files)} workbook(s) as '{cfg.entity}' (sheet_index={cfg.sheet_index})")

    if args.inspect_data:
        return _inspect_data(files, cfg)

    diagnostics = DiagnosticLog()
    try:
        result = read_all(files, cfg, diagnostics)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if len(diagnostics):
        try:
            log_path = diagnostics.flush()
            logger.info(f"diagnostics written to {log_path}")
        except OSError as e:
            logger.warning(f"failed to write diagnostics log: {e}")

    summary_line = render_summary_line(result)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
