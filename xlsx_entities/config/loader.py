from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from xlsx_entities.models.config_models import CultureSettings, ReaderConfig
from xlsx_entities.models.entity import entity_type_by_name

"""Config loader.

Responsibilities:
- Load the YAML reader configuration (default config/reader.yml)
- Validate it against contracts/reader_config_schema.json
- Apply defaults and build a frozen ReaderConfig
- Resolve the configured entity name to a registered type
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "resolve_entity",
]

# Schema ships inside the package: xlsx_entities/config/loader.py -> xlsx_entities/contracts
SCHEMA_PATH = Path(__file__).resolve().parent.parent / "contracts" / "reader_config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/reader.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: the schema file is missing or unreadable, or the data
            violates it (missing keys, wrong types, unknown keys)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _culture(raw: dict[str, Any] | None) -> CultureSettings:
    defaults = CultureSettings()
    if not raw:
        return defaults
    return CultureSettings(
        decimal_separator=raw.get("decimal_separator", defaults.decimal_separator),
        group_separator=raw.get("group_separator", defaults.group_separator),
        dayfirst=raw.get("dayfirst", defaults.dayfirst),
        date_formats=tuple(raw.get("date_formats") or ()),
    )


def load_config(path: Path) -> ReaderConfig:
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    culture = _culture(data.get("culture"))
    if culture.group_separator and culture.group_separator == culture.decimal_separator:
        raise ConfigError("culture: group_separator must differ from decimal_separator")

    return ReaderConfig(
        entity=data["entity"],
        sheet_index=data.get("sheet_index", 0),
        has_header=data.get("has_header", True),
        honor_cell_references=data.get("honor_cell_references", False),
        column_mapping=dict(data.get("column_mapping") or {}),
        culture=culture,
    )


def resolve_entity(config: ReaderConfig) -> type:
    """Entity class registered under ``config.entity``.

    Raises:
        ConfigError: no entity is registered under that name
    """
    try:
        return entity_type_by_name(config.entity)
    except KeyError:
        raise ConfigError(f"unknown entity: {config.entity}") from None
