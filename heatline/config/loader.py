from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from heatline.models.config_models import OVERLAP_REJECT, PipelineConfig

"""Config loader.

Responsibilities:
- Load the YAML config (``config/heatline.yml`` by default)
- Validate it against ``contracts/config_schema.json``
- Apply defaults for absent keys
"""

# heatline/config/loader.py -> heatline/config -> heatline -> repo_root
_repo_root = Path(__file__).parent.parent.parent
SCHEMA_PATH = _repo_root / "contracts" / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/heatline.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or not JSON, or data fails validation
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


def _parse_default_date(raw: str | None) -> date | None:
    if raw is None:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError as e:
        raise ConfigError(f"invalid default_date: {raw}") from e


def load_config(path: Path | None = None, *, required: bool = True) -> PipelineConfig:
    """Load the pipeline config.

    A missing file raises ConfigError when ``required`` is true, otherwise
    the defaults are returned.
    """
    path = path if path is not None else DEFAULT_CONFIG_PATH
    if not path.exists():
        if required:
            raise ConfigError(f"config file not found: {path}")
        return PipelineConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")
    # YAML は 2025-01-01 を date として読むため文字列へ戻す
    if isinstance(data.get("default_date"), date):
        data["default_date"] = data["default_date"].isoformat()

    _validate_config_schema(data)

    return PipelineConfig(
        overlap_policy=data.get("overlap_policy", OVERLAP_REJECT),
        production_day_start_hour=data.get("production_day_start_hour", 8),
        default_date=_parse_default_date(data.get("default_date")),
        error_log_dir=data.get("error_log_dir", "./logs"),
    )
