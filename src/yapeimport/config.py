"""Configuration loader for the Yape importer.

Loads runtime settings (batch size, cross-batch duplicate check, database
path) from a YAML file. The report layout itself is not configurable.

Error codes owned by this module: ERR_001, ERR_002, ERR_003.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from yapeimport.errors import ConfigError, ErrorCode
from yapeimport.models import AppConfig

DEFAULT_CONFIG_PATH = Path("config") / "importer.yaml"


def load_yaml(yaml_path: Path) -> dict[str, Any]:
    """Read a YAML mapping; an empty file yields an empty dict.

    Args:
        yaml_path: Path to the YAML file.

    Returns:
        Parsed YAML data as a dict.

    Raises:
        ConfigError: ERR_002 on a syntax error or a non-mapping document.
    """
    try:
        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(
            code=ErrorCode.ERR_002,
            message=f"Invalid YAML in {yaml_path.name}: {exc}",
            path=str(yaml_path),
        ) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            code=ErrorCode.ERR_002,
            message=f"Top level of {yaml_path.name} must be a mapping",
            path=str(yaml_path),
        )
    return data


def load_config(config_path: Path) -> AppConfig:
    """Load and validate the importer settings file.

    Relative ``database_path`` values are resolved against the directory
    containing the config file's parent (the project base directory).

    Args:
        config_path: Path to importer.yaml.

    Returns:
        Validated AppConfig; keys absent from the file keep their defaults.

    Raises:
        ConfigError: ERR_001 if the file does not exist, ERR_002 on invalid
            YAML, ERR_003 on unknown keys or invalid values.
    """
    if not config_path.exists():
        raise ConfigError(
            code=ErrorCode.ERR_001,
            message=f"Config file not found: {config_path}",
            path=str(config_path),
        )

    data = load_yaml(config_path)
    try:
        config = AppConfig.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(
            code=ErrorCode.ERR_003,
            message=f"Invalid setting in {config_path.name}: {problems}",
            path=str(config_path),
        ) from exc

    if not config.database_path.is_absolute():
        base_dir = config_path.resolve().parent.parent
        config = config.model_copy(
            update={"database_path": base_dir / config.database_path}
        )
    return config
