# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader: reads YAML from disk and produces a validated, frozen RelpackConfig.

The loading pipeline is linear:
  1. Read the file
  2. Parse as YAML into a plain dict
  3. Hand the dict to pydantic for schema validation
  4. Return the frozen config object

Any failure stops the run before a single archive is written.
"""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from relpack.config.exceptions import ConfigLoadError, ConfigValidationError
from relpack.config.schema import RelpackConfig


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed dict.

    An empty file is treated as an empty mapping, so every section falls back
    to its defaults.

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't a YAML mapping.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


def load_config(config_path: Optional[Path] = None) -> RelpackConfig:
    """
    Load, validate, and freeze a config file into a RelpackConfig object.

    Args:
        config_path: Path to a YAML config file, or None for all defaults.

    Returns:
        A fully validated, frozen RelpackConfig instance.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations (wrong types, unknown keys).
    """
    if config_path is None:
        return RelpackConfig()

    raw_data = _read_yaml_file(config_path)

    try:
        config = RelpackConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(
            f"Config validation failed for {config_path}:\n{err}"
        ) from err

    return config
