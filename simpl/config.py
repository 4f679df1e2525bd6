"""simpl Configuration: project-level .simplrc.yml support.

Loads configuration from .simplrc.yml (or .simplrc.yaml, .simplrc.json)
found by walking up from the working directory.

Example .simplrc.yml:
    prelude: true        # start from the built-in environment
    format: json         # "pretty" or "json"
    annotate: false      # print every sub-expression's type
    log_level: DEBUG
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml


_FORMATS = ("pretty", "json")


class ConfigError(Exception):
    """A configuration file exists but cannot be used."""


@dataclass
class SimplConfig:
    """Project-level simpl configuration."""
    prelude: bool = False
    format: str = "pretty"
    annotate: bool = False
    log_level: str = "WARNING"


# ---------------------------------------------------------------------------
# Config file names (in priority order)
# ---------------------------------------------------------------------------

_CONFIG_FILES = [
    ".simplrc.yml",
    ".simplrc.yaml",
    ".simplrc.json",
]


def find_config(start_dir: str = ".") -> Optional[str]:
    """Find the nearest config file by walking up from start_dir."""
    current = os.path.abspath(start_dir)
    while True:
        for name in _CONFIG_FILES:
            path = os.path.join(current, name)
            if os.path.isfile(path):
                return path
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Optional[str] = None, start_dir: str = ".") -> SimplConfig:
    """Load configuration from a file.

    If no path is given, searches for a config file starting from start_dir.
    If no config file is found, returns defaults.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return SimplConfig()

    try:
        with open(path, "r") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e

    try:
        if path.endswith(".json"):
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot parse {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return _dict_to_config(data)


def _flag(data: Dict[str, Any], key: str) -> bool:
    value = data[key]
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


def _dict_to_config(data: Dict[str, Any]) -> SimplConfig:
    """Convert a parsed dict to SimplConfig."""
    config = SimplConfig()

    if "prelude" in data:
        config.prelude = _flag(data, "prelude")
    if "format" in data:
        fmt = str(data["format"])
        if fmt not in _FORMATS:
            raise ConfigError(f"format must be one of {', '.join(_FORMATS)}, got '{fmt}'")
        config.format = fmt
    if "annotate" in data:
        config.annotate = _flag(data, "annotate")
    if "log_level" in data:
        config.log_level = str(data["log_level"]).upper()

    return config
