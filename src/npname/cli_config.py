"""CLI defaults loaded from a YAML file.

Command-line flags have the highest precedence; values from the file only
fill options that were not given on the command line, and built-in
constants fill whatever is left.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml

from .constants import Constants
from .models import NpnameError

logger = logging.getLogger(__name__)

# file key -> (args attribute, expected type)
CONFIG_KEYS = {
    "registry": ("REGISTRY", str),
    "timeout": ("TIMEOUT", int),
    "concurrency": ("CONCURRENCY", int),
    "json": ("JSON", bool),
    "quiet": ("QUIET", bool),
}


class ConfigFileError(NpnameError):
    """The CLI config file is missing, unreadable or malformed."""


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load CLI defaults from a YAML file.

    Args:
        config_path: Path to the YAML file, or None.

    Returns:
        Mapping of recognized keys to values; unknown keys are ignored.

    Raises:
        ConfigFileError: The file cannot be read or has the wrong shape.
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        raise ConfigFileError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigFileError(f"Failed to load config {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigFileError(f"Config file {config_path} must contain a mapping")

    config: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in CONFIG_KEYS:
            logger.warning("Ignoring unknown config key: %s", key)
            continue
        _, expected = CONFIG_KEYS[key]
        if expected is int and isinstance(value, bool):
            raise ConfigFileError(f"Config key '{key}' must be an integer")
        if not isinstance(value, expected):
            raise ConfigFileError(f"Config key '{key}' must be of type {expected.__name__}")
        config[key] = value
    return config


def apply_config(args, config: Dict[str, Any]) -> None:
    """Fill unset CLI options from ``config`` and then from built-in defaults."""
    for key, (attr, _) in CONFIG_KEYS.items():
        if getattr(args, attr, None) is None and key in config:
            setattr(args, attr, config[key])
            logger.debug("Using %s=%r from config file", key, config[key])

    if getattr(args, "TIMEOUT", None) is None:
        args.TIMEOUT = Constants.DEFAULT_TIMEOUT_MS
    if getattr(args, "CONCURRENCY", None) is None:
        args.CONCURRENCY = Constants.DEFAULT_CONCURRENCY
    if getattr(args, "JSON", None) is None:
        args.JSON = False
    if getattr(args, "QUIET", None) is None:
        args.QUIET = False
