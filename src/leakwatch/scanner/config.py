# SPDX-License-Identifier: MIT
"""
Scanner configuration loader for leakwatch.
"""
from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from leakwatch.core.exceptions import LeakwatchConfigError

logger = logging.getLogger(__name__)

CONFIG_NAMES = (".leakwatch.yml", ".leakwatch.yaml")

DEFAULT_CONFIG: Dict[str, Any] = {
    "disabled_detectors": [],
    "store_path": ".leakwatch/findings.json",
    "log_level": "INFO",
    "validators": {
        "allow_network": True,
        "timeout": 10.0,
        "qps": 0,
    },
    "source_maps": {
        "enabled": True,
        "timeout": 10.0,
    },
}

# section -> expected types of its known keys
_SECTION_TYPES = {
    "validators": {"allow_network": (bool,), "timeout": (int, float), "qps": (int, float)},
    "source_maps": {"enabled": (bool,), "timeout": (int, float)},
}


def load_scanner_config(config_path: Optional[str] = None, root: str = ".") -> Dict[str, Any]:
    """
    Load scanner configuration following the search order.

    Args:
        config_path: Explicit config path from --config CLI flag
        root: Directory searched for .leakwatch.yml/.leakwatch.yaml

    Returns:
        Dictionary containing scanner configuration

    Raises:
        LeakwatchConfigError: If config file is malformed or explicitly provided config is missing
    """
    # 1. If CLI --config provided -> load it
    if config_path:
        config_abs_path = Path(config_path).resolve()
        if not config_abs_path.exists():
            raise LeakwatchConfigError(
                f"Specified config file not found: {config_abs_path}",
                config_path=str(config_abs_path),
            )
        return _load_yaml_config(config_abs_path)

    # 2. Look for .leakwatch.yml or .leakwatch.yaml under root
    root_path = Path(root).resolve()
    for config_name in CONFIG_NAMES:
        config_file = root_path / config_name
        if config_file.exists():
            return _load_yaml_config(config_file)

    # 3. Use built-in defaults
    logger.debug("Using default scanner config")
    return get_default_scanner_config()


def _load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """Load and validate a YAML config file."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise LeakwatchConfigError(f"Failed to parse config file: {e}", config_path=str(config_path)) from e

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise LeakwatchConfigError("Config must be a mapping", config_path=str(config_path))

    config = _apply_scanner_defaults(config)
    validate_scanner_config(config, config_path=str(config_path))
    logger.info("Loaded config: %s", config_path)
    return config


def _apply_scanner_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill missing keys, including missing keys of known sections."""
    merged = get_default_scanner_config()
    for key, value in config.items():
        if key in _SECTION_TYPES and isinstance(value, dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def validate_scanner_config(config: Dict[str, Any], config_path: Optional[str] = None) -> None:
    """Raise ``LeakwatchConfigError`` for wrongly typed known keys."""
    disabled = config.get("disabled_detectors")
    if not isinstance(disabled, list) or not all(isinstance(d, str) for d in disabled):
        raise LeakwatchConfigError(
            "disabled_detectors must be a list of detector names",
            config_path=config_path,
            section="disabled_detectors",
        )
    for key in ("store_path", "log_level"):
        if not isinstance(config.get(key), str):
            raise LeakwatchConfigError(f"{key} must be a string", config_path=config_path, section=key)

    for section, types in _SECTION_TYPES.items():
        values = config.get(section)
        if not isinstance(values, dict):
            raise LeakwatchConfigError(f"{section} must be a mapping", config_path=config_path, section=section)
        for key, expected in types.items():
            value = values.get(key)
            # bool is an int subclass; numbers must not be booleans
            if not isinstance(value, expected) or (bool not in expected and isinstance(value, bool)):
                raise LeakwatchConfigError(
                    f"{section}.{key} has invalid type {type(value).__name__}",
                    config_path=config_path,
                    section=section,
                )


def get_default_scanner_config() -> Dict[str, Any]:
    """
    Get the default scanner configuration.

    Returns:
        Dictionary with default scanner settings
    """
    return copy.deepcopy(DEFAULT_CONFIG)


def create_default_config_template() -> str:
    """
    Create a minimal .leakwatch.yml template with commented examples.

    Returns:
        YAML string with default configuration template
    """
    return """# leakwatch configuration
# Controls which credential families are scanned and how they are validated

# Detector ids (family names) to skip
disabled_detectors: []
  # Examples:
  # - "DeepAI"
  # - "Apollo"

# Where scan results are merged and persisted
store_path: ".leakwatch/findings.json"

# DEBUG, INFO, WARNING or ERROR
log_level: "INFO"

validators:
  # Set to false to skip every provider call (all candidates become invalid)
  allow_network: true
  # Per-request timeout in seconds
  timeout: 10.0
  # Requests per second per validator, 0 = unlimited
  qps: 0

source_maps:
  # Resolve secrets to original sources through sourceMappingURL
  enabled: true
  timeout: 10.0
"""
