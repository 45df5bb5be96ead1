"""
Host configuration and logging setup.

Configuration is a plain dict. Hosts start from DEFAULT_CONFIG and override
what they need:

    config = load_config({"components": [{"name": "room", "threshold_duration": 30}]})
    registry = ComponentRegistry.from_config(config)
"""

import copy
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "components": [
        {"name": "event"},
        {"name": "room"},
        {"name": "variable"},
    ],
    "logging": {
        "levels": {
            "default": "debug",
        },
    },
}


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Merge overrides into base (dicts recursively, everything else replaced)."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build a configuration from the defaults plus overrides.

    Lists (such as "components") are replaced, not appended to.

    Args:
        overrides: Partial configuration

    Returns:
        A new configuration dict
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if overrides:
        config = _deep_merge(config, overrides)
    return config


def _parse_level(level: Any) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def configure_logging(config: Dict[str, Any], root: str = "home_scenarios") -> None:
    """
    Apply the "logging.levels" section of a configuration.

    "default" sets the level of the package logger; any other key is taken
    as a logger name relative to the package (e.g., "core.bus").

    Args:
        config: Configuration dict
        root: Package logger name
    """
    levels = config.get("logging", {}).get("levels", {})

    for name, level in levels.items():
        logger_name = root if name == "default" else f"{root}.{name}"
        logging.getLogger(logger_name).setLevel(_parse_level(level))
        logger.debug(f"Log level for {logger_name}: {level}")
