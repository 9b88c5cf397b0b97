# services/config.py

"""
Loads the application configuration from configs/app.yaml.

Values from the YAML file are merged over DEFAULT_CONFIG, so the file only
needs the keys it wants to change. When the file is missing the defaults are
used as-is.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "app.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "app": {"name": "Disease Prediction & Outbreak Analysis", "page_icon": "🩺"},
    "prediction": {"top_n": 3, "clamp_probability": False},
    "logging": {"log_file": "logs/prediction_history.log", "level": "INFO"},
    "reports": {"output_dir": "reports"},
}


class ConfigError(ValueError):
    """Raised when the config file cannot be used."""


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Read the YAML config and merge it over the defaults.

    Args:
        path (str | Path, optional): Config file. Defaults to CONFIG_PATH.

    Returns:
        Dict[str, Any]: The merged configuration.

    Raises:
        ConfigError: If the file is not valid YAML or does not hold a mapping.
    """
    config_path = Path(path) if path else CONFIG_PATH
    if not config_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")

    return _deep_merge(DEFAULT_CONFIG, data)


def log_level(config: Dict[str, Any]) -> int:
    """Translate the configured level name (e.g. 'DEBUG') to a logging constant."""
    name = str(config.get("logging", {}).get("level", "INFO")).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
