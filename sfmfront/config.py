"""
Configuration management for sfmfront
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SFMFRONT_CONFIG"

DEFAULT_CONFIG = {
    "detection": {
        "detector": "sift",
        "min_keypoints": 10,
        "sift": {
            "nfeatures": 0,
            "nOctaveLayers": 3,
            "contrastThreshold": 0.04,
            "edgeThreshold": 10,
            "sigma": 1.6
        },
        "orb": {
            "nfeatures": 1000,
            "scaleFactor": 1.2,
            "nlevels": 8,
            "edgeThreshold": 31,
            "patchSize": 31
        },
        "akaze": {
            "threshold": 0.001,
            "nOctaves": 4,
            "nOctaveLayers": 4
        }
    },
    "matching": {
        "metric": "auto"
    },
    "geometry": {
        "backend": "opencv",
        "ransac_threshold": 3.0,
        "confidence": 0.99,
        "max_iters": 2000,
        "refine": False,
        "random_seed": None
    },
    "pipeline": {
        "num_workers": 4
    },
    "logging": {
        "configure": False,
        "level": "INFO",
        "log_file": None
    }
}


def merge_config(overrides: Dict[str, Any], base: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Deep-merge ``overrides`` over ``base`` (defaults when omitted) into a new dict."""
    merged = copy.deepcopy(DEFAULT_CONFIG if base is None else base)

    def _recursive_merge(source: Dict[str, Any], destination: Dict[str, Any]) -> Dict[str, Any]:
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(destination.get(key), dict):
                destination[key] = _recursive_merge(value, destination[key])
            else:
                destination[key] = copy.deepcopy(value)
        return destination

    return _recursive_merge(overrides or {}, merged)


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file merged over the defaults.

    Args:
        config_path: Path to a YAML file. Falls back to the SFMFRONT_CONFIG
                     environment variable, then to the defaults alone.

    Returns:
        Complete configuration dictionary
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)

    if config_path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    config_path = Path(config_path)
    if not config_path.exists():
        logger.warning(f"Config file {config_path} not found. Using default settings.")
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_path, 'r') as f:
        overrides = yaml.safe_load(f)

    if overrides is not None and not isinstance(overrides, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    return merge_config(overrides or {})


def get_value(config: Dict[str, Any], key: str, default: Any = None) -> Any:
    """Look up a nested value with dot notation, e.g. ``"geometry.ransac_threshold"``."""
    value = config
    for part in key.split('.'):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return default
    return value
