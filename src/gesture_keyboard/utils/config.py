"""
Configuration loading.

Reads a YAML file, deep-merges it over the built-in defaults and checks the
types of the fields the application relies on. Type mismatches are logged
as warnings; range checks belong to the typed config dataclasses.
"""

import copy
import logging
from pathlib import Path
from typing import Optional, Union

import yaml

from ..core.exceptions import ConfigError

logger = logging.getLogger(__name__)

_BASE_DIR = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_PATH = _BASE_DIR / "config" / "config.yaml"

DEFAULTS = {
    "camera": {
        "device_id": 0,
        "width": 640,
        "height": 480,
        "fps": 30,
        "flip_horizontal": True,
        "threaded": True,
        "warmup_frames": 5,
    },
    "mediapipe": {
        "model_path": "",
        "max_num_hands": 1,
        "min_detection_confidence": 0.75,
        "min_tracking_confidence": 0.75,
        "min_presence_confidence": 0.5,
        "running_mode": "VIDEO",
    },
    "debounce": {
        "required_consecutive": 4,
        "action_cooldown_ms": 800,
        "reset_after_action": True,
    },
    "output": {
        "mode": "demo",
        "max_length": 2000,
        "keystrokes": {
            "enabled": True,
            "space_key": "space",
            "backspace_key": "BackSpace",
            "type_delay_ms": 12,
        },
    },
    "visualization": {
        "show_landmarks": True,
        "show_connections": True,
        "show_gesture_label": True,
        "show_legend": True,
        "show_fps": True,
        "window_name": "Touchless Virtual Keyboard",
    },
    "feedback": {
        "command_pulse_ms": 200,
        "highlight_ms": 700,
    },
    "logging": {
        "level": "INFO",
        "file": None,
        "max_size_mb": 10,
        "backup_count": 3,
    },
}

# Section -> field -> expected type
_CONFIG_SCHEMA = {
    "camera": {"device_id": int, "width": int, "height": int, "fps": int},
    "mediapipe": {
        "max_num_hands": int,
        "min_detection_confidence": float,
        "min_tracking_confidence": float,
    },
    "debounce": {"required_consecutive": int, "action_cooldown_ms": float, "reset_after_action": bool},
    "output": {"mode": str, "max_length": int},
    "feedback": {"command_pulse_ms": int, "highlight_ms": int},
    "logging": {"level": str},
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(data: dict) -> list:
    """Check field types against the schema. Returns the list of warnings."""
    warnings = []
    for section_name, fields in _CONFIG_SCHEMA.items():
        section = data.get(section_name)
        if section is None:
            continue
        if not isinstance(section, dict):
            warnings.append(f"Section '{section_name}' should be a mapping, got {type(section).__name__}")
            continue
        for field_name, expected_type in fields.items():
            if field_name not in section:
                continue
            value = section[field_name]
            if expected_type is float and isinstance(value, (int, float)) and not isinstance(value, bool):
                continue
            if expected_type is int and isinstance(value, bool):
                warnings.append(f"{section_name}.{field_name}: expected int, got bool ({value!r})")
                continue
            if not isinstance(value, expected_type):
                warnings.append(
                    f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                    f"got {type(value).__name__} ({value!r})"
                )

    for w in warnings:
        logger.warning("Config validation: %s", w)
    return warnings


def load_config(path: Optional[Union[str, Path]] = None) -> dict:
    """
    Load configuration from YAML, merged over DEFAULTS.

    Args:
        path: Config file. None uses ``config/config.yaml``; a missing file
            falls back to the defaults with a warning.

    Raises:
        ConfigError: if the file is not valid YAML or not a mapping
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded config from %s", config_path)
    except FileNotFoundError:
        logger.warning("Config file not found: %s, using defaults", config_path)
        data = {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")

    merged = _deep_merge(copy.deepcopy(DEFAULTS), data)
    validate_config(merged)
    return merged

