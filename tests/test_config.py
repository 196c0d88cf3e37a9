"""
Tests for configuration loading
================================
"""

import pytest

from gesture_keyboard.app import create_app_config
from gesture_keyboard.core.exceptions import ConfigError
from gesture_keyboard.utils.config import DEFAULTS, load_config, validate_config


class TestLoadConfig:
    """YAML over defaults."""

    def test_missing_file_uses_defaults(self, tmp_path, caplog):
        with caplog.at_level("WARNING"):
            config = load_config(tmp_path / "nope.yaml")
        assert config == DEFAULTS
        assert "not found" in caplog.text

    def test_deep_merge(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("debounce:\n  required_consecutive: 6\ncamera:\n  width: 320\n")

        config = load_config(path)

        assert config["debounce"]["required_consecutive"] == 6
        assert config["debounce"]["action_cooldown_ms"] == 800
        assert config["camera"]["width"] == 320
        assert config["camera"]["height"] == 480

    def test_defaults_not_mutated(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("output:\n  keystrokes:\n    enabled: false\n")
        load_config(path)
        assert DEFAULTS["output"]["keystrokes"]["enabled"] is True

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == DEFAULTS

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("debounce: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_bundled_config_loads(self):
        config = load_config()
        assert config["debounce"]["required_consecutive"] == 4
        assert validate_config(config) == []


class TestValidateConfig:
    """Type checks produce warnings, not errors."""

    def test_wrong_type(self):
        warnings = validate_config({"camera": {"width": "wide"}})
        assert len(warnings) == 1
        assert "camera.width" in warnings[0]

    def test_int_accepted_for_float(self):
        assert validate_config({"mediapipe": {"min_detection_confidence": 1}}) == []

    def test_bool_rejected_for_int(self):
        assert validate_config({"debounce": {"required_consecutive": True}})

    def test_section_not_mapping(self):
        assert validate_config({"logging": "DEBUG"})


class TestAppConfig:
    """Typed sections built from the merged dictionary."""

    def test_create_app_config(self):
        config = create_app_config(DEFAULTS)
        assert config.debounce.required_consecutive == 4
        assert config.debounce.action_cooldown == pytest.approx(0.8)
        assert config.mode == "demo"
        assert config.keystrokes.backspace_key == "BackSpace"

    def test_invalid_debounce_section(self):
        with pytest.raises(ConfigError):
            create_app_config({"debounce": {"required_consecutive": 0}})
