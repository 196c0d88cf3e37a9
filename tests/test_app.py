"""
Tests for the application wiring
=================================
"""

import numpy as np
import pytest

from gesture_keyboard.app import KeyboardApplication, build_parser, create_app_config, main
from gesture_keyboard.control.text_buffer import TextBuffer
from gesture_keyboard.core.events import Events
from gesture_keyboard.utils.config import DEFAULTS


class TestKeyboardApplication:
    """Frame handling without camera or detector."""

    @pytest.fixture
    def app(self):
        return KeyboardApplication(create_app_config(DEFAULTS))

    def test_demo_mode_types_into_buffer(self, app, hand):
        for i in range(4):
            app.process_hand(hand("index"), i * 0.1)
        assert app.buffer.text == "A"
        assert app.action_logger.total_actions == 1
        assert app.feedback.command_text() == "A"

    def test_demo_sink_is_buffer(self, app):
        assert isinstance(app.sink, TextBuffer)

    def test_malformed_frame_skipped(self, app):
        assert app.process_hand([(0.5, 0.5)] * 3, 0.0) is None

    def test_action_applied_event(self, app, hand):
        applied = []
        app.engine.event_bus.subscribe(Events.ACTION_APPLIED, lambda action: applied.append(action.name))
        for i in range(4):
            app.process_hand(hand("index", "middle", "ring", "pinky"), i * 0.1)
        assert applied == ["SPACE"]

    def test_hand_lost_resets_feedback(self, app, hand):
        for i in range(4):
            app.process_hand(hand("ring"), i * 0.1)
        app.process_hand(None, 0.5)
        assert app.feedback.command_text() == "-"

    def test_keys(self, app):
        app.buffer.append_character("A")
        assert app._handle_key(13) is False
        assert app.buffer.text == "A\n"
        app._handle_key(ord("c"))
        assert app.buffer.text == ""
        assert app._handle_key(ord("q")) is True
        assert app._handle_key(27) is True

    def test_draw_overlay(self, app, hand):
        display = np.zeros((480, 640, 3), dtype=np.uint8)
        app.process_hand(hand("index"), 0.0)
        app._draw(display, hand("index"), 0.0)
        assert display.any()


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.mode is None
        assert args.debug is False

    def test_options(self):
        args = build_parser().parse_args(["--mode", "type", "--config", "x.yaml", "-d", "--log-file", "k.log"])
        assert (args.mode, args.config, args.debug, args.log_file) == ("type", "x.yaml", True, "k.log")

    def test_invalid_mode(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--mode", "dictate"])


class TestMain:
    """Startup failures are reported, not raised."""

    @pytest.fixture(autouse=True)
    def keep_test_logging(self, monkeypatch):
        monkeypatch.setattr("gesture_keyboard.app.setup_logging", lambda **kwargs: None)

    def test_invalid_yaml(self, tmp_path, caplog):
        path = tmp_path / "config.yaml"
        path.write_text("debounce: [unclosed\n")

        assert main(["--config", str(path)]) == 1
        assert "Invalid configuration" in caplog.text

    def test_invalid_debounce_values(self, tmp_path, caplog):
        path = tmp_path / "config.yaml"
        path.write_text("debounce:\n  required_consecutive: 0\n")

        assert main(["--config", str(path)]) == 1
        assert "required_consecutive" in caplog.text

    def test_camera_failure(self, tmp_path, monkeypatch):
        monkeypatch.setattr(KeyboardApplication, "start", lambda self: False)
        assert main(["--config", str(tmp_path / "missing.yaml")]) == 1
