"""
Touchless Virtual Keyboard - Main Application
===============================================

Entry point. Wires camera -> MediaPipe -> keyboard engine -> text sinks and
draws the overlay.
"""

import argparse
import logging
import signal
from dataclasses import dataclass, field
from typing import Optional

import cv2

from .capture.camera import Camera, CameraConfig
from .control.keystroke_sink import KeystrokeSink, KeystrokeSinkConfig
from .control.sinks import ActionSink, MultiSink, apply_action
from .control.text_buffer import TextBuffer
from .core.engine import KeyboardEngine
from .core.events import Events
from .core.exceptions import ConfigError, MalformedFrameError
from .core.types import KeyAction, first_hand
from .detection.hand_detector import HandDetector, HandDetectorConfig
from .recognition.debouncer import DebounceConfig
from .utils.config import load_config
from .utils.feedback import FeedbackManager
from .utils.logger import ActionLogger, setup_logging
from .utils.performance import PerformanceMonitor
from .utils.visualization import Visualizer, VisualizerConfig

logger = logging.getLogger(__name__)

MODES = ("demo", "type")


@dataclass
class AppConfig:
    """Application configuration container."""
    camera: CameraConfig
    mediapipe: HandDetectorConfig
    debounce: DebounceConfig
    keystrokes: KeystrokeSinkConfig
    visualization: VisualizerConfig
    feedback: dict = field(default_factory=dict)
    mode: str = "demo"
    max_length: int = 2000


def create_app_config(config_dict: dict) -> AppConfig:
    """Create AppConfig from a (merged) configuration dictionary."""
    output = config_dict.get("output", {})
    return AppConfig(
        camera=CameraConfig.from_dict(config_dict.get("camera", {})),
        mediapipe=HandDetectorConfig.from_dict(config_dict.get("mediapipe", {})),
        debounce=DebounceConfig.from_dict(config_dict.get("debounce", {})),
        keystrokes=KeystrokeSinkConfig.from_dict(output.get("keystrokes", {})),
        visualization=VisualizerConfig.from_dict(config_dict.get("visualization", {})),
        feedback=config_dict.get("feedback", {}),
        mode=output.get("mode", "demo"),
        max_length=output.get("max_length", 2000),
    )


class KeyboardApplication:
    """
    Camera-driven virtual keyboard.

    Modes:
    - demo: actions only edit the on-screen text buffer
    - type: actions are also typed into the focused window via xdotool
    """

    def __init__(self, config: AppConfig):
        self.config = config

        self.camera = Camera(config.camera)
        self.detector = HandDetector(config.mediapipe)
        self.engine = KeyboardEngine(config.debounce)
        self.buffer = TextBuffer(max_length=config.max_length)
        self.feedback = FeedbackManager.from_dict(config.feedback)
        self.visualizer = Visualizer(config.visualization)
        self.performance = PerformanceMonitor()
        self.action_logger = ActionLogger()

        self._keystrokes: Optional[KeystrokeSink] = None
        self._running = False
        self._mode = config.mode if config.mode in MODES else "demo"

        bus = self.engine.event_bus
        bus.subscribe(Events.ACTION_EMITTED, self.action_logger.on_action)
        bus.subscribe(Events.HAND_LOST, lambda timestamp: self.feedback.on_hand_lost())

    @property
    def sink(self) -> ActionSink:
        if self._mode == "type":
            if self._keystrokes is None:
                self._keystrokes = KeystrokeSink(self.config.keystrokes)
            return MultiSink(self.buffer, self._keystrokes)
        return self.buffer

    def start(self) -> bool:
        """Start camera and detector."""
        logger.info("Starting virtual keyboard (%s mode)...", self._mode)

        if not self.camera.start():
            logger.error("Failed to start camera")
            return False

        if not self.detector.start():
            logger.error("Failed to start hand detector")
            self.camera.stop()
            return False

        self._running = True
        return True

    def stop(self) -> None:
        self._running = False
        self.camera.stop()
        self.detector.stop()
        cv2.destroyAllWindows()
        logger.info("Virtual keyboard stopped")

    def run(self) -> bool:
        """Run until quit. Returns False if startup failed."""
        if not self.start():
            return False

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        try:
            self._main_loop()
        finally:
            self.stop()
            logger.info("Typed %d actions. Final text: %r",
                        self.action_logger.total_actions, self.buffer.text)
        return True

    def _main_loop(self) -> None:
        while self._running:
            frame = self.camera.read()
            if frame is None:
                if self._handle_key(cv2.waitKey(1) & 0xFF):
                    break
                continue

            self.performance.tick()

            with self.performance.measure("detection"):
                hands = self.detector.detect(frame.rgb, frame.timestamp_ms)

            hand = first_hand(hands)
            with self.performance.measure("engine"):
                action = self.process_hand(hand, frame.timestamp)

            display = frame.image.copy()
            self._draw(display, hand, frame.timestamp)
            cv2.imshow(self.config.visualization.window_name, display)

            if action is not None:
                logger.debug("Buffer: %r", self.buffer.text)

            if self._handle_key(cv2.waitKey(1) & 0xFF):
                break

    def process_hand(self, hand, now: float) -> Optional[KeyAction]:
        """Feed one frame to the engine and apply any resulting action."""
        try:
            action = self.engine.on_frame(hand, now)
        except MalformedFrameError as e:
            logger.error("Skipping malformed frame: %s", e)
            return None

        if action is not None:
            if apply_action(self.sink, action):
                self.engine.event_bus.emit(Events.ACTION_APPLIED, action=action)
            else:
                self.engine.event_bus.emit(Events.ACTION_FAILED, action=action)
            self.feedback.trigger(action, now)
        return action

    def _draw(self, display, hand, now: float) -> None:
        engine = self.engine
        if hand is not None:
            self.visualizer.draw_hand(display, hand)
            self.visualizer.draw_gesture_label(display, hand, engine.last_gesture)

        self.visualizer.draw_status(
            display,
            self.feedback.status_text(engine.hand_present, now),
            engine.hand_present,
            command=self.feedback.command_text(),
            command_scale=self.feedback.command_scale(now),
        )
        self.visualizer.draw_progress(display, engine.debouncer.progress, engine.cooldown_remaining(now))
        self.visualizer.draw_legend(display, self.feedback.highlighted_gesture(engine.last_gesture, now))
        self.visualizer.draw_text(display, self.buffer.text)
        self.visualizer.draw_fps(display, self.performance.fps)

    def _handle_key(self, key: int) -> bool:
        """Handle a keyboard key. Returns True when the app should quit."""
        if key in (ord("q"), 27):
            return True
        if key == 13:
            self.buffer.append_newline()
        elif key == ord("c"):
            self.buffer.clear()
            logger.info("Text buffer cleared")
        elif key == ord("m"):
            self._mode = "type" if self._mode == "demo" else "demo"
            logger.info("Switched to %s mode", self._mode)
        elif key == ord("p"):
            print(self.performance.get_report())
        return False

    def _signal_handler(self, signum, frame) -> None:
        logger.info("Received signal %d, shutting down...", signum)
        self._running = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gesture-keyboard",
        description="Touchless virtual keyboard driven by hand gestures",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Gestures (fingers up, thumb ignored):
  open palm -> SPACE        fist -> BACKSPACE
  index -> A   index+middle -> B   index+middle+ring -> D
  index+ring -> E   middle+ring+pinky -> F   middle+ring -> G
  middle -> H   ring -> I   pinky -> J

Keyboard Controls:
  q/ESC     - Quit
  Enter     - Newline
  c         - Clear text
  m         - Toggle demo/type mode
  p         - Print performance report
        """
    )
    parser.add_argument("--mode", "-m", choices=MODES, default=None,
                        help="Output mode (default: from config)")
    parser.add_argument("--config", "-c", default=None,
                        help="Path to configuration file (default: config/config.yaml)")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", default=None, help="Also log to this rotating file")
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config_dict = load_config(args.config)
    except ConfigError as e:
        setup_logging(level="DEBUG" if args.debug else "INFO", log_file=args.log_file)
        logger.error("Invalid configuration: %s", e)
        return 1

    log_cfg = config_dict.get("logging", {})
    setup_logging(
        level="DEBUG" if args.debug else log_cfg.get("level", "INFO"),
        log_file=args.log_file or log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    try:
        app_config = create_app_config(config_dict)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    if args.mode:
        app_config.mode = args.mode

    return 0 if KeyboardApplication(app_config).run() else 1
