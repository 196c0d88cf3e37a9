"""
Touchless Virtual Keyboard
===========================

Types text from hand gestures seen by a webcam.

Modules:
    - core: shared types, keyboard engine, event bus, frame dispatcher
    - recognition: finger-state extraction, gesture rules, debouncing
    - control: action sinks (text buffer, xdotool keystrokes)
    - detection: MediaPipe hand landmark detection
    - capture: camera frame acquisition
    - utils: configuration, logging, overlay, performance
"""

__version__ = "1.0.0"

from .core.engine import KeyboardEngine
from .core.types import Gesture, HandLandmarks, KeyAction, Landmark
from .recognition.debouncer import DebounceConfig

__all__ = [
    "KeyboardEngine",
    "DebounceConfig",
    "Gesture",
    "HandLandmarks",
    "KeyAction",
    "Landmark",
]
