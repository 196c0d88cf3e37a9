"""Gesture recognition: finger states, rule table, debouncing."""
from .debouncer import DebounceConfig, DebounceState, GestureDebouncer
from .finger_state import FingerState, extract
from .gesture_classifier import GESTURE_RULES, GestureClassifier, GestureRule, classify

__all__ = [
    "DebounceConfig",
    "DebounceState",
    "GestureDebouncer",
    "FingerState",
    "extract",
    "GESTURE_RULES",
    "GestureClassifier",
    "GestureRule",
    "classify",
]
