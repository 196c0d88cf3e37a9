"""Shared types, engine and event plumbing."""
from .exceptions import ConfigError, KeyboardError, MalformedFrameError
from .events import EventBus, Events
from .types import Gesture, HandLandmarks, KeyAction, Landmark, LandmarkIndex

__all__ = [
    "ConfigError",
    "KeyboardError",
    "MalformedFrameError",
    "EventBus",
    "Events",
    "Gesture",
    "HandLandmarks",
    "KeyAction",
    "Landmark",
    "LandmarkIndex",
]
