"""
Exception hierarchy for the virtual keyboard.

Only input-contract violations surface as exceptions from the recognition
core. Collaborators (camera, detector, keystroke output) log failures and
report them through return values instead.
"""


class KeyboardError(Exception):
    """Base class for all virtual keyboard errors."""


class MalformedFrameError(KeyboardError, ValueError):
    """A landmark frame does not carry the 21 points the extractor reads."""

    def __init__(self, message: str, landmark_count: int = -1):
        super().__init__(message)
        self.landmark_count = landmark_count


class ConfigError(KeyboardError, ValueError):
    """A configuration value is outside its allowed range."""
