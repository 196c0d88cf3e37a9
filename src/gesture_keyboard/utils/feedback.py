"""
Highlight-then-clear feedback timing for committed actions.

Everything is derived from the commit timestamp and the current time, so
the overlay can ask "what should be shown now" on every frame without any
timers.
"""

import time
from typing import Optional

from ..core.types import Gesture, KeyAction

NO_VALUE = "-"


class FeedbackManager:
    """Tracks the last committed action and how long to emphasise it.

    - the command label pulses (scale 1.1) for ``command_pulse`` seconds
    - the legend entry and "X -> applied" status stay for ``highlight`` seconds
    """

    def __init__(self, command_pulse: float = 0.2, highlight: float = 0.7):
        self.command_pulse = command_pulse
        self.highlight = highlight
        self._last_action: Optional[KeyAction] = None
        self._trigger_time: Optional[float] = None

    @classmethod
    def from_dict(cls, config: dict) -> "FeedbackManager":
        return cls(
            command_pulse=config.get("command_pulse_ms", 200) / 1000.0,
            highlight=config.get("highlight_ms", 700) / 1000.0,
        )

    def trigger(self, action: KeyAction, now: Optional[float] = None) -> None:
        self._last_action = action
        self._trigger_time = time.monotonic() if now is None else now

    def on_hand_lost(self) -> None:
        """The command display resets when the hand leaves the frame."""
        self._last_action = None
        self._trigger_time = None

    def _elapsed(self, now: Optional[float]) -> Optional[float]:
        if self._trigger_time is None:
            return None
        return (time.monotonic() if now is None else now) - self._trigger_time

    def command_text(self) -> str:
        return self._last_action.name if self._last_action else NO_VALUE

    def command_scale(self, now: Optional[float] = None) -> float:
        elapsed = self._elapsed(now)
        if elapsed is not None and elapsed < self.command_pulse:
            return 1.1
        return 1.0

    def is_highlighting(self, now: Optional[float] = None) -> bool:
        elapsed = self._elapsed(now)
        return elapsed is not None and elapsed < self.highlight

    def highlighted_gesture(self, detected: Optional[Gesture], now: Optional[float] = None) -> Optional[Gesture]:
        """Legend entry to highlight: the fresh action, else the live gesture."""
        if self.is_highlighting(now):
            return self._last_action.gesture
        if detected is None or detected is Gesture.NONE:
            return None
        return detected

    def status_text(self, hand_present: bool, now: Optional[float] = None) -> str:
        if self.is_highlighting(now):
            return f"{self._last_action.name} -> applied"
        return "Hand detected" if hand_present else "No hand detected"

    @property
    def last_action(self) -> Optional[KeyAction]:
        return self._last_action
