"""
Gesture Debouncer
==================

Turns the per-frame gesture stream into rate-limited key actions.

A gesture is committed once it has been classified identically on
``required_consecutive`` frames in a row and at least ``action_cooldown``
seconds have passed since the previous commit. After a commit the
candidate is cleared, so holding a pose types one character and the user has
to re-enter the pose (count rebuilds from 1) to type it again.

The debouncer owns its state. Run one instance per input stream and drive it
from a single thread.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from ..core.exceptions import ConfigError
from ..core.types import Gesture, KeyAction

logger = logging.getLogger(__name__)


@dataclass
class DebounceConfig:
    """Debouncer tunables."""
    required_consecutive: int = 4   # Identical frames needed to confirm a gesture
    action_cooldown: float = 0.8    # Seconds between committed actions
    reset_after_action: bool = True  # Clear the candidate on every commit

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if (isinstance(self.required_consecutive, bool)
                or not isinstance(self.required_consecutive, int)
                or self.required_consecutive < 1):
            raise ConfigError(
                f"required_consecutive must be a positive integer, got {self.required_consecutive!r}")
        if not isinstance(self.action_cooldown, (int, float)) or self.action_cooldown < 0:
            raise ConfigError(
                f"action_cooldown must be a non-negative number of seconds, got {self.action_cooldown!r}")

    @classmethod
    def from_dict(cls, config: dict) -> "DebounceConfig":
        """Create config from dictionary. ``action_cooldown_ms`` wins over ``action_cooldown``."""
        if "action_cooldown_ms" in config:
            cooldown = config["action_cooldown_ms"] / 1000.0
        else:
            cooldown = config.get("action_cooldown", 0.8)
        return cls(
            required_consecutive=config.get("required_consecutive", 4),
            action_cooldown=cooldown,
            reset_after_action=config.get("reset_after_action", True),
        )


@dataclass
class DebounceState:
    """Mutable per-stream debounce state."""
    candidate: Optional[Gesture] = None       # None: nothing accumulated
    count: int = 0
    last_action_time: Optional[float] = None  # None: no action committed yet

    def clear_candidate(self) -> None:
        self.candidate = None
        self.count = 0


class GestureDebouncer:
    """
    Stability + cooldown gate between the classifier and the action sink.

    Example:
        >>> debouncer = GestureDebouncer(DebounceConfig())
        >>>
        >>> while running:
        ...     gesture = classify(extract(hand)) if hand else None
        ...     action = debouncer.update(gesture, time.monotonic())
        ...     if action:
        ...         apply_action(sink, action)
    """

    def __init__(self, config: Optional[DebounceConfig] = None):
        self.config = config or DebounceConfig()
        self._state = DebounceState()

    def update(self, gesture: Optional[Gesture], now: float) -> Optional[KeyAction]:
        """
        Advance the state machine by one frame.

        Args:
            gesture: Classified gesture, or None when no hand was observed
            now: Monotonic timestamp of the frame in seconds

        Returns:
            KeyAction if the gesture is committed on this frame, else None
        """
        state = self._state

        if gesture is None:
            if state.candidate is not None:
                logger.debug("Hand lost, dropping candidate %s (count=%d)",
                             state.candidate.value, state.count)
            state.clear_candidate()
            return None

        if gesture == state.candidate:
            state.count += 1
        else:
            state.candidate = gesture
            state.count = 1

        if gesture is Gesture.NONE:
            return None
        if state.count < self.config.required_consecutive:
            return None
        if not self._cooldown_elapsed(now):
            return None

        action = KeyAction(gesture=gesture, timestamp=now)
        state.last_action_time = now
        if self.config.reset_after_action:
            state.clear_candidate()

        logger.info("Action committed: %s", gesture.value)
        return action

    def _cooldown_elapsed(self, now: float) -> bool:
        last = self._state.last_action_time
        return last is None or (now - last) >= self.config.action_cooldown

    def reset(self) -> None:
        """Return to the startup state, forgetting the last action time too."""
        self._state = DebounceState()
        logger.debug("Debouncer reset")

    def peek_state(self) -> DebounceState:
        """Copy of the current state for inspection."""
        return replace(self._state)

    @property
    def candidate(self) -> Optional[Gesture]:
        return self._state.candidate

    @property
    def count(self) -> int:
        return self._state.count

    @property
    def last_action_time(self) -> Optional[float]:
        return self._state.last_action_time

    @property
    def progress(self) -> float:
        """Fraction of the required streak accumulated (0.0-1.0)."""
        if self._state.candidate in (None, Gesture.NONE):
            return 0.0
        return min(1.0, self._state.count / self.config.required_consecutive)

    def cooldown_remaining(self, now: float) -> float:
        """Seconds until another action may be committed."""
        last = self._state.last_action_time
        if last is None:
            return 0.0
        return max(0.0, self.config.action_cooldown - (now - last))
