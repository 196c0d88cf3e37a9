"""
Keyboard engine: the per-frame extract -> classify -> debounce cycle.

Architecture:
    landmarks -> extract() -> FingerState -> GestureClassifier -> Gesture
    -> GestureDebouncer -> Optional[KeyAction]

One call to :meth:`KeyboardEngine.on_frame` per camera frame, run to
completion before the next. The engine never sleeps; cooldowns are
timestamp comparisons. It is not thread-safe: frames from several producers
must go through a single owner such as :class:`core.dispatcher.FrameDispatcher`.
"""

import logging
import time
from typing import Callable, Optional

from ..recognition.debouncer import DebounceConfig, DebounceState, GestureDebouncer
from ..recognition.finger_state import FingerState, LandmarkFrame, extract
from ..recognition.gesture_classifier import GestureClassifier
from .events import EventBus, Events
from .types import Gesture, KeyAction

logger = logging.getLogger(__name__)


class FrameResult:
    """What the engine saw on the most recent frame."""

    __slots__ = (
        "timestamp", "hand_present", "finger_state", "gesture",
        "action", "progress", "frame_id",
    )

    def __init__(self, timestamp: float = 0.0, frame_id: int = 0):
        self.timestamp = timestamp
        self.frame_id = frame_id
        self.hand_present = False
        self.finger_state: Optional[FingerState] = None
        self.gesture: Optional[Gesture] = None
        self.action: Optional[KeyAction] = None
        self.progress = 0.0

    def __repr__(self):
        gesture = self.gesture.value if self.gesture else "-"
        return f"FrameResult(#{self.frame_id}, hand={self.hand_present}, gesture={gesture})"


class KeyboardEngine:
    """
    Converts hand landmark frames into debounced key actions.

    Example:
        >>> engine = KeyboardEngine()
        >>> action = engine.on_frame(hand_landmarks)   # or None for no hand
        >>> if action:
        ...     apply_action(text_buffer, action)
    """

    def __init__(
        self,
        config: Optional[DebounceConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        event_bus: Optional[EventBus] = None,
        classifier: Optional[GestureClassifier] = None,
    ):
        self.config = config or DebounceConfig()
        self._clock = clock
        self._bus = event_bus or EventBus()
        self._classifier = classifier or GestureClassifier()
        self._debouncer = GestureDebouncer(self.config)

        self._frame_count = 0
        self._action_count = 0
        self._hand_present = False
        self._last_result = FrameResult()

    def on_frame(self, landmarks: Optional[LandmarkFrame], now: Optional[float] = None) -> Optional[KeyAction]:
        """
        Process one frame.

        Args:
            landmarks: 21 landmarks of the tracked hand, or None if no hand
            now: Frame timestamp in seconds; read from the clock when omitted

        Returns:
            The KeyAction committed on this frame, if any

        Raises:
            MalformedFrameError: if ``landmarks`` has fewer than 21 points
        """
        if now is None:
            now = self._clock()
        self._frame_count += 1
        result = FrameResult(timestamp=now, frame_id=self._frame_count)

        if landmarks is None:
            self._debouncer.update(None, now)
            if self._hand_present:
                self._hand_present = False
                self._bus.emit(Events.HAND_LOST, timestamp=now)
            self._last_result = result
            return None

        finger_state = extract(landmarks)
        gesture = self._classifier.classify(finger_state)

        if not self._hand_present:
            self._hand_present = True
            self._bus.emit(Events.HAND_DETECTED, timestamp=now)

        action = self._debouncer.update(gesture, now)

        result.hand_present = True
        result.finger_state = finger_state
        result.gesture = gesture
        result.action = action
        result.progress = self._debouncer.progress
        self._last_result = result

        self._bus.emit(Events.GESTURE_DETECTED, gesture=gesture,
                       finger_state=finger_state, timestamp=now)
        if action is not None:
            self._action_count += 1
            self._bus.emit(Events.ACTION_EMITTED, action=action)

        return action

    def reset(self) -> None:
        """Forget all debounce state, including the cooldown timestamp."""
        self._debouncer.reset()
        self._hand_present = False
        self._last_result = FrameResult()
        logger.debug("Engine reset")

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    @property
    def debouncer(self) -> GestureDebouncer:
        return self._debouncer

    @property
    def state(self) -> DebounceState:
        return self._debouncer.peek_state()

    @property
    def last_result(self) -> FrameResult:
        return self._last_result

    @property
    def last_gesture(self) -> Optional[Gesture]:
        return self._last_result.gesture

    @property
    def hand_present(self) -> bool:
        return self._hand_present

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def action_count(self) -> int:
        return self._action_count

    def cooldown_remaining(self, now: Optional[float] = None) -> float:
        return self._debouncer.cooldown_remaining(self._clock() if now is None else now)
