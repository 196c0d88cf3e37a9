"""
Shared domain types for the Touchless Virtual Keyboard.

Centralizes enums, landmark containers and action types used across modules
so that the recognition core never has to import the MediaPipe wrapper.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from .exceptions import MalformedFrameError

NUM_LANDMARKS = 21


# =============================================================================
# Landmarks
# =============================================================================

class LandmarkIndex(IntEnum):
    """Hand landmark indices following MediaPipe convention."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


# (tip, pip) per finger, in the order FingerState stores them
FINGER_JOINTS: Dict[str, Tuple[LandmarkIndex, LandmarkIndex]] = {
    "index": (LandmarkIndex.INDEX_TIP, LandmarkIndex.INDEX_PIP),
    "middle": (LandmarkIndex.MIDDLE_TIP, LandmarkIndex.MIDDLE_PIP),
    "ring": (LandmarkIndex.RING_TIP, LandmarkIndex.RING_PIP),
    "pinky": (LandmarkIndex.PINKY_TIP, LandmarkIndex.PINKY_PIP),
}


class Landmark(NamedTuple):
    """A single landmark point with normalized coordinates."""
    x: float  # 0.0 to 1.0, normalized by image width
    y: float  # 0.0 to 1.0, normalized by image height, origin top-left
    z: float = 0.0  # Depth relative to wrist

    def to_pixel(self, width: int, height: int) -> Tuple[int, int]:
        """Convert normalized coordinates to pixel coordinates."""
        return (int(self.x * width), int(self.y * height))


def to_landmark(point: Any) -> Landmark:
    """Coerce a point into a Landmark.

    Accepts Landmark instances, (x, y) / (x, y, z) sequences, ``{"x", "y"}``
    mappings, and objects exposing ``.x``/``.y`` (and optionally ``.z``) such
    as MediaPipe's NormalizedLandmark.

    Raises:
        MalformedFrameError: if the coordinates cannot be read as numbers
    """
    if isinstance(point, Landmark):
        return point
    try:
        if isinstance(point, Mapping):
            return Landmark(float(point["x"]), float(point["y"]), float(point.get("z") or 0.0))
        if hasattr(point, "x") and hasattr(point, "y"):
            return Landmark(float(point.x), float(point.y), float(getattr(point, "z", 0.0) or 0.0))
        coords = [float(c) for c in point]
    except (KeyError, TypeError, ValueError):
        raise MalformedFrameError(f"Cannot read coordinates from {point!r}") from None
    if len(coords) < 2:
        raise MalformedFrameError(f"Landmark needs at least x and y, got {point!r}")
    return Landmark(*coords[:3])


@dataclass
class HandLandmarks:
    """One hand's 21 landmarks for a single frame.

    Immutable by convention: produced by the detector and read by the
    recognition core.
    """
    landmarks: List[Landmark]
    handedness: str = "Right"  # "Left" or "Right"
    confidence: float = 1.0

    def __post_init__(self):
        if len(self.landmarks) < NUM_LANDMARKS:
            raise MalformedFrameError(
                f"Hand frame has {len(self.landmarks)} landmarks, expected {NUM_LANDMARKS}",
                landmark_count=len(self.landmarks),
            )

    def get(self, index: LandmarkIndex) -> Landmark:
        """Get landmark by index."""
        return self.landmarks[index]


# =============================================================================
# Gestures & Actions
# =============================================================================

class Gesture(Enum):
    """Symbolic hand shapes recognized by the classifier.

    NONE means a hand is present but its finger pattern is not mapped;
    an absent hand is represented by ``None`` at the engine boundary.
    """
    SPACE = "SPACE"
    BACKSPACE = "BACKSPACE"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"
    G = "G"
    H = "H"
    I = "I"  # noqa: E741
    J = "J"
    NONE = "NONE"


# Legend shown on the overlay, in classifier priority order
GESTURE_LEGEND: Dict[Gesture, str] = {
    Gesture.SPACE: "Open palm",
    Gesture.BACKSPACE: "Fist",
    Gesture.D: "Index+Middle+Ring",
    Gesture.C: "Index+Middle+Ring (+Pinky)",
    Gesture.F: "Middle+Ring+Pinky",
    Gesture.B: "Index+Middle",
    Gesture.E: "Index+Ring",
    Gesture.G: "Middle+Ring",
    Gesture.A: "Index",
    Gesture.H: "Middle",
    Gesture.I: "Ring",
    Gesture.J: "Pinky",
}


@dataclass(frozen=True)
class KeyAction:
    """A committed text-editing command emitted by the debouncer."""
    gesture: Gesture
    timestamp: float

    def __post_init__(self):
        if self.gesture is Gesture.NONE:
            raise ValueError("KeyAction cannot carry Gesture.NONE")

    @property
    def name(self) -> str:
        return self.gesture.value

    @property
    def text(self) -> str:
        """Character typed by this action ("" for BACKSPACE)."""
        if self.gesture is Gesture.SPACE:
            return " "
        if self.gesture is Gesture.BACKSPACE:
            return ""
        return self.gesture.value

    def __repr__(self):
        return f"KeyAction({self.gesture.value}, t={self.timestamp:.3f})"


def first_hand(hands: Optional[Sequence[Any]]) -> Optional[Any]:
    """Pick the single hand the engine consumes from a detector result."""
    if not hands:
        return None
    return hands[0]
