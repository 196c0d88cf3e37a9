"""
Finger-State Extractor
=======================

Derives an up/down flag for the four long fingers from one landmark frame.
Stateless: every call looks at a single frame only, all temporal smoothing
happens in the debouncer.
"""

from dataclasses import dataclass, fields
from typing import Any, Sequence, Tuple, Union

from ..core.exceptions import MalformedFrameError
from ..core.types import FINGER_JOINTS, NUM_LANDMARKS, HandLandmarks, to_landmark


LandmarkFrame = Union[HandLandmarks, Sequence[Any]]


@dataclass(frozen=True)
class FingerState:
    """Up/down state of each non-thumb finger for one frame."""
    index: bool = False
    middle: bool = False
    ring: bool = False
    pinky: bool = False

    @classmethod
    def from_fingers(cls, *names: str) -> "FingerState":
        """Build a state with the named fingers up, e.g. ``from_fingers("index")``."""
        valid = {f.name for f in fields(cls)}
        unknown = set(names) - valid
        if unknown:
            raise ValueError(f"Unknown finger(s): {sorted(unknown)}")
        return cls(**{name: True for name in names})

    def as_tuple(self) -> Tuple[bool, bool, bool, bool]:
        return (self.index, self.middle, self.ring, self.pinky)

    @property
    def up_count(self) -> int:
        return sum(self.as_tuple())

    def __str__(self):
        up = [f.name for f in fields(self) if getattr(self, f.name)]
        return "+".join(up) if up else "none"


def _points(frame: LandmarkFrame):
    if isinstance(frame, HandLandmarks):
        return frame.landmarks
    if frame is None:
        raise MalformedFrameError("Landmark frame is None; pass None to the engine for 'no hand'",
                                  landmark_count=0)
    try:
        count = len(frame)
    except TypeError:
        raise MalformedFrameError(f"Landmark frame is not a sequence: {type(frame).__name__}") from None
    if count < NUM_LANDMARKS:
        raise MalformedFrameError(
            f"Landmark frame has {count} points, expected {NUM_LANDMARKS}",
            landmark_count=count,
        )
    return frame


def extract(frame: LandmarkFrame) -> FingerState:
    """
    Compute the finger-state vector for one frame.

    A finger is up iff its tip is above its PIP joint, i.e. has a smaller
    normalized y (image origin is top-left).

    Args:
        frame: HandLandmarks or any sequence of 21 points

    Returns:
        FingerState for the frame

    Raises:
        MalformedFrameError: if the frame has fewer than 21 readable points
    """
    points = _points(frame)

    states = {}
    for finger, (tip_idx, pip_idx) in FINGER_JOINTS.items():
        tip = to_landmark(points[tip_idx])
        pip = to_landmark(points[pip_idx])
        states[finger] = tip.y < pip.y

    return FingerState(**states)
