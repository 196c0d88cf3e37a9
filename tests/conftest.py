"""
Shared fixtures: synthetic hand frames and a controllable clock.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gesture_keyboard.core.types import HandLandmarks, Landmark  # noqa: E402

FINGERS = ("index", "middle", "ring", "pinky")


def create_mock_landmarks(*fingers_up: str, base_x: float = 0.5, base_y: float = 0.8) -> HandLandmarks:
    """
    Build a 21-point hand with the named fingers extended upward.

    Each finger gets MCP, PIP, DIP, TIP points; an extended finger's tip sits
    well above its PIP joint, a curled one's tip folds back below it.
    """
    unknown = set(fingers_up) - set(FINGERS)
    assert not unknown, f"unknown fingers {unknown}"

    landmarks = [Landmark(x=base_x, y=base_y, z=0.0)]  # Wrist

    # Thumb (1-4), irrelevant to the keyboard
    for i in range(1, 5):
        landmarks.append(Landmark(x=base_x - 0.04 * i, y=base_y - 0.03 * i, z=0.0))

    for offset, finger in zip((-0.06, -0.02, 0.02, 0.06), FINGERS):
        up = finger in fingers_up
        x = base_x + offset
        landmarks.append(Landmark(x=x, y=base_y - 0.20, z=0.0))                     # MCP
        landmarks.append(Landmark(x=x, y=base_y - 0.28, z=0.0))                     # PIP
        landmarks.append(Landmark(x=x, y=base_y - (0.34 if up else 0.24), z=0.0))   # DIP
        landmarks.append(Landmark(x=x, y=base_y - (0.40 if up else 0.22), z=0.0))   # TIP

    return HandLandmarks(landmarks=landmarks)


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def hand():
    """Factory fixture: ``hand("index", "middle")``."""
    return create_mock_landmarks


@pytest.fixture
def clock():
    return FakeClock()
