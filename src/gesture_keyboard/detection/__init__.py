"""Hand detection module using MediaPipe."""
from .hand_detector import HandDetector, HandDetectorConfig

__all__ = ["HandDetector", "HandDetectorConfig"]
