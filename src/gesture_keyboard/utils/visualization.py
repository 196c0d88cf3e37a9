"""
Visualization Module
=====================

On-frame overlay for the virtual keyboard: hand skeleton, gesture label,
debounce progress, gesture legend and the typed text.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from ..core.types import GESTURE_LEGEND, Gesture, HandLandmarks, LandmarkIndex


@dataclass
class VisualizerConfig:
    """Visualization settings."""
    show_landmarks: bool = True
    show_connections: bool = True
    show_gesture_label: bool = True
    show_legend: bool = True
    show_fps: bool = True
    window_name: str = "Touchless Virtual Keyboard"

    # Colors (BGR)
    landmark_color: Tuple[int, int, int] = (198, 78, 255)    # Pink
    connection_color: Tuple[int, int, int] = (255, 229, 0)   # Cyan
    text_color: Tuple[int, int, int] = (255, 255, 255)
    active_color: Tuple[int, int, int] = (255, 229, 0)
    ok_color: Tuple[int, int, int] = (0, 200, 0)
    warning_color: Tuple[int, int, int] = (0, 0, 255)

    font_scale: float = 0.6
    font_thickness: int = 1

    @classmethod
    def from_dict(cls, config: dict) -> "VisualizerConfig":
        """Create config from dictionary."""
        return cls(
            show_landmarks=config.get("show_landmarks", True),
            show_connections=config.get("show_connections", True),
            show_gesture_label=config.get("show_gesture_label", True),
            show_legend=config.get("show_legend", True),
            show_fps=config.get("show_fps", True),
            window_name=config.get("window_name", "Touchless Virtual Keyboard"),
        )


class Visualizer:
    """
    Draws keyboard overlays on BGR camera frames.

    Example:
        >>> viz = Visualizer(VisualizerConfig())
        >>> viz.draw_hand(frame.image, hand)
        >>> viz.draw_gesture_label(frame.image, hand, engine.last_gesture)
        >>> viz.draw_legend(frame.image, feedback.highlighted_gesture(engine.last_gesture))
    """

    HAND_CONNECTIONS = [
        (0, 1), (1, 2), (2, 3), (3, 4),        # Thumb
        (0, 5), (5, 6), (6, 7), (7, 8),        # Index
        (5, 9), (9, 10), (10, 11), (11, 12),   # Middle
        (9, 13), (13, 14), (14, 15), (15, 16), # Ring
        (13, 17), (17, 18), (18, 19), (19, 20), # Pinky
        (0, 17),                               # Palm base
    ]

    def __init__(self, config: Optional[VisualizerConfig] = None):
        self.config = config or VisualizerConfig()
        self._font = cv2.FONT_HERSHEY_SIMPLEX

    def draw_hand(self, image: np.ndarray, hand: HandLandmarks) -> np.ndarray:
        """Draw landmarks and connections."""
        height, width = image.shape[:2]

        if self.config.show_connections:
            for start_idx, end_idx in self.HAND_CONNECTIONS:
                start = hand.get(LandmarkIndex(start_idx)).to_pixel(width, height)
                end = hand.get(LandmarkIndex(end_idx)).to_pixel(width, height)
                cv2.line(image, start, end, self.config.connection_color, 2)

        if self.config.show_landmarks:
            for lm in hand.landmarks:
                cv2.circle(image, lm.to_pixel(width, height), 4, self.config.landmark_color, -1)

        return image

    def draw_gesture_label(self, image: np.ndarray, hand: HandLandmarks,
                           gesture: Optional[Gesture]) -> np.ndarray:
        """Draw the gesture name in a dark box just above the wrist."""
        if not self.config.show_gesture_label or gesture in (None, Gesture.NONE):
            return image

        height, width = image.shape[:2]
        wx, wy = hand.get(LandmarkIndex.WRIST).to_pixel(width, height)
        y = wy - 15

        cv2.rectangle(image, (wx - 45, y - 24), (wx + 50, y + 4), (0, 0, 0), -1)
        cv2.putText(image, gesture.value, (wx - 38, y - 4),
                    self._font, 0.6, self.config.active_color, 2)
        return image

    def draw_status(self, image: np.ndarray, status: str, hand_present: bool,
                    command: str = "-", command_scale: float = 1.0) -> np.ndarray:
        """Draw hand status and the last executed command (top-left)."""
        color = self.config.ok_color if hand_present else self.config.warning_color
        cv2.putText(image, status, (10, 25), self._font, self.config.font_scale, color, 2)

        scale = self.config.font_scale * command_scale
        cv2.putText(image, f"Command: {command}", (10, 55), self._font, scale,
                    self.config.text_color, 2)
        return image

    def draw_progress(self, image: np.ndarray, progress: float, cooldown_remaining: float = 0.0) -> np.ndarray:
        """Debounce streak progress bar under the status lines."""
        x, y, w, h = 10, 70, 150, 8
        cv2.rectangle(image, (x, y), (x + w, y + h), (80, 80, 80), 1)
        fill = int(w * max(0.0, min(1.0, progress)))
        color = self.config.warning_color if cooldown_remaining > 0 else self.config.ok_color
        if fill:
            cv2.rectangle(image, (x, y), (x + fill, y + h), color, -1)
        return image

    def draw_legend(self, image: np.ndarray, active: Optional[Gesture]) -> np.ndarray:
        """Gesture -> command legend on the right, active entry highlighted."""
        if not self.config.show_legend:
            return image

        height, width = image.shape[:2]
        x = width - 260
        y = 25
        for gesture, pose in GESTURE_LEGEND.items():
            is_active = gesture is active
            color = self.config.active_color if is_active else self.config.text_color
            thickness = 2 if is_active else 1
            cv2.putText(image, f"{gesture.value:>9}  {pose}", (x, y),
                        self._font, 0.45, color, thickness)
            y += 18
        return image

    def draw_text(self, image: np.ndarray, text: str, max_chars: int = 48) -> np.ndarray:
        """Typed text on a dark strip along the bottom edge."""
        height, width = image.shape[:2]
        line = text.rsplit("\n", 1)[-1][-max_chars:]

        cv2.rectangle(image, (0, height - 40), (width, height), (30, 30, 30), -1)
        cv2.putText(image, line + "_", (10, height - 12), self._font, 0.8,
                    self.config.text_color, 2)
        return image

    def draw_fps(self, image: np.ndarray, fps: float) -> np.ndarray:
        if not self.config.show_fps:
            return image
        height, width = image.shape[:2]
        color = self.config.ok_color if fps >= 20 else self.config.warning_color
        cv2.putText(image, f"FPS: {fps:.1f}", (10, height - 50), self._font, 0.5, color, 1)
        return image
