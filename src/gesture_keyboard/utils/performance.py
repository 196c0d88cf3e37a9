"""
Frame-rate and per-stage timing for the capture loop.
"""

import logging
import time
from collections import deque
from contextlib import contextmanager
from typing import Callable, Deque, Dict, Optional

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Rolling FPS and stage latency.

    Example:
        >>> monitor = PerformanceMonitor()
        >>> while running:
        ...     monitor.tick()
        ...     with monitor.measure("detection"):
        ...         hands = detector.detect(frame.rgb)
        >>> print(monitor.get_report())
    """

    def __init__(self, window_size: int = 30, clock: Callable[[], float] = time.perf_counter):
        self.window_size = window_size
        self._clock = clock
        self._intervals: Deque[float] = deque(maxlen=window_size)
        self._stage_times: Dict[str, Deque[float]] = {}
        self._last_tick: Optional[float] = None
        self._total_frames = 0

    def tick(self) -> None:
        """Mark the arrival of a new frame."""
        now = self._clock()
        if self._last_tick is not None:
            self._intervals.append(now - self._last_tick)
        self._last_tick = now
        self._total_frames += 1

    @contextmanager
    def measure(self, stage: str):
        """Time a processing stage (e.g. "capture", "detection", "engine")."""
        start = self._clock()
        try:
            yield
        finally:
            elapsed = self._clock() - start
            self._stage_times.setdefault(stage, deque(maxlen=self.window_size)).append(elapsed)

    @property
    def fps(self) -> float:
        if not self._intervals:
            return 0.0
        avg = sum(self._intervals) / len(self._intervals)
        return 1.0 / avg if avg > 0 else 0.0

    def stage_time_ms(self, stage: str) -> float:
        times = self._stage_times.get(stage)
        if not times:
            return 0.0
        return (sum(times) / len(times)) * 1000

    @property
    def total_frames(self) -> int:
        return self._total_frames

    def get_report(self) -> str:
        lines = [
            "Performance Report",
            "=" * 40,
            f"FPS: {self.fps:.1f}",
            f"Frames: {self._total_frames}",
        ]
        if self._stage_times:
            lines.append("Per-Stage Breakdown:")
            for stage in self._stage_times:
                lines.append(f"  {stage}: {self.stage_time_ms(stage):.2f}ms")
        return "\n".join(lines)
