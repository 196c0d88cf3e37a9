"""
Frame dispatcher: serializes frames from any number of producers onto one
engine.

Producers call :meth:`FrameDispatcher.submit` from whatever thread they run
on. A single worker thread owns the engine and the sink, so debounce state
only ever has one writer. The input queue is bounded; when it is full the
oldest pending frame is dropped, since a stale frame is worth less than the
newest one.
"""

import logging
import queue
import threading
from typing import Optional

from ..control.sinks import ActionSink, apply_action
from .engine import KeyboardEngine
from .events import Events
from .types import KeyAction

logger = logging.getLogger(__name__)

_STOP = object()


class FrameDispatcher:
    """Single-owner worker around a KeyboardEngine.

    Example:
        >>> with FrameDispatcher(engine, TextBuffer()) as dispatcher:
        ...     dispatcher.submit(landmarks, timestamp)
    """

    def __init__(self, engine: KeyboardEngine, sink: Optional[ActionSink] = None, max_queue: int = 2):
        if max_queue < 1:
            raise ValueError("max_queue must be at least 1")
        self._engine = engine
        self._sink = sink
        self._queue: "queue.Queue" = queue.Queue(maxsize=max_queue)
        self._put_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._running = False

        self._dropped = 0
        self._processed = 0
        self._errors = 0

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(target=self._worker, name="frame-dispatcher", daemon=True)
        self._thread.start()
        logger.info("Frame dispatcher started (queue=%d)", self._queue.maxsize)

    def stop(self, timeout: float = 1.0) -> None:
        """Process frames already queued, then stop the worker.

        If the queue is full the oldest pending frame makes room for the
        stop marker, so this never blocks on a stalled worker.
        """
        with self._put_lock:
            if not self._running:
                return
            self._running = False
            self._put_dropping_oldest(_STOP)
        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Frame dispatcher worker did not exit within %.1fs", timeout)
            self._thread = None
        logger.info("Frame dispatcher stopped (processed=%d, dropped=%d, errors=%d)",
                    self._processed, self._dropped, self._errors)

    def submit(self, landmarks, timestamp: Optional[float] = None) -> bool:
        """
        Queue a frame without blocking.

        Returns:
            False if an older pending frame had to be dropped to make room
        """
        with self._put_lock:
            if not self._running:
                raise RuntimeError("FrameDispatcher is not running; call start() first")
            return not self._put_dropping_oldest((landmarks, timestamp))

    def _put_dropping_oldest(self, item) -> bool:
        """Enqueue ``item``, evicting pending frames while full. Caller holds ``_put_lock``."""
        dropped = False
        while True:
            try:
                self._queue.put_nowait(item)
                return dropped
            except queue.Full:
                try:
                    self._queue.get_nowait()
                    self._queue.task_done()
                    self._dropped += 1
                    dropped = True
                except queue.Empty:
                    pass

    def join(self) -> None:
        """Block until every queued frame has been processed."""
        self._queue.join()

    def _worker(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                landmarks, timestamp = item
                self._process(landmarks, timestamp)
            finally:
                self._queue.task_done()

    def _process(self, landmarks, timestamp: Optional[float]) -> None:
        try:
            action = self._engine.on_frame(landmarks, timestamp)
        except ValueError as e:
            # Malformed frames are the producer's bug; keep serving the others
            self._errors += 1
            logger.error("Rejected frame: %s", e)
            return
        self._processed += 1
        if action is not None and self._sink is not None:
            self._apply(action)

    def _apply(self, action: KeyAction) -> None:
        bus = self._engine.event_bus
        try:
            ok = apply_action(self._sink, action)
        except Exception as e:
            self._errors += 1
            logger.error("Sink %s raised on %s: %s", type(self._sink).__name__, action.name, e)
            ok = False
        bus.emit(Events.ACTION_APPLIED if ok else Events.ACTION_FAILED, action=action)

    @property
    def dropped_frames(self) -> int:
        return self._dropped

    @property
    def processed_frames(self) -> int:
        return self._processed

    @property
    def error_count(self) -> int:
        return self._errors

    @property
    def is_running(self) -> bool:
        return self._running

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
