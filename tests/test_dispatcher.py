"""
Tests for the Frame Dispatcher
===============================
"""

import threading

import pytest

from gesture_keyboard.control.text_buffer import TextBuffer
from gesture_keyboard.core.dispatcher import FrameDispatcher
from gesture_keyboard.core.engine import KeyboardEngine
from gesture_keyboard.core.events import Events
from gesture_keyboard.recognition.debouncer import DebounceConfig


class TestFrameDispatcher:
    """Single worker thread owns the engine."""

    @pytest.fixture
    def engine(self):
        return KeyboardEngine(DebounceConfig(action_cooldown=0.0))

    def test_frames_reach_sink(self, engine, hand):
        buffer = TextBuffer()
        with FrameDispatcher(engine, buffer, max_queue=100) as dispatcher:
            for i in range(4):
                dispatcher.submit(hand("index", "middle"), i * 0.1)
            dispatcher.join()
        assert buffer.text == "B"
        assert dispatcher.processed_frames == 4
        assert not dispatcher.is_running

    def test_submit_requires_start(self, engine, hand):
        dispatcher = FrameDispatcher(engine)
        with pytest.raises(RuntimeError):
            dispatcher.submit(hand(), 0.0)

    def test_invalid_queue_size(self, engine):
        with pytest.raises(ValueError):
            FrameDispatcher(engine, max_queue=0)

    def test_malformed_frame_counted_and_skipped(self, engine, hand):
        with FrameDispatcher(engine, TextBuffer(), max_queue=10) as dispatcher:
            dispatcher.submit([(0.1, 0.1)] * 3, 0.0)
            dispatcher.submit(hand("pinky"), 0.1)
            dispatcher.join()
        assert dispatcher.error_count == 1
        assert dispatcher.processed_frames == 1

    def test_drops_oldest_when_full(self, engine, hand):
        entered, gate = threading.Event(), threading.Event()

        def block(**kwargs):
            entered.set()
            gate.wait(timeout=2.0)

        engine.event_bus.subscribe(Events.GESTURE_DETECTED, block)

        dispatcher = FrameDispatcher(engine, max_queue=1)
        dispatcher.start()
        try:
            dispatcher.submit(hand("index"), 0.0)   # taken by the blocked worker
            assert entered.wait(timeout=2.0)
            assert dispatcher.submit(hand("index"), 0.1) is True
            assert dispatcher.submit(hand("index"), 0.2) is False
            assert dispatcher.dropped_frames == 1
        finally:
            gate.set()
            dispatcher.stop()

    def test_action_applied_event(self, engine, hand):
        applied = []
        engine.event_bus.subscribe(Events.ACTION_APPLIED, lambda action: applied.append(action))
        with FrameDispatcher(engine, TextBuffer(), max_queue=10) as dispatcher:
            for i in range(4):
                dispatcher.submit(hand(), i * 0.1)
            dispatcher.join()
        assert len(applied) == 1

    def test_stop_is_idempotent(self, engine):
        dispatcher = FrameDispatcher(engine)
        dispatcher.stop()
        dispatcher.start()
        dispatcher.start()
        dispatcher.stop()
        dispatcher.stop()
        assert not dispatcher.is_running


class BrokenSink:
    """Sink whose output device has gone away."""

    def __init__(self):
        self.calls = 0

    def append_character(self, char):
        self.calls += 1
        raise RuntimeError("sink down")

    def append_space(self):
        return self.append_character(" ")

    def delete_last_character(self):
        return self.append_character("")


class TestDispatcherFailures:
    """The worker survives misbehaving sinks and never wedges shutdown."""

    @pytest.fixture
    def engine(self):
        return KeyboardEngine(DebounceConfig(required_consecutive=1, action_cooldown=0.0))

    def test_raising_sink_keeps_worker_alive(self, engine, hand, caplog):
        sink = BrokenSink()
        failed = []
        engine.event_bus.subscribe(Events.ACTION_FAILED, lambda action: failed.append(action.name))

        dispatcher = FrameDispatcher(engine, sink, max_queue=10)
        dispatcher.start()
        dispatcher.submit(hand("index"), 0.0)
        dispatcher.join()
        for i in range(1, 6):
            dispatcher.submit(hand("middle" if i % 2 else "ring"), i * 0.1)
        dispatcher.join()

        stopper = threading.Thread(target=dispatcher.stop)
        stopper.start()
        stopper.join(timeout=2.0)

        assert not stopper.is_alive()
        assert dispatcher.processed_frames == 6
        assert dispatcher.error_count == 6
        assert sink.calls == 6
        assert len(failed) == 6
        assert "sink down" in caplog.text

    def test_stop_with_full_queue_and_stalled_worker(self, engine, hand):
        entered, gate = threading.Event(), threading.Event()

        def block(**kwargs):
            entered.set()
            gate.wait(timeout=2.0)

        engine.event_bus.subscribe(Events.GESTURE_DETECTED, block)
        dispatcher = FrameDispatcher(engine, max_queue=1)
        dispatcher.start()
        dispatcher.submit(hand("index"), 0.0)
        assert entered.wait(timeout=2.0)
        dispatcher.submit(hand("index"), 0.1)

        stopper = threading.Thread(target=dispatcher.stop, kwargs={"timeout": 0.1})
        stopper.start()
        stopper.join(timeout=2.0)
        gate.set()

        assert not stopper.is_alive()
        assert dispatcher.dropped_frames == 1

    def test_submit_after_stop_raises(self, engine, hand):
        dispatcher = FrameDispatcher(engine)
        dispatcher.start()
        dispatcher.stop()
        with pytest.raises(RuntimeError):
            dispatcher.submit(hand(), 0.0)
