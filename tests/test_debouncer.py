"""
Tests for the Gesture Debouncer
================================
"""

import pytest

from gesture_keyboard.core.exceptions import ConfigError
from gesture_keyboard.core.types import Gesture
from gesture_keyboard.recognition.debouncer import DebounceConfig, GestureDebouncer


def feed(debouncer, gestures, start=0.0, step=0.1):
    """Feed a gesture sequence at a fixed frame interval, return (time, action) emissions."""
    emitted = []
    for i, gesture in enumerate(gestures):
        t = start + i * step
        action = debouncer.update(gesture, t)
        if action is not None:
            emitted.append((round(t, 6), action))
    return emitted


class TestStability:
    """A gesture needs four identical frames in a row."""

    @pytest.fixture
    def debouncer(self):
        return GestureDebouncer(DebounceConfig(required_consecutive=4, action_cooldown=0.8))

    def test_three_then_different_emits_nothing(self, debouncer):
        emitted = feed(debouncer, [Gesture.A] * 3 + [Gesture.B])
        assert emitted == []
        assert debouncer.candidate is Gesture.B
        assert debouncer.count == 1

    def test_four_open_palm_frames_emit_one_space(self, debouncer):
        emitted = feed(debouncer, [Gesture.SPACE] * 4)
        assert len(emitted) == 1
        assert emitted[0][1].gesture is Gesture.SPACE
        assert emitted[0][1].text == " "

    def test_fist_scenario_emits_backspace_at_third_hundred_ms(self, debouncer):
        emitted = feed(debouncer, [Gesture.BACKSPACE] * 4)
        assert [(t, a.gesture) for t, a in emitted] == [(0.3, Gesture.BACKSPACE)]
        assert emitted[0][1].timestamp == pytest.approx(0.3)

    def test_first_action_not_blocked_by_cooldown(self, debouncer):
        # No action has happened yet, so t=0.3 is not "within 0.8s" of anything
        assert debouncer.last_action_time is None
        assert feed(debouncer, [Gesture.A] * 4)

    def test_interruption_restarts_count(self, debouncer):
        emitted = feed(debouncer, [Gesture.A, Gesture.A, Gesture.A, Gesture.B,
                                   Gesture.A, Gesture.A, Gesture.A])
        assert emitted == []
        assert debouncer.count == 3

    def test_count_accumulates(self, debouncer):
        for expected in (1, 2, 3):
            debouncer.update(Gesture.H, expected * 0.1)
            assert debouncer.count == expected
            assert debouncer.candidate is Gesture.H


class TestCooldown:
    """At most one action per cooldown window."""

    @pytest.fixture
    def debouncer(self):
        return GestureDebouncer(DebounceConfig(required_consecutive=4, action_cooldown=0.8))

    def test_holding_pose_types_once_then_again_after_cooldown(self):
        # Emit at 0.3, re-accumulate 0.4-0.7 (blocked), count keeps rising
        # until the cooldown ends between 1.0 and 1.1
        debouncer = GestureDebouncer(DebounceConfig(required_consecutive=4, action_cooldown=0.75))
        emitted = feed(debouncer, [Gesture.A] * 12)
        assert [t for t, _ in emitted] == [0.3, 1.1]

    def test_cooldown_boundary_is_inclusive(self):
        debouncer = GestureDebouncer(DebounceConfig(required_consecutive=1, action_cooldown=0.75))
        assert debouncer.update(Gesture.A, 1.0) is not None
        assert debouncer.update(Gesture.B, 1.74) is None
        assert debouncer.update(Gesture.B, 1.75) is not None

    def test_spacing_invariant(self, debouncer):
        gestures = ([Gesture.A] * 5 + [Gesture.B] * 5) * 6
        emitted = feed(debouncer, gestures, step=0.05)
        times = [t for t, _ in emitted]
        assert times
        for earlier, later in zip(times, times[1:]):
            assert later - earlier >= 0.8 - 1e-9

    def test_blocked_frames_do_not_reset_candidate(self, debouncer):
        debouncer.update(Gesture.A, 0.0)
        feed(debouncer, [Gesture.A] * 3, start=0.1)  # commits at 0.3
        feed(debouncer, [Gesture.B] * 6, start=0.4)  # blocked by cooldown
        assert debouncer.candidate is Gesture.B
        assert debouncer.count == 6

    def test_cooldown_remaining(self, debouncer):
        assert debouncer.cooldown_remaining(0.0) == 0.0
        feed(debouncer, [Gesture.A] * 4)
        assert debouncer.cooldown_remaining(0.5) == pytest.approx(0.6)
        assert debouncer.cooldown_remaining(5.0) == 0.0


class TestNoHand:
    """A no-hand frame clears the candidate."""

    @pytest.fixture
    def debouncer(self):
        return GestureDebouncer(DebounceConfig(required_consecutive=4, action_cooldown=0.8))

    def test_no_hand_clears_candidate(self, debouncer):
        feed(debouncer, [Gesture.E] * 3)
        assert debouncer.update(None, 0.3) is None
        assert debouncer.candidate is None
        assert debouncer.count == 0

    def test_no_hand_keeps_last_action_time(self, debouncer):
        feed(debouncer, [Gesture.E] * 4)
        debouncer.update(None, 0.4)
        assert debouncer.last_action_time == pytest.approx(0.3)

    def test_no_hand_between_streaks_requires_full_reaccumulation(self, debouncer):
        gestures = [Gesture.A] * 4 + [None] + [Gesture.A] * 4
        emitted = feed(debouncer, gestures, step=0.3)
        assert [a.gesture for _, a in emitted] == [Gesture.A, Gesture.A]
        # Second emission needs four fresh frames after the gap
        assert emitted[1][0] == pytest.approx(0.3 * 8)

    def test_no_hand_from_startup(self, debouncer):
        assert debouncer.update(None, 0.0) is None
        assert debouncer.peek_state().candidate is None


class TestNoneGesture:
    """Unmapped poses are tracked but never typed."""

    def test_none_never_emits(self):
        debouncer = GestureDebouncer(DebounceConfig(required_consecutive=2, action_cooldown=0.0))
        assert feed(debouncer, [Gesture.NONE] * 20) == []
        assert debouncer.candidate is Gesture.NONE
        assert debouncer.count == 20
        assert debouncer.progress == 0.0

    def test_none_interrupts_streak(self):
        debouncer = GestureDebouncer()
        emitted = feed(debouncer, [Gesture.A] * 3 + [Gesture.NONE] + [Gesture.A] * 3)
        assert emitted == []


class TestResetPolicy:
    """Candidate handling after a commit."""

    def test_reset_after_action_clears_candidate(self):
        debouncer = GestureDebouncer(DebounceConfig(action_cooldown=0.0))
        feed(debouncer, [Gesture.J] * 4)
        assert debouncer.candidate is None
        assert debouncer.count == 0

    def test_zero_cooldown_types_every_four_frames(self):
        debouncer = GestureDebouncer(DebounceConfig(action_cooldown=0.0))
        assert len(feed(debouncer, [Gesture.J] * 12)) == 3

    def test_keep_candidate_repeats_after_cooldown(self):
        config = DebounceConfig(required_consecutive=4, action_cooldown=0.75, reset_after_action=False)
        debouncer = GestureDebouncer(config)
        emitted = feed(debouncer, [Gesture.I] * 20)
        assert [t for t, _ in emitted] == [0.3, 1.1, 1.9]
        assert debouncer.candidate is Gesture.I


class TestStateAccess:
    """Inspection and reset."""

    def test_peek_state_is_a_copy(self):
        debouncer = GestureDebouncer()
        debouncer.update(Gesture.G, 0.0)
        snapshot = debouncer.peek_state()
        snapshot.count = 99
        assert debouncer.count == 1

    def test_reset_forgets_everything(self):
        debouncer = GestureDebouncer()
        feed(debouncer, [Gesture.G] * 4)
        debouncer.reset()
        state = debouncer.peek_state()
        assert (state.candidate, state.count, state.last_action_time) == (None, 0, None)

    def test_progress(self):
        debouncer = GestureDebouncer()
        assert debouncer.progress == 0.0
        debouncer.update(Gesture.B, 0.0)
        debouncer.update(Gesture.B, 0.1)
        assert debouncer.progress == pytest.approx(0.5)

    def test_instances_are_independent(self):
        first, second = GestureDebouncer(), GestureDebouncer()
        feed(first, [Gesture.A] * 3)
        assert second.count == 0
        assert second.candidate is None

    def test_commit_is_logged(self, caplog):
        debouncer = GestureDebouncer()
        with caplog.at_level("INFO", logger="gesture_keyboard.recognition.debouncer"):
            feed(debouncer, [Gesture.SPACE] * 4)
        assert "Action committed: SPACE" in caplog.text


class TestDebounceConfig:
    """Configuration validation."""

    def test_defaults(self):
        config = DebounceConfig()
        assert config.required_consecutive == 4
        assert config.action_cooldown == pytest.approx(0.8)
        assert config.reset_after_action is True

    def test_from_dict_milliseconds(self):
        config = DebounceConfig.from_dict({"required_consecutive": 3, "action_cooldown_ms": 500})
        assert config.required_consecutive == 3
        assert config.action_cooldown == pytest.approx(0.5)

    def test_from_dict_ms_wins(self):
        config = DebounceConfig.from_dict({"action_cooldown": 2.0, "action_cooldown_ms": 100})
        assert config.action_cooldown == pytest.approx(0.1)

    def test_from_dict_seconds(self):
        assert DebounceConfig.from_dict({"action_cooldown": 1.5}).action_cooldown == 1.5

    @pytest.mark.parametrize("count", [0, -1, 2.5, True, "4"])
    def test_invalid_required_consecutive(self, count):
        with pytest.raises(ConfigError):
            DebounceConfig(required_consecutive=count)

    def test_negative_cooldown(self):
        with pytest.raises(ConfigError):
            DebounceConfig(action_cooldown=-0.1)

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            DebounceConfig.from_dict({"required_consecutive": 0})
