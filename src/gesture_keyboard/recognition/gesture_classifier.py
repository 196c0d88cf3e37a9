"""
Gesture Classifier
===================

Maps a finger-state vector to a keyboard gesture.

Rules are an ordered list of (predicate, gesture) pairs and the first match
wins. Several finger patterns satisfy more than one predicate, so the order
below is part of the behavior:

    1. all four up              -> SPACE
    2. none up                  -> BACKSPACE
    3. index+middle+ring        -> D   (pinky down)
    4. index+middle+ring        -> C   (shadowed by rule 3)
    5. middle+ring+pinky        -> F
    6. index+middle only        -> B
    7. index+ring only          -> E
    8. middle+ring only         -> G
    9. index only               -> A
   10. middle only              -> H
   11. ring only                -> I
   12. pinky only               -> J

Anything else (e.g. index+pinky) is Gesture.NONE. The vocabulary is a
partial mapping over the 16 possible finger states.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ..core.types import Gesture
from .finger_state import FingerState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GestureRule:
    """One entry of the priority list."""
    name: str
    predicate: Callable[[FingerState], bool]
    gesture: Gesture

    def matches(self, state: FingerState) -> bool:
        return bool(self.predicate(state))


def _only(*fingers: str) -> Callable[[FingerState], bool]:
    """Predicate: exactly the named fingers are up."""
    wanted = FingerState.from_fingers(*fingers)
    return lambda s: s == wanted


GESTURE_RULES: Tuple[GestureRule, ...] = (
    GestureRule("open_palm", lambda s: s.index and s.middle and s.ring and s.pinky, Gesture.SPACE),
    GestureRule("fist", lambda s: not (s.index or s.middle or s.ring or s.pinky), Gesture.BACKSPACE),
    GestureRule("index_middle_ring", lambda s: s.index and s.middle and s.ring and not s.pinky, Gesture.D),
    # Superset of the rule above and therefore never reached. Kept until
    # product decides whether C needs its own pose.
    GestureRule("index_middle_ring_any_pinky", lambda s: s.index and s.middle and s.ring, Gesture.C),
    GestureRule("middle_ring_pinky", lambda s: s.middle and s.ring and s.pinky, Gesture.F),
    GestureRule("index_middle", _only("index", "middle"), Gesture.B),
    GestureRule("index_ring", _only("index", "ring"), Gesture.E),
    GestureRule("middle_ring", _only("middle", "ring"), Gesture.G),
    GestureRule("index", _only("index"), Gesture.A),
    GestureRule("middle", _only("middle"), Gesture.H),
    GestureRule("ring", _only("ring"), Gesture.I),
    GestureRule("pinky", _only("pinky"), Gesture.J),
)


def matching_rule(state: FingerState,
                  rules: Tuple[GestureRule, ...] = GESTURE_RULES) -> Optional[GestureRule]:
    """Return the first rule matching ``state``, or None."""
    for rule in rules:
        if rule.matches(state):
            return rule
    return None


def classify(state: FingerState, rules: Tuple[GestureRule, ...] = GESTURE_RULES) -> Gesture:
    """Classify a finger-state vector. Pure: no state is read or written."""
    rule = matching_rule(state, rules)
    return rule.gesture if rule else Gesture.NONE


class GestureClassifier:
    """
    Rule-based keyboard gesture classifier.

    Thin wrapper over :func:`classify` that carries a rule table and optional
    debug logging.

    Example:
        >>> classifier = GestureClassifier()
        >>> classifier.classify(FingerState.from_fingers("index"))
        <Gesture.A: 'A'>
    """

    def __init__(self, rules: Tuple[GestureRule, ...] = GESTURE_RULES, debug: bool = False):
        self.rules = tuple(rules)
        self.debug = debug

    def classify(self, state: FingerState) -> Gesture:
        rule = matching_rule(state, self.rules)
        if self.debug:
            logger.debug("Fingers %s -> %s", state, rule.name if rule else "unmapped")
        return rule.gesture if rule else Gesture.NONE

    @property
    def vocabulary(self) -> Tuple[Gesture, ...]:
        """Gestures the rule table can produce, in priority order."""
        return tuple(rule.gesture for rule in self.rules)
