"""
Action sink protocol and routing.

The engine never edits text itself. A committed KeyAction is handed to an
ActionSink, which only needs three primitive edits.
"""

import logging
from typing import Protocol, runtime_checkable

from ..core.types import Gesture, KeyAction

logger = logging.getLogger(__name__)


@runtime_checkable
class ActionSink(Protocol):
    """Anything that can receive typed text edits."""

    def append_character(self, char: str) -> bool:
        """Append a single character."""
        ...

    def append_space(self) -> bool:
        """Append a space."""
        ...

    def delete_last_character(self) -> bool:
        """Delete the character before the cursor."""
        ...


def apply_action(sink: ActionSink, action: KeyAction) -> bool:
    """
    Route a committed action to the matching sink primitive.

    Returns:
        True if the sink reported success. A ``None`` return from the sink
        counts as success.
    """
    if action.gesture is Gesture.SPACE:
        result = sink.append_space()
    elif action.gesture is Gesture.BACKSPACE:
        result = sink.delete_last_character()
    else:
        result = sink.append_character(action.text)

    ok = _ok(result)
    if not ok:
        logger.warning("Sink %s failed to apply %s", type(sink).__name__, action.name)
    return ok


class MultiSink:
    """Fans every edit out to several sinks. Succeeds only if all of them do."""

    def __init__(self, *sinks: ActionSink):
        self.sinks = list(sinks)

    def append_character(self, char: str) -> bool:
        return all([_ok(s.append_character(char)) for s in self.sinks])

    def append_space(self) -> bool:
        return all([_ok(s.append_space()) for s in self.sinks])

    def delete_last_character(self) -> bool:
        return all([_ok(s.delete_last_character()) for s in self.sinks])


def _ok(result) -> bool:
    return result is None or bool(result)
