"""
In-memory text buffer: the on-screen output of the keyboard.
"""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


class TextBuffer:
    """
    Append-only text with backspace, the simplest ActionSink.

    Listeners are called with the new text after every change.

    Example:
        >>> buf = TextBuffer()
        >>> buf.append_character("A")
        True
        >>> buf.append_space()
        True
        >>> buf.text
        'A '
    """

    def __init__(self, initial: str = "", max_length: int = 0):
        """
        Args:
            initial: Starting text
            max_length: Keep at most this many characters, dropping the
                oldest ones (0 = unlimited)
        """
        self._chars: List[str] = list(initial)
        self._max_length = max_length
        self._listeners: List[Callable[[str], None]] = []
        self._trim()

    def append_character(self, char: str) -> bool:
        if len(char) != 1:
            raise ValueError(f"append_character takes exactly one character, got {char!r}")
        self._chars.append(char)
        self._changed()
        return True

    def append_space(self) -> bool:
        self._chars.append(" ")
        self._changed()
        return True

    def append_newline(self) -> bool:
        self._chars.append("\n")
        self._changed()
        return True

    def delete_last_character(self) -> bool:
        """Remove the last character. Deleting from an empty buffer is a no-op."""
        if self._chars:
            self._chars.pop()
            self._changed()
        return True

    def clear(self) -> None:
        self._chars.clear()
        self._changed()

    def add_listener(self, callback: Callable[[str], None]) -> None:
        self._listeners.append(callback)

    @property
    def text(self) -> str:
        return "".join(self._chars)

    @property
    def last_line(self) -> str:
        return self.text.rsplit("\n", 1)[-1]

    def __len__(self):
        return len(self._chars)

    def __str__(self):
        return self.text

    def _trim(self) -> None:
        if self._max_length and len(self._chars) > self._max_length:
            del self._chars[:len(self._chars) - self._max_length]

    def _changed(self) -> None:
        self._trim()
        text = self.text
        for callback in list(self._listeners):
            try:
                callback(text)
            except Exception as e:
                logger.error("Text buffer listener failed: %s", e)
