"""Output sinks for committed key actions."""
from .sinks import ActionSink, MultiSink, apply_action
from .text_buffer import TextBuffer

__all__ = ["ActionSink", "MultiSink", "apply_action", "TextBuffer"]
