"""
Logging setup and a recorder for committed key actions.
"""

import logging
import logging.handlers
import os
import time

from ..core.types import KeyAction


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure console (and optional rotating file) logging."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-30s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(root_logger.level)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class ActionLogger:
    """Logs committed actions and keeps a bounded history of them.

    Subscribe :meth:`on_action` to ``Events.ACTION_EMITTED``.
    """

    def __init__(self, max_history: int = 500):
        self.logger = logging.getLogger("keyboard_actions")
        self._history = []
        self._max_history = max_history

    def on_action(self, action: KeyAction):
        self.log_action(action)

    def log_action(self, action: KeyAction):
        entry = {
            "wall_time": time.time(),
            "timestamp": action.timestamp,
            "action": action.name,
        }
        self._history.append(entry)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]
        self.logger.info("Action: %-10s | t=%.3f", action.name, action.timestamp)

    def get_history(self, last_n=None):
        if last_n:
            return self._history[-last_n:]
        return self._history.copy()

    @property
    def total_actions(self):
        return len(self._history)
