"""
Keystroke Sink
===============

Types committed actions into the focused window via keyboard simulation
using xdotool.
"""

import logging
import subprocess
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class KeystrokeSinkConfig:
    """Keystroke output configuration."""
    enabled: bool = True
    space_key: str = "space"
    backspace_key: str = "BackSpace"
    type_delay_ms: int = 12  # xdotool --delay between typed characters
    timeout: float = 5.0

    @classmethod
    def from_dict(cls, config: dict) -> "KeystrokeSinkConfig":
        """Create config from dictionary."""
        return cls(
            enabled=config.get("enabled", True),
            space_key=config.get("space_key", "space"),
            backspace_key=config.get("backspace_key", "BackSpace"),
            type_delay_ms=config.get("type_delay_ms", 12),
            timeout=config.get("timeout", 5.0),
        )


class KeystrokeSink:
    """
    ActionSink that sends real key events to the active window.

    Falls back to simulation (log only) when xdotool is not installed, so
    the keyboard can be demoed anywhere.

    Example:
        >>> sink = KeystrokeSink()
        >>> sink.append_character("A")   # xdotool type -- A
        >>> sink.delete_last_character() # xdotool key BackSpace
    """

    def __init__(self, config: Optional[KeystrokeSinkConfig] = None):
        self.config = config or KeystrokeSinkConfig()
        self._callbacks: List[Callable[[str, bool], None]] = []
        self._last_command: Optional[List[str]] = None
        self._last_send_time: float = 0.0

        self._xdotool_available = self._check_xdotool()
        if not self._xdotool_available:
            logger.warning("xdotool not found. Keystrokes will be simulated.")

    def _check_xdotool(self) -> bool:
        """Check if xdotool is installed and available."""
        try:
            result = subprocess.run(
                ["which", "xdotool"],
                capture_output=True,
                text=True,
                timeout=5
            )
            return result.returncode == 0
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("Error checking xdotool: %s", e)
            return False

    def append_character(self, char: str) -> bool:
        return self._run(
            ["xdotool", "type", "--delay", str(self.config.type_delay_ms), "--", char],
            label=char,
        )

    def append_space(self) -> bool:
        return self._run(["xdotool", "key", self.config.space_key], label="SPACE")

    def delete_last_character(self) -> bool:
        return self._run(["xdotool", "key", self.config.backspace_key], label="BACKSPACE")

    def _run(self, command: List[str], label: str) -> bool:
        if not self.config.enabled:
            logger.debug("Keystroke output disabled, ignoring %s", label)
            return False

        self._last_command = command
        self._last_send_time = time.time()

        if not self._xdotool_available:
            logger.debug("[SIMULATED] %s", " ".join(command))
            success = True
        else:
            success = self._send(command)

        for callback in self._callbacks:
            try:
                callback(label, success)
            except Exception as e:
                logger.error("Error in keystroke callback: %s", e)

        return success

    def _send(self, command: List[str]) -> bool:
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.config.timeout
            )
        except subprocess.TimeoutExpired:
            logger.error("xdotool command timed out: %s", " ".join(command))
            return False
        except OSError as e:
            logger.error("Error sending keystroke: %s", e)
            return False

        if result.returncode != 0:
            logger.error("xdotool error: %s", result.stderr.strip())
            return False
        return True

    def add_callback(self, callback: Callable[[str, bool], None]) -> None:
        """Register callback(label, success) called after every keystroke."""
        self._callbacks.append(callback)

    @property
    def last_command(self) -> Optional[List[str]]:
        return self._last_command

    @property
    def is_available(self) -> bool:
        """True if real keystrokes will be sent."""
        return self._xdotool_available and self.config.enabled
