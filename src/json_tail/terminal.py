"""Shared terminal handle.

Every component writes through a single Terminal. A component that needs the
line for itself (the status indicator while animating) acquires the terminal
with a holder token; while it is held, writes without that token are refused
with TerminalBusyError instead of being interleaved with the holder's output.
"""

from __future__ import annotations

import threading

from rich.console import Console
from rich.control import Control, ControlType

from .exceptions import TerminalBusyError

# Carriage return followed by erase-to-end-of-line.
CLEAR_LINE = Control(ControlType.CARRIAGE_RETURN, (ControlType.ERASE_IN_LINE, 0))


class Terminal:
    """Serialized, ownership-checked access to a rich Console."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(highlight=False)
        self._lock = threading.Lock()
        self._holder: object | None = None

    @property
    def held(self) -> bool:
        """Whether some component currently holds the terminal."""
        return self._holder is not None

    def acquire(self, token: object, *, clear: bool = False) -> None:
        """Take exclusive ownership of the terminal.

        Args:
            token: Identity used by the holder for its writes and release
            clear: Clear the current line as part of taking ownership

        Raises:
            TerminalBusyError: If another token already holds the terminal
        """
        with self._lock:
            if self._holder is not None and self._holder is not token:
                raise TerminalBusyError("terminal is already held")
            self._holder = token
            if clear:
                self.console.control(CLEAR_LINE)

    def release(self, token: object, *, clear: bool = False) -> None:
        """Give up ownership; a stale or unknown token is ignored."""
        with self._lock:
            if self._holder is not token:
                return
            if clear:
                self.console.control(CLEAR_LINE)
            self._holder = None

    def _check(self, token: object | None) -> None:
        if self._holder is not token:
            raise TerminalBusyError("terminal is held by another component")

    def redraw(self, text: str, token: object | None = None) -> None:
        """Overwrite the current line with text, leaving the cursor on it.

        Skipped when output is not a terminal, since the line could not be
        overwritten there.
        """
        with self._lock:
            self._check(token)
            if not self.console.is_terminal:
                return
            self.console.control(CLEAR_LINE)
            self.console.out(text, end="", highlight=False)

    def print_line(self, text: str = "", token: object | None = None) -> None:
        """Write text followed by a newline."""
        with self._lock:
            self._check(token)
            self.console.out(text, highlight=False)
