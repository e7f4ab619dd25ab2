"""Animated status line shown while waiting for new entries.

The indicator owns the terminal between start() and stop(). Each animation run
gets its own token, so a thread left over from a previous run can never draw
once stop() has returned.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

from .exceptions import TerminalBusyError
from .terminal import Terminal

logger = logging.getLogger(__name__)

DEFAULT_FRAMES: tuple[str, ...] = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
FRAME_INTERVAL_SECONDS = 0.1


class _AnimationRun:
    """Token and stop signal for one start()/stop() cycle."""

    def __init__(self) -> None:
        self.stopped = threading.Event()
        self.thread: threading.Thread | None = None


class StatusIndicator:
    """Thread-safe terminal spinner with a replaceable status message."""

    def __init__(
        self,
        terminal: Terminal,
        frames: Sequence[str] | None = None,
        interval: float = FRAME_INTERVAL_SECONDS,
    ):
        """Initialize the indicator in the stopped state.

        Args:
            terminal: Terminal to render on
            frames: Animation frames; DEFAULT_FRAMES when empty or None
            interval: Seconds between frames
        """
        self.terminal = terminal
        self.frames: tuple[str, ...] = tuple(frames) if frames else DEFAULT_FRAMES
        self.interval = interval

        # Guards _run and _message only
        self._lock = threading.Lock()
        self._run: _AnimationRun | None = None
        self._message = ""

    @property
    def running(self) -> bool:
        with self._lock:
            return self._run is not None

    @property
    def message(self) -> str:
        with self._lock:
            return self._message

    def set_message(self, text: str) -> None:
        """Replace the status text shown next to the spinner frame."""
        with self._lock:
            self._message = text

    def start(self) -> None:
        """Clear the line and start animating in a background thread.

        Calling start() while already running does nothing.

        Raises:
            TerminalBusyError: If another component holds the terminal; the
                indicator stays stopped
        """
        run = _AnimationRun()
        with self._lock:
            if self._run is not None:
                logger.debug("StatusIndicator already running")
                return
            self._run = run

        try:
            self.terminal.acquire(run, clear=True)
        except TerminalBusyError:
            with self._lock:
                if self._run is run:
                    self._run = None
            raise
        if run.stopped.is_set():
            # stop() ran before we owned the terminal
            self.terminal.release(run)
            return

        run.thread = threading.Thread(
            target=self._animate, args=(run,), daemon=True, name="StatusIndicator"
        )
        run.thread.start()

    def stop(self) -> None:
        """Clear the line and stop animating. Safe to call repeatedly."""
        with self._lock:
            run, self._run = self._run, None
        if run is None:
            return

        run.stopped.set()
        self.terminal.release(run, clear=True)

        thread = run.thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(self.interval * 2, 1.0))

    def _animate(self, run: _AnimationRun) -> None:
        index = 0
        while not run.stopped.is_set():
            with self._lock:
                message = self._message
            frame = self.frames[index % len(self.frames)]
            try:
                self.terminal.redraw(f"{frame} {message}", token=run)
            except TerminalBusyError:
                # Released by stop() between our check and the draw
                break
            index += 1
            run.stopped.wait(self.interval)
