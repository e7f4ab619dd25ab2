"""Main event loop.

JsonTailApp prints the initial tail of the file, then starts the status
indicator and the poller and waits for either a new batch of entries or an
interrupt. The indicator is always stopped before anything else is printed.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path

from .channel import BatchChannel
from .config import Config
from .exceptions import ChannelClosedError, EntryError
from .poller import WAITING_MESSAGE, EntryPoller
from .reader import last_n, read_entries
from .spinner import StatusIndicator
from .terminal import Terminal

logger = logging.getLogger(__name__)

SEPARATOR = "----------------------------"
FAREWELL = "\nReceived interrupt signal, exiting..."

# How often the wait loop wakes to look at the interrupt flag
_WAKEUP_SECONDS = 0.1


def format_entry(entry: str, now: datetime | None = None) -> str:
    """Prefix an entry with an RFC 3339 local timestamp."""
    stamp = (now or datetime.now().astimezone()).isoformat(timespec="seconds")
    return f"[{stamp}] {entry}"


class JsonTailApp:
    """Coordinates the poller, the status indicator and terminal output."""

    def __init__(self, path: Path, config: Config, terminal: Terminal | None = None):
        """Initialize the application.

        Args:
            path: Absolute path of the file to watch
            config: Runtime configuration
            terminal: Output handle; defaults to one on stdout
        """
        self.path = path
        self.config = config
        self.terminal = terminal or Terminal()
        self.indicator = StatusIndicator(self.terminal, config.frames)
        self.channel = BatchChannel()
        self.poller: EntryPoller | None = None

        self._interrupted = threading.Event()

    def interrupt(self) -> None:
        """Ask the wait loop to shut down. Safe to call from a signal handler."""
        self._interrupted.set()

    def show_initial_entries(self) -> int:
        """Print the last few entries of the file.

        Returns:
            Number of entries in the file, or 0 if it could not be read
        """
        try:
            entries = read_entries(self.path)
        except EntryError as err:
            logger.warning(
                f"Initial read failed: {err}",
                extra={"extra_context": {"path": str(self.path)}},
            )
            return 0

        count = self.config.initial_entries
        self.terminal.print_line(f"Initial entries (last {count})")
        self.terminal.print_line(SEPARATOR)
        for entry in last_n(entries, count):
            self.terminal.print_line(entry)
        self.terminal.print_line(SEPARATOR)
        self.terminal.print_line(
            "Monitoring file for new entries "
            f"(checking every {self.config.interval_seconds:.1f} seconds)...\n"
        )

        logger.info(
            "Initial entries displayed",
            extra={"extra_context": {"path": str(self.path), "entries": len(entries)}},
        )
        return len(entries)

    def display_batch(self, batch: list[str]) -> None:
        """Print a batch of new entries with the indicator paused."""
        self.indicator.stop()
        for entry in batch:
            self.terminal.print_line(format_entry(entry))
        self.indicator.set_message(WAITING_MESSAGE)
        self.indicator.start()

    def run(self) -> int:
        """Run until interrupted.

        Returns:
            Exit code (0 after an interrupt)
        """
        initial_count = self.show_initial_entries()

        self.poller = EntryPoller(
            self.path,
            self.channel,
            self.indicator,
            interval=self.config.interval_seconds,
            last_seen_count=initial_count,
        )

        self.indicator.set_message(WAITING_MESSAGE)
        self.indicator.start()
        self.poller.start()

        try:
            self._wait_for_events()
        except KeyboardInterrupt:
            self.interrupt()
        finally:
            self.indicator.stop()
            if self._interrupted.is_set():
                self.terminal.print_line(FAREWELL)
                logger.info("Interrupted, exiting")
            self.shutdown()
        return 0

    def _wait_for_events(self) -> None:
        while not self._interrupted.is_set():
            try:
                batch = self.channel.receive(timeout=_WAKEUP_SECONDS)
            except ChannelClosedError:
                return
            if batch:
                logger.info(
                    "New entries received",
                    extra={"extra_context": {"count": len(batch)}},
                )
                self.display_batch(batch)

    def shutdown(self) -> None:
        """Release the poller thread and close the channel."""
        self.channel.close()
        if self.poller is not None:
            self.poller.stop()
