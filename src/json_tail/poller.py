"""Background polling of the watched file.

A ticker thread re-reads the file every interval, diffs it against the number
of entries already reported and hands any new suffix to the main loop through
a BatchChannel.
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path

from .channel import BatchChannel
from .config import is_valid_interval
from .exceptions import ChannelClosedError, EntryError
from .reader import new_entries, read_entries
from .spinner import StatusIndicator

logger = logging.getLogger(__name__)

WAITING_MESSAGE = "Waiting for changes..."
CHECKING_MESSAGE = "Checking for changes..."
ERROR_MESSAGE = "Error reading file"


class EntryPoller:
    """Background thread that polls the watched file for appended entries.

    last_seen_count is read and written only by the polling thread (or by the
    caller of poll_once() when no thread is running).
    """

    def __init__(
        self,
        path: Path,
        channel: BatchChannel,
        indicator: StatusIndicator,
        interval: float = 1.0,
        last_seen_count: int = 0,
    ):
        """Initialize entry poller.

        Args:
            path: File to poll
            channel: Channel new batches are sent on
            indicator: Status indicator whose message reflects the poll state
            interval: Polling interval in seconds, must be positive
            last_seen_count: Number of entries already reported
        """
        if not is_valid_interval(interval):
            raise ValueError(f"interval must be a finite positive number, got {interval}")

        self.path = path
        self.channel = channel
        self.indicator = indicator
        self.interval = interval
        self.last_seen_count = last_seen_count

        # Thread control
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        # Performance metrics tracking
        self._poll_times: list[float] = []
        self._poll_count = 0
        self._metrics_log_interval = 10  # Log metrics every 10 cycles

    def poll_once(self) -> list[str]:
        """Run one read-diff-emit cycle.

        Returns:
            The batch sent on the channel (empty when nothing was appended)

        Raises:
            EntryReadError: If the file could not be read
            EntryFormatError: If the file did not decode as an array of strings
            ChannelClosedError: If the channel closed before the batch was taken
        """
        self.indicator.set_message(CHECKING_MESSAGE)
        entries = read_entries(self.path)

        batch = new_entries(entries, self.last_seen_count)
        if batch:
            self.channel.send(batch)
            self.last_seen_count = len(entries)

        self.indicator.set_message(WAITING_MESSAGE)
        return batch

    def _tick(self) -> None:
        try:
            self.poll_once()
        except EntryError as err:
            logger.warning(
                f"Error reading file: {err}",
                extra={"extra_context": {"path": str(self.path)}},
            )
            self.indicator.set_message(ERROR_MESSAGE)

    def _run(self) -> None:
        logger.info(
            "Polling file",
            extra={"extra_context": {"path": str(self.path), "interval": self.interval}},
        )

        while not self._stop_event.wait(self.interval):
            try:
                start_time = time.perf_counter()
                self._tick()
                poll_duration_ms = (time.perf_counter() - start_time) * 1000

                self._poll_times.append(poll_duration_ms)
                self._poll_count += 1

                if (
                    logger.isEnabledFor(logging.DEBUG)
                    and self._poll_count % self._metrics_log_interval == 0
                    and self._poll_times
                ):
                    logger.debug(
                        "EntryPoller metrics",
                        extra={
                            "extra_context": {
                                "poll_count": self._poll_count,
                                "last_seen_count": self.last_seen_count,
                                "min_poll_ms": round(min(self._poll_times), 2),
                                "max_poll_ms": round(max(self._poll_times), 2),
                                "avg_poll_ms": round(
                                    sum(self._poll_times) / len(self._poll_times), 2
                                ),
                            }
                        },
                    )
                    self._poll_times.clear()

            except ChannelClosedError:
                logger.info("Channel closed, EntryPoller exiting")
                break
            except Exception as err:
                # Catch all exceptions to prevent thread crash
                logger.error(f"Error in poll cycle: {err}", exc_info=True)

        logger.info("Polling ended", extra={"extra_context": {"path": str(self.path)}})

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Tick every interval on a daemon thread until stop(). No-op while running."""
        if self.running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="EntryPoller", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """End the ticker and wait briefly for its thread.

        Close the channel first: a tick blocked in send() only returns once
        the channel is closed.
        """
        thread, self._thread = self._thread, None
        if thread is None:
            return

        self._stop_event.set()
        thread.join(timeout=min(self.interval * 2, threading.TIMEOUT_MAX))
        if thread.is_alive():
            logger.warning(
                "EntryPoller thread still alive after stop",
                extra={"extra_context": {"path": str(self.path)}},
            )
