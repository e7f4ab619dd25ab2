"""Unbuffered handoff of entry batches from the poller to the main loop.

send() does not return until receive() has taken the batch, so the poller can
never run ahead of what has been displayed and batches arrive in order.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence

from .exceptions import ChannelClosedError


class BatchChannel:
    """Zero-capacity channel carrying lists of entries between two threads."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._send_lock = threading.Lock()
        self._pending: list[str] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, batch: Sequence[str]) -> None:
        """Hand a batch to the receiver, blocking until it has been taken.

        Raises:
            ChannelClosedError: If the channel is closed before the handoff
        """
        # One sender at a time; the condition alone only serializes the handoff
        with self._send_lock, self._cond:
            if self._closed:
                raise ChannelClosedError("channel is closed")
            self._pending = list(batch)
            self._cond.notify_all()
            while self._pending is not None and not self._closed:
                self._cond.wait()
            if self._pending is not None:
                self._pending = None
                raise ChannelClosedError("channel closed before the batch was received")

    def receive(self, timeout: float | None = None) -> list[str] | None:
        """Take the next batch.

        Args:
            timeout: Seconds to wait; None waits until a batch or close()

        Returns:
            The batch, or None if the timeout expired first

        Raises:
            ChannelClosedError: If the channel is closed
        """
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._pending is not None or self._closed, timeout
            )
            if self._closed:
                raise ChannelClosedError("channel is closed")
            if not ready:
                return None
            batch, self._pending = self._pending, None
            self._cond.notify_all()
            return batch

    def close(self) -> None:
        """Close the channel, releasing any blocked sender or receiver."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()
