"""TickEventStream — background polling loop with drop-oldest overflow handling."""

from __future__ import annotations

import contextlib
import logging
import queue
import threading
import time
from dataclasses import dataclass

from rde_coach.telemetry.models import RdeTick

_logger = logging.getLogger(__name__)


@dataclass
class TickEvent:
    """A parsed tick with a monotonic timestamp."""

    tick: RdeTick
    timestamp: float  # time.monotonic() seconds


class TickEventStream:
    """Polls a tick source+parser pair at *target_hz* and enqueues :class:`TickEvent`.

    When the internal queue is full the *oldest* event is discarded so that
    the consumer always sees the most recent progress data.

    Parameters
    ----------
    source:
        Object with ``read_tick() -> dict | None``.
    parser:
        Object with ``parse(raw: dict) -> RdeTick``.
    target_hz:
        Polling frequency in Hz.
    queue_maxsize:
        Maximum number of events buffered before drop-oldest kicks in.
    """

    def __init__(
        self,
        source,
        parser,
        target_hz: float = 1.0,
        queue_maxsize: int = 120,
    ) -> None:
        self._source = source
        self._parser = parser
        self._interval = 1.0 / target_hz
        self._queue: queue.Queue[TickEvent] = queue.Queue(maxsize=queue_maxsize)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._dropped = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the background polling thread."""
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="TickStream")
        self._thread.start()

    def stop(self) -> None:
        """Signal the polling thread to stop and join it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None

    def get_event(self, timeout: float = 0.1) -> TickEvent | None:
        """Return the next queued event, or None if none arrives within *timeout* s."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def queue_size(self) -> int:
        """Return the current number of buffered events."""
        return self._queue.qsize()

    @property
    def dropped(self) -> int:
        """Number of events discarded because the queue was full."""
        return self._dropped

    def poll_once(self) -> bool:
        """Read, parse and enqueue a single tick; return True if one was enqueued."""
        t0 = time.monotonic()
        raw = self._source.read_tick()
        if not raw:
            return False
        try:
            tick = self._parser.parse(raw)
        except (TypeError, ValueError, KeyError) as exc:
            _logger.warning("Dropping unparsable tick: %s", exc)
            return False
        self._enqueue(TickEvent(tick=tick, timestamp=t0))
        return True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _run(self) -> None:
        while not self._stop_event.is_set():
            t0 = time.monotonic()
            self.poll_once()
            elapsed = time.monotonic() - t0
            wait = self._interval - elapsed
            if wait > 0:
                self._stop_event.wait(wait)

    def _enqueue(self, event: TickEvent) -> None:
        """Put *event* in the queue; drop oldest if full."""
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            with contextlib.suppress(queue.Empty):
                self._queue.get_nowait()
                self._dropped += 1
            with contextlib.suppress(queue.Full):
                self._queue.put_nowait(event)
