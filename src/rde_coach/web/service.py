"""SessionRegistry — in-memory live sessions for the Web API."""

from __future__ import annotations

import logging
import threading
import time
import uuid

from rde_coach.coaching.models import PromptOutput
from rde_coach.coaching.session import RdeSession
from rde_coach.telemetry.parser import TickParser

_logger = logging.getLogger(__name__)


class SessionNotFound(KeyError):
    """Raised for an unknown session id."""


class SessionRegistry:
    """Holds running :class:`RdeSession` objects keyed by a generated id.

    Every session has its own lock so that ticks for one session are
    applied one at a time while different sessions proceed independently.

    Parameters
    ----------
    default_distance_km:
        Expected distance for sessions created without one.
    parser:
        Tick parser used to sanitise incoming payloads.
    _time_fn:
        Clock handed to each new session; injectable for testing.
    """

    def __init__(
        self,
        default_distance_km: float = 83.0,
        parser: TickParser | None = None,
        _time_fn=time.monotonic,
    ) -> None:
        self._default_distance_km = default_distance_km
        self._parser = parser or TickParser()
        self._time_fn = _time_fn
        self._sessions: dict[str, tuple[RdeSession, threading.Lock]] = {}
        self._guard = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create(self, expected_distance_km: float | None = None) -> tuple[str, RdeSession]:
        """Create a new session and return ``(session_id, session)``.

        Raises
        ------
        ValueError
            If *expected_distance_km* is not positive.
        """
        distance = expected_distance_km or self._default_distance_km
        session = RdeSession(distance, _time_fn=self._time_fn)
        session_id = uuid.uuid4().hex
        with self._guard:
            self._sessions[session_id] = (session, threading.Lock())
        _logger.info("Created session %s (expected %.1f km)", session_id, distance)
        return session_id, session

    def update(self, session_id: str, raw_tick: dict) -> PromptOutput:
        """Parse *raw_tick* and feed it to the session."""
        session, lock = self._get(session_id)
        tick = self._parser.parse(raw_tick)
        with lock:
            return session.update(tick)

    def snapshot(self, session_id: str) -> dict:
        session, lock = self._get(session_id)
        with lock:
            return session.snapshot()

    def delete(self, session_id: str) -> None:
        with self._guard:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFound(session_id)
        _logger.info("Closed session %s", session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _get(self, session_id: str) -> tuple[RdeSession, threading.Lock]:
        with self._guard:
            entry = self._sessions.get(session_id)
        if entry is None:
            raise SessionNotFound(session_id)
        return entry
