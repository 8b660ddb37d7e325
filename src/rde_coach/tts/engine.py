"""TTS engine abstractions — NullTTSEngine for tests, ConsoleTTSEngine for headless runs."""

from __future__ import annotations

import logging

_logger = logging.getLogger(__name__)


class NullTTSEngine:
    """No-op TTS engine; records calls for test assertions."""

    def __init__(self) -> None:
        self.speaks: list[tuple[str, int]] = []
        self.stops: int = 0

    def speak(self, text: str, priority: int = 0) -> None:
        """Record a speak call."""
        self.speaks.append((text, priority))

    def stop(self) -> None:
        """Record a stop call."""
        self.stops += 1

    def is_speaking(self) -> bool:
        """Return False — null engine never actually speaks."""
        return False

    def shutdown(self) -> None:
        """No-op shutdown."""


class ConsoleTTSEngine:
    """Writes each utterance to the log instead of a speech device.

    Parameters
    ----------
    logger:
        Logger receiving the utterances; defaults to this module's logger.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or _logger
        self._spoken = 0

    def speak(self, text: str, priority: int = 0) -> None:
        """Log *text*; priority utterances are marked as such."""
        marker = "!" if priority > 0 else ">"
        self._log.info("%s %s", marker, text)
        self._spoken += 1

    def stop(self) -> None:
        """Nothing is ever queued, so there is nothing to drain."""

    def is_speaking(self) -> bool:
        return False

    def shutdown(self) -> None:
        self._log.debug("Console TTS shut down after %d utterances", self._spoken)
