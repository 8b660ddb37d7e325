"""SpeedAccumulator — time-weighted minutes spent stopped, above 100 and above 145 km/h."""

from __future__ import annotations

from rde_coach.analysis.models import HIGH_SPEED_KMH, VERY_HIGH_SPEED_KMH

_MS_PER_MINUTE = 60000.0


class SpeedAccumulator:
    """Integrates speed samples into cumulative time-in-band minutes.

    A band is only credited when both the previous and the current sample
    fall inside it, so a single-sample excursion (e.g. one GPS glitch to
    0 km/h) never counts. The first sample only primes the accumulator.

    Samples may arrive at any rate; the elapsed time between consecutive
    samples is taken from their timestamps.
    """

    def __init__(self) -> None:
        self._stopping_minutes = 0.0
        self._high_speed_minutes = 0.0
        self._very_high_speed_minutes = 0.0
        self._previous_speed: float | None = None
        self._last_updated: int | None = None
        self._dt_ms = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def update(self, speed_kmh: float, now_ms: int) -> None:
        """Feed one speed sample taken at *now_ms* (milliseconds)."""
        prev = self._previous_speed
        last = self._last_updated
        self._previous_speed = speed_kmh
        self._last_updated = now_ms

        if prev is None or last is None:
            self._dt_ms = 0
            return

        self._dt_ms = now_ms - last
        if self._dt_ms <= 0:
            return

        minutes = self._dt_ms / _MS_PER_MINUTE
        if speed_kmh == 0.0 and prev == 0.0:
            self._stopping_minutes += minutes
        if speed_kmh > HIGH_SPEED_KMH and prev > HIGH_SPEED_KMH:
            self._high_speed_minutes += minutes
        if speed_kmh > VERY_HIGH_SPEED_KMH and prev > VERY_HIGH_SPEED_KMH:
            self._very_high_speed_minutes += minutes

    @property
    def stopping_minutes(self) -> float:
        return self._stopping_minutes

    @property
    def high_speed_minutes(self) -> float:
        return self._high_speed_minutes

    @property
    def very_high_speed_minutes(self) -> float:
        return self._very_high_speed_minutes

    @property
    def previous_speed(self) -> float | None:
        return self._previous_speed

    @property
    def last_updated(self) -> int | None:
        return self._last_updated

    def time_difference_ms(self) -> int:
        """Return the milliseconds between the last two samples (0 before the second)."""
        return self._dt_ms
