"""Telemetry data models."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class RdeTick:
    """One tick of progress data from the upstream RDE validator.

    All values are validated/clamped to their documented valid ranges by
    :class:`~rde_coach.telemetry.parser.TickParser`.
    """

    urban_distance_m: float
    """Cumulative distance driven in the urban band, metres."""

    rural_distance_m: float
    """Cumulative distance driven in the rural band, metres."""

    motorway_distance_m: float
    """Cumulative distance driven in the motorway band, metres."""

    elapsed_urban_seconds: int
    """Cumulative time spent in the urban band, seconds."""

    total_time_minutes: float
    """Elapsed test time, minutes."""

    current_speed_kmh: float
    """Instantaneous vehicle speed, km/h."""

    avg_urban_speed_kmh: float = 0.0
    avg_rural_speed_kmh: float = 0.0
    avg_motorway_speed_kmh: float = 0.0

    is_valid_signal: float = 0.0
    """1.0 while the regulatory engine judges the test valid."""

    not_rde_signal: float = 0.0
    """Reason code from the regulatory engine (see ``InvalidRdeReason``)."""

    timestamp_ms: int | None = None
    """Sample time in milliseconds; None means "now" on the session clock."""

    @property
    def total_distance_m(self) -> float:
        return self.urban_distance_m + self.rural_distance_m + self.motorway_distance_m

    @property
    def traveled_km(self) -> float:
        return self.total_distance_m / 1000.0

    def is_valid(self) -> bool:
        """Return True if all float fields are finite (no NaN/Inf)."""
        floats = (
            self.urban_distance_m,
            self.rural_distance_m,
            self.motorway_distance_m,
            self.total_time_minutes,
            self.current_speed_kmh,
            self.avg_urban_speed_kmh,
            self.avg_rural_speed_kmh,
            self.avg_motorway_speed_kmh,
            self.is_valid_signal,
            self.not_rde_signal,
        )
        return all(math.isfinite(f) for f in floats)
