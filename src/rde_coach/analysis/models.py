"""Analysis data models: driving modes, regulatory limits and constraint verdicts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Regulatory limits
# ---------------------------------------------------------------------------

MAX_TEST_MINUTES = 120.0
MIN_TEST_MINUTES = 90.0

URBAN_MAX_SPEED_KMH = 60.0
RURAL_MAX_SPEED_KMH = 90.0
MOTORWAY_MAX_SPEED_KMH = 145.0

URBAN_MAX_SHARE = 0.44
RURAL_MAX_SHARE = 0.43
MOTORWAY_MAX_SHARE = 0.43

URBAN_MIN_SHARE = 0.23
RURAL_MIN_SHARE = 0.18
MOTORWAY_MIN_SHARE = 0.18

HIGH_SPEED_KMH = 100.0
VERY_HIGH_SPEED_KMH = 145.0

# Minutes above HIGH_SPEED_KMH still owed at the start of a test.
HIGH_SPEED_REQUIRED_MINUTES = 5.0

# Time-in-band figures are only meaningful after this many minutes.
RELIABLE_AFTER_MINUTES = 15.0


class DrivingMode(str, Enum):
    """Speed band of the RDE regulation."""

    URBAN = "urban"
    RURAL = "rural"
    MOTORWAY = "motorway"

    @classmethod
    def from_speed(cls, speed_kmh: float) -> DrivingMode:
        """Classify an instantaneous speed (km/h) into its band."""
        if speed_kmh < URBAN_MAX_SPEED_KMH:
            return cls.URBAN
        if speed_kmh < RURAL_MAX_SPEED_KMH:
            return cls.RURAL
        return cls.MOTORWAY


# (lower, upper) speed band in km/h used to steer the driver into a mode.
SPEED_BANDS: dict[DrivingMode, tuple[float, float]] = {
    DrivingMode.URBAN: (0.0, URBAN_MAX_SPEED_KMH),
    DrivingMode.RURAL: (URBAN_MAX_SPEED_KMH, RURAL_MAX_SPEED_KMH),
    DrivingMode.MOTORWAY: (RURAL_MAX_SPEED_KMH, MOTORWAY_MAX_SPEED_KMH),
}

# Nominal average speed (km/h) assumed when estimating time left in a mode.
NOMINAL_SPEEDS: dict[DrivingMode, float] = {
    DrivingMode.URBAN: 30.0,
    DrivingMode.RURAL: 75.0,
    DrivingMode.MOTORWAY: 115.0,
}

MAX_SHARES: dict[DrivingMode, float] = {
    DrivingMode.URBAN: URBAN_MAX_SHARE,
    DrivingMode.RURAL: RURAL_MAX_SHARE,
    DrivingMode.MOTORWAY: MOTORWAY_MAX_SHARE,
}

MIN_SHARES: dict[DrivingMode, float] = {
    DrivingMode.URBAN: URBAN_MIN_SHARE,
    DrivingMode.RURAL: RURAL_MIN_SHARE,
    DrivingMode.MOTORWAY: MOTORWAY_MIN_SHARE,
}


class Constraint(str, Enum):
    """The four time-in-band constraints checked during a test."""

    HIGH_SPEED_DURATION = "high_speed_duration"
    VERY_HIGH_SPEED_PERCENTAGE = "very_high_speed_percentage"
    STOPPING_PERCENTAGE = "stopping_percentage"
    AVERAGE_URBAN_SPEED = "average_urban_speed"


class VerdictStatus(str, Enum):
    SATISFIED = "satisfied"
    WARN = "warn"
    INVALID = "invalid"


@dataclass(frozen=True)
class ConstraintVerdict:
    """Outcome of evaluating one constraint on one tick.

    ``value`` is the corrective magnitude for ``WARN`` verdicts. A
    ``SATISFIED`` verdict may still carry an informational value (the
    high-speed check reports ``0.0`` once its minutes are banked).
    """

    status: VerdictStatus
    value: float | None = None

    @classmethod
    def satisfied(cls, value: float | None = None) -> ConstraintVerdict:
        return cls(VerdictStatus.SATISFIED, value)

    @classmethod
    def warn(cls, value: float) -> ConstraintVerdict:
        return cls(VerdictStatus.WARN, value)

    @classmethod
    def invalid(cls) -> ConstraintVerdict:
        return cls(VerdictStatus.INVALID)

    @property
    def is_invalid(self) -> bool:
        return self.status is VerdictStatus.INVALID

    @property
    def payload(self) -> float | None:
        """Optional-float view: the value, or None for invalid verdicts."""
        if self.is_invalid:
            return None
        return self.value

    def needs_attention(self) -> bool:
        """Return True for warnings the driver can still act on."""
        return self.status is VerdictStatus.WARN and self.value is not None and self.value != 0.0


@dataclass(frozen=True)
class Constraints:
    """The four constraint verdicts of one tick, by name."""

    high_speed: ConstraintVerdict
    very_high_speed: ConstraintVerdict
    stopping: ConstraintVerdict
    average_urban_speed: ConstraintVerdict

    def items(self) -> tuple[tuple[Constraint, ConstraintVerdict], ...]:
        return (
            (Constraint.HIGH_SPEED_DURATION, self.high_speed),
            (Constraint.VERY_HIGH_SPEED_PERCENTAGE, self.very_high_speed),
            (Constraint.STOPPING_PERCENTAGE, self.stopping),
            (Constraint.AVERAGE_URBAN_SPEED, self.average_urban_speed),
        )

    def payloads(self) -> tuple[float | None, float | None, float | None, float | None]:
        """Return ``(high_speed, very_high_speed, stopping, average_urban_speed)`` values."""
        return (
            self.high_speed.payload,
            self.very_high_speed.payload,
            self.stopping.payload,
            self.average_urban_speed.payload,
        )

    def first_invalid(self) -> Constraint | None:
        for name, verdict in self.items():
            if verdict.is_invalid:
                return name
        return None
