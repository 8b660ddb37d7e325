"""TrajectoryAnalyser — progress tracking plus constraint evaluation for one test."""

from __future__ import annotations

import logging

from rde_coach.analysis.constraints import (
    evaluate_average_urban_speed,
    evaluate_high_speed,
    evaluate_stopping,
    evaluate_very_high_speed,
)
from rde_coach.analysis.models import MAX_TEST_MINUTES, Constraint, Constraints, DrivingMode
from rde_coach.analysis.progress import ProgressTracker
from rde_coach.analysis.speed_accumulator import SpeedAccumulator
from rde_coach.telemetry.models import RdeTick

_logger = logging.getLogger(__name__)


class TrajectoryAnalyser:
    """Analyses the progress of an RDE test and checks its constraints.

    Owns the :class:`ProgressTracker` and :class:`SpeedAccumulator` of one
    test. Once a constraint is judged impossible to meet, the analyser
    remembers it for the rest of the test (:meth:`check_invalid`).

    Parameters
    ----------
    expected_distance_km:
        Planned test distance in kilometres.
    accumulator:
        Optional pre-built accumulator (tests inject one).
    """

    def __init__(
        self,
        expected_distance_km: float,
        accumulator: SpeedAccumulator | None = None,
    ) -> None:
        self._progress = ProgressTracker(expected_distance_km)
        self._accumulator = accumulator or SpeedAccumulator()
        self._invalid: Constraint | None = None

        self._total_time = 0.0
        self._current_speed = 0.0
        self._elapsed_urban_seconds = 0
        self._avg_urban_speed = 0.0
        self._avg_rural_speed = 0.0
        self._avg_motorway_speed = 0.0

    # ------------------------------------------------------------------
    # Updating
    # ------------------------------------------------------------------

    def update_progress(self, tick: RdeTick, now_ms: int) -> None:
        """Feed one tick; *now_ms* is the sample time used for time-in-band integration."""
        self._total_time = tick.total_time_minutes
        self._current_speed = tick.current_speed_kmh
        self._elapsed_urban_seconds = tick.elapsed_urban_seconds
        self._avg_urban_speed = tick.avg_urban_speed_kmh
        self._avg_rural_speed = tick.avg_rural_speed_kmh
        self._avg_motorway_speed = tick.avg_motorway_speed_kmh

        self._progress.update(
            tick.urban_distance_m, tick.rural_distance_m, tick.motorway_distance_m
        )
        self._accumulator.update(tick.current_speed_kmh, now_ms)

    # ------------------------------------------------------------------
    # Constraints
    # ------------------------------------------------------------------

    def get_constraints(self) -> Constraints:
        """Evaluate all four constraints; records any that became impossible."""
        constraints = Constraints(
            high_speed=evaluate_high_speed(self._accumulator.high_speed_minutes, self._total_time),
            very_high_speed=evaluate_very_high_speed(self._accumulator.very_high_speed_minutes),
            stopping=evaluate_stopping(
                self._accumulator.stopping_minutes,
                self._elapsed_urban_seconds,
                self._total_time,
            ),
            average_urban_speed=evaluate_average_urban_speed(
                self._avg_urban_speed,
                self._progress.proportion(DrivingMode.URBAN),
                self._progress.expected_distance_km,
                self._total_time,
            ),
        )
        failed = constraints.first_invalid()
        if failed is not None and self._invalid is None:
            _logger.warning(
                "Constraint %s can no longer be met (%.1f min into the test)",
                failed.value,
                self._total_time,
            )
            self._invalid = failed
        return constraints

    def check_invalid(self) -> Constraint | None:
        """Return the first constraint that became impossible to meet, or None."""
        return self._invalid

    def check_time_limit(self) -> bool:
        """Return True once the maximum test duration is exceeded."""
        return self._total_time > MAX_TEST_MINUTES

    # ------------------------------------------------------------------
    # Driving modes
    # ------------------------------------------------------------------

    def current_driving_mode(self) -> DrivingMode:
        return DrivingMode.from_speed(self._current_speed)

    def set_desired_driving_mode(self) -> DrivingMode:
        return self._progress.set_desired_driving_mode(self.current_driving_mode())

    def check_sufficient(self) -> DrivingMode | None:
        return self._progress.check_sufficient()

    def compute_speed_change(self) -> float:
        return self._progress.compute_speed_change(self._current_speed)

    def compute_duration(self) -> float:
        return self._progress.compute_duration()

    # ------------------------------------------------------------------
    # Read-only state for rendering
    # ------------------------------------------------------------------

    @property
    def accumulator(self) -> SpeedAccumulator:
        return self._accumulator

    @property
    def progress(self) -> ProgressTracker:
        return self._progress

    @property
    def desired_driving_mode(self) -> DrivingMode:
        return self._progress.desired_driving_mode

    @property
    def expected_distance_km(self) -> float:
        return self._progress.expected_distance_km

    @property
    def total_time(self) -> float:
        return self._total_time

    @property
    def current_speed(self) -> float:
        return self._current_speed

    @property
    def average_urban_speed(self) -> float:
        return self._avg_urban_speed

    @property
    def average_rural_speed(self) -> float:
        return self._avg_rural_speed

    @property
    def average_motorway_speed(self) -> float:
        return self._avg_motorway_speed

    def stopping_share(self) -> float | None:
        """Stopping time as a fraction of urban time; None before any urban time."""
        if self._elapsed_urban_seconds <= 0:
            return None
        return self._accumulator.stopping_minutes / (self._elapsed_urban_seconds / 60.0)

    def percentage(self, mode: DrivingMode) -> float:
        """Share of the expected distance driven in *mode*, in percent."""
        return self._progress.proportion(mode) * 100.0
