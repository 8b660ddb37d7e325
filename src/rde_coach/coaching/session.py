"""RdeSession — one RDE test: a tick in, one prompt out."""

from __future__ import annotations

import logging
import time

from rde_coach.analysis.models import Constraints, DrivingMode
from rde_coach.analysis.trajectory import TrajectoryAnalyser
from rde_coach.coaching.models import PromptOutput, PromptType
from rde_coach.coaching.prompts import PromptGenerator
from rde_coach.coaching.selector import PromptSelector
from rde_coach.telemetry.models import RdeTick

_logger = logging.getLogger(__name__)


class RdeSession:
    """Owns the analyser, selector and generator of one test session.

    Each :meth:`update` runs the whole pipeline: progress update, desired
    mode, constraint evaluation, prompt selection and text generation.
    The session is not thread-safe; callers serialise access.

    Parameters
    ----------
    expected_distance_km:
        Planned test distance in kilometres.
    _time_fn:
        Callable returning monotonic seconds, used for ticks without an
        explicit ``timestamp_ms``; injectable for testing.
    """

    def __init__(self, expected_distance_km: float, _time_fn=time.monotonic) -> None:
        self._analyser = TrajectoryAnalyser(expected_distance_km)
        self._selector = PromptSelector()
        self._generator = PromptGenerator()
        self._time_fn = _time_fn
        self._constraints: Constraints | None = None
        self._output = PromptOutput(PromptType.NONE)
        self._ticks = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def update(self, tick: RdeTick) -> PromptOutput:
        """Process one tick and return the prompt to show."""
        now_ms = tick.timestamp_ms
        if now_ms is None:
            now_ms = int(self._time_fn() * 1000)

        analyser = self._analyser
        analyser.update_progress(tick, now_ms)
        analyser.set_desired_driving_mode()
        constraints = analyser.get_constraints()

        previous = self._selector.current
        prompt_type = self._selector.select(
            analyser.current_driving_mode(),
            constraints,
            analyser.total_time,
            analyser.expected_distance_km,
            tick.traveled_km,
            analyser.check_sufficient,
        )
        if prompt_type is not previous:
            _logger.info(
                "Prompt changed %s -> %s at %.1f min",
                previous.value,
                prompt_type.value,
                analyser.total_time,
            )

        self._output = self._generator.generate(
            prompt_type,
            analyser,
            constraints,
            sufficient_mode=self._selector.sufficient_mode,
            is_valid_signal=tick.is_valid_signal,
            not_rde_signal=tick.not_rde_signal,
        )
        self._constraints = constraints
        self._ticks += 1
        return self._output

    def snapshot(self) -> dict:
        """Plain-dict view of the progress getters for rendering collaborators."""
        return {
            "urban_percentage": self.urban_percentage,
            "rural_percentage": self.rural_percentage,
            "motorway_percentage": self.motorway_percentage,
            "current_speed": self.current_speed,
            "expected_distance_km": self.expected_distance_km,
            "total_time": self.total_time,
            "desired_driving_mode": self.desired_driving_mode.value,
            "prompt_type": self.prompt_type.value,
            "invalid_reason": self.invalid_reason.value,
            "ticks": self._ticks,
        }

    # ------------------------------------------------------------------
    # Progress getters
    # ------------------------------------------------------------------

    @property
    def analyser(self) -> TrajectoryAnalyser:
        return self._analyser

    @property
    def output(self) -> PromptOutput:
        """The prompt produced by the latest update."""
        return self._output

    @property
    def constraints(self) -> Constraints | None:
        """Constraint verdicts of the latest update; None before the first tick."""
        return self._constraints

    @property
    def urban_percentage(self) -> float:
        return self._analyser.percentage(DrivingMode.URBAN)

    @property
    def rural_percentage(self) -> float:
        return self._analyser.percentage(DrivingMode.RURAL)

    @property
    def motorway_percentage(self) -> float:
        return self._analyser.percentage(DrivingMode.MOTORWAY)

    @property
    def current_speed(self) -> float:
        return self._analyser.current_speed

    @property
    def expected_distance_km(self) -> float:
        return self._analyser.expected_distance_km

    @property
    def total_time(self) -> float:
        return self._analyser.total_time

    @property
    def desired_driving_mode(self) -> DrivingMode:
        return self._analyser.desired_driving_mode

    @property
    def prompt_type(self) -> PromptType:
        return self._selector.current

    @property
    def invalid_reason(self) -> PromptType:
        """Prompt type of the first constraint that failed for good; NONE if none has."""
        return PromptType.for_constraint(self._analyser.check_invalid())
