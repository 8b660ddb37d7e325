"""PromptGenerator — turns a selected prompt type into driver-facing text."""

from __future__ import annotations

from rde_coach.analysis.constraints import (
    STOPPING_HIGH_WARN,
    STOPPING_MAX_SHARE,
    STOPPING_MIN_SHARE,
    URBAN_SPEED_HIGH_WARN_KMH,
    URBAN_SPEED_LOW_WARN_KMH,
    URBAN_SPEED_MAX_KMH,
    URBAN_SPEED_MIN_KMH,
)
from rde_coach.analysis.models import (
    MAX_TEST_MINUTES,
    NOMINAL_SPEEDS,
    Constraint,
    Constraints,
    DrivingMode,
)
from rde_coach.analysis.trajectory import TrajectoryAnalyser
from rde_coach.coaching.models import Emphasis, InvalidRdeReason, PromptOutput, PromptType

EARLY_PHASE_TEXT = "Analysis will be available after 1/5 of the test is completed."
MAX_DURATION_TEXT = "The maximum test duration has been reached."
GOOD_STYLE_TEXT = "Your driving style is good"

_CONSTRAINT_TEXT: dict[Constraint, str] = {
    Constraint.HIGH_SPEED_DURATION: "The 5 minutes above 100km/h can no longer be reached.",
    Constraint.VERY_HIGH_SPEED_PERCENTAGE: "Too much time has been driven above 145km/h.",
    Constraint.STOPPING_PERCENTAGE: "The stopping percentage can no longer be corrected.",
    Constraint.AVERAGE_URBAN_SPEED: "The average urban speed can no longer be corrected.",
}


def _num(value: float, digits: int = 2) -> float:
    """Round for display; never prints ``-0.0``."""
    return round(value, digits) + 0.0


class PromptGenerator:
    """Builds the :class:`PromptOutput` for a prompt type from analyser state.

    Every generator is deterministic: the same analyser state and prompt
    type always give the same text, so speech collaborators can use the
    output's identity to suppress repeats.
    """

    def generate(
        self,
        prompt_type: PromptType,
        analyser: TrajectoryAnalyser,
        constraints: Constraints,
        sufficient_mode: DrivingMode | None = None,
        is_valid_signal: float = 0.0,
        not_rde_signal: float = 0.0,
    ) -> PromptOutput:
        """Render *prompt_type*; unknown combinations fall back to the NONE prompt."""
        if prompt_type is PromptType.SUFFICIENCY and sufficient_mode is not None:
            return self._sufficiency(sufficient_mode)
        if prompt_type is PromptType.DRIVING_STYLE:
            return self._driving_style(analyser)
        if prompt_type is PromptType.AVERAGE_URBAN_SPEED and constraints.average_urban_speed.value is not None:
            return self._average_urban_speed(
                analyser.average_urban_speed, constraints.average_urban_speed.value
            )
        if prompt_type is PromptType.STOPPING_PERCENTAGE and constraints.stopping.value is not None:
            return self._stopping(analyser.stopping_share(), constraints.stopping.value)
        if prompt_type is PromptType.HIGH_SPEED_PERCENTAGE and constraints.high_speed.value is not None:
            return self._high_speed(analyser, constraints.high_speed.value)
        if (
            prompt_type is PromptType.VERY_HIGH_SPEED_PERCENTAGE
            and constraints.very_high_speed.value is not None
        ):
            return self._very_high_speed(analyser, constraints.very_high_speed.value)
        if prompt_type is PromptType.INVALID_RDE_REASON:
            return self._validity(analyser.check_invalid(), is_valid_signal, not_rde_signal)
        return self._none(analyser)

    # ------------------------------------------------------------------
    # Generators
    # ------------------------------------------------------------------

    def _none(self, analyser: TrajectoryAnalyser) -> PromptOutput:
        text = MAX_DURATION_TEXT if analyser.total_time >= MAX_TEST_MINUTES else EARLY_PHASE_TEXT
        return PromptOutput(PromptType.NONE, text=text)

    def _sufficiency(self, mode: DrivingMode) -> PromptOutput:
        return PromptOutput(
            PromptType.SUFFICIENCY,
            text=f"Your {mode.value} driving is sufficient.",
        )

    def _style(self, analyser: TrajectoryAnalyser) -> tuple[str, Emphasis, float]:
        """Return the speed-change sentence for the desired mode, its emphasis and the change."""
        speed_change = analyser.compute_speed_change()
        target = f"for more {analyser.desired_driving_mode.value} driving"
        if speed_change > 0:
            return (
                f"Aim for a higher driving speed, if it is safe to do so, {target}",
                Emphasis.POSITIVE,
                speed_change,
            )
        if speed_change < 0:
            return (
                f"Aim for a lower driving speed, if it is safe to do so, {target}",
                Emphasis.NEGATIVE,
                speed_change,
            )
        return GOOD_STYLE_TEXT, Emphasis.NEUTRAL, 0.0

    def _driving_style(self, analyser: TrajectoryAnalyser) -> PromptOutput:
        text, emphasis, speed_change = self._style(analyser)
        mode = analyser.desired_driving_mode
        duration = analyser.compute_duration()
        if duration > 0:
            analysis = (
                f"Drive at an average speed of {NOMINAL_SPEEDS[mode]:.0f} km/h "
                f"for at most {_num(duration)} minutes."
            )
        else:
            analysis = f"You have driven enough {mode.value} distance."
        return PromptOutput(
            PromptType.DRIVING_STYLE,
            text=text,
            analysis_text=analysis,
            emphasis=emphasis,
            parameters={"speed_change_kmh": speed_change, "duration_minutes": duration},
        )

    def _high_speed(self, analyser: TrajectoryAnalyser, minutes_needed: float) -> PromptOutput:
        text, emphasis, speed_change = self._style(analyser)
        return PromptOutput(
            PromptType.HIGH_SPEED_PERCENTAGE,
            text=text,
            analysis_text=(
                "You need to drive at 100km/h or more for at least "
                f"{_num(minutes_needed, 1)} more minutes."
            ),
            emphasis=emphasis,
            parameters={"speed_change_kmh": speed_change, "value": minutes_needed},
        )

    def _very_high_speed(self, analyser: TrajectoryAnalyser, share: float) -> PromptOutput:
        text, emphasis, speed_change = self._style(analyser)
        return PromptOutput(
            PromptType.VERY_HIGH_SPEED_PERCENTAGE,
            text=text,
            analysis_text=(
                f"You have driven at 145km/h or more for {_num(share * 100.0, 1)}% "
                "of the motorway driving distance."
            ),
            emphasis=emphasis,
            parameters={"speed_change_kmh": speed_change, "value": share},
        )

    def _average_urban_speed(self, average: float, change: float) -> PromptOutput:
        avg = _num(average)
        delta = _num(change)
        close = f"Your average urban speed, {avg}km/h, is close to being invalid."
        # bands are decided on the unrounded average, as in the evaluator
        if URBAN_SPEED_HIGH_WARN_KMH < average <= URBAN_SPEED_MAX_KMH:
            text = close
            analysis = f"You are {delta}km/h away from exceeding the upper limit."
            emphasis = Emphasis.NEGATIVE
        elif URBAN_SPEED_MIN_KMH <= average < URBAN_SPEED_LOW_WARN_KMH:
            text = close
            analysis = f"You are {abs(delta)}km/h above the lower limit."
            emphasis = Emphasis.POSITIVE
        elif change < 0:
            text = f"Your average urban speed, {avg}km/h, is too high."
            analysis = f"You are {abs(delta)}km/h more than the upper limit."
            emphasis = Emphasis.NEGATIVE
        else:
            text = f"Your average urban speed, {avg}km/h, is too low."
            analysis = f"You are {delta}km/h less than the lower limit."
            emphasis = Emphasis.POSITIVE
        return PromptOutput(
            PromptType.AVERAGE_URBAN_SPEED,
            text=text,
            analysis_text=analysis,
            emphasis=emphasis,
            parameters={"average_urban_speed_kmh": average, "value": change},
        )

    def _stopping(self, share: float | None, change: float) -> PromptOutput:
        pct = _num(abs(change) * 100.0, 1)
        if share is None:
            share = STOPPING_MIN_SHARE - change
        if share < STOPPING_MIN_SHARE:
            text = "You are stopping too little. Try to stop more."
            analysis = f"You need to stop for at least {pct}% more of the urban time."
            emphasis = Emphasis.NEGATIVE
        elif share <= STOPPING_HIGH_WARN:
            text = "Your stopping percentage is close to the lower limit. Try to stop more."
            analysis = f"You are stopping {pct}% more than the lower bound."
            emphasis = Emphasis.NEGATIVE
        elif share <= STOPPING_MAX_SHARE:
            text = "You are close to exceeding the stopping percentage. Try to stop less."
            analysis = f"You are stopping {pct}% less than the upper bound."
            emphasis = Emphasis.POSITIVE
        else:
            text = "You are stopping too much. Try to stop less."
            analysis = f"You are stopping {pct}% more than the upper bound."
            emphasis = Emphasis.POSITIVE
        return PromptOutput(
            PromptType.STOPPING_PERCENTAGE,
            text=text,
            analysis_text=analysis,
            emphasis=emphasis,
            parameters={"stopping_share": share, "value": change},
        )

    def _validity(
        self,
        failed: Constraint | None,
        is_valid_signal: float,
        not_rde_signal: float,
    ) -> PromptOutput:
        if is_valid_signal == 1.0:
            reason = InvalidRdeReason.VALID
        else:
            reason = InvalidRdeReason.from_signal(not_rde_signal)

        if reason is InvalidRdeReason.VALID:
            text = "The RDE test is currently valid."
            emphasis = Emphasis.POSITIVE
        else:
            text = "The RDE test is currently invalid."
            emphasis = Emphasis.NEGATIVE

        analysis = reason.description
        if failed is not None:
            analysis = f"{analysis} {_CONSTRAINT_TEXT[failed]}"
            emphasis = Emphasis.NEGATIVE
        return PromptOutput(
            PromptType.INVALID_RDE_REASON,
            text=text,
            analysis_text=analysis,
            emphasis=emphasis,
            analysis_emphasis=emphasis,
            parameters={"reason_code": float(reason.value)},
        )
