"""PromptSelector — ordered rule ladder choosing one prompt type per tick."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from rde_coach.analysis.models import MAX_TEST_MINUTES, MIN_TEST_MINUTES, Constraints, DrivingMode
from rde_coach.coaching.models import PromptType

# Sufficiency news is only given during the first fifth of the expected distance.
EARLY_PHASE_FRACTION = 1.0 / 5.0


@dataclass
class SelectionContext:
    """Everything the rules look at on one tick."""

    mode: DrivingMode
    constraints: Constraints
    total_time: float
    expected_distance_km: float
    traveled_km: float
    previous: PromptType
    check_sufficient: Callable[[], DrivingMode | None]


@dataclass(frozen=True)
class PromptRule:
    """A named guard returning a prompt type, or None to defer to the next rule."""

    name: str
    apply: Callable[[SelectionContext], PromptType | None]


# ---------------------------------------------------------------------------
# Rules, highest priority first
# ---------------------------------------------------------------------------


def _final_phase(ctx: SelectionContext) -> PromptType | None:
    # Past the minimum duration the driver only needs to know whether the test holds.
    if MIN_TEST_MINUTES < ctx.total_time < MAX_TEST_MINUTES:
        return PromptType.INVALID_RDE_REASON
    return None


def _motorway_constraints(ctx: SelectionContext) -> PromptType | None:
    if ctx.mode is not DrivingMode.MOTORWAY:
        return None
    if (
        ctx.constraints.very_high_speed.needs_attention()
        and ctx.previous is not PromptType.VERY_HIGH_SPEED_PERCENTAGE
    ):
        return PromptType.VERY_HIGH_SPEED_PERCENTAGE
    if ctx.constraints.high_speed.needs_attention():
        return PromptType.HIGH_SPEED_PERCENTAGE
    return None


def _urban_constraints(ctx: SelectionContext) -> PromptType | None:
    if ctx.mode is not DrivingMode.URBAN:
        return None
    if (
        ctx.constraints.stopping.needs_attention()
        and ctx.previous is not PromptType.AVERAGE_URBAN_SPEED
    ):
        return PromptType.STOPPING_PERCENTAGE
    if ctx.constraints.average_urban_speed.needs_attention():
        return PromptType.AVERAGE_URBAN_SPEED
    return None


def _mode_progress(ctx: SelectionContext) -> PromptType | None:
    if ctx.traveled_km < ctx.expected_distance_km * EARLY_PHASE_FRACTION:
        if ctx.check_sufficient() is not None:
            return PromptType.SUFFICIENCY
        return PromptType.NONE
    if ctx.total_time <= MIN_TEST_MINUTES:
        return PromptType.DRIVING_STYLE
    return PromptType.NONE


DEFAULT_RULES: tuple[PromptRule, ...] = (
    PromptRule("final_phase", _final_phase),
    PromptRule("motorway_constraints", _motorway_constraints),
    PromptRule("urban_constraints", _urban_constraints),
    PromptRule("mode_progress", _mode_progress),
)


class PromptSelector:
    """Picks exactly one :class:`PromptType` per tick; first matching rule wins.

    Remembers the previous pick so that alternating warnings (very high
    speed vs. high speed, stopping vs. average urban speed) take turns
    instead of one of them monopolising the driver's attention.

    Parameters
    ----------
    rules:
        Ordered rules; the last one must always match.
    """

    def __init__(self, rules: tuple[PromptRule, ...] = DEFAULT_RULES) -> None:
        self._rules = rules
        self._current = PromptType.NONE
        self._sufficient_mode: DrivingMode | None = None

    @property
    def current(self) -> PromptType:
        return self._current

    @property
    def sufficient_mode(self) -> DrivingMode | None:
        """Mode reported by the latest SUFFICIENCY pick."""
        return self._sufficient_mode

    def select(
        self,
        mode: DrivingMode,
        constraints: Constraints,
        total_time: float,
        expected_distance_km: float,
        traveled_km: float,
        check_sufficient: Callable[[], DrivingMode | None],
    ) -> PromptType:
        """Evaluate the rules for this tick and return the chosen prompt type."""
        sufficient: list[DrivingMode] = []

        def _check() -> DrivingMode | None:
            found = check_sufficient()
            if found is not None:
                sufficient.append(found)
            return found

        ctx = SelectionContext(
            mode=mode,
            constraints=constraints,
            total_time=total_time,
            expected_distance_km=expected_distance_km,
            traveled_km=traveled_km,
            previous=self._current,
            check_sufficient=_check,
        )
        chosen = PromptType.NONE
        for rule in self._rules:
            result = rule.apply(ctx)
            if result is not None:
                chosen = result
                break

        if sufficient:
            self._sufficient_mode = sufficient[-1]
        self._current = chosen
        return chosen
