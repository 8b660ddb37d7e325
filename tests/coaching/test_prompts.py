"""Tests for PromptGenerator — wording, rounding and emphasis per prompt type."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from rde_coach.analysis.models import Constraints, ConstraintVerdict, DrivingMode
from rde_coach.analysis.trajectory import TrajectoryAnalyser
from rde_coach.coaching.models import Emphasis, PromptType
from rde_coach.coaching.prompts import (
    EARLY_PHASE_TEXT,
    GOOD_STYLE_TEXT,
    MAX_DURATION_TEXT,
    PromptGenerator,
)
from rde_coach.telemetry.models import RdeTick

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_OK = ConstraintVerdict.satisfied()


def _analyser(expected_km: float = 83.0, accumulator=None, **tick) -> TrajectoryAnalyser:
    defaults = dict(
        urban_distance_m=0.0,
        rural_distance_m=0.0,
        motorway_distance_m=0.0,
        elapsed_urban_seconds=0,
        total_time_minutes=30.0,
        current_speed_kmh=0.0,
    )
    defaults.update(tick)
    analyser = TrajectoryAnalyser(expected_km, accumulator=accumulator)
    analyser.update_progress(RdeTick(**defaults), now_ms=0)
    analyser.set_desired_driving_mode()
    return analyser


def _constraints(**kwargs) -> Constraints:
    defaults = dict(
        high_speed=ConstraintVerdict.satisfied(0.0),
        very_high_speed=_OK,
        stopping=_OK,
        average_urban_speed=_OK,
    )
    defaults.update(kwargs)
    return Constraints(**defaults)


@pytest.fixture
def generator() -> PromptGenerator:
    return PromptGenerator()


# ---------------------------------------------------------------------------
# None / Sufficiency
# ---------------------------------------------------------------------------


def test_none_early_text(generator):
    out = generator.generate(PromptType.NONE, _analyser(total_time_minutes=0.0), _constraints())
    assert out.prompt_type is PromptType.NONE
    assert out.text == EARLY_PHASE_TEXT
    assert out.analysis_text == ""


def test_none_after_max_duration(generator):
    out = generator.generate(PromptType.NONE, _analyser(total_time_minutes=121.0), _constraints())
    assert out.text == MAX_DURATION_TEXT


def test_sufficiency_text(generator):
    out = generator.generate(
        PromptType.SUFFICIENCY, _analyser(), _constraints(), sufficient_mode=DrivingMode.URBAN
    )
    assert out.text == "Your urban driving is sufficient."
    assert out.emphasis is Emphasis.NEUTRAL


def test_sufficiency_without_mode_falls_back_to_none(generator):
    out = generator.generate(PromptType.SUFFICIENCY, _analyser(), _constraints())
    assert out.prompt_type is PromptType.NONE


# ---------------------------------------------------------------------------
# Driving style
# ---------------------------------------------------------------------------


def test_driving_style_good(generator):
    analyser = _analyser(urban_distance_m=8300.0, current_speed_kmh=30.0)
    out = generator.generate(PromptType.DRIVING_STYLE, analyser, _constraints())
    assert out.text == GOOD_STYLE_TEXT
    assert out.analysis_text == "Drive at an average speed of 30 km/h for at most 56.44 minutes."
    assert out.emphasis is Emphasis.NEUTRAL
    assert out.parameters["speed_change_kmh"] == 0.0
    assert out.parameters["duration_minutes"] == pytest.approx(56.44)


def test_driving_style_slow_down(generator):
    analyser = _analyser(
        expected_km=100.0,
        rural_distance_m=18000.0,
        motorway_distance_m=18000.0,
        current_speed_kmh=70.0,
    )
    out = generator.generate(PromptType.DRIVING_STYLE, analyser, _constraints())
    assert out.text == (
        "Aim for a lower driving speed, if it is safe to do so, for more urban driving"
    )
    assert out.analysis_text == "Drive at an average speed of 30 km/h for at most 88.0 minutes."
    assert out.emphasis is Emphasis.NEGATIVE
    assert out.parameters["speed_change_kmh"] == -10.0


def test_driving_style_speed_up(generator):
    analyser = _analyser(
        expected_km=100.0,
        urban_distance_m=23000.0,
        rural_distance_m=18000.0,
        current_speed_kmh=50.0,
    )
    out = generator.generate(PromptType.DRIVING_STYLE, analyser, _constraints())
    assert out.text == (
        "Aim for a higher driving speed, if it is safe to do so, for more motorway driving"
    )
    assert out.emphasis is Emphasis.POSITIVE
    assert out.parameters["speed_change_kmh"] == 40.0


def test_driving_style_mode_complete(generator):
    analyser = _analyser(
        expected_km=100.0,
        urban_distance_m=44000.0,
        rural_distance_m=18000.0,
        motorway_distance_m=18000.0,
        current_speed_kmh=30.0,
    )
    out = generator.generate(PromptType.DRIVING_STYLE, analyser, _constraints())
    assert out.analysis_text == "You have driven enough urban distance."


# ---------------------------------------------------------------------------
# Motorway constraints
# ---------------------------------------------------------------------------


def test_high_speed_minutes_left(generator):
    analyser = _analyser(expected_km=100.0, current_speed_kmh=120.0)
    out = generator.generate(
        PromptType.HIGH_SPEED_PERCENTAGE,
        analyser,
        _constraints(high_speed=ConstraintVerdict.warn(3.5)),
    )
    assert out.prompt_type is PromptType.HIGH_SPEED_PERCENTAGE
    assert out.analysis_text == "You need to drive at 100km/h or more for at least 3.5 more minutes."
    assert out.parameters["value"] == 3.5


@pytest.mark.parametrize("share,shown", [(0.015, "1.5"), (0.025, "2.5")])
def test_very_high_speed_tier_wording(generator, share, shown):
    analyser = _analyser(current_speed_kmh=146.0)
    out = generator.generate(
        PromptType.VERY_HIGH_SPEED_PERCENTAGE,
        analyser,
        _constraints(very_high_speed=ConstraintVerdict.warn(share)),
    )
    assert out.analysis_text == (
        f"You have driven at 145km/h or more for {shown}% of the motorway driving distance."
    )


# ---------------------------------------------------------------------------
# Average urban speed
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "avg,delta,text,analysis,emphasis",
    [
        (45.0, -5.0, "Your average urban speed, 45.0km/h, is too high.",
         "You are 5.0km/h more than the upper limit.", Emphasis.NEGATIVE),
        (39.0, 1.0, "Your average urban speed, 39.0km/h, is close to being invalid.",
         "You are 1.0km/h away from exceeding the upper limit.", Emphasis.NEGATIVE),
        (17.0, -2.0, "Your average urban speed, 17.0km/h, is close to being invalid.",
         "You are 2.0km/h above the lower limit.", Emphasis.POSITIVE),
        (10.0, 5.0, "Your average urban speed, 10.0km/h, is too low.",
         "You are 5.0km/h less than the lower limit.", Emphasis.POSITIVE),
        # averages that round onto a band edge still get their band's wording
        (38.004, 40.0 - 38.004, "Your average urban speed, 38.0km/h, is close to being invalid.",
         "You are 2.0km/h away from exceeding the upper limit.", Emphasis.NEGATIVE),
        (17.996, 15.0 - 17.996, "Your average urban speed, 18.0km/h, is close to being invalid.",
         "You are 3.0km/h above the lower limit.", Emphasis.POSITIVE),
        (40.0004, 40.0 - 40.0004, "Your average urban speed, 40.0km/h, is too high.",
         "You are 0.0km/h more than the upper limit.", Emphasis.NEGATIVE),
    ],
)
def test_average_urban_speed_wording(generator, avg, delta, text, analysis, emphasis):
    analyser = _analyser(avg_urban_speed_kmh=avg, current_speed_kmh=30.0)
    out = generator.generate(
        PromptType.AVERAGE_URBAN_SPEED,
        analyser,
        _constraints(average_urban_speed=ConstraintVerdict.warn(delta)),
    )
    assert out.text == text
    assert out.analysis_text == analysis
    assert out.emphasis is emphasis
    assert out.parameters["value"] == delta


# ---------------------------------------------------------------------------
# Stopping
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "stopped,urban_s,delta,text,analysis",
    [
        (0.5, 1200, 0.035, "You are stopping too little. Try to stop more.",
         "You need to stop for at least 3.5% more of the urban time."),
        (0.7, 600, -0.01,
         "Your stopping percentage is close to the lower limit. Try to stop more.",
         "You are stopping 1.0% more than the lower bound."),
        (2.9, 600, 0.01,
         "You are close to exceeding the stopping percentage. Try to stop less.",
         "You are stopping 1.0% less than the upper bound."),
        (4.0, 600, -0.1, "You are stopping too much. Try to stop less.",
         "You are stopping 10.0% more than the upper bound."),
    ],
)
def test_stopping_wording(generator, stopped, urban_s, delta, text, analysis):
    accumulator = MagicMock(stopping_minutes=stopped)
    analyser = _analyser(accumulator=accumulator, elapsed_urban_seconds=urban_s)
    out = generator.generate(
        PromptType.STOPPING_PERCENTAGE,
        analyser,
        _constraints(stopping=ConstraintVerdict.warn(delta)),
    )
    assert out.text == text
    assert out.analysis_text == analysis


# ---------------------------------------------------------------------------
# Validity
# ---------------------------------------------------------------------------


def test_validity_valid(generator):
    out = generator.generate(
        PromptType.INVALID_RDE_REASON, _analyser(), _constraints(), is_valid_signal=1.0
    )
    assert out.text == "The RDE test is currently valid."
    assert out.analysis_text == "All requirements are currently met."
    assert out.emphasis is Emphasis.POSITIVE


def test_validity_invalid_reason(generator):
    out = generator.generate(
        PromptType.INVALID_RDE_REASON, _analyser(), _constraints(), not_rde_signal=3.0
    )
    assert out.text == "The RDE test is currently invalid."
    assert out.analysis_text == "The maximum speed was exceeded."
    assert out.emphasis is Emphasis.NEGATIVE
    assert out.parameters["reason_code"] == 3.0


def test_validity_unknown_code(generator):
    out = generator.generate(
        PromptType.INVALID_RDE_REASON, _analyser(), _constraints(), not_rde_signal=42.0
    )
    assert out.analysis_text == "The reason is unknown."


def test_validity_mentions_sticky_constraint(generator):
    analyser = _analyser(total_time_minutes=118.0)
    analyser.get_constraints()
    out = generator.generate(
        PromptType.INVALID_RDE_REASON, analyser, _constraints(), is_valid_signal=1.0
    )
    assert out.text == "The RDE test is currently valid."
    assert "100km/h can no longer be reached" in out.analysis_text
    assert out.emphasis is Emphasis.NEGATIVE


def test_same_state_same_identity(generator):
    analyser = _analyser(urban_distance_m=8300.0, current_speed_kmh=30.0)
    first = generator.generate(PromptType.DRIVING_STYLE, analyser, _constraints())
    second = generator.generate(PromptType.DRIVING_STYLE, analyser, _constraints())
    assert first.identity == second.identity
    assert first.to_dict() == second.to_dict()
