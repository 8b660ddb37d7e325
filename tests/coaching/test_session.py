"""Tests for RdeSession — end-to-end tick scenarios through the whole pipeline."""

from __future__ import annotations

import logging
import math

import pytest

from rde_coach.analysis.models import DrivingMode
from rde_coach.coaching.models import Emphasis, PromptType
from rde_coach.coaching.prompts import EARLY_PHASE_TEXT
from rde_coach.coaching.session import RdeSession
from rde_coach.telemetry.models import RdeTick

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _tick(**kwargs) -> RdeTick:
    defaults = dict(
        urban_distance_m=0.0,
        rural_distance_m=0.0,
        motorway_distance_m=0.0,
        elapsed_urban_seconds=0,
        total_time_minutes=0.0,
        current_speed_kmh=0.0,
        timestamp_ms=0,
    )
    defaults.update(kwargs)
    return RdeTick(**defaults)


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


def test_scenario_a_fresh_session():
    session = RdeSession(83.0)
    out = session.update(_tick())
    assert out.prompt_type is PromptType.NONE
    assert out.text == EARLY_PHASE_TEXT
    assert session.constraints.payloads() == (5.0, None, None, None)
    assert session.invalid_reason is PromptType.NONE


def test_scenario_b_urban_sufficient_once():
    session = RdeSession(100.0)
    session.update(_tick(urban_distance_m=23000.0, rural_distance_m=15000.0,
                         motorway_distance_m=15000.0, current_speed_kmh=30.0))
    assert session.analyser.check_sufficient() is DrivingMode.URBAN
    assert session.analyser.check_sufficient() is None


def test_sufficiency_prompt_in_early_phase():
    session = RdeSession(100.0)
    tick = _tick(motorway_distance_m=18000.0, current_speed_kmh=80.0, total_time_minutes=10.0)
    out = session.update(tick)
    assert out.prompt_type is PromptType.SUFFICIENCY
    assert out.text == "Your motorway driving is sufficient."

    out = session.update(tick)
    assert out.prompt_type is not PromptType.SUFFICIENCY


def test_scenario_c_very_high_speed_tier():
    session = RdeSession(83.0)
    session.update(_tick(current_speed_kmh=145.1, timestamp_ms=0))
    session.update(_tick(current_speed_kmh=145.1, timestamp_ms=23500))
    assert session.constraints.payloads()[1] == 0.015


def test_scenario_d_average_urban_speed():
    session = RdeSession(83.0)
    out = session.update(_tick(current_speed_kmh=30.0, avg_urban_speed_kmh=45.0,
                               total_time_minutes=20.0))
    assert out.prompt_type is PromptType.AVERAGE_URBAN_SPEED
    assert session.constraints.average_urban_speed.value == -5.0
    assert out.text == "Your average urban speed, 45.0km/h, is too high."
    assert out.analysis_text == "You are 5.0km/h more than the upper limit."


@pytest.mark.parametrize(
    "average,analysis,emphasis",
    [
        (38.004, "You are 2.0km/h away from exceeding the upper limit.", Emphasis.NEGATIVE),
        (17.996, "You are 3.0km/h above the lower limit.", Emphasis.POSITIVE),
    ],
)
def test_average_urban_speed_at_band_edge(average, analysis, emphasis):
    session = RdeSession(83.0)
    out = session.update(_tick(current_speed_kmh=30.0, avg_urban_speed_kmh=average,
                               total_time_minutes=20.0))
    assert out.prompt_type is PromptType.AVERAGE_URBAN_SPEED
    assert out.text.endswith("is close to being invalid.")
    assert out.analysis_text == analysis
    assert out.emphasis is emphasis


def test_scenario_e_final_phase(caplog):
    session = RdeSession(83.0)
    common = dict(urban_distance_m=30000.0, rural_distance_m=20000.0,
                  motorway_distance_m=20000.0, current_speed_kmh=30.0,
                  avg_urban_speed_kmh=30.0, is_valid_signal=1.0)

    assert session.update(_tick(total_time_minutes=89.9, **common)).prompt_type is (
        PromptType.DRIVING_STYLE
    )
    with caplog.at_level(logging.INFO, logger="rde_coach.coaching.session"):
        out = session.update(_tick(total_time_minutes=95.0, timestamp_ms=305000, **common))
    assert out.prompt_type is PromptType.INVALID_RDE_REASON
    assert out.text == "The RDE test is currently valid."
    assert "invalid_rde_reason" in caplog.text


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "speed,mode",
    [
        (0.0, DrivingMode.URBAN),
        (59.99, DrivingMode.URBAN),
        (60.0, DrivingMode.RURAL),
        (89.99, DrivingMode.RURAL),
        (90.0, DrivingMode.MOTORWAY),
        (160.0, DrivingMode.MOTORWAY),
    ],
)
def test_driving_mode_boundaries(speed, mode):
    session = RdeSession(83.0)
    session.update(_tick(current_speed_kmh=speed))
    assert session.analyser.current_driving_mode() is mode


def test_prompt_type_matches_output_every_tick():
    session = RdeSession(83.0)
    for minute in range(0, 125, 5):
        out = session.update(_tick(
            urban_distance_m=minute * 300.0,
            rural_distance_m=minute * 200.0,
            motorway_distance_m=minute * 250.0,
            elapsed_urban_seconds=minute * 25,
            total_time_minutes=float(minute),
            current_speed_kmh=float((minute * 7) % 150),
            avg_urban_speed_kmh=28.0,
            timestamp_ms=minute * 60000,
        ))
        assert out.prompt_type is session.prompt_type


def test_constraint_values_are_none_or_finite():
    session = RdeSession(83.0)
    speeds = [0.0, 0.0, 35.0, 120.0, 150.0, 150.0, 70.0, 0.0]
    for minute, speed in enumerate(speeds):
        session.update(_tick(
            urban_distance_m=minute * 1500.0,
            motorway_distance_m=minute * 2000.0,
            elapsed_urban_seconds=minute * 40,
            total_time_minutes=float(minute * 15),
            current_speed_kmh=speed,
            avg_urban_speed_kmh=33.0,
            timestamp_ms=minute * 60000,
        ))
        values = session.constraints.payloads()
        assert len(values) == 4
        assert all(v is None or math.isfinite(v) for v in values)


def test_expected_distance_never_decreases():
    session = RdeSession(83.0)
    seen = 0.0
    for i, urban in enumerate([0.0, 20000.0, 50000.0, 50000.0, 60000.0]):
        session.update(_tick(urban_distance_m=urban, timestamp_ms=i * 1000))
        assert session.expected_distance_km >= seen
        seen = session.expected_distance_km
    assert seen == pytest.approx(60.0 / 0.44)


def test_invalid_reason_is_sticky():
    session = RdeSession(83.0)
    session.update(_tick(total_time_minutes=118.0))
    assert session.invalid_reason is PromptType.HIGH_SPEED_PERCENTAGE

    session.update(_tick(total_time_minutes=30.0, timestamp_ms=1000))
    assert session.invalid_reason is PromptType.HIGH_SPEED_PERCENTAGE


def test_missing_timestamp_uses_session_clock():
    clock = FakeClock(100.0)
    session = RdeSession(83.0, _time_fn=clock)
    session.update(_tick(timestamp_ms=None))
    clock.now = 160.0
    session.update(_tick(timestamp_ms=None))
    assert session.analyser.accumulator.stopping_minutes == pytest.approx(1.0)


def test_progress_getters_and_snapshot():
    session = RdeSession(100.0)
    session.update(_tick(urban_distance_m=20000.0, rural_distance_m=10000.0,
                         motorway_distance_m=5000.0, total_time_minutes=12.0,
                         current_speed_kmh=42.0))
    assert session.urban_percentage == pytest.approx(20.0)
    assert session.rural_percentage == pytest.approx(10.0)
    assert session.motorway_percentage == pytest.approx(5.0)
    assert session.current_speed == 42.0
    assert session.total_time == 12.0

    snap = session.snapshot()
    assert snap["expected_distance_km"] == 100.0
    assert snap["desired_driving_mode"] == "urban"
    assert snap["prompt_type"] == session.prompt_type.value
    assert snap["invalid_reason"] == "none"
    assert snap["ticks"] == 1
