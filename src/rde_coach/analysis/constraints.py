"""Constraint evaluators — pure functions from accumulated statistics to verdicts.

Each evaluator returns a :class:`~rde_coach.analysis.models.ConstraintVerdict`:

* ``SATISFIED`` — nothing to tell the driver.
* ``WARN(value)`` — the constraint is violated or close to its limit;
  *value* is the corrective quantity shown to the driver.
* ``INVALID`` — the constraint can no longer be met in the time left.

Evaluators never raise.
"""

from __future__ import annotations

import math

from rde_coach.analysis.models import (
    HIGH_SPEED_REQUIRED_MINUTES,
    MAX_TEST_MINUTES,
    MIN_TEST_MINUTES,
    MOTORWAY_MAX_SHARE,
    RELIABLE_AFTER_MINUTES,
    URBAN_MAX_SHARE,
    ConstraintVerdict,
)

# Very-high-speed time may not exceed 3% of the longest motorway budget.
VERY_HIGH_SPEED_LIMIT_MINUTES = 0.03 * MAX_TEST_MINUTES * MOTORWAY_MAX_SHARE

# Warning tiers, as fractions of the shortest motorway budget (90 min × 0.29).
_SHORTEST_MOTORWAY_SHARE = 0.29


def _shortest_budget_minutes(fraction: float) -> float:
    return fraction * MIN_TEST_MINUTES * _SHORTEST_MOTORWAY_SHARE


VERY_HIGH_SPEED_TIERS: tuple[tuple[float, float, float], ...] = (
    # (lower minutes, upper minutes, reported share)
    (_shortest_budget_minutes(0.025), _shortest_budget_minutes(0.026), 0.025),
    (_shortest_budget_minutes(0.015), _shortest_budget_minutes(0.016), 0.015),
)

STOPPING_MIN_SHARE = 0.06
STOPPING_MAX_SHARE = 0.30
STOPPING_LOW_WARN = 0.08
STOPPING_HIGH_WARN = 0.28

URBAN_SPEED_MIN_KMH = 15.0
URBAN_SPEED_MAX_KMH = 40.0
URBAN_SPEED_LOW_WARN_KMH = 18.0
URBAN_SPEED_HIGH_WARN_KMH = 38.0

# Below this many remaining minutes an out-of-range average is final.
URBAN_SPEED_LAST_CHANCE_MINUTES = 20.0


def evaluate_high_speed(high_speed_minutes: float, total_time_minutes: float) -> ConstraintVerdict:
    """At least 5 cumulative minutes above 100 km/h must be driven.

    Returns the minutes still owed, ``0.0`` (satisfied) once they are
    banked, or INVALID when the test would run out of time first.
    """
    if high_speed_minutes > HIGH_SPEED_REQUIRED_MINUTES:
        return ConstraintVerdict.satisfied(0.0)
    needed = HIGH_SPEED_REQUIRED_MINUTES - high_speed_minutes
    if total_time_minutes + needed <= MAX_TEST_MINUTES:
        return ConstraintVerdict.warn(needed)
    return ConstraintVerdict.invalid()


def evaluate_very_high_speed(very_high_speed_minutes: float) -> ConstraintVerdict:
    """Time above 145 km/h is capped; two fixed tiers warn on the way up."""
    if very_high_speed_minutes > VERY_HIGH_SPEED_LIMIT_MINUTES:
        return ConstraintVerdict.invalid()
    for lower, upper, share in VERY_HIGH_SPEED_TIERS:
        if lower <= very_high_speed_minutes <= upper:
            return ConstraintVerdict.warn(share)
    return ConstraintVerdict.satisfied()


def evaluate_stopping(
    stopping_minutes: float,
    elapsed_urban_seconds: float,
    total_time_minutes: float,
) -> ConstraintVerdict:
    """Stopping time must stay within 6–30% of urban driving time.

    Returns the signed distance from the stopping share to its nearest
    bound (positive: stop more, negative: stop less) inside the warning
    bands, nothing in the interior, and INVALID when the remaining test
    time cannot bring an out-of-range share back.
    """
    urban_minutes = elapsed_urban_seconds / 60.0
    if total_time_minutes < RELIABLE_AFTER_MINUTES or urban_minutes <= 0.0:
        return ConstraintVerdict.satisfied()

    share = stopping_minutes / urban_minutes
    remaining = MAX_TEST_MINUTES - total_time_minutes

    if share < STOPPING_MIN_SHARE:
        # best case: every remaining urban minute is spent stopped
        catch_up = (STOPPING_MIN_SHARE * urban_minutes - stopping_minutes) / (
            1.0 - STOPPING_MIN_SHARE
        )
        if remaining < catch_up:
            return ConstraintVerdict.invalid()
    elif share > STOPPING_MAX_SHARE:
        # best case: every remaining urban minute is spent moving
        catch_up = stopping_minutes / STOPPING_MAX_SHARE - urban_minutes
        if remaining < catch_up:
            return ConstraintVerdict.invalid()

    if share < STOPPING_LOW_WARN:
        return ConstraintVerdict.warn(STOPPING_MIN_SHARE - share)
    if share > STOPPING_HIGH_WARN:
        return ConstraintVerdict.warn(STOPPING_MAX_SHARE - share)
    return ConstraintVerdict.satisfied()


def required_urban_speed(
    urban_proportion: float,
    expected_distance_km: float,
    total_time_minutes: float,
) -> float:
    """Average speed (km/h) that covers the remaining urban share in the time left."""
    distance_left = (URBAN_MAX_SHARE - urban_proportion) * expected_distance_km
    remaining = MAX_TEST_MINUTES - total_time_minutes
    if remaining <= 0.0:
        return math.inf
    return distance_left / (remaining / 60.0)


def evaluate_average_urban_speed(
    avg_urban_speed_kmh: float,
    urban_proportion: float,
    expected_distance_km: float,
    total_time_minutes: float,
) -> ConstraintVerdict:
    """Average urban speed must end up within 15–40 km/h.

    Returns the signed difference to the nearest bound (positive: speed
    up, negative: slow down) inside the warning bands.
    """
    if total_time_minutes < RELIABLE_AFTER_MINUTES:
        return ConstraintVerdict.satisfied()

    remaining = MAX_TEST_MINUTES - total_time_minutes
    distance_left = (URBAN_MAX_SHARE - urban_proportion) * expected_distance_km
    required = required_urban_speed(urban_proportion, expected_distance_km, total_time_minutes)
    unreachable = not URBAN_SPEED_MIN_KMH <= required <= URBAN_SPEED_MAX_KMH
    last_chance = remaining < URBAN_SPEED_LAST_CHANCE_MINUTES

    if avg_urban_speed_kmh < URBAN_SPEED_MIN_KMH and unreachable and last_chance:
        return ConstraintVerdict.invalid()
    if (
        avg_urban_speed_kmh > URBAN_SPEED_MAX_KMH
        and (distance_left <= 0.0 or unreachable)
        and last_chance
    ):
        return ConstraintVerdict.invalid()

    if avg_urban_speed_kmh > URBAN_SPEED_HIGH_WARN_KMH:
        return ConstraintVerdict.warn(URBAN_SPEED_MAX_KMH - avg_urban_speed_kmh)
    if avg_urban_speed_kmh < URBAN_SPEED_LOW_WARN_KMH:
        return ConstraintVerdict.warn(URBAN_SPEED_MIN_KMH - avg_urban_speed_kmh)
    return ConstraintVerdict.satisfied()
