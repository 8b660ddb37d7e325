"""ProgressTracker — urban/rural/motorway shares against an adaptive expected distance."""

from __future__ import annotations

import logging

from rde_coach.analysis.models import (
    MAX_SHARES,
    MIN_SHARES,
    NOMINAL_SPEEDS,
    SPEED_BANDS,
    DrivingMode,
)

_logger = logging.getLogger(__name__)

# Order in which newly sufficient modes are reported.
_SUFFICIENCY_ORDER = (DrivingMode.MOTORWAY, DrivingMode.RURAL, DrivingMode.URBAN)

# When two modes are short and the driver is in neither, steer towards the
# first of these: motorway stretches are the hardest to find on the way.
TIE_BREAK_ORDER = (DrivingMode.MOTORWAY, DrivingMode.RURAL, DrivingMode.URBAN)


class ProgressTracker:
    """Tracks each driving mode's share of the expected test distance.

    The expected distance only grows: it follows the distance actually
    driven, and is raised further whenever a mode's share would otherwise
    exceed its regulatory ceiling, so reported shares stay meaningful.

    Parameters
    ----------
    expected_distance_km:
        Planned test distance in kilometres; must be positive.
    """

    def __init__(self, expected_distance_km: float) -> None:
        if expected_distance_km <= 0.0:
            raise ValueError(f"expected_distance_km must be positive, got {expected_distance_km}")
        self._expected_distance_km = expected_distance_km
        self._distances_m: dict[DrivingMode, float] = {mode: 0.0 for mode in DrivingMode}
        self._proportions: dict[DrivingMode, float] = {mode: 0.0 for mode in DrivingMode}
        self._sufficient: dict[DrivingMode, bool] = {mode: False for mode in DrivingMode}
        self._reported: list[DrivingMode] = []
        self._desired_mode = DrivingMode.URBAN

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def update(self, urban_distance_m: float, rural_distance_m: float, motorway_distance_m: float) -> None:
        """Recompute expected distance, shares and sufficiency from cumulative distances."""
        self._distances_m = {
            DrivingMode.URBAN: urban_distance_m,
            DrivingMode.RURAL: rural_distance_m,
            DrivingMode.MOTORWAY: motorway_distance_m,
        }
        total_km = (urban_distance_m + rural_distance_m + motorway_distance_m) / 1000.0
        expected = max(self._expected_distance_km, total_km)

        for mode in (DrivingMode.URBAN, DrivingMode.RURAL, DrivingMode.MOTORWAY):
            mode_km = self._distances_m[mode] / 1000.0
            if mode_km / expected > MAX_SHARES[mode]:
                expected = mode_km / MAX_SHARES[mode]

        if expected > self._expected_distance_km:
            _logger.debug(
                "Expected distance raised from %.2f km to %.2f km",
                self._expected_distance_km,
                expected,
            )
        self._expected_distance_km = expected

        for mode in DrivingMode:
            proportion = self._distances_m[mode] / 1000.0 / expected
            self._proportions[mode] = proportion
            self._sufficient[mode] = proportion >= MIN_SHARES[mode]

    @property
    def expected_distance_km(self) -> float:
        return self._expected_distance_km

    @property
    def desired_driving_mode(self) -> DrivingMode:
        return self._desired_mode

    def proportion(self, mode: DrivingMode) -> float:
        return self._proportions[mode]

    def is_sufficient(self, mode: DrivingMode) -> bool:
        return self._sufficient[mode]

    def insufficient_modes(self) -> list[DrivingMode]:
        return [mode for mode in DrivingMode if not self._sufficient[mode]]

    def set_desired_driving_mode(self, current_mode: DrivingMode) -> DrivingMode:
        """Choose the mode the driver should aim for to balance the three shares.

        * all or none sufficient → stay in *current_mode*
        * one mode short → that mode
        * two modes short → the one being driven now, else by
          :data:`TIE_BREAK_ORDER`
        """
        short = self.insufficient_modes()
        if len(short) in (0, len(DrivingMode)):
            desired = current_mode
        elif len(short) == 1:
            desired = short[0]
        elif current_mode in short:
            desired = current_mode
        else:
            desired = next(mode for mode in TIE_BREAK_ORDER if mode in short)
        self._desired_mode = desired
        return desired

    def check_sufficient(self) -> DrivingMode | None:
        """Return a mode that has newly reached its minimum share, once per mode."""
        for mode in _SUFFICIENCY_ORDER:
            if self._sufficient[mode] and mode not in self._reported:
                self._reported.append(mode)
                return mode
        return None

    def compute_speed_change(self, current_speed_kmh: float) -> float:
        """Signed km/h change that brings the driver into the desired mode's band (0.0 if inside)."""
        lower, upper = SPEED_BANDS[self._desired_mode]
        if current_speed_kmh < lower:
            return lower - current_speed_kmh
        if current_speed_kmh > upper:
            return upper - current_speed_kmh
        return 0.0

    def compute_duration(self) -> float:
        """Minutes still to drive in the desired mode, at its nominal speed, to reach its ceiling.

        Negative once the ceiling is exceeded.
        """
        mode = self._desired_mode
        distance_left_km = (MAX_SHARES[mode] - self._proportions[mode]) * self._expected_distance_km
        return distance_left_km * 60.0 / NOMINAL_SPEEDS[mode]
