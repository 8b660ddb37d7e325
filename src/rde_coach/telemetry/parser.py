"""TickParser — converts raw validator output to RdeTick."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from rde_coach.telemetry.models import RdeTick

_logger = logging.getLogger(__name__)

# RdeTick field → (clamp_min, clamp_max)
# clamp_min/max of None means no bound on that side.
_FIELD_MAP: tuple[tuple[str, float | None, float | None], ...] = (
    # field                    min    max
    ("urban_distance_m",        0.0,  None),
    ("rural_distance_m",        0.0,  None),
    ("motorway_distance_m",     0.0,  None),
    ("total_time_minutes",      0.0,  None),
    ("current_speed_kmh",       0.0,  None),
    ("avg_urban_speed_kmh",     0.0,  None),
    ("avg_rural_speed_kmh",     0.0,  None),
    ("avg_motorway_speed_kmh",  0.0,  None),
    ("is_valid_signal",         None, None),
    ("not_rde_signal",          None, None),
)

# Positions in the regulatory engine's output array.
_OUT_URBAN_DISTANCE = 1
_OUT_RURAL_DISTANCE = 2
_OUT_MOTORWAY_DISTANCE = 3
_OUT_URBAN_TIME = 4
_OUT_AVG_URBAN_SPEED = 7
_OUT_AVG_RURAL_SPEED = 8
_OUT_AVG_MOTORWAY_SPEED = 9
_OUT_IS_VALID = 17
_OUT_NOT_RDE = 18
_OUTPUT_LENGTH = 19


def _sanitize(value: float, lo: float | None, hi: float | None) -> float:
    """Return value clamped to [lo, hi], with NaN/Inf replaced by lo (or 0)."""
    if not math.isfinite(value):
        value = lo if lo is not None else 0.0
    if lo is not None and value < lo:
        value = lo
    if hi is not None and value > hi:
        value = hi
    return value


class TickParser:
    """Parses raw validator data into a :class:`RdeTick`.

    The raw dict uses the snake_case field names of :class:`RdeTick`.
    Invalid or out-of-range values are clamped and a warning is logged.
    """

    def parse(self, raw: dict) -> RdeTick:
        """Convert *raw* validator data to a validated :class:`RdeTick`."""
        kwargs: dict = {}
        clamped: list[str] = []

        for name, lo, hi in _FIELD_MAP:
            val = float(raw.get(name) or 0.0)
            clean = _sanitize(val, lo, hi)
            if clean != val:
                clamped.append(name)
            kwargs[name] = clean

        urban_s = raw.get("elapsed_urban_seconds") or 0
        urban_f = float(urban_s)
        if not math.isfinite(urban_f) or urban_f < 0:
            clamped.append("elapsed_urban_seconds")
            urban_f = 0.0
        kwargs["elapsed_urban_seconds"] = int(urban_f)

        ts = raw.get("timestamp_ms")
        if ts is not None:
            ts = float(ts)
            if math.isfinite(ts):
                ts = int(ts)
            else:
                # the session clock stands in for an unusable timestamp
                clamped.append("timestamp_ms")
                ts = None
        kwargs["timestamp_ms"] = ts

        if clamped:
            _logger.warning("Clamped malformed tick fields: %s", ", ".join(clamped))

        return RdeTick(**kwargs)

    def from_outputs(
        self,
        outputs: Sequence[float],
        current_speed_kmh: float,
        total_time_minutes: float,
        timestamp_ms: int | None = None,
    ) -> RdeTick:
        """Build a tick from the regulatory engine's positional output array.

        Raises
        ------
        ValueError
            If *outputs* holds fewer values than the engine emits.
        """
        if len(outputs) < _OUTPUT_LENGTH:
            raise ValueError(
                f"Expected {_OUTPUT_LENGTH} regulatory outputs, got {len(outputs)}"
            )
        return self.parse(
            {
                "urban_distance_m": outputs[_OUT_URBAN_DISTANCE],
                "rural_distance_m": outputs[_OUT_RURAL_DISTANCE],
                "motorway_distance_m": outputs[_OUT_MOTORWAY_DISTANCE],
                "elapsed_urban_seconds": outputs[_OUT_URBAN_TIME],
                "total_time_minutes": total_time_minutes,
                "current_speed_kmh": current_speed_kmh,
                "avg_urban_speed_kmh": outputs[_OUT_AVG_URBAN_SPEED],
                "avg_rural_speed_kmh": outputs[_OUT_AVG_RURAL_SPEED],
                "avg_motorway_speed_kmh": outputs[_OUT_AVG_MOTORWAY_SPEED],
                "is_valid_signal": outputs[_OUT_IS_VALID],
                "not_rde_signal": outputs[_OUT_NOT_RDE],
                "timestamp_ms": timestamp_ms,
            }
        )
