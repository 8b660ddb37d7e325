"""Telemetry input from the upstream RDE validator.

Public API
----------
RdeTick     - one tick of validator progress data
TickParser  - raw validator dict / output array → RdeTick
"""

from rde_coach.telemetry.models import RdeTick
from rde_coach.telemetry.parser import TickParser

__all__ = [
    "RdeTick",
    "TickParser",
]
