"""Progress tracking and constraint evaluation for RDE tests."""

from rde_coach.analysis.models import (
    Constraint,
    Constraints,
    ConstraintVerdict,
    DrivingMode,
    VerdictStatus,
)
from rde_coach.analysis.progress import ProgressTracker
from rde_coach.analysis.speed_accumulator import SpeedAccumulator
from rde_coach.analysis.trajectory import TrajectoryAnalyser

__all__ = [
    "Constraint",
    "ConstraintVerdict",
    "Constraints",
    "DrivingMode",
    "ProgressTracker",
    "SpeedAccumulator",
    "TrajectoryAnalyser",
    "VerdictStatus",
]
