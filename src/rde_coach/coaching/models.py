"""Coaching data models: prompt types, emphasis, output record and validity reasons."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum

from rde_coach.analysis.models import Constraint


class PromptType(str, Enum):
    """The single kind of instruction shown to the driver on a tick."""

    NONE = "none"
    SUFFICIENCY = "sufficiency"
    DRIVING_STYLE = "driving_style"
    AVERAGE_URBAN_SPEED = "average_urban_speed"
    STOPPING_PERCENTAGE = "stopping_percentage"
    HIGH_SPEED_PERCENTAGE = "high_speed_percentage"
    VERY_HIGH_SPEED_PERCENTAGE = "very_high_speed_percentage"
    INVALID_RDE_REASON = "invalid_rde_reason"

    @classmethod
    def for_constraint(cls, constraint: Constraint | None) -> PromptType:
        """Map a failed constraint onto the prompt type that reports it."""
        if constraint is None:
            return cls.NONE
        return _CONSTRAINT_PROMPTS[constraint]


_CONSTRAINT_PROMPTS: dict[Constraint, PromptType] = {
    Constraint.HIGH_SPEED_DURATION: PromptType.HIGH_SPEED_PERCENTAGE,
    Constraint.VERY_HIGH_SPEED_PERCENTAGE: PromptType.VERY_HIGH_SPEED_PERCENTAGE,
    Constraint.STOPPING_PERCENTAGE: PromptType.STOPPING_PERCENTAGE,
    Constraint.AVERAGE_URBAN_SPEED: PromptType.AVERAGE_URBAN_SPEED,
}


class Emphasis(str, Enum):
    """Severity cue of a prompt, independent of any colour palette."""

    NEUTRAL = "neutral"
    POSITIVE = "positive"
    NEGATIVE = "negative"


class InvalidRdeReason(IntEnum):
    """Validity codes emitted by the upstream regulatory engine."""

    UNKNOWN = 0
    VALID = 1
    BAD_DURATION = 2
    MAX_SPEED_EXCEEDED = 3
    INVALID_STOPPING = 4
    AMBIENT_TEMPERATURE = 5
    INVALID_DYNAMICS = 6
    TOO_MANY_LONG_STOPS = 7
    INVALID_AVERAGE_URBAN_SPEED = 8
    INVALID_URBAN_PROPORTION = 9
    INVALID_RURAL_PROPORTION = 10
    INVALID_MOTORWAY_PROPORTION = 11
    FAILED_TRIP_REQUIREMENTS = 12

    @classmethod
    def from_signal(cls, code: float) -> InvalidRdeReason:
        """Look up a code; anything outside 0–12 (or non-finite) is UNKNOWN."""
        if not math.isfinite(code) or code != int(code):
            return cls.UNKNOWN
        try:
            return cls(int(code))
        except ValueError:
            return cls.UNKNOWN

    @property
    def description(self) -> str:
        return _REASON_TEXT[self]


_REASON_TEXT: dict[InvalidRdeReason, str] = {
    InvalidRdeReason.UNKNOWN: "The reason is unknown.",
    InvalidRdeReason.VALID: "All requirements are currently met.",
    InvalidRdeReason.BAD_DURATION: "The test duration is outside 90 to 120 minutes.",
    InvalidRdeReason.MAX_SPEED_EXCEEDED: "The maximum speed was exceeded.",
    InvalidRdeReason.INVALID_STOPPING: "The stopping percentage is invalid.",
    InvalidRdeReason.AMBIENT_TEMPERATURE: "The ambient temperature is out of range.",
    InvalidRdeReason.INVALID_DYNAMICS: "The driving dynamics are invalid.",
    InvalidRdeReason.TOO_MANY_LONG_STOPS: "There were too many long stops.",
    InvalidRdeReason.INVALID_AVERAGE_URBAN_SPEED: "The average urban speed is invalid.",
    InvalidRdeReason.INVALID_URBAN_PROPORTION: "The urban distance proportion is invalid.",
    InvalidRdeReason.INVALID_RURAL_PROPORTION: "The rural distance proportion is invalid.",
    InvalidRdeReason.INVALID_MOTORWAY_PROPORTION: "The motorway distance proportion is invalid.",
    InvalidRdeReason.FAILED_TRIP_REQUIREMENTS: "The trip requirements were not met.",
}


@dataclass
class PromptOutput:
    """What rendering and speech collaborators receive on every tick."""

    prompt_type: PromptType
    text: str = ""
    analysis_text: str = ""
    emphasis: Emphasis = Emphasis.NEUTRAL
    analysis_emphasis: Emphasis = Emphasis.NEUTRAL
    parameters: dict[str, float] = field(default_factory=dict)
    """Raw numbers behind the text, e.g. ``speed_change_kmh`` or ``value``."""

    @property
    def identity(self) -> tuple[PromptType, str]:
        """Key used to tell a repeated prompt from a new one."""
        return (self.prompt_type, self.text)

    def to_dict(self) -> dict:
        return {
            "prompt_type": self.prompt_type.value,
            "text": self.text,
            "analysis_text": self.analysis_text,
            "emphasis": self.emphasis.value,
            "analysis_emphasis": self.analysis_emphasis.value,
            "parameters": dict(self.parameters),
        }
