"""Prompt selection and generation for the driver."""

from rde_coach.coaching.models import Emphasis, InvalidRdeReason, PromptOutput, PromptType
from rde_coach.coaching.prompts import PromptGenerator
from rde_coach.coaching.selector import PromptSelector
from rde_coach.coaching.session import RdeSession

__all__ = [
    "Emphasis",
    "InvalidRdeReason",
    "PromptGenerator",
    "PromptOutput",
    "PromptSelector",
    "PromptType",
    "RdeSession",
]
