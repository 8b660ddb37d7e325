"""Pydantic request/response schemas for the live session API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str
    version: str


class CreateSessionRequest(BaseModel):
    expected_distance_km: float | None = Field(default=None, gt=0)


class SessionResponse(BaseModel):
    session_id: str
    expected_distance_km: float


class TickRequest(BaseModel):
    urban_distance_m: float = 0.0
    rural_distance_m: float = 0.0
    motorway_distance_m: float = 0.0
    elapsed_urban_seconds: int = 0
    total_time_minutes: float = 0.0
    current_speed_kmh: float = 0.0
    avg_urban_speed_kmh: float = 0.0
    avg_rural_speed_kmh: float = 0.0
    avg_motorway_speed_kmh: float = 0.0
    is_valid_signal: float = 0.0
    not_rde_signal: float = 0.0
    timestamp_ms: int | None = None


class PromptResponse(BaseModel):
    prompt_type: str
    text: str
    analysis_text: str
    emphasis: str
    analysis_emphasis: str
    parameters: dict[str, float]


class ProgressResponse(BaseModel):
    session_id: str
    urban_percentage: float
    rural_percentage: float
    motorway_percentage: float
    current_speed: float
    expected_distance_km: float
    total_time: float
    desired_driving_mode: str
    prompt_type: str
    invalid_reason: str
    ticks: int
