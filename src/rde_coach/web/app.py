"""FastAPI Web application — live coaching sessions for a local UI."""

from __future__ import annotations

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException

from rde_coach.config import CoachConfig
from rde_coach.web.schemas import (
    CreateSessionRequest,
    HealthResponse,
    ProgressResponse,
    PromptResponse,
    SessionResponse,
    TickRequest,
)
from rde_coach.web.service import SessionNotFound, SessionRegistry

load_dotenv()  # loads .env from project root; must run before env vars are consumed

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

_VERSION = "0.1.0"

app = FastAPI(title="RDE Coach", version=_VERSION)

_config = CoachConfig.from_env()
registry = SessionRegistry(default_distance_km=_config.expected_distance_km)


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Session {session_id!r} not found")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=_VERSION)


@app.post("/api/sessions", response_model=SessionResponse)
def create_session(req: CreateSessionRequest | None = None) -> SessionResponse:
    """Start a new RDE test session."""
    distance = req.expected_distance_km if req is not None else None
    try:
        session_id, session = registry.create(distance)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return SessionResponse(session_id=session_id, expected_distance_km=session.expected_distance_km)


@app.post("/api/sessions/{session_id}/ticks", response_model=PromptResponse)
def post_tick(session_id: str, req: TickRequest) -> PromptResponse:
    """Feed one tick and return the prompt to display."""
    try:
        output = registry.update(session_id, req.model_dump())
    except SessionNotFound as exc:
        raise _not_found(session_id) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return PromptResponse(**output.to_dict())


@app.get("/api/sessions/{session_id}/progress", response_model=ProgressResponse)
def get_progress(session_id: str) -> ProgressResponse:
    """Return the session's progress snapshot."""
    try:
        snapshot = registry.snapshot(session_id)
    except SessionNotFound as exc:
        raise _not_found(session_id) from exc
    return ProgressResponse(session_id=session_id, **snapshot)


@app.delete("/api/sessions/{session_id}", status_code=204)
def delete_session(session_id: str) -> None:
    try:
        registry.delete(session_id)
    except SessionNotFound as exc:
        raise _not_found(session_id) from exc
