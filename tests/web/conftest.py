"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from rde_coach.web.app import app


@pytest.fixture
def client():
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session_id(client) -> str:
    """Id of a freshly created 100 km session."""
    resp = client.post("/api/sessions", json={"expected_distance_km": 100.0})
    return resp.json()["session_id"]


def make_tick_body(**overrides) -> dict:
    """Build a tick request body."""
    body = {
        "urban_distance_m": 0.0,
        "rural_distance_m": 0.0,
        "motorway_distance_m": 0.0,
        "elapsed_urban_seconds": 0,
        "total_time_minutes": 0.0,
        "current_speed_kmh": 0.0,
        "timestamp_ms": 0,
    }
    body.update(overrides)
    return body
