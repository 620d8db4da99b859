from __future__ import annotations

from pathlib import Path
import sys

from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from backend.foodcast.main import app  # noqa: E402


client = TestClient(app)


def test_simulate_baseline() -> None:
    response = client.post(
        "/api/v1/scenarios/simulate",
        json={"date": "2024-10-15", "attendance": 1000, "weather": "sunny", "event": "none"},
    )
    assert response.status_code == 200

    result = response.json()
    assert result["projected_demand"] == 950
    assert result["confidence"] == 95
    assert result["confidence_is_illustrative"] is True
    assert result["factors"] == {"attendance": 0, "weather": 0, "event": 0}


def test_simulate_rejects_negative_attendance() -> None:
    response = client.post("/api/v1/scenarios/simulate", json={"date": "2024-10-15", "attendance": -10})
    assert response.status_code == 422


def test_templates_round_trip_through_simulate() -> None:
    response = client.get("/api/v1/scenarios/templates")
    assert response.status_code == 200

    templates = response.json()
    assert len(templates) == 4
    game_day = next(t for t in templates if t["name"] == "Game Day")
    simulated = client.post("/api/v1/scenarios/simulate", json=game_day["scenario"])
    assert simulated.status_code == 200
    assert simulated.json()["factors"]["event"] == 30


def test_simulate_rejects_attendance_multiplier() -> None:
    response = client.post(
        "/api/v1/scenarios/simulate",
        json={"date": "2024-10-15", "attendance": 1000, "attendance_multiplier": 2.0},
    )
    assert response.status_code == 422


def test_simulate_baseline_recommendation_rounds_up() -> None:
    response = client.post("/api/v1/scenarios/simulate", json={"date": "2024-10-15", "attendance": 1000})
    assert response.status_code == 200
    assert response.json()["recommended_quantity"] == 1093
