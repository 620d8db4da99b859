from __future__ import annotations

from pathlib import Path
import sys

from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from backend.foodcast.main import app  # noqa: E402


client = TestClient(app)


def test_forecast_all_items() -> None:
    response = client.post("/api/v1/forecasts", json={"date": "2024-09-27", "weather": "Rainy"})
    assert response.status_code == 200

    payload = response.json()
    assert payload["conditions"]["weather"] == "rainy"
    assert payload["conditions"]["day_of_week"] == 4
    assert len(payload["forecasts"]) == 30
    for forecast in payload["forecasts"]:
        interval = forecast["confidence_interval"]
        assert interval["lower"] <= forecast["predicted_demand"] <= interval["upper"]
        assert forecast["factors"]["weather"] == 0.85


def test_forecast_single_item() -> None:
    response = client.post("/api/v1/forecasts/burger", json={"date": "2024-09-27"})
    assert response.status_code == 200

    forecasts = {f["meal_period"]: f for f in response.json()}
    assert set(forecasts) == {"breakfast", "lunch", "dinner"}
    assert forecasts["lunch"]["predicted_demand"] == 119


def test_forecast_unknown_item_returns_404() -> None:
    response = client.post("/api/v1/forecasts/lobster", json={"date": "2024-09-27"})
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "item_not_found"


def test_forecast_invalid_payload_returns_422() -> None:
    assert client.post("/api/v1/forecasts", json={"date": "2024-13-40"}).status_code == 422
    response = client.post(
        "/api/v1/forecasts", json={"date": "2024-09-27", "attendance_multiplier": -1}
    )
    assert response.status_code == 422


def test_optimization_endpoints() -> None:
    response = client.post("/api/v1/optimization", json={"date": "2024-09-27"})
    assert response.status_code == 200
    summary = response.json()
    assert len(summary["results"]) == 10
    assert summary["total_current_waste"] == sum(r["current_waste"] for r in summary["results"])

    response = client.post("/api/v1/optimization/burger", json={"date": "2024-09-27"})
    assert response.status_code == 200
    result = response.json()
    assert result["recommended_quantity"] == 347
    assert result["safety_stock_multiplier"] == 1.2

    assert client.post("/api/v1/optimization/lobster", json={"date": "2024-09-27"}).status_code == 404
