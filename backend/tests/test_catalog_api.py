from __future__ import annotations

from pathlib import Path
import sys

from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from backend.foodcast.main import app  # noqa: E402


client = TestClient(app)


def test_catalog_listing_and_lookup() -> None:
    response = client.get("/api/v1/catalog/items")
    assert response.status_code == 200
    assert len(response.json()) == 10

    response = client.get("/api/v1/catalog/items", params={"category": "vegetarian"})
    assert {item["id"] for item in response.json()} == {"salad", "pasta", "soup"}

    response = client.get("/api/v1/catalog/items/fries")
    assert response.status_code == 200
    assert response.json()["shelf_life_hours"] == 1


def test_catalog_unknown_item_and_category() -> None:
    assert client.get("/api/v1/catalog/items/lobster").status_code == 404
    assert client.get("/api/v1/catalog/items", params={"category": "seafood"}).status_code == 422


def test_correlation_endpoints() -> None:
    response = client.get("/api/v1/correlations")
    assert response.status_code == 200
    assert len(response.json()) == 6

    response = client.get("/api/v1/correlations/fries/burger")
    assert response.status_code == 200
    assert response.json()["label"] == "very strong complement"

    response = client.get("/api/v1/correlations/soda/dessert")
    assert response.json()["label"] == "neutral"

    response = client.get("/api/v1/correlations/classify", params={"coefficient": -0.445})
    assert response.json()["recommendation"] == "substitute"

    assert client.get("/api/v1/correlations/classify", params={"coefficient": 1.5}).status_code == 422
    assert client.get("/api/v1/correlations/burger/lobster").status_code == 404


def test_derived_correlations() -> None:
    response = client.get(
        "/api/v1/correlations/derived",
        params={"start": "2024-09-02", "end": "2024-09-15", "min_abs": 0.0},
    )
    assert response.status_code == 200
    for insight in response.json():
        assert -1.0 <= insight["correlation"]["correlation"] <= 1.0


def test_health() -> None:
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["menu_items"] == 10
