from __future__ import annotations

from pathlib import Path
import sys

from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from backend.foodcast.main import app  # noqa: E402
from backend.foodcast.services.catalog_service import CatalogService  # noqa: E402
from backend.foodcast.services.history_service import FileHistoryProvider  # noqa: E402


client = TestClient(app)


def test_waste_summary_over_synthetic_history() -> None:
    response = client.get("/api/v1/analytics/waste", params={"start": "2024-09-02", "end": "2024-09-08"})
    assert response.status_code == 200

    summary = response.json()
    assert summary["days"] == 7
    assert len(summary["by_item"]) == 10
    assert len(summary["by_meal"]) == 3
    assert len(summary["by_category"]) == 5
    assert summary["total_wasted"] == sum(row["wasted"] for row in summary["by_day"])


def test_inverted_range_is_rejected() -> None:
    response = client.get("/api/v1/analytics/waste", params={"start": "2024-09-08", "end": "2024-09-02"})
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "invalid_request"


def test_backtest_reports_accuracy() -> None:
    response = client.get("/api/v1/backtest", params={"start": "2024-09-02", "end": "2024-09-08"})
    assert response.status_code == 200

    evaluation = response.json()
    assert evaluation["observations"] == 7 * 10 * 3
    assert 0.0 <= evaluation["coverage"] <= 1.0
    assert evaluation["mae"] >= 0.0


def test_missing_waste_log_returns_503(monkeypatch, tmp_path: Path) -> None:
    provider = FileHistoryProvider(tmp_path / "waste_records.csv", catalog=CatalogService())
    monkeypatch.setattr("backend.foodcast.api.v1.analytics._history_provider", provider)

    response = client.get("/api/v1/analytics/waste")
    assert response.status_code == 503
    assert response.json()["detail"]["error"] == "data_unavailable"
