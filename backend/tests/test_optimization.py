from __future__ import annotations

from datetime import date
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from backend.foodcast.core.config import ConfidenceTier, EngineConfig
from backend.foodcast.models.schemas import ConditionSet, MenuItem
from backend.foodcast.services.catalog_service import CatalogService
from backend.foodcast.services.forecasting_service import DemandForecaster
from backend.foodcast.services.optimization_service import (
    SafetyStockOptimizer,
    reduction_pct,
    safety_stock_multiplier,
)

FRIDAY_IN_TERM = date(2024, 9, 27)
TIERS = [ConfidenceTier(above=0.8, multiplier=1.10), ConfidenceTier(above=0.6, multiplier=1.20)]


def _optimizer(*items: MenuItem) -> SafetyStockOptimizer:
    catalog = CatalogService(items=items, correlations=[]) if items else CatalogService()
    return SafetyStockOptimizer(forecaster=DemandForecaster(catalog=catalog, config=EngineConfig()))


@pytest.mark.parametrize(
    "confidence, expected",
    [(0.9, 1.10), (0.7, 1.20), (0.4, 1.30), (0.8, 1.20), (0.6, 1.30), (0.0, 1.30)],
)
def test_safety_stock_tiers(confidence: float, expected: float) -> None:
    assert safety_stock_multiplier(confidence, TIERS, 1.30) == expected


def test_tiers_are_order_insensitive() -> None:
    assert safety_stock_multiplier(0.85, list(reversed(TIERS)), 1.30) == 1.10


def test_reduction_pct_guards_zero() -> None:
    assert reduction_pct(0, 0) == 0.0
    assert reduction_pct(200, 50) == 75.0


def test_burger_recommendation() -> None:
    optimizer = _optimizer()

    result = optimizer.optimize_item("burger", FRIDAY_IN_TERM)

    # 68 breakfast + 119 lunch + 102 dinner, average confidence ~0.70.
    assert result.predicted_demand == 289
    assert result.safety_stock_multiplier == 1.20
    assert result.recommended_quantity == 347
    assert result.safety_stock == 58
    assert result.current_waste == 105
    assert result.projected_waste == 35
    assert result.cost_savings == 70 * 180
    assert result.waste_reduction_pct == pytest.approx(70 / 105 * 100)
    assert result.confidence == 70


def test_recommended_never_below_demand() -> None:
    optimizer = _optimizer()
    conditions = ConditionSet(date=date(2024, 7, 6), weather="rainy", event="exam")

    summary = optimizer.optimize_all(conditions.date, conditions)

    for result in summary.results:
        assert result.recommended_quantity >= result.predicted_demand
        assert result.safety_stock == result.recommended_quantity - result.predicted_demand
        assert result.safety_stock_multiplier in {1.10, 1.20, 1.30}


def test_zero_cost_item_saves_nothing() -> None:
    free = MenuItem(id="water", name="Tap Water", category="beverages", cost=0, shelf_life_hours=24, popularity_score=0.9)
    optimizer = _optimizer(free)

    result = optimizer.optimize_item("water", FRIDAY_IN_TERM)

    assert result.current_waste > result.projected_waste
    assert result.cost_savings == 0.0


def test_zero_demand_item() -> None:
    ghost = MenuItem(id="ghost", name="Ghost Dish", category="sides", cost=10, shelf_life_hours=2, popularity_score=0.0)
    optimizer = _optimizer(ghost)

    result = optimizer.optimize_item("ghost", FRIDAY_IN_TERM)

    assert result.predicted_demand == 0
    assert result.recommended_quantity == 0
    assert result.confidence == 0
    assert result.safety_stock_multiplier == 1.30
    assert result.waste_reduction_pct == 0.0


def test_summary_totals_match_results() -> None:
    summary = _optimizer().optimize_all(FRIDAY_IN_TERM)

    current = sum(r.current_waste for r in summary.results)
    projected = sum(r.projected_waste for r in summary.results)
    assert len(summary.results) == 10
    assert summary.total_current_waste == current
    assert summary.total_projected_waste == projected
    assert summary.total_cost_savings == pytest.approx(sum(r.cost_savings for r in summary.results))
    assert summary.overall_reduction_pct == pytest.approx((current - projected) / current * 100)


def test_optimize_rejects_foreign_forecasts() -> None:
    optimizer = _optimizer()
    pizza_forecasts = optimizer.forecaster.forecast_item("pizza", FRIDAY_IN_TERM)

    with pytest.raises(ValueError):
        optimizer.optimize(optimizer.forecaster.catalog.get("burger"), pizza_forecasts)


def test_optimize_rejects_mixed_dates() -> None:
    optimizer = _optimizer()
    forecasts = optimizer.forecaster.forecast_item("pizza", FRIDAY_IN_TERM)
    forecasts += optimizer.forecaster.forecast_item("pizza", date(2024, 9, 30))

    with pytest.raises(ValueError):
        optimizer.optimize(optimizer.forecaster.catalog.get("pizza"), forecasts)
