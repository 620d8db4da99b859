"""Turn demand forecasts into preparation quantities using safety-stock tiers."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Sequence

import numpy as np

from ..core.config import ConfidenceTier, EngineConfig
from ..models.schemas import (
    ConditionSet,
    DemandForecast,
    MenuItem,
    OptimizationResult,
    OptimizationSummary,
)
from .forecasting_service import DemandForecaster
from .rounding import round_half_up

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
def safety_stock_multiplier(
    confidence: float,
    tiers: Sequence[ConfidenceTier],
    fallback: float,
) -> float:
    """Return the multiplier of the first tier whose threshold ``confidence`` exceeds.

    Comparisons are strict, so a confidence exactly on a threshold falls to
    the next (larger) multiplier.
    """

    for tier in sorted(tiers, key=lambda t: t.above, reverse=True):
        if confidence > tier.above:
            return tier.multiplier
    return fallback


def reduction_pct(current: float, projected: float) -> float:
    """Percentage reduction from ``current`` to ``projected``; 0 when ``current`` is 0."""

    if current <= 0:
        return 0.0
    return (current - projected) / current * 100.0


def average_confidence(forecasts: Sequence[DemandForecast]) -> float:
    if not forecasts:
        return 0.0
    return float(np.mean([f.confidence for f in forecasts]))


class SafetyStockOptimizer:
    """Confidence-tiered preparation recommendations and waste projections."""

    def __init__(
        self,
        forecaster: DemandForecaster | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.config = config or (forecaster.config if forecaster else EngineConfig())
        self.forecaster = forecaster or DemandForecaster(config=self.config)

    # ------------------------------------------------------------------
    def multiplier_for(self, confidence: float) -> float:
        return safety_stock_multiplier(
            confidence,
            self.config.confidence_tiers,
            self.config.fallback_safety_multiplier,
        )

    # ------------------------------------------------------------------
    def optimize(self, item: MenuItem, forecasts: Sequence[DemandForecast]) -> OptimizationResult:
        """Recommend how much of ``item`` to prepare given its forecasts for one date."""

        foreign = {f.menu_item_id for f in forecasts if f.menu_item_id != item.id}
        if foreign:
            raise ValueError(
                f"Forecasts for {sorted(foreign)} cannot be used to optimise '{item.id}'"
            )
        if len({f.date for f in forecasts}) > 1:
            raise ValueError("Forecasts passed to optimize must all be for the same date")

        total_demand = int(sum(f.predicted_demand for f in forecasts))
        avg_confidence = average_confidence(forecasts) if total_demand > 0 else 0.0
        multiplier = self.multiplier_for(avg_confidence)

        recommended = round_half_up(total_demand * multiplier)
        recommended = max(recommended, total_demand)
        safety_stock = recommended - total_demand

        current_waste = round_half_up(total_demand * self.config.current_waste_rate)
        projected_waste = round_half_up(total_demand * self.config.optimized_waste_rate)
        cost_savings = float((current_waste - projected_waste) * item.cost)

        LOGGER.debug(
            "Optimised %s demand=%d confidence=%.3f multiplier=%.2f recommended=%d",
            item.id,
            total_demand,
            avg_confidence,
            multiplier,
            recommended,
        )

        return OptimizationResult(
            menu_item_id=item.id,
            predicted_demand=total_demand,
            recommended_quantity=recommended,
            safety_stock=safety_stock,
            safety_stock_multiplier=multiplier,
            current_waste=current_waste,
            projected_waste=projected_waste,
            waste_reduction_pct=reduction_pct(current_waste, projected_waste),
            cost_savings=cost_savings,
            confidence=round_half_up(avg_confidence * 100),
        )

    # ------------------------------------------------------------------
    @staticmethod
    def summarize(day: date, results: Iterable[OptimizationResult]) -> OptimizationSummary:
        """Aggregate per-item results into totals for ``day``."""

        results = list(results)
        total_current = sum(r.current_waste for r in results)
        total_projected = sum(r.projected_waste for r in results)
        total_savings = float(sum(r.cost_savings for r in results))
        return OptimizationSummary(
            date=day,
            results=results,
            total_current_waste=total_current,
            total_projected_waste=total_projected,
            total_cost_savings=total_savings,
            overall_reduction_pct=reduction_pct(total_current, total_projected),
        )

    # ------------------------------------------------------------------
    def optimize_item(
        self, item_id: str, day: date, conditions: ConditionSet | None = None
    ) -> OptimizationResult:
        item = self.forecaster.catalog.get(item_id)
        return self.optimize(item, self.forecaster.forecast_item(item_id, day, conditions))

    # ------------------------------------------------------------------
    def optimize_all(self, day: date, conditions: ConditionSet | None = None) -> OptimizationSummary:
        """Forecast and optimise every catalogue item for ``day``."""

        forecasts = self.forecaster.forecast_all(day, conditions)
        by_item: dict[str, List[DemandForecast]] = {}
        for forecast in forecasts:
            by_item.setdefault(forecast.menu_item_id, []).append(forecast)

        results = [
            self.optimize(item, by_item.get(item.id, []))
            for item in self.forecaster.catalog.items()
        ]
        summary = self.summarize(day, results)
        LOGGER.info(
            "Optimisation for %s: current_waste=%d projected_waste=%d savings=%.2f",
            day.isoformat(),
            summary.total_current_waste,
            summary.total_projected_waste,
            summary.total_cost_savings,
        )
        return summary
