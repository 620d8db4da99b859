r"""backend\foodcast\services\forecasting_service.py

Per-item, per-meal-period demand forecasting.

Demand is modelled as the item's popularity scaled to typical daily
servings, multiplied by the factors produced by :class:`FactorModel`.  A
symmetric interval proportional to the point forecast expresses the
uncertainty, and the relative width of that interval is the confidence
score consumed by the safety-stock optimiser.

The forecaster is deterministic.  Random variation is only applied when a
``numpy.random.Generator`` is injected, which keeps tests reproducible.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional

import numpy as np

from ..core.config import EngineConfig
from ..models.schemas import (
    MEAL_PERIODS,
    ConditionSet,
    ConfidenceInterval,
    DemandForecast,
    ForecastEvaluation,
    MenuItem,
    WasteRecord,
)
from .catalog_service import CatalogProvider, CatalogService
from .factor_model import FactorModel
from .rounding import round_half_up

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helper utilities (kept top-level for straightforward unit testing)


def compute_interval(predicted: int, interval_fraction: float) -> tuple[int, int]:
    """Return ``(lower, upper)`` bounds around ``predicted``.

    The half-width is ``predicted * interval_fraction``.  Both bounds are
    rounded to integers, clamped at zero and widened if rounding would leave
    ``predicted`` outside the band.
    """

    variance = predicted * interval_fraction
    lower = max(round_half_up(predicted - variance), 0)
    upper = max(round_half_up(predicted + variance), 0)
    return min(lower, predicted), max(upper, predicted)


def confidence_score(predicted: float, lower: float, upper: float) -> float:
    """Return ``1 - (upper - lower) / predicted`` clamped to ``[0, 1]``.

    A zero prediction carries no information about the interval, so the
    score is defined as 0 rather than raising.
    """

    if predicted <= 0:
        return 0.0
    score = 1.0 - (upper - lower) / predicted
    return float(min(max(score, 0.0), 1.0))


# ---------------------------------------------------------------------------
# Core service implementation


class DemandForecaster:
    """Forecast demand for every menu item and meal period."""

    def __init__(
        self,
        catalog: CatalogProvider | None = None,
        config: EngineConfig | None = None,
        factor_model: FactorModel | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.catalog = catalog or CatalogService()
        self.factor_model = factor_model or FactorModel(self.config)
        self.rng = rng
        if self.config.noise_low > self.config.noise_high:
            raise ValueError("noise_low must not exceed noise_high")

    # ------------------------------------------------------------------
    def _noise(self) -> float:
        if self.rng is None:
            return 1.0
        return float(self.rng.uniform(self.config.noise_low, self.config.noise_high))

    # ------------------------------------------------------------------
    def forecast(
        self,
        item: MenuItem,
        meal_period: str,
        day: date,
        conditions: ConditionSet | None = None,
    ) -> DemandForecast:
        """Return the demand forecast for ``item`` during ``meal_period`` on ``day``."""

        meal = str(meal_period).lower()
        if meal not in MEAL_PERIODS:
            raise ValueError(f"Unknown meal period '{meal_period}'")
        if conditions is None:
            conditions = ConditionSet(date=day)
        elif conditions.date != day:
            raise ValueError(
                f"Conditions are for {conditions.date.isoformat()} but the forecast is for {day.isoformat()}"
            )

        factors = self.factor_model.factors(conditions, meal)
        base_demand = item.popularity_score * self.config.base_demand_scale
        expected = (
            base_demand
            * factors.meal_period
            * factors.day_of_week
            * factors.seasonality
            * factors.weather
            * factors.events
            * factors.attendance
        )
        predicted = max(round_half_up(expected * self._noise()), 0)
        lower, upper = compute_interval(predicted, self.config.interval_fraction)

        return DemandForecast(
            menu_item_id=item.id,
            meal_period=meal,
            date=day,
            predicted_demand=predicted,
            confidence_interval=ConfidenceInterval(lower=lower, upper=upper),
            factors=factors,
            confidence=confidence_score(predicted, lower, upper),
        )

    # ------------------------------------------------------------------
    def forecast_item(
        self, item_id: str, day: date, conditions: ConditionSet | None = None
    ) -> List[DemandForecast]:
        item = self.catalog.get(item_id)
        return [self.forecast(item, meal, day, conditions) for meal in MEAL_PERIODS]

    # ------------------------------------------------------------------
    def forecast_all(self, day: date, conditions: ConditionSet | None = None) -> List[DemandForecast]:
        """Forecast every (item x meal period) pair for ``day``."""

        conditions = conditions or ConditionSet(date=day)
        forecasts = [
            self.forecast(item, meal, day, conditions)
            for item in self.catalog.items()
            for meal in MEAL_PERIODS
        ]
        LOGGER.info(
            "Forecasted %d item/meal pairs for %s weather=%s event=%s",
            len(forecasts),
            day.isoformat(),
            conditions.weather,
            conditions.event,
        )
        return forecasts

    # ------------------------------------------------------------------
    def evaluate(self, records: Iterable[WasteRecord]) -> ForecastEvaluation:
        """Compare forecasts under neutral conditions with recorded consumption.

        Historical records do not carry weather or events, so only the
        calendar factors (day of week and academic term) vary.
        """

        actual_values: list[float] = []
        predicted_values: list[float] = []
        hits = 0
        cache: dict[tuple[str, str, date], DemandForecast] = {}

        for record in records:
            key = (record.menu_item_id, record.meal_period, record.date)
            forecast: Optional[DemandForecast] = cache.get(key)
            if forecast is None:
                item = self.catalog.get(record.menu_item_id)
                forecast = self.forecast(item, record.meal_period, record.date)
                cache[key] = forecast
            interval = forecast.confidence_interval
            actual_values.append(float(record.consumed))
            predicted_values.append(float(forecast.predicted_demand))
            if interval.lower <= record.consumed <= interval.upper:
                hits += 1

        if not actual_values:
            raise ValueError("No historical records available for evaluation")

        actual_arr = np.array(actual_values, dtype=float)
        pred_arr = np.array(predicted_values, dtype=float)
        mae = float(np.mean(np.abs(actual_arr - pred_arr)))
        mask = actual_arr != 0
        if mask.any():
            mape = float(np.mean(np.abs((actual_arr[mask] - pred_arr[mask]) / actual_arr[mask])))
        else:
            mape = 0.0

        coverage = hits / len(actual_values)
        accuracy = max(0.0, 1.0 - mape) * 100.0
        LOGGER.info(
            "Evaluated %d observations mae=%.2f mape=%.3f coverage=%.3f",
            len(actual_values),
            mae,
            mape,
            coverage,
        )
        return ForecastEvaluation(
            observations=len(actual_values),
            mae=round(mae, 4),
            mape=round(mape, 4),
            coverage=round(coverage, 4),
            accuracy_pct=round(accuracy, 2),
        )
