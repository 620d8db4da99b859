"""Multiplicative demand factors derived from exogenous conditions.

Every factor is a multiplier centred on 1.0.  Factors combine by product so
they scale demand proportionally and can never push it below zero.  Weather
and event lookups are table driven and fail soft: an unknown key yields the
neutral multiplier instead of an error.
"""

from __future__ import annotations

import logging
from datetime import date

from ..core.config import EngineConfig
from ..models.schemas import ConditionSet, FactorContributions

LOGGER = logging.getLogger(__name__)


class FactorModel:
    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    # ------------------------------------------------------------------
    def day_of_week_multiplier(self, day: date) -> float:
        if day.weekday() in self.config.weekend_days:
            return self.config.weekend_multiplier
        return self.config.weekday_multiplier

    def meal_period_multiplier(self, meal_period: str) -> float:
        try:
            return self.config.meal_period_multipliers[meal_period.lower()]
        except KeyError:
            raise ValueError(f"Unknown meal period '{meal_period}'") from None

    def academic_multiplier(self, day: date) -> float:
        if day.month in self.config.academic_break_months:
            return self.config.academic_break_multiplier
        return self.config.academic_term_multiplier

    def weather_multiplier(self, weather: str | None) -> float:
        return self._lookup(self.config.weather_multipliers, weather, "weather")

    def event_multiplier(self, event: str | None) -> float:
        return self._lookup(self.config.event_multipliers, event, "event")

    def _lookup(self, table: dict[str, float], key: str | None, kind: str) -> float:
        normalised = (key or "").strip().lower()
        if normalised in table:
            return table[normalised]
        LOGGER.debug("Unknown %s '%s'; using neutral multiplier", kind, key)
        return self.config.neutral_multiplier

    # ------------------------------------------------------------------
    def factors(self, conditions: ConditionSet, meal_period: str) -> FactorContributions:
        """Return every multiplier that applies to ``meal_period`` under ``conditions``."""

        return FactorContributions(
            weather=self.weather_multiplier(conditions.weather),
            events=self.event_multiplier(conditions.event),
            seasonality=self.academic_multiplier(conditions.date),
            day_of_week=self.day_of_week_multiplier(conditions.date),
            meal_period=self.meal_period_multiplier(meal_period),
            attendance=float(conditions.attendance_multiplier),
        )
