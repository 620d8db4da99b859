"""What-if projections under hypothetical attendance, weather and events."""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import List

from ..core.config import EngineConfig
from ..models.schemas import ScenarioFactors, ScenarioInput, ScenarioResult, ScenarioTemplate
from .factor_model import FactorModel
from .rounding import round_half_up

LOGGER = logging.getLogger(__name__)


def _pct_deviation(multiplier: float) -> int:
    return round_half_up((multiplier - 1.0) * 100)


def scenario_confidence(total_multiplier: float, config: EngineConfig) -> float:
    """Similarity of a scenario to baseline operations, in ``[floor, ceiling]``.

    The distance is ``|ln(total_multiplier)|`` so halving and doubling demand
    are equally far from the baseline.  Confidence starts at the ceiling for
    a baseline scenario and decays linearly with distance down to the floor.
    A zero multiplier (nobody attends) sits at the floor.
    """

    if total_multiplier <= 0:
        return config.scenario_confidence_floor
    distance = abs(math.log(total_multiplier))
    value = config.scenario_confidence_ceiling - config.scenario_confidence_decay * distance
    return max(config.scenario_confidence_floor, min(config.scenario_confidence_ceiling, value))


class ScenarioSimulator:
    def __init__(self, config: EngineConfig | None = None, factor_model: FactorModel | None = None) -> None:
        self.config = config or EngineConfig()
        self.factor_model = factor_model or FactorModel(self.config)

    # ------------------------------------------------------------------
    def simulate(self, scenario: ScenarioInput) -> ScenarioResult:
        cfg = self.config

        attendance_multiplier = scenario.attendance / cfg.baseline_attendance
        weather_multiplier = self.factor_model.weather_multiplier(scenario.weather)
        event_multiplier = self.factor_model.event_multiplier(scenario.event)
        total = attendance_multiplier * weather_multiplier * event_multiplier

        projected_demand = round_half_up(cfg.baseline_demand * total)
        projected_waste = round_half_up(cfg.baseline_waste * total * cfg.optimization_factor)
        projected_cost = round_half_up(cfg.baseline_cost * total * cfg.optimization_factor)

        normal_waste = round_half_up(cfg.baseline_demand * total * cfg.current_waste_rate)
        waste_savings = normal_waste - projected_waste
        cost_savings = round_half_up(waste_savings * cfg.average_cost_per_item)
        if normal_waste > 0:
            waste_reduction = round_half_up(waste_savings / normal_waste * 100)
        else:
            waste_reduction = 0

        safety_stock = round_half_up(projected_demand * cfg.scenario_safety_margin)
        factors = ScenarioFactors(
            attendance=_pct_deviation(attendance_multiplier),
            weather=_pct_deviation(weather_multiplier),
            event=_pct_deviation(event_multiplier),
        )

        LOGGER.info(
            "Scenario attendance=%d weather=%s event=%s total_multiplier=%.3f demand=%d",
            scenario.attendance,
            scenario.weather,
            scenario.event,
            total,
            projected_demand,
        )

        return ScenarioResult(
            projected_demand=projected_demand,
            recommended_quantity=projected_demand + safety_stock,
            safety_stock=safety_stock,
            projected_waste=projected_waste,
            projected_cost=projected_cost,
            normal_waste=normal_waste,
            waste_savings=waste_savings,
            cost_savings=cost_savings,
            waste_reduction_pct=waste_reduction,
            total_multiplier=total,
            confidence=round_half_up(scenario_confidence(total, cfg) * 100),
            confidence_is_illustrative=True,
            factors=factors,
            recommendations=self._recommendations(
                projected_demand + safety_stock, waste_reduction, factors
            ),
        )

    # ------------------------------------------------------------------
    def _recommendations(self, prepare: int, waste_reduction: int, factors: ScenarioFactors) -> List[str]:
        margin = round_half_up(self.config.scenario_safety_margin * 100)
        actions = [
            f"Prepare {prepare} total items ({margin}% safety margin).",
            f"Expect {waste_reduction}% less waste than normal operations.",
        ]
        if factors.attendance > 0 or factors.event > 0:
            actions.append("Schedule extra staff and stagger batch cooking for the demand peak.")
        elif factors.attendance < 0 or factors.event < 0:
            actions.append("Cook in smaller batches and favour items with longer shelf life.")
        if factors.weather < 0:
            actions.append("Shift preparation toward hot dishes for the poor weather.")
        return actions

    # ------------------------------------------------------------------
    @staticmethod
    def templates() -> List[ScenarioTemplate]:
        """Prebuilt scenarios for common campus situations."""

        return [
            ScenarioTemplate(
                name="Exam Week",
                description="Reduced attendance, stress eating patterns",
                scenario=ScenarioInput(
                    date=date(2024, 10, 15), attendance=800, weather="cloudy",
                    temperature=18, event="exam", event_impact="high",
                ),
            ),
            ScenarioTemplate(
                name="Game Day",
                description="High attendance, increased demand",
                scenario=ScenarioInput(
                    date=date(2024, 11, 2), attendance=1500, weather="sunny",
                    temperature=24, event="sports", event_impact="high",
                ),
            ),
            ScenarioTemplate(
                name="Holiday Break",
                description="Very low attendance, skeleton crew",
                scenario=ScenarioInput(
                    date=date(2024, 12, 20), attendance=300, weather="snowy",
                    temperature=-5, event="holiday", event_impact="high",
                ),
            ),
            ScenarioTemplate(
                name="Graduation",
                description="Peak attendance, special event",
                scenario=ScenarioInput(
                    date=date(2024, 9, 15), attendance=1800, weather="sunny",
                    temperature=25, event="graduation", event_impact="high",
                ),
            ),
        ]
