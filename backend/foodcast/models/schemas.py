r"""backend\foodcast\models\schemas.py

Pydantic models used throughout the engine and the API.

These models serve as both request payload validators and response
serialisation schemas.  Reference data and engine outputs are frozen so a
result handed to a caller can never be mutated after it was computed.
"""

from __future__ import annotations

from datetime import date as Date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

Category = Literal["protein", "vegetarian", "sides", "beverages", "desserts"]
MealPeriod = Literal["breakfast", "lunch", "dinner"]
EventImpact = Literal["low", "medium", "high"]
Recommendation = Literal["complement", "substitute", "neutral"]

MEAL_PERIODS: tuple[str, ...] = ("breakfast", "lunch", "dinner")
CATEGORIES: tuple[str, ...] = ("protein", "vegetarian", "sides", "beverages", "desserts")


# ---------------------------------------------------------------------------
# Reference data


class MenuItem(BaseModel):
    """A dish on the menu together with its costing attributes."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    category: Category
    cost: float = Field(..., ge=0, description="Unit cost of one serving")
    shelf_life_hours: float = Field(..., gt=0)
    popularity_score: float = Field(..., ge=0, le=1)


class WasteRecord(BaseModel):
    """One observed service: what was prepared, eaten and thrown away."""

    model_config = ConfigDict(frozen=True)

    date: Date
    menu_item_id: str = Field(..., min_length=1)
    meal_period: MealPeriod
    prepared: int = Field(..., ge=0)
    consumed: int = Field(..., ge=0)
    wasted: int = Field(..., ge=0)
    cost: float = Field(..., ge=0, description="Cost of the wasted quantity")

    @model_validator(mode="after")
    def _check_balance(self) -> "WasteRecord":
        if self.consumed > self.prepared:
            raise ValueError("consumed cannot exceed prepared")
        if self.wasted != self.prepared - self.consumed:
            raise ValueError("wasted must equal prepared - consumed")
        return self


class MenuCorrelation(BaseModel):
    """Correlation between the demand of two menu items."""

    model_config = ConfigDict(frozen=True)

    item1: str
    item2: str
    correlation: float = Field(..., ge=-1.0, le=1.0)
    recommendation: Recommendation = "neutral"


# ---------------------------------------------------------------------------
# Inputs


class ConditionSet(BaseModel):
    """Exogenous conditions a forecast is made under."""

    date: Date
    weather: str = Field("sunny", description="sunny, cloudy, rainy or snowy")
    temperature: Optional[float] = Field(None, description="Temperature in degrees Celsius")
    event: str = Field("none", description="Campus event type, 'none' when quiet")
    event_impact: EventImpact = "low"
    attendance_multiplier: float = Field(1.0, ge=0)

    @field_validator("weather", "event", mode="before")
    @classmethod
    def _normalise_key(cls, value: object) -> str:
        return str(value or "").strip().lower()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def day_of_week(self) -> int:
        """Monday is 0 and Sunday is 6."""
        return self.date.weekday()


class ScenarioInput(ConditionSet):
    """A hypothetical set of conditions with an expected headcount."""

    attendance: int = Field(..., ge=0, description="Expected number of diners")

    @model_validator(mode="after")
    def _attendance_from_headcount(self) -> "ScenarioInput":
        if self.attendance_multiplier != 1.0:
            raise ValueError("attendance_multiplier is derived from attendance in a scenario; set attendance instead")
        return self


# ---------------------------------------------------------------------------
# Forecasts


class ConfidenceInterval(BaseModel):
    model_config = ConfigDict(frozen=True)

    lower: int = Field(..., ge=0)
    upper: int = Field(..., ge=0)


class FactorContributions(BaseModel):
    """Multipliers applied to the baseline demand, each centred on 1.0."""

    model_config = ConfigDict(frozen=True)

    weather: float
    events: float
    seasonality: float
    day_of_week: float
    meal_period: float = 1.0
    attendance: float = 1.0


class DemandForecast(BaseModel):
    """Point forecast and interval for one item, meal period and date."""

    model_config = ConfigDict(frozen=True)

    menu_item_id: str
    meal_period: MealPeriod
    date: Date
    predicted_demand: int = Field(..., ge=0)
    confidence_interval: ConfidenceInterval
    factors: FactorContributions
    confidence: float = Field(..., ge=0, le=1, description="1 - interval width / prediction")

    @model_validator(mode="after")
    def _check_interval(self) -> "DemandForecast":
        interval = self.confidence_interval
        if not interval.lower <= self.predicted_demand <= interval.upper:
            raise ValueError("confidence interval must bracket the predicted demand")
        return self


class ForecastBatch(BaseModel):
    date: Date
    conditions: ConditionSet
    forecasts: List[DemandForecast]


# ---------------------------------------------------------------------------
# Optimisation


class OptimizationResult(BaseModel):
    """Recommended preparation for one item on one date."""

    model_config = ConfigDict(frozen=True)

    menu_item_id: str
    predicted_demand: int = Field(..., ge=0)
    recommended_quantity: int = Field(..., ge=0)
    safety_stock: int = Field(..., ge=0)
    safety_stock_multiplier: float
    current_waste: int = Field(..., ge=0, description="Projected waste under the current policy")
    projected_waste: int = Field(..., ge=0, description="Projected waste under the optimised policy")
    waste_reduction_pct: float
    cost_savings: float
    confidence: int = Field(..., ge=0, le=100, description="Average forecast confidence, percent")


class OptimizationSummary(BaseModel):
    date: Date
    results: List[OptimizationResult]
    total_current_waste: int
    total_projected_waste: int
    total_cost_savings: float
    overall_reduction_pct: float


# ---------------------------------------------------------------------------
# Correlations


class CorrelationInsight(BaseModel):
    correlation: MenuCorrelation
    label: str
    action: str


# ---------------------------------------------------------------------------
# Scenarios


class ScenarioFactors(BaseModel):
    """Percentage deviation of each scenario input from the baseline."""

    attendance: int
    weather: int
    event: int


class ScenarioResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    projected_demand: int = Field(..., ge=0)
    recommended_quantity: int = Field(..., ge=0)
    safety_stock: int = Field(..., ge=0)
    projected_waste: int
    projected_cost: int
    normal_waste: int
    waste_savings: int
    cost_savings: int
    waste_reduction_pct: int
    total_multiplier: float
    confidence: int = Field(..., ge=0, le=100)
    confidence_is_illustrative: bool = True
    factors: ScenarioFactors
    recommendations: List[str] = Field(default_factory=list)


class ScenarioTemplate(BaseModel):
    name: str
    description: str
    scenario: ScenarioInput


# ---------------------------------------------------------------------------
# Analytics and evaluation


class ItemWaste(BaseModel):
    menu_item_id: str
    name: str
    wasted: int
    cost: float
    waste_rate_pct: float


class DailyWaste(BaseModel):
    date: Date
    wasted: int
    prepared: int
    cost: float
    waste_rate_pct: float


class MealWaste(BaseModel):
    meal_period: MealPeriod
    wasted: int
    cost: float


class CategoryWaste(BaseModel):
    category: Category
    wasted: int
    cost: float
    share_pct: float


class WasteSummary(BaseModel):
    start: Optional[Date]
    end: Optional[Date]
    days: int
    total_wasted: int
    total_prepared: int
    total_cost: float
    average_daily_waste: float
    waste_rate_pct: float
    by_item: List[ItemWaste]
    by_day: List[DailyWaste]
    by_meal: List[MealWaste]
    by_category: List[CategoryWaste]


class ForecastEvaluation(BaseModel):
    """Accuracy of the factor model against recorded consumption."""

    observations: int
    mae: float
    mape: float
    coverage: float = Field(..., description="Share of actuals inside the interval")
    accuracy_pct: float
