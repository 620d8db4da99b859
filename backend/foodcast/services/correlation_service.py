"""Classify menu-item pairs as complements or substitutes.

The thresholds are module-level constants so the policy can be tested on
its own; :class:`CorrelationAnalyzer` reads them from the engine
configuration when one is supplied.
"""

from __future__ import annotations

import logging
from itertools import combinations
from typing import Iterable, List

import pandas as pd

from ..core.config import EngineConfig
from ..models.schemas import CorrelationInsight, MenuCorrelation, WasteRecord
from .catalog_service import CorrelationProvider
from .history_service import records_frame

LOGGER = logging.getLogger(__name__)

VERY_STRONG_COMPLEMENT_THRESHOLD = 0.8
STRONG_COMPLEMENT_THRESHOLD = 0.65
SUBSTITUTE_THRESHOLD = -0.3

VERY_STRONG_COMPLEMENT = "very strong complement"
STRONG_COMPLEMENT = "strong complement"
MODERATE_COMPLEMENT = "moderate complement"
SUBSTITUTE = "substitute"
NEUTRAL = "neutral"


def _check_coefficient(coefficient: float) -> float:
    value = float(coefficient)
    if not -1.0 <= value <= 1.0:
        raise ValueError(f"Correlation coefficient {value} is outside [-1, 1]")
    return value


def classify(
    coefficient: float,
    very_strong: float = VERY_STRONG_COMPLEMENT_THRESHOLD,
    strong: float = STRONG_COMPLEMENT_THRESHOLD,
    substitute: float = SUBSTITUTE_THRESHOLD,
) -> str:
    """Return the relationship label for a correlation ``coefficient``."""

    value = _check_coefficient(coefficient)
    if value > very_strong:
        return VERY_STRONG_COMPLEMENT
    if value > strong:
        return STRONG_COMPLEMENT
    if value > 0:
        return MODERATE_COMPLEMENT
    if value <= substitute:
        return SUBSTITUTE
    return NEUTRAL


def recommendation_for(coefficient: float, substitute: float = SUBSTITUTE_THRESHOLD) -> str:
    value = _check_coefficient(coefficient)
    if value > 0:
        return "complement"
    if value <= substitute:
        return "substitute"
    return "neutral"


def action_for(label: str, item1: str, item2: str) -> str:
    if label == VERY_STRONG_COMPLEMENT:
        return f"Prepare {item1} and {item2} together and scale both from the same forecast."
    if label == STRONG_COMPLEMENT:
        return f"Coordinate {item1} and {item2} batches; a rise in one signals a rise in the other."
    if label == MODERATE_COMPLEMENT:
        return f"Offer {item1} and {item2} as a pairing but size them independently."
    if label == SUBSTITUTE:
        return f"{item1} and {item2} compete for the same diners; avoid over-preparing both."
    return f"No joint preparation adjustment for {item1} and {item2}."


def correlations_from_records(
    records: Iterable[WasteRecord],
    min_abs: float = 0.0,
) -> List[MenuCorrelation]:
    """Derive pairwise Pearson correlations of consumption per service.

    Each (date, meal period) service is one observation.  Pairs whose
    coefficient is undefined (constant series) or below ``min_abs`` in
    magnitude are omitted.
    """

    frame = records_frame(records)
    if frame.empty:
        return []

    pivot = frame.pivot_table(
        index=["date", "meal_period"],
        columns="menu_item_id",
        values="consumed",
        aggfunc="sum",
    ).fillna(0.0)
    matrix = pivot.corr(method="pearson")

    results: List[MenuCorrelation] = []
    for item1, item2 in combinations(sorted(matrix.columns), 2):
        value = matrix.loc[item1, item2]
        if pd.isna(value) or abs(value) < min_abs:
            continue
        coefficient = float(max(min(value, 1.0), -1.0))
        results.append(
            MenuCorrelation(
                item1=item1,
                item2=item2,
                correlation=round(coefficient, 3),
                recommendation=recommendation_for(coefficient),
            )
        )
    results.sort(key=lambda c: abs(c.correlation), reverse=True)
    return results


class CorrelationAnalyzer:
    def __init__(self, provider: CorrelationProvider, config: EngineConfig | None = None) -> None:
        self.provider = provider
        self.config = config or EngineConfig()

    def classify(self, coefficient: float) -> str:
        return classify(
            coefficient,
            very_strong=self.config.very_strong_complement_threshold,
            strong=self.config.strong_complement_threshold,
            substitute=self.config.substitute_threshold,
        )

    def insight(self, correlation: MenuCorrelation) -> CorrelationInsight:
        label = self.classify(correlation.correlation)
        classified = correlation.model_copy(
            update={
                "recommendation": recommendation_for(
                    correlation.correlation, self.config.substitute_threshold
                )
            }
        )
        return CorrelationInsight(
            correlation=classified,
            label=label,
            action=action_for(label, correlation.item1, correlation.item2),
        )

    def classify_all(self) -> List[CorrelationInsight]:
        return [self.insight(c) for c in self.provider.correlations()]

    def lookup(self, item1: str, item2: str) -> CorrelationInsight:
        """Return the insight for a pair in either order; missing pairs are neutral."""

        wanted = {item1, item2}
        for correlation in self.provider.correlations():
            if {correlation.item1, correlation.item2} == wanted:
                return self.insight(correlation)
        LOGGER.debug("No correlation recorded for %s/%s; treating as neutral", item1, item2)
        return self.insight(MenuCorrelation(item1=item1, item2=item2, correlation=0.0))
