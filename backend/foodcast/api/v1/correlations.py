r"""backend/foodcast/api/v1/correlations.py

Menu item correlation routes."""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query

from .analytics import CONFIG_DIR, _catalog_service, _load_records
from .forecasts import _validate_item
from ...core.config import get_engine_config
from ...models import schemas
from ...services.correlation_service import (
    CorrelationAnalyzer,
    correlations_from_records,
    recommendation_for,
)

LOGGER = logging.getLogger(__name__)

router = APIRouter()

_analyzer = CorrelationAnalyzer(_catalog_service, config=get_engine_config(CONFIG_DIR))


@router.get("/correlations", response_model=List[schemas.CorrelationInsight])
def classify_all() -> List[schemas.CorrelationInsight]:
    """Classify every precomputed item pair."""

    return _analyzer.classify_all()


@router.get("/correlations/classify")
def classify(
    coefficient: float = Query(..., ge=-1.0, le=1.0, description="Correlation coefficient"),
) -> dict[str, object]:
    """Classify a single coefficient without reference to any item pair."""

    return {
        "coefficient": coefficient,
        "label": _analyzer.classify(coefficient),
        "recommendation": recommendation_for(coefficient, _analyzer.config.substitute_threshold),
    }


@router.get("/correlations/derived", response_model=List[schemas.CorrelationInsight])
def derived(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    min_abs: float = Query(0.3, ge=0.0, le=1.0, description="Smallest |coefficient| to report"),
) -> List[schemas.CorrelationInsight]:
    """Compute correlations from historical consumption instead of the static table."""

    records = _load_records(start, end)
    correlations = correlations_from_records(records, min_abs=min_abs)
    LOGGER.info("Derived %d correlations from %d records", len(correlations), len(records))
    return [_analyzer.insight(c) for c in correlations]


@router.get("/correlations/{item1}/{item2}", response_model=schemas.CorrelationInsight)
def lookup(item1: str, item2: str) -> schemas.CorrelationInsight:
    """Return the relationship between two items; unknown pairs are neutral."""

    _validate_item(_catalog_service, item1)
    _validate_item(_catalog_service, item2)
    return _analyzer.lookup(item1, item2)
