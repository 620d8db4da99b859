r"""backend/foodcast/api/v1/backtest.py

Forecast accuracy against recorded consumption."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Query

from .analytics import CONFIG_DIR, _catalog_service, _load_records
from .forecasts import _invalid_request
from ...core.config import get_engine_config
from ...models import schemas
from ...services.forecasting_service import DemandForecaster

LOGGER = logging.getLogger(__name__)

router = APIRouter()

_forecaster = DemandForecaster(catalog=_catalog_service, config=get_engine_config(CONFIG_DIR))


@router.get("/backtest", response_model=schemas.ForecastEvaluation)
def backtest(
    start: Optional[date] = Query(None, description="First day to evaluate (inclusive)."),
    end: Optional[date] = Query(None, description="Last day to evaluate (inclusive)."),
) -> schemas.ForecastEvaluation:
    """Return MAE, MAPE and interval coverage of the factor model."""

    records = _load_records(start, end)
    try:
        return _forecaster.evaluate(records)
    except ValueError as exc:
        LOGGER.warning("Backtest rejected start=%s end=%s: %s", start, end, exc)
        raise _invalid_request(exc) from exc
