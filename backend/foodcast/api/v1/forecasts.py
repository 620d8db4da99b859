"""Routes for demand forecasting."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, HTTPException, status

from ...core.config import get_engine_config, get_settings
from ...models import schemas
from ...services.catalog_service import CatalogService
from ...services.forecasting_service import DemandForecaster

LOGGER = logging.getLogger(__name__)

router = APIRouter()

CONFIG_DIR = get_settings().config_dir

_catalog_service = CatalogService(config_root=CONFIG_DIR)
_forecaster = DemandForecaster(catalog=_catalog_service, config=get_engine_config(CONFIG_DIR))


def _error_payload(code: str, message: str) -> dict[str, str]:
    """Return a standardised error payload."""

    return {"error": code, "message": message}


def _validate_item(catalog: CatalogService, item_id: str) -> None:
    """Ensure that the menu item exists before attempting a forecast."""

    if not catalog.has_item(item_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error_payload("item_not_found", f"Menu item '{item_id}' was not found in the catalog."),
        )


def _invalid_request(exc: ValueError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=_error_payload("invalid_request", str(exc)),
    )


@router.post("/forecasts", response_model=schemas.ForecastBatch)
async def forecast_all(conditions: schemas.ConditionSet) -> schemas.ForecastBatch:
    """Return forecasts for every menu item and meal period on ``conditions.date``."""

    LOGGER.info(
        "Forecast request received for date=%s weather=%s event=%s",
        conditions.date,
        conditions.weather,
        conditions.event,
    )
    try:
        forecasts = _forecaster.forecast_all(conditions.date, conditions)
    except ValueError as exc:
        LOGGER.warning("Forecasting rejected for date=%s: %s", conditions.date, exc)
        raise _invalid_request(exc) from exc

    return schemas.ForecastBatch(date=conditions.date, conditions=conditions, forecasts=forecasts)


@router.post("/forecasts/{item_id}", response_model=List[schemas.DemandForecast])
async def forecast_item(item_id: str, conditions: schemas.ConditionSet) -> List[schemas.DemandForecast]:
    """Return the breakfast, lunch and dinner forecasts for one menu item."""

    LOGGER.info("Forecast request received for item_id=%s date=%s", item_id, conditions.date)
    _validate_item(_catalog_service, item_id)
    try:
        return _forecaster.forecast_item(item_id, conditions.date, conditions)
    except ValueError as exc:
        LOGGER.warning("Forecasting rejected for item_id=%s: %s", item_id, exc)
        raise _invalid_request(exc) from exc
