r"""backend/foodcast/api/v1/optimization.py

Routes for safety-stock preparation recommendations."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from .forecasts import _invalid_request, _validate_item
from ...core.config import get_engine_config, get_settings
from ...models import schemas
from ...services.catalog_service import CatalogService
from ...services.forecasting_service import DemandForecaster
from ...services.optimization_service import SafetyStockOptimizer

LOGGER = logging.getLogger(__name__)

router = APIRouter()

CONFIG_DIR = get_settings().config_dir

_catalog_service = CatalogService(config_root=CONFIG_DIR)
_optimizer = SafetyStockOptimizer(
    forecaster=DemandForecaster(catalog=_catalog_service, config=get_engine_config(CONFIG_DIR))
)


@router.post("/optimization", response_model=schemas.OptimizationSummary)
async def optimize_all(conditions: schemas.ConditionSet) -> schemas.OptimizationSummary:
    """Recommend preparation quantities for every menu item on ``conditions.date``."""

    LOGGER.info("Optimisation request received for date=%s", conditions.date)
    try:
        return _optimizer.optimize_all(conditions.date, conditions)
    except ValueError as exc:
        LOGGER.warning("Optimisation rejected for date=%s: %s", conditions.date, exc)
        raise _invalid_request(exc) from exc


@router.post("/optimization/{item_id}", response_model=schemas.OptimizationResult)
async def optimize_item(item_id: str, conditions: schemas.ConditionSet) -> schemas.OptimizationResult:
    """Recommend the preparation quantity for a single menu item."""

    LOGGER.info("Optimisation request received for item_id=%s date=%s", item_id, conditions.date)
    _validate_item(_catalog_service, item_id)
    try:
        return _optimizer.optimize_item(item_id, conditions.date, conditions)
    except ValueError as exc:
        LOGGER.warning("Optimisation rejected for item_id=%s: %s", item_id, exc)
        raise _invalid_request(exc) from exc
