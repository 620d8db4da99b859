r"""backend/foodcast/api/v1/analytics.py

Historical waste analytics routes."""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from .forecasts import _error_payload, _invalid_request
from ...core.config import get_engine_config, get_settings
from ...models import schemas
from ...services.analytics_service import WasteAnalytics
from ...services.catalog_service import CatalogService
from ...services.history_service import default_history_provider

LOGGER = logging.getLogger(__name__)

router = APIRouter()

CONFIG_DIR = get_settings().config_dir
DATA_DIR = get_settings().data_dir

_catalog_service = CatalogService(config_root=CONFIG_DIR)
_history_provider = default_history_provider(
    DATA_DIR,
    catalog=_catalog_service,
    config=get_engine_config(CONFIG_DIR),
    seed=get_settings().history_seed,
)
_analytics = WasteAnalytics(catalog=_catalog_service)


def _load_records(start: Optional[date], end: Optional[date]) -> List[schemas.WasteRecord]:
    """Read historical records, mapping provider failures to HTTP errors."""

    try:
        return _history_provider.records(start, end)
    except FileNotFoundError as exc:
        LOGGER.exception("Waste log is missing")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=_error_payload("data_unavailable", "The recorded waste log could not be read."),
        ) from exc
    except ValueError as exc:
        LOGGER.warning("History request rejected start=%s end=%s: %s", start, end, exc)
        raise _invalid_request(exc) from exc


@router.get("/analytics/waste", response_model=schemas.WasteSummary)
def waste_summary(
    start: Optional[date] = Query(None, description="First day to include (inclusive)."),
    end: Optional[date] = Query(None, description="Last day to include (inclusive)."),
) -> schemas.WasteSummary:
    """Summarise recorded waste by item, day, meal period and category."""

    records = _load_records(start, end)
    return _analytics.summarize(records)
