r"""backend\foodcast\api\v1\catalog.py"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Query

from .forecasts import _validate_item
from ...core.config import get_settings
from ...models import schemas
from ...services.catalog_service import CatalogService

LOGGER = logging.getLogger(__name__)
router = APIRouter()

_catalog_service = CatalogService(config_root=get_settings().config_dir)


@router.get("/catalog/items", response_model=List[schemas.MenuItem])
def list_items(
    category: Optional[schemas.Category] = Query(None, description="Only return this category"),
) -> List[schemas.MenuItem]:
    """Return the menu items, optionally filtered by category."""

    items = _catalog_service.items()
    if category is not None:
        items = [item for item in items if item.category == category]
    return items


@router.get("/catalog/items/{item_id}", response_model=schemas.MenuItem)
def get_item(item_id: str) -> schemas.MenuItem:
    _validate_item(_catalog_service, item_id)
    return _catalog_service.get(item_id)
