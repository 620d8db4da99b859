r"""backend\foodcast\services\catalog_service.py

Menu catalogue and precomputed correlation table.

Both are immutable reference data read once at start-up from
``configs/catalog.yaml``.  When the file is absent the built-in reference
menu is used so the engine always has something to forecast.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Iterable, List, Optional, Protocol

from pydantic import ValidationError

from ..core.config import load_yaml
from ..models.schemas import MenuCorrelation, MenuItem

LOGGER = logging.getLogger(__name__)


DEFAULT_MENU_ITEMS: tuple[MenuItem, ...] = (
    MenuItem(id="burger", name="Classic Burger", category="protein", cost=180, shelf_life_hours=4, popularity_score=0.85),
    MenuItem(id="pizza", name="Margherita Pizza", category="protein", cost=150, shelf_life_hours=6, popularity_score=0.92),
    MenuItem(id="salad", name="Garden Salad", category="vegetarian", cost=120, shelf_life_hours=2, popularity_score=0.65),
    MenuItem(id="chicken", name="Grilled Chicken", category="protein", cost=200, shelf_life_hours=4, popularity_score=0.78),
    MenuItem(id="pasta", name="Penne Pasta", category="vegetarian", cost=140, shelf_life_hours=8, popularity_score=0.82),
    MenuItem(id="sandwich", name="Club Sandwich", category="protein", cost=160, shelf_life_hours=3, popularity_score=0.71),
    MenuItem(id="soup", name="Tomato Soup", category="vegetarian", cost=80, shelf_life_hours=12, popularity_score=0.68),
    MenuItem(id="fries", name="French Fries", category="sides", cost=60, shelf_life_hours=1, popularity_score=0.88),
    MenuItem(id="soda", name="Soft Drinks", category="beverages", cost=40, shelf_life_hours=24, popularity_score=0.90),
    MenuItem(id="dessert", name="Chocolate Cake", category="desserts", cost=100, shelf_life_hours=48, popularity_score=0.75),
)

DEFAULT_CORRELATIONS: tuple[MenuCorrelation, ...] = (
    MenuCorrelation(item1="burger", item2="fries", correlation=0.945),
    MenuCorrelation(item1="pizza", item2="soda", correlation=0.823),
    MenuCorrelation(item1="salad", item2="chicken", correlation=0.756),
    MenuCorrelation(item1="soup", item2="sandwich", correlation=0.689),
    MenuCorrelation(item1="pasta", item2="salad", correlation=0.612),
    MenuCorrelation(item1="burger", item2="chicken", correlation=-0.445),
)


class CatalogProvider(Protocol):
    def items(self) -> List[MenuItem]: ...

    def get(self, item_id: str) -> MenuItem: ...

    def has_item(self, item_id: str) -> bool: ...


class CorrelationProvider(Protocol):
    def correlations(self) -> List[MenuCorrelation]: ...


class CatalogService:
    """Provide menu items and the precomputed correlation table."""

    def __init__(
        self,
        config_root: str = "configs",
        items: Optional[Iterable[MenuItem]] = None,
        correlations: Optional[Iterable[MenuCorrelation]] = None,
    ) -> None:
        self.config_root = config_root
        raw = load_yaml(os.path.join(config_root, "catalog.yaml"))
        if not isinstance(raw, dict):
            LOGGER.warning("catalog.yaml in %s is not a mapping; using defaults.", config_root)
            raw = {}

        if items is None:
            items = self._parse(raw.get("items"), MenuItem, DEFAULT_MENU_ITEMS, "items")
        if correlations is None:
            correlations = self._parse(
                raw.get("correlations"), MenuCorrelation, DEFAULT_CORRELATIONS, "correlations"
            )

        self._items: Dict[str, MenuItem] = {}
        for item in items:
            if item.id in self._items:
                raise ValueError(f"Duplicate menu item id '{item.id}'")
            self._items[item.id] = item
        self._correlations: tuple[MenuCorrelation, ...] = tuple(correlations)

    # ------------------------------------------------------------------
    @staticmethod
    def _parse(entries, model, default, label: str):
        if not entries:
            return default
        try:
            return tuple(model.model_validate(entry) for entry in entries)
        except ValidationError as exc:
            raise ValueError(f"Invalid {label} in catalog.yaml: {exc}") from exc

    # ------------------------------------------------------------------
    def items(self) -> List[MenuItem]:
        return list(self._items.values())

    def correlations(self) -> List[MenuCorrelation]:
        return list(self._correlations)

    def has_item(self, item_id: str) -> bool:
        return item_id in self._items

    def get(self, item_id: str) -> MenuItem:
        """Return the item with ``item_id`` or raise ``ValueError``."""
        try:
            return self._items[item_id]
        except KeyError:
            raise ValueError(f"Menu item '{item_id}' not found") from None
