"""Aggregate historical waste records by item, day, meal period and category."""

from __future__ import annotations

import logging
from typing import Iterable, List

import pandas as pd

from ..models.schemas import (
    CATEGORIES,
    MEAL_PERIODS,
    CategoryWaste,
    DailyWaste,
    ItemWaste,
    MealWaste,
    WasteRecord,
    WasteSummary,
)
from .catalog_service import CatalogProvider, CatalogService
from .history_service import records_frame

LOGGER = logging.getLogger(__name__)


def _rate_pct(wasted: float, prepared: float) -> float:
    return round(wasted / prepared * 100.0, 2) if prepared > 0 else 0.0


class WasteAnalytics:
    def __init__(self, catalog: CatalogProvider | None = None) -> None:
        self.catalog = catalog or CatalogService()

    # ------------------------------------------------------------------
    def by_item(self, frame: pd.DataFrame) -> List[ItemWaste]:
        rows: List[ItemWaste] = []
        for item in self.catalog.items():
            subset = frame[frame["menu_item_id"] == item.id]
            if subset.empty:
                rows.append(ItemWaste(menu_item_id=item.id, name=item.name, wasted=0, cost=0.0, waste_rate_pct=0.0))
                continue
            # Mean of per-service waste rates, ignoring services with nothing prepared.
            prepared = subset["prepared"].astype(float)
            rates = (subset["wasted"] / prepared.where(prepared > 0)).dropna()
            rows.append(
                ItemWaste(
                    menu_item_id=item.id,
                    name=item.name,
                    wasted=int(subset["wasted"].sum()),
                    cost=float(subset["cost"].sum()),
                    waste_rate_pct=round(float(rates.mean()) * 100.0, 2) if not rates.empty else 0.0,
                )
            )
        return sorted(rows, key=lambda r: r.cost, reverse=True)

    def by_day(self, frame: pd.DataFrame) -> List[DailyWaste]:
        if frame.empty:
            return []
        grouped = frame.groupby("date")[["wasted", "prepared", "cost"]].sum().sort_index()
        return [
            DailyWaste(
                date=day,
                wasted=int(row["wasted"]),
                prepared=int(row["prepared"]),
                cost=float(row["cost"]),
                waste_rate_pct=_rate_pct(row["wasted"], row["prepared"]),
            )
            for day, row in grouped.iterrows()
        ]

    def by_meal(self, frame: pd.DataFrame) -> List[MealWaste]:
        grouped = frame.groupby("meal_period")[["wasted", "cost"]].sum()
        grouped = grouped.reindex(list(MEAL_PERIODS), fill_value=0)
        return [
            MealWaste(meal_period=meal, wasted=int(row["wasted"]), cost=float(row["cost"]))
            for meal, row in grouped.iterrows()
        ]

    def by_category(self, frame: pd.DataFrame) -> List[CategoryWaste]:
        categories = {item.id: item.category for item in self.catalog.items()}
        total_wasted = float(frame["wasted"].sum()) if not frame.empty else 0.0
        tagged = frame.assign(category=frame["menu_item_id"].map(categories))
        grouped = tagged.groupby("category")[["wasted", "cost"]].sum()
        grouped = grouped.reindex(list(CATEGORIES), fill_value=0)
        return [
            CategoryWaste(
                category=category,
                wasted=int(row["wasted"]),
                cost=float(row["cost"]),
                share_pct=_rate_pct(row["wasted"], total_wasted),
            )
            for category, row in grouped.iterrows()
        ]

    # ------------------------------------------------------------------
    def summarize(self, records: Iterable[WasteRecord]) -> WasteSummary:
        frame = records_frame(records)
        for column in ("prepared", "consumed", "wasted"):
            frame[column] = frame[column].astype(int)
        frame["cost"] = frame["cost"].astype(float)

        days = int(frame["date"].nunique()) if not frame.empty else 0
        total_wasted = int(frame["wasted"].sum())
        total_prepared = int(frame["prepared"].sum())
        total_cost = float(frame["cost"].sum())

        LOGGER.info("Summarised %d waste records across %d days", len(frame), days)
        return WasteSummary(
            start=min(frame["date"]) if days else None,
            end=max(frame["date"]) if days else None,
            days=days,
            total_wasted=total_wasted,
            total_prepared=total_prepared,
            total_cost=total_cost,
            average_daily_waste=round(total_wasted / days, 2) if days else 0.0,
            waste_rate_pct=_rate_pct(total_wasted, total_prepared),
            by_item=self.by_item(frame),
            by_day=self.by_day(frame),
            by_meal=self.by_meal(frame),
            by_category=self.by_category(frame),
        )
