from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from backend.foodcast.models.schemas import WasteRecord
from backend.foodcast.services.analytics_service import WasteAnalytics
from backend.foodcast.services.catalog_service import CatalogService
from backend.foodcast.services.history_service import SyntheticHistoryProvider

START = date(2024, 9, 2)


def _record(day: date, item: str, meal: str, prepared: int, consumed: int, unit_cost: float) -> WasteRecord:
    wasted = prepared - consumed
    return WasteRecord(
        date=day,
        menu_item_id=item,
        meal_period=meal,
        prepared=prepared,
        consumed=consumed,
        wasted=wasted,
        cost=wasted * unit_cost,
    )


def test_summary_of_handwritten_records() -> None:
    records = [
        _record(START, "burger", "lunch", 100, 80, 180),
        _record(START, "fries", "dinner", 50, 50, 60),
        _record(START + timedelta(days=1), "soda", "breakfast", 40, 30, 40),
    ]

    summary = WasteAnalytics(CatalogService()).summarize(records)

    assert summary.days == 2
    assert summary.start == START
    assert summary.end == START + timedelta(days=1)
    assert summary.total_wasted == 30
    assert summary.total_prepared == 190
    assert summary.total_cost == pytest.approx(20 * 180 + 10 * 40)
    assert summary.average_daily_waste == 15.0
    assert summary.waste_rate_pct == pytest.approx(round(30 / 190 * 100, 2))

    by_item = {row.menu_item_id: row for row in summary.by_item}
    assert by_item["burger"].wasted == 20
    assert by_item["burger"].waste_rate_pct == 20.0
    assert by_item["fries"].waste_rate_pct == 0.0
    assert by_item["pizza"].wasted == 0
    assert summary.by_item[0].menu_item_id == "burger"

    assert [d.wasted for d in summary.by_day] == [20, 10]
    meals = {row.meal_period: row.wasted for row in summary.by_meal}
    assert meals == {"breakfast": 10, "lunch": 20, "dinner": 0}
    categories = {row.category: row for row in summary.by_category}
    assert categories["protein"].share_pct == pytest.approx(66.67)
    assert categories["beverages"].wasted == 10
    assert categories["desserts"].wasted == 0


def test_summary_of_synthetic_history_is_consistent() -> None:
    records = SyntheticHistoryProvider(seed=5).records(START, START + timedelta(days=6))

    summary = WasteAnalytics().summarize(records)

    assert summary.days == 7
    assert summary.total_wasted == sum(r.wasted for r in records)
    assert sum(row.wasted for row in summary.by_item) == summary.total_wasted
    assert sum(row.wasted for row in summary.by_meal) == summary.total_wasted
    assert sum(row.wasted for row in summary.by_category) == summary.total_wasted
    assert len(summary.by_day) == 7


def test_summary_of_no_records() -> None:
    summary = WasteAnalytics().summarize([])

    assert summary.days == 0
    assert summary.start is None
    assert summary.total_wasted == 0
    assert summary.waste_rate_pct == 0.0
    assert summary.by_day == []
    assert all(row.wasted == 0 for row in summary.by_meal)
