from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
import sys

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from backend.foodcast.services.catalog_service import CatalogService
from backend.foodcast.services.history_service import (
    FileHistoryProvider,
    SyntheticHistoryProvider,
    default_history_provider,
)

START = date(2024, 9, 2)


def test_synthetic_history_shape_and_balance() -> None:
    provider = SyntheticHistoryProvider(seed=3)

    records = provider.records(START, START + timedelta(days=1))

    assert len(records) == 2 * 10 * 3
    for record in records:
        assert record.consumed <= record.prepared
        assert record.wasted == record.prepared - record.consumed
        item = provider.catalog.get(record.menu_item_id)
        assert record.cost == pytest.approx(record.wasted * item.cost)


def test_synthetic_history_is_reproducible_per_day() -> None:
    day = START + timedelta(days=3)
    wide = SyntheticHistoryProvider(seed=42).records(START, START + timedelta(days=6))
    narrow = SyntheticHistoryProvider(seed=42).records(day, day)

    assert [r for r in wide if r.date == day] == narrow
    assert SyntheticHistoryProvider(seed=43).records(day, day) != narrow


def test_synthetic_history_default_range() -> None:
    records = SyntheticHistoryProvider().records()

    days = {r.date for r in records}
    assert min(days) == SyntheticHistoryProvider.DEFAULT_START
    assert len(days) == SyntheticHistoryProvider.DEFAULT_DAYS


def test_synthetic_history_rejects_inverted_range() -> None:
    with pytest.raises(ValueError):
        SyntheticHistoryProvider().records(START, START - timedelta(days=1))


def _write_log(path: Path, rows: list[dict]) -> Path:
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


def test_file_history_derives_waste_and_filters(tmp_path: Path) -> None:
    path = _write_log(
        tmp_path / "waste_records.csv",
        [
            {"date": "2024-09-02", "menu_item_id": "burger", "meal_period": "Lunch", "prepared": 120, "consumed": 100},
            {"date": "2024-09-03", "menu_item_id": "fries", "meal_period": "dinner", "prepared": 80, "consumed": 80},
        ],
    )
    provider = FileHistoryProvider(path, catalog=CatalogService())

    records = provider.records()
    first = provider.records(date(2024, 9, 2), date(2024, 9, 2))

    assert len(records) == 2
    assert len(first) == 1
    assert first[0].meal_period == "lunch"
    assert first[0].wasted == 20
    assert first[0].cost == 20 * 180


def test_file_history_rejects_bad_rows(tmp_path: Path) -> None:
    path = _write_log(
        tmp_path / "waste_records.csv",
        [{"date": "2024-09-02", "menu_item_id": "burger", "meal_period": "lunch", "prepared": 10, "consumed": 12}],
    )

    with pytest.raises(ValueError):
        FileHistoryProvider(path).records()


def test_file_history_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        FileHistoryProvider(tmp_path / "waste_records.csv").records()


def test_default_provider_prefers_recorded_log(tmp_path: Path) -> None:
    assert isinstance(default_history_provider(str(tmp_path)), SyntheticHistoryProvider)

    _write_log(
        tmp_path / "waste_records.csv",
        [{"date": "2024-09-02", "menu_item_id": "soda", "meal_period": "lunch", "prepared": 5, "consumed": 5}],
    )
    assert isinstance(default_history_provider(str(tmp_path)), FileHistoryProvider)
