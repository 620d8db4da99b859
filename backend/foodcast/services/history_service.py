r"""backend\foodcast\services\history_service.py

Historical waste records.

Two providers satisfy :class:`HistoricalDataProvider`: one reads recorded
waste logs from ``data/waste_records.csv`` (or its Parquet sibling), the
other synthesises plausible records from the factor model when no log has
been collected yet.  The engine only ever reads these records.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

import numpy as np
import pandas as pd
from pydantic import ValidationError

from ..core.config import EngineConfig, get_settings
from ..models.schemas import MEAL_PERIODS, WasteRecord
from .catalog_service import CatalogProvider, CatalogService
from .factor_model import FactorModel
from .rounding import round_half_up
from .io_utils import dataset_available, prefer_parquet

LOGGER = logging.getLogger(__name__)

RECORD_COLUMNS = ["date", "menu_item_id", "meal_period", "prepared", "consumed", "wasted", "cost"]


class HistoricalDataProvider(Protocol):
    def records(self, start: Optional[date] = None, end: Optional[date] = None) -> List[WasteRecord]: ...


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise ValueError(f"start {start.isoformat()} is after end {end.isoformat()}")


def records_frame(records: Iterable[WasteRecord]) -> pd.DataFrame:
    """Return ``records`` as a ``pd.DataFrame`` with the canonical columns."""

    rows = [record.model_dump() for record in records]
    if not rows:
        return pd.DataFrame(columns=RECORD_COLUMNS)
    frame = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    frame["date"] = pd.to_datetime(frame["date"]).dt.date
    return frame


# ---------------------------------------------------------------------------


class SyntheticHistoryProvider:
    """Generate waste records shaped by the calendar factors plus random noise.

    Each day draws from its own generator seeded by ``(seed, day)``, so a
    date yields the same records no matter which range it is requested in.
    Passing ``rng`` instead draws every value from that generator in order.
    """

    DEFAULT_START = date(2024, 6, 1)
    DEFAULT_DAYS = 120

    def __init__(
        self,
        catalog: CatalogProvider | None = None,
        config: EngineConfig | None = None,
        seed: int = 42,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.catalog = catalog or CatalogService()
        self.factor_model = FactorModel(self.config)
        self.seed = int(seed)
        self.rng = rng

    def _generator_for(self, day: date) -> np.random.Generator:
        if self.rng is not None:
            return self.rng
        return np.random.default_rng([self.seed, day.toordinal()])

    def _day_records(self, day: date) -> List[WasteRecord]:
        rng = self._generator_for(day)
        weekend = self.factor_model.day_of_week_multiplier(day)
        academic = self.factor_model.academic_multiplier(day)
        records: List[WasteRecord] = []
        for item in self.catalog.items():
            base = item.popularity_score * self.config.base_demand_scale
            for meal in MEAL_PERIODS:
                meal_factor = self.factor_model.meal_period_multiplier(meal)
                expected = round_half_up(base * meal_factor * weekend * academic * rng.uniform(0.8, 1.2))
                prepared = round_half_up(expected * rng.uniform(1.2, 1.5))
                consumed = min(prepared, round_half_up(expected * rng.uniform(0.85, 1.15)))
                wasted = prepared - consumed
                records.append(
                    WasteRecord(
                        date=day,
                        menu_item_id=item.id,
                        meal_period=meal,
                        prepared=prepared,
                        consumed=consumed,
                        wasted=wasted,
                        cost=wasted * item.cost,
                    )
                )
        return records

    def records(self, start: Optional[date] = None, end: Optional[date] = None) -> List[WasteRecord]:
        start = start or self.DEFAULT_START
        end = end or start + timedelta(days=self.DEFAULT_DAYS - 1)
        _check_range(start, end)

        records: List[WasteRecord] = []
        day = start
        while day <= end:
            records.extend(self._day_records(day))
            day += timedelta(days=1)
        LOGGER.debug("Synthesised %d records for %s..%s", len(records), start, end)
        return records


# ---------------------------------------------------------------------------


class FileHistoryProvider:
    """Read recorded waste logs from CSV or Parquet."""

    def __init__(self, path: str | Path, catalog: CatalogProvider | None = None) -> None:
        self.path = Path(path)
        self.catalog = catalog or CatalogService()
        self._frame: Optional[pd.DataFrame] = None

    def _load(self) -> pd.DataFrame:
        if self._frame is None:
            frame = prefer_parquet(self.path)
            missing = [c for c in RECORD_COLUMNS if c not in frame.columns and c not in {"wasted", "cost"}]
            if missing:
                raise ValueError(f"{self.path} is missing required columns: {', '.join(missing)}")
            frame["date"] = pd.to_datetime(frame["date"], errors="raise").dt.date
            self._frame = frame
        return self._frame

    def _to_record(self, row: dict) -> WasteRecord:
        item = self.catalog.get(str(row["menu_item_id"]))
        prepared = int(row["prepared"])
        consumed = int(row["consumed"])
        wasted = row.get("wasted")
        wasted = prepared - consumed if wasted is None or pd.isna(wasted) else int(wasted)
        cost = row.get("cost")
        cost = wasted * item.cost if cost is None or pd.isna(cost) else float(cost)
        try:
            return WasteRecord(
                date=row["date"],
                menu_item_id=item.id,
                meal_period=str(row["meal_period"]).lower(),
                prepared=prepared,
                consumed=consumed,
                wasted=wasted,
                cost=cost,
            )
        except ValidationError as exc:
            raise ValueError(f"Invalid waste record in {self.path}: {exc}") from exc

    def records(self, start: Optional[date] = None, end: Optional[date] = None) -> List[WasteRecord]:
        frame = self._load()
        if start is not None and end is not None:
            _check_range(start, end)
        mask = pd.Series(True, index=frame.index)
        if start is not None:
            mask &= frame["date"] >= start
        if end is not None:
            mask &= frame["date"] <= end
        return [self._to_record(row) for row in frame.loc[mask].to_dict(orient="records")]


def default_history_provider(
    data_root: str | None = None,
    catalog: CatalogProvider | None = None,
    config: EngineConfig | None = None,
    seed: int = 42,
) -> HistoricalDataProvider:
    """Prefer a recorded waste log under ``data_root``; otherwise synthesise."""

    root = data_root or get_settings().data_dir
    path = Path(root) / "waste_records.csv"
    if dataset_available(path):
        LOGGER.info("Using recorded waste log at %s", path)
        return FileHistoryProvider(path, catalog=catalog)
    LOGGER.info("No waste log found under %s; using synthetic history (seed=%d)", root, seed)
    return SyntheticHistoryProvider(catalog=catalog, config=config, seed=seed)
