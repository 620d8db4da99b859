"""Tabular file helpers for recorded waste logs."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd


def parquet_sibling(csv_path: str | Path) -> Path:
    return Path(csv_path).with_suffix(".parquet")


def prefer_parquet(csv_path: str | Path, **csv_kwargs: Any) -> pd.DataFrame:
    """Load ``csv_path``, reading its ``.parquet`` sibling instead when one exists.

    Raises ``FileNotFoundError`` when neither file is present.
    """

    csv_path = Path(csv_path)
    pq_path = parquet_sibling(csv_path)
    if pq_path.exists():
        return pd.read_parquet(pq_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Neither {pq_path} nor {csv_path} exists")
    return pd.read_csv(csv_path, **csv_kwargs)


def dataset_available(csv_path: str | Path) -> bool:
    return Path(csv_path).exists() or parquet_sibling(csv_path).exists()
