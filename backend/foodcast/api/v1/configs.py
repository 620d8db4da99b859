"""API endpoints for reading and updating the engine configuration YAML files.

Updates are written atomically and validated against ``EngineConfig``.
Services read the configuration at start-up, so new values apply to new
processes.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from typing import Any, Dict, List, Optional

import yaml
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field, ValidationError

from ...core.config import ConfidenceTier, EngineConfig, get_engine_config
from ...core.config import get_settings as _process_settings

router = APIRouter()

CONFIG_DIR = _process_settings().config_dir
SETTINGS_FILE = "settings.yaml"
THRESHOLDS_FILE = "thresholds.yaml"


def _path(filename: str) -> str:
    return os.path.join(CONFIG_DIR, filename)


def _load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _safe_write_yaml(path: str, payload: Dict[str, Any]) -> None:
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(
        prefix=".tmp-", suffix=".yaml", dir=directory
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            yaml.safe_dump(payload, handle, sort_keys=False)
        shutil.move(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)


class SettingsUpdate(BaseModel):
    weekend_multiplier: Optional[float] = Field(None, gt=0.0)
    meal_period_multipliers: Optional[Dict[str, float]] = None
    academic_break_months: Optional[List[int]] = None
    academic_break_multiplier: Optional[float] = Field(None, gt=0.0)
    weather_multipliers: Optional[Dict[str, float]] = None
    event_multipliers: Optional[Dict[str, float]] = None
    base_demand_scale: Optional[float] = Field(None, gt=0.0)
    interval_fraction: Optional[float] = Field(None, ge=0.0, le=1.0)
    current_waste_rate: Optional[float] = Field(None, ge=0.0, le=1.0)
    optimized_waste_rate: Optional[float] = Field(None, ge=0.0, le=1.0)
    baseline_attendance: Optional[float] = Field(None, gt=0.0)
    baseline_demand: Optional[float] = Field(None, ge=0.0)
    baseline_waste: Optional[float] = Field(None, ge=0.0)
    baseline_cost: Optional[float] = Field(None, ge=0.0)
    optimization_factor: Optional[float] = Field(None, ge=0.0, le=1.0)
    average_cost_per_item: Optional[float] = Field(None, ge=0.0)


class ThresholdsUpdate(BaseModel):
    confidence_tiers: Optional[List[ConfidenceTier]] = None
    fallback_safety_multiplier: Optional[float] = Field(None, ge=1.0)
    very_strong_complement_threshold: Optional[float] = Field(None, ge=0.0, le=1.0)
    strong_complement_threshold: Optional[float] = Field(None, ge=0.0, le=1.0)
    substitute_threshold: Optional[float] = Field(None, ge=-1.0, le=0.0)


def _merge_updates(original: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    result = original.copy()
    result.update({k: v for k, v in updates.items() if v is not None})
    return result


def _read(filename: str) -> Dict[str, Any]:
    try:
        return _load_yaml(_path(filename))
    except FileNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "message": f"{filename} not found"},
        ) from exc


def _update(filename: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    try:
        current = _load_yaml(_path(filename))
    except FileNotFoundError:
        current = {}

    updated = _merge_updates(current, updates)
    if updated == current:
        return current

    other = THRESHOLDS_FILE if filename == SETTINGS_FILE else SETTINGS_FILE
    try:
        other_values = _load_yaml(_path(other))
    except FileNotFoundError:
        other_values = {}
    known = set(EngineConfig.model_fields)
    try:
        EngineConfig.model_validate(
            {k: v for k, v in {**other_values, **updated}.items() if k in known}
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_config", "message": str(exc)},
        ) from exc

    try:
        _safe_write_yaml(_path(filename), updated)
    except OSError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "write_failed", "message": str(exc)},
        ) from exc
    get_engine_config.cache_clear()
    return updated


@router.get("/configs/settings")
def get_settings() -> Dict[str, Any]:
    return _read(SETTINGS_FILE)


@router.put("/configs/settings")
def put_settings(body: SettingsUpdate) -> Dict[str, Any]:
    return _update(SETTINGS_FILE, body.model_dump(exclude_none=True))


@router.get("/configs/thresholds")
def get_thresholds() -> Dict[str, Any]:
    return _read(THRESHOLDS_FILE)


@router.put("/configs/thresholds")
def put_thresholds(body: ThresholdsUpdate) -> Dict[str, Any]:
    return _update(THRESHOLDS_FILE, body.model_dump(exclude_none=True))
