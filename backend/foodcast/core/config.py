"""
Application configuration utilities.

This module defines the ``Settings`` class used throughout the service for
environment variables, the ``EngineConfig`` table holding every business
constant used by the forecasting engine, and helper functions to load the
YAML files (``configs/settings.yaml`` and ``configs/thresholds.yaml``) that
override those constants.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Dict, List

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOGGER = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Configuration loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # API server configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Locations of the YAML business rules and optional recorded waste logs
    config_dir: str = "configs"
    data_dir: str = "data"

    # Seed for the synthetic history generator used when no waste log exists
    history_seed: int = 42

    # Logging and cross-origin access
    log_level: str = "INFO"
    cors_origins: str = ""


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return a cached instance of ``Settings``.

    Using a cache ensures that environment variables are only read once.
    """
    return Settings()


def load_yaml(file_path: str) -> dict:
    """Load a YAML file from the given path and return its contents.

    If the file does not exist, an empty dictionary is returned.
    """
    if not os.path.exists(file_path):
        return {}
    with open(file_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


# ---------------------------------------------------------------------------
# Engine configuration table


class ConfidenceTier(BaseModel):
    """Safety-stock multiplier applied when confidence is strictly above ``above``."""

    above: float = Field(..., ge=0.0, le=1.0)
    multiplier: float = Field(..., ge=1.0)


class EngineConfig(BaseModel):
    """Every threshold, lookup table and baseline used by the engine."""

    # Factor model
    weekday_multiplier: float = 1.0
    weekend_multiplier: float = 0.6
    weekend_days: List[int] = Field(default_factory=lambda: [5, 6])
    meal_period_multipliers: Dict[str, float] = Field(
        default_factory=lambda: {"breakfast": 0.8, "lunch": 1.4, "dinner": 1.2}
    )
    academic_break_months: List[int] = Field(default_factory=lambda: [6, 7, 8])
    academic_break_multiplier: float = 0.3
    academic_term_multiplier: float = 1.0
    weather_multipliers: Dict[str, float] = Field(
        default_factory=lambda: {"sunny": 1.0, "cloudy": 0.95, "rainy": 0.85, "snowy": 0.75}
    )
    event_multipliers: Dict[str, float] = Field(
        default_factory=lambda: {
            "none": 1.0,
            "exam": 0.8,
            "sports": 1.3,
            "conference": 1.1,
            "holiday": 0.6,
            "graduation": 1.5,
        }
    )
    neutral_multiplier: float = 1.0

    # Demand forecaster
    base_demand_scale: float = 100.0
    interval_fraction: float = Field(0.15, ge=0.0)
    noise_low: float = 0.9
    noise_high: float = 1.1

    # Safety-stock optimizer
    confidence_tiers: List[ConfidenceTier] = Field(
        default_factory=lambda: [
            ConfidenceTier(above=0.8, multiplier=1.10),
            ConfidenceTier(above=0.6, multiplier=1.20),
        ]
    )
    fallback_safety_multiplier: float = 1.30
    current_waste_rate: float = Field(0.365, ge=0.0, le=1.0)
    optimized_waste_rate: float = Field(0.12, ge=0.0, le=1.0)

    # Correlation analyzer
    very_strong_complement_threshold: float = 0.8
    strong_complement_threshold: float = 0.65
    substitute_threshold: float = -0.3

    # Scenario simulator
    baseline_attendance: float = Field(1000.0, gt=0.0)
    baseline_demand: float = 950.0
    baseline_waste: float = 347.0
    baseline_cost: float = 2156.0
    optimization_factor: float = 0.65
    average_cost_per_item: float = 6.2
    scenario_safety_margin: float = 0.15
    scenario_confidence_ceiling: float = 0.95
    scenario_confidence_floor: float = 0.85
    scenario_confidence_decay: float = 0.1

    @field_validator("confidence_tiers")
    @classmethod
    def _sort_tiers(cls, tiers: List[ConfidenceTier]) -> List[ConfidenceTier]:
        # Highest threshold first so the first match wins.
        return sorted(tiers, key=lambda tier: tier.above, reverse=True)

    @field_validator("weather_multipliers", "event_multipliers", "meal_period_multipliers")
    @classmethod
    def _lowercase_keys(cls, table: Dict[str, float]) -> Dict[str, float]:
        return {str(key).strip().lower(): float(value) for key, value in table.items()}


def load_engine_config(config_root: str = "configs") -> EngineConfig:
    """Merge ``settings.yaml`` and ``thresholds.yaml`` into an ``EngineConfig``.

    Keys that are absent from both files keep their reference defaults;
    unrecognised keys are ignored.
    """

    settings = load_yaml(os.path.join(config_root, "settings.yaml"))
    thresholds = load_yaml(os.path.join(config_root, "thresholds.yaml"))
    merged: dict = {}
    for source in (settings, thresholds):
        if not isinstance(source, dict):
            LOGGER.warning("Ignoring non-mapping configuration in %s", config_root)
            continue
        merged.update({k: v for k, v in source.items() if v is not None})

    known = set(EngineConfig.model_fields)
    unknown = sorted(set(merged) - known)
    if unknown:
        LOGGER.debug("Ignoring unknown engine configuration keys: %s", ", ".join(unknown))
    return EngineConfig.model_validate({k: v for k, v in merged.items() if k in known})


@lru_cache(maxsize=None)
def get_engine_config(config_root: str | None = None) -> EngineConfig:
    """Return the cached engine configuration for ``config_root``."""

    root = config_root or get_settings().config_dir
    return load_engine_config(root)
