"""Routes for what-if scenario simulation."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter

from .forecasts import _invalid_request
from ...core.config import get_engine_config, get_settings
from ...models import schemas
from ...services.scenario_service import ScenarioSimulator

LOGGER = logging.getLogger(__name__)

router = APIRouter()

_simulator = ScenarioSimulator(config=get_engine_config(get_settings().config_dir))


@router.post("/scenarios/simulate", response_model=schemas.ScenarioResult)
async def simulate(scenario: schemas.ScenarioInput) -> schemas.ScenarioResult:
    """Project demand, waste and savings for a hypothetical scenario."""

    LOGGER.info(
        "Scenario request received attendance=%d weather=%s event=%s",
        scenario.attendance,
        scenario.weather,
        scenario.event,
    )
    try:
        return _simulator.simulate(scenario)
    except ValueError as exc:
        LOGGER.warning("Scenario rejected: %s", exc)
        raise _invalid_request(exc) from exc


@router.get("/scenarios/templates", response_model=List[schemas.ScenarioTemplate])
async def templates() -> List[schemas.ScenarioTemplate]:
    """Return prebuilt scenarios for common campus situations."""

    return _simulator.templates()
