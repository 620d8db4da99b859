r"""backend\foodcast\main.py

Main entrypoint for the FastAPI application.

The API exposes the demand forecasting and waste optimisation engine:
per-item forecasts, safety-stock preparation recommendations, menu item
correlations, what-if scenarios and historical waste analytics.  A health
endpoint is also provided for readiness/liveness checks.  Business rules
are read from YAML files in `configs/`.
"""

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

# Load .env from repo root before any router reads CONFIG_DIR / DATA_DIR.
BASE_DIR = Path(__file__).resolve().parents[2]
load_dotenv(BASE_DIR / ".env")

from .api.v1 import (  # noqa: E402
    analytics,
    backtest,
    catalog,
    configs,
    correlations,
    forecasts,
    health,
    optimization,
    scenarios,
)
from .core.config import get_settings  # noqa: E402
from .core.observability import TokenAndRateLimitMiddleware, metrics_endpoint  # noqa: E402

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())
logging.getLogger(__name__).info(
    "Engine configuration directory: %s", settings.config_dir
)

app = FastAPI(title="Foodcast Waste Optimization API", version="0.1.0")

# Allow cross-origin requests from the dashboard (and others).
origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()] or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,  # In production specify your UI domain(s)
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TokenAndRateLimitMiddleware)

# Include versioned routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(catalog.router, prefix="/api/v1")
app.include_router(forecasts.router, prefix="/api/v1")
app.include_router(optimization.router, prefix="/api/v1")
app.include_router(correlations.router, prefix="/api/v1")
app.include_router(scenarios.router, prefix="/api/v1")
app.include_router(analytics.router, prefix="/api/v1")
app.include_router(backtest.router, prefix="/api/v1")
app.include_router(configs.router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
def _root() -> RedirectResponse:
    """Redirect the root path to the interactive docs."""

    return RedirectResponse(url="/docs")


@app.get("/metrics", include_in_schema=False)
async def _metrics() -> Response:
    """Expose Prometheus metrics."""

    return metrics_endpoint()


def run() -> None:
    """Serve the API on ``API_HOST``/``API_PORT``."""

    import uvicorn

    uvicorn.run("backend.foodcast.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
