r"""backend\foodcast\api\v1\health.py

Health check endpoint.

Orchestrators and load balancers can call `/api/v1/health` to verify that
the service is running and that its reference data loaded.
"""

from __future__ import annotations

from fastapi import APIRouter

from .analytics import _catalog_service, _history_provider

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, object]:
    """Return a basic health indicator with the size of the loaded catalog."""
    return {
        "status": "ok",
        "menu_items": len(_catalog_service.items()),
        "history_source": type(_history_provider).__name__,
    }
