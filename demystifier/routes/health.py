"""Health check endpoints."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from demystifier.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness probe - checks the document store, dispatcher and LLM credentials."""
    checks = {}
    all_ok = True

    store = getattr(request.app.state, "store", None)
    if store is not None:
        checks["store"] = f"ok ({len(store)} documents)"
    else:
        checks["store"] = "not initialized"
        all_ok = False

    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is not None:
        checks["dispatcher"] = f"ok ({dispatcher.in_flight} in flight)"
    else:
        checks["dispatcher"] = "not initialized"
        all_ok = False

    if settings.OPENAI_API_KEY:
        checks["llm"] = "ok"
    else:
        checks["llm"] = "not configured"
        all_ok = False

    if not all_ok:
        logger.warning("Readiness check degraded: %s", checks)

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ok" if all_ok else "degraded", "checks": checks},
    )
