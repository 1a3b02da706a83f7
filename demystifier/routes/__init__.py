"""API routes package."""

from demystifier.routes.documents import router as documents_router
from demystifier.routes.health import router as health_router
from demystifier.routes.reminders import router as reminders_router

__all__ = ["documents_router", "health_router", "reminders_router"]
