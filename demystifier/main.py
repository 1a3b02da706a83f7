"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from demystifier import __version__
from demystifier.core.config import settings
from demystifier.core.logging import setup_logging
from demystifier.llm import analyze_contract, analyze_general
from demystifier.routes import documents_router, health_router, reminders_router
from demystifier.services.dispatcher import AnalysisDispatcher
from demystifier.store import DocumentStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup, cleanup on shutdown."""
    setup_logging()

    app.state.store = DocumentStore()
    app.state.dispatcher = AnalysisDispatcher(
        app.state.store,
        analyze_general=analyze_general,
        analyze_contract=analyze_contract,
        policy=settings.BATCH_FAILURE_POLICY,
    )
    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set; analyses will fail until it is configured")
    logger.info("%s started (batch failure policy: %s)", settings.APP_NAME, settings.BATCH_FAILURE_POLICY)

    yield

    # app.state.dispatcher may have been replaced since startup
    await app.state.dispatcher.shutdown()


app = FastAPI(title=settings.APP_NAME, version=__version__, lifespan=lifespan)

# Register routers
app.include_router(health_router)
app.include_router(documents_router)
app.include_router(reminders_router)
