"""FastAPI application entrypoint with lifecycle management."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from webaudit.api import router as api_router
from webaudit.api.deps import get_audit_store, get_enricher
from webaudit.config.settings import get_config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Reads configuration once and binds the AI enricher before serving.
    """
    logger.info("Starting up Web Quality Audit API...")

    config = get_config()
    get_enricher()
    get_audit_store()

    logger.info(
        f"Web Quality Audit API started ({config.environment}), "
        f"AI enrichment {'enabled' if config.ai_enabled else 'disabled'}"
    )

    try:
        yield
    finally:
        expired = get_audit_store().cleanup_expired()
        logger.info(f"Web Quality Audit API shutdown complete ({expired} expired record(s) dropped)")


app = FastAPI(
    title="Web Quality Audit API",
    description="Scores a website on accessibility, trust, performance and agent-readiness "
    "using Lighthouse, with AI-generated insights",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(api_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "name": "Web Quality Audit API",
        "version": "0.1.0",
        "docs": "/docs",
    }
