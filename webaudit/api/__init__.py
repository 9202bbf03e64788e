"""HTTP API package."""

from fastapi import APIRouter

from webaudit.api.routes import audits, health

router = APIRouter(prefix="/api")
router.include_router(health.router, tags=["health"])
router.include_router(audits.router, tags=["audits"])
