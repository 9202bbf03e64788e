"""Health check endpoint with dependency verification."""

import sys
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from webaudit.api.deps import get_settings
from webaudit.config.settings import Config
from webaudit.core.lighthouse import check_lighthouse_available
from webaudit.errors.exceptions import LaunchError, LighthouseNotFoundError
from webaudit.services.browser import resolve_chrome_path

router = APIRouter()


def _playwright_chromium_installed() -> bool:
    """Whether Playwright has downloaded a Chromium build."""
    # Default: ~/.cache/ms-playwright on Linux, ~/Library/Caches on macOS, AppData on Windows
    playwright_cache = Path.home() / ".cache" / "ms-playwright"
    if sys.platform == "darwin":
        playwright_cache = Path.home() / "Library" / "Caches" / "ms-playwright"
    elif sys.platform == "win32":
        playwright_cache = Path.home() / "AppData" / "Local" / "ms-playwright"

    return playwright_cache.exists() and any(playwright_cache.glob("chromium*"))


def _check_chrome(config: Config) -> dict[str, Any]:
    try:
        path = resolve_chrome_path(config.chrome_path)
        return {"status": "healthy", "available": True, "path": path, "error": None}
    except LaunchError as e:
        if not config.chrome_path and _playwright_chromium_installed():
            return {"status": "healthy", "available": True, "path": "playwright", "error": None}
        return {"status": "unhealthy", "available": False, "path": None, "error": str(e)}


@router.get("/health")
async def health_check(
    config: Config = Depends(get_settings),  # noqa: B008
) -> dict[str, Any]:
    """
    Health check endpoint.

    Reports the Lighthouse CLI, the Chrome executable and whether AI
    enrichment is configured. Returns 503 when an audit could not run.
    """
    lighthouse_status: dict[str, Any] = {"status": "healthy", "available": True, "error": None}
    try:
        check_lighthouse_available()
    except LighthouseNotFoundError as e:
        lighthouse_status = {"status": "unhealthy", "available": False, "error": str(e)}

    chrome_status = _check_chrome(config)

    body: dict[str, Any] = {
        "status": "healthy",
        "ready": True,
        "alive": True,
        "dependencies": {
            "lighthouse_cli": lighthouse_status,
            "chrome": chrome_status,
        },
        "ai_enrichment": {"enabled": config.ai_enabled, "model": config.ai_model},
        "environment": config.environment,
    }

    if not (lighthouse_status["available"] and chrome_status["available"]):
        reasons = []
        if not lighthouse_status["available"]:
            reasons.append(f"Lighthouse not available: {lighthouse_status['error']}")
        if not chrome_status["available"]:
            reasons.append(f"Chrome not available: {chrome_status['error']}")

        raise HTTPException(
            status_code=503,
            detail={**body, "status": "unhealthy", "ready": False, "reason": "; ".join(reasons)},
        )

    return body
