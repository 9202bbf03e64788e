"""Main audit orchestration: launch, run, normalize, always release the browser."""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime

from webaudit.config.settings import Config
from webaudit.core.ai import Enricher
from webaudit.core.lighthouse import (
    AUDIT_TIMEOUT_SECONDS,
    build_lighthouse_config,
    check_lighthouse_available,
    run_lighthouse,
)
from webaudit.core.normalizer import normalize_report
from webaudit.errors.exceptions import ProviderError
from webaudit.schemas.audit import AIAnalysis, AuditRequest, AuditResults
from webaudit.schemas.common import AuditStatus
from webaudit.services.browser import LaunchConfig, launch_browser
from webaudit.services.store import AuditStore, new_audit_id

logger = logging.getLogger(__name__)


def launch_config_from(config: Config) -> LaunchConfig:
    """Browser launch options from application configuration."""
    return LaunchConfig(
        chrome_path=config.chrome_path,
        chrome_flags=config.chrome_flags,
        launch_timeout=config.browser_launch_timeout,
    )


async def run_audit(
    request: AuditRequest,
    launch_config: LaunchConfig | None = None,
    timeout: float = AUDIT_TIMEOUT_SECONDS,
) -> AuditResults:
    """
    Run a Lighthouse audit for a validated request and score it.

    The Lighthouse CLI is checked before any browser starts. Exactly one
    browser session is launched, and it is killed on every path once
    launched: success, run failure and timeout.

    Returns the record with status PROCESSING; AI analysis is still pending.

    Raises:
        LighthouseNotFoundError: If the Lighthouse CLI is not installed.
        LaunchError: If the browser cannot be started.
        AuditTimeoutError: If Lighthouse exceeds `timeout`.
        AuditError: If Lighthouse fails or its report cannot be scored.
    """
    start = time.time()
    check_lighthouse_available()
    session = await launch_browser(launch_config)
    try:
        raw = await run_lighthouse(
            request.url,
            session.port,
            build_lighthouse_config(request.options),
            timeout=timeout,
        )
    finally:
        await session.kill()

    normalized = normalize_report(raw)
    results = AuditResults(
        id=new_audit_id(),
        url=request.url,
        timestamp=datetime.now(UTC),
        pillars=normalized.pillars,
        overall_score=normalized.overall_score,
        ai_analysis=AIAnalysis(status=AuditStatus.PENDING),
        status=AuditStatus.PROCESSING,
    )
    logger.info(
        f"Audit {results.id} for {request.url} scored {results.overall_score} "
        f"in {time.time() - start:.1f}s"
    )
    return results


async def analyze(results: AuditResults, enricher: Enricher) -> AIAnalysis:
    """
    Run AI enrichment, downgrading provider failures to a FAILED analysis.

    Never raises ProviderError; the audit's scores are never touched.
    """
    try:
        insights = await enricher.enrich(results)
    except ProviderError as e:
        logger.warning(f"AI enrichment failed for audit {results.id}: {e}")
        return AIAnalysis(
            generated_at=datetime.now(UTC),
            status=AuditStatus.FAILED,
            error=str(e),
        )

    return AIAnalysis(
        generated_at=datetime.now(UTC),
        insights=insights.insights,
        recommendations=insights.recommendations,
        summary=insights.summary,
        status=AuditStatus.COMPLETED,
    )


async def enrich_audit(
    audit_id: str,
    results: AuditResults,
    enricher: Enricher,
    store: AuditStore,
) -> None:
    """
    Background task: attach AI analysis to a stored audit record.

    Status transitions are pushed through the store so clients can poll them.
    """
    store.update(audit_id, {"ai_analysis": AIAnalysis(status=AuditStatus.PROCESSING)})

    try:
        analysis = await analyze(results, enricher)
    except Exception as e:
        logger.exception(f"AI enrichment for audit {audit_id} crashed: {e}")
        analysis = AIAnalysis(
            generated_at=datetime.now(UTC),
            status=AuditStatus.FAILED,
            error=f"Unexpected error: {e}",
        )

    store.update(audit_id, {"status": AuditStatus.COMPLETED, "ai_analysis": analysis})
