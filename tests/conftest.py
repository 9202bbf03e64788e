"""Pytest fixtures for web audit tests."""

import json
from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from webaudit.api.deps import reset_enricher
from webaudit.config.settings import reset_config
from webaudit.core import audit
from webaudit.core.normalizer import normalize_report
from webaudit.schemas.audit import AIAnalysis, AuditResults
from webaudit.schemas.common import AuditStatus
from webaudit.schemas.lighthouse import RawReport
from webaudit.services.store import AuditStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True, scope="function")
def reset_singletons(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Reset all singleton instances for each test."""
    # Blank values are read as unset and keep a local .env from leaking in
    monkeypatch.setenv("GOOGLE_API_KEY", "")
    monkeypatch.setenv("CHROME_PATH", "")
    monkeypatch.setenv("CHROME_FLAGS", "")
    monkeypatch.setenv("APP_ENV", "development")

    AuditStore.reset_instance()
    reset_enricher()
    reset_config()

    yield

    AuditStore.reset_instance()
    reset_enricher()
    reset_config()


@pytest.fixture(autouse=True)
def lighthouse_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    """Audits check for the Lighthouse CLI up front; pretend it is installed."""
    monkeypatch.setattr(audit, "check_lighthouse_available", lambda: None)


@pytest.fixture
def lighthouse_json() -> dict[str, Any]:
    """Raw Lighthouse result (LHR) captured from a real run, trimmed."""
    with open(FIXTURES_DIR / "lighthouse.json") as f:
        return json.load(f)


@pytest.fixture
def raw_report(lighthouse_json: dict[str, Any]) -> RawReport:
    return RawReport.model_validate(lighthouse_json)


@pytest.fixture
def sample_results(raw_report: RawReport) -> AuditResults:
    """Scored audit record as returned right after a run."""
    normalized = normalize_report(raw_report)
    return AuditResults(
        id="test-audit",
        url="https://example.com/",
        timestamp=datetime(2026, 10, 19, 10, 0, tzinfo=UTC),
        pillars=normalized.pillars,
        overall_score=normalized.overall_score,
        ai_analysis=AIAnalysis(status=AuditStatus.PENDING),
        status=AuditStatus.PROCESSING,
    )
