"""Audit-related Pydantic schemas."""

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field, StrictBool, StrictStr, field_validator

from webaudit.schemas.common import AuditStatus, CamelModel, Device, Impact

# === Request Models ===


class AuditOptions(CamelModel):
    """Run options for an audit."""

    model_config = ConfigDict(frozen=True)

    device: Device = Device.DESKTOP
    throttling: StrictBool = False

    @field_validator("device", mode="before")
    @classmethod
    def _coerce_device(cls, value: Any) -> Any:
        # Unknown devices fall back to desktop instead of failing the request
        if isinstance(value, Device):
            return value
        if isinstance(value, str) and value.strip().lower() in ("mobile", "desktop"):
            return value.strip().lower()
        return Device.DESKTOP


class AuditRequest(CamelModel):
    """Request model for audit endpoint."""

    model_config = ConfigDict(frozen=True)

    url: StrictStr
    options: AuditOptions = Field(default_factory=AuditOptions)

    @field_validator("options", mode="before")
    @classmethod
    def _default_options(cls, value: Any) -> Any:
        return {} if value is None else value


# === Result Models ===


class AuditMetric(CamelModel):
    """A single Lighthouse audit rescaled to the 0-5 pillar scale."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    score: float = Field(ge=0, le=5)
    value: float | str | None = None
    threshold: float = 0.9
    impact: Impact
    description: str = ""


class PillarResult(CamelModel):
    """Score, metrics and static insights for one pillar."""

    score: float = Field(ge=0, le=5)
    metrics: list[AuditMetric] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)


class Pillars(CamelModel):
    """The four fixed quality pillars."""

    accessibility: PillarResult
    trust: PillarResult
    performance: PillarResult
    agent_readiness: PillarResult


class AIInsights(CamelModel):
    """Narrative output of the AI enrichment step."""

    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    summary: str | None = None


class AIAnalysis(AIInsights):
    """AI enrichment attached to an audit record."""

    generated_at: datetime | None = None
    status: AuditStatus = AuditStatus.PENDING
    error: str | None = None


class AuditResults(CamelModel):
    """The main audit record returned by the API."""

    id: str
    url: str
    timestamp: datetime
    pillars: Pillars
    overall_score: float = Field(ge=0, le=5)
    ai_analysis: AIAnalysis = Field(default_factory=AIAnalysis)
    status: AuditStatus = AuditStatus.PENDING


class AuditUpdate(CamelModel):
    """Partial update applied to a stored audit record."""

    status: AuditStatus | None = None
    ai_analysis: AIAnalysis | None = None
