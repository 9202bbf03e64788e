"""Report normalizer - maps a Lighthouse report onto the four quality pillars."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from webaudit.core.insights import generate_insights
from webaudit.errors.exceptions import MissingCategoryError
from webaudit.schemas.audit import AuditMetric, PillarResult, Pillars
from webaudit.schemas.common import Impact
from webaudit.schemas.lighthouse import RawAudit, RawCategory, RawReport

SCORE_SCALE = 5
METRIC_THRESHOLD = 0.9

# pillar field -> (Lighthouse category id, display name used in insights)
PILLAR_CATEGORIES: dict[str, tuple[str, str]] = {
    "accessibility": ("accessibility", "accessibility"),
    "trust": ("best-practices", "trust"),
    "performance": ("performance", "performance"),
    "agent_readiness": ("seo", "agent readiness"),
}


@dataclass(frozen=True)
class NormalizedReport:
    """Pillars plus the overall 0-5 score."""

    pillars: Pillars
    overall_score: float


def classify_impact(score: float) -> Impact:
    """Severity label for a 0-5 score: a low score carries a high impact."""
    if score >= 4:
        return Impact.LOW
    if score >= 2.5:
        return Impact.MEDIUM
    return Impact.HIGH


def _metric_value(audit: RawAudit) -> float | str | None:
    if audit.numeric_value is not None:
        return audit.numeric_value
    if audit.display_value is not None:
        return audit.display_value
    return audit.score


def build_metric(audit_id: str, audit: RawAudit) -> AuditMetric:
    """Rescale a single audit to the 0-5 pillar scale."""
    score = audit.score * SCORE_SCALE if audit.score is not None else 0.0

    return AuditMetric(
        id=audit_id,
        name=audit.title,
        score=score,
        value=_metric_value(audit),
        threshold=METRIC_THRESHOLD,
        impact=classify_impact(score),
        description=audit.description,
    )


def extract_metrics(category: RawCategory, raw: RawReport) -> list[AuditMetric]:
    """Metrics for every weighted audit reference the report actually contains."""
    metrics: list[AuditMetric] = []
    for ref in category.audit_refs:
        if not ref.weight:
            continue
        audit = raw.audits.get(ref.id)
        if audit is None:
            continue
        metrics.append(build_metric(ref.id, audit))
    return metrics


def average_score(metrics: list[AuditMetric]) -> float:
    """Mean metric score, 0 for an empty list."""
    if not metrics:
        return 0.0
    return sum(metric.score for metric in metrics) / len(metrics)


def normalize_category(category_id: str, name: str, raw: RawReport) -> PillarResult | None:
    """Build one pillar from a Lighthouse category, or None if the category is absent."""
    category = raw.categories.get(category_id)
    if category is None:
        return None

    metrics = extract_metrics(category, raw)
    return PillarResult(
        score=average_score(metrics),
        metrics=metrics,
        insights=generate_insights(name, metrics),
    )


def calculate_overall_score(pillars: Pillars) -> float:
    """Mean of the four pillar scores, rounded half-up to one decimal."""
    scores = [
        pillars.accessibility.score,
        pillars.trust.score,
        pillars.performance.score,
        pillars.agent_readiness.score,
    ]
    mean = sum(scores) / len(scores)
    return float(Decimal(str(mean)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def normalize_report(raw: RawReport) -> NormalizedReport:
    """
    Map a Lighthouse report onto the four pillars.

    Raises:
        MissingCategoryError: If any pillar's source category is absent.
    """
    results: dict[str, PillarResult] = {}
    missing: list[str] = []

    for pillar, (category_id, name) in PILLAR_CATEGORIES.items():
        pillar_result = normalize_category(category_id, name, raw)
        if pillar_result is None:
            missing.append(category_id)
        else:
            results[pillar] = pillar_result

    if missing:
        raise MissingCategoryError(
            f"Lighthouse report is missing categories: {', '.join(missing)}"
        )

    pillars = Pillars(**results)
    return NormalizedReport(pillars=pillars, overall_score=calculate_overall_score(pillars))
