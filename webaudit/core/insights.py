"""Rule-based insights derived from normalized pillar metrics."""

from webaudit.schemas.audit import AuditMetric

LOW_SCORE_THRESHOLD = 2.5
EXCELLENT_THRESHOLD = 4


def generate_insights(pillar_name: str, metrics: list[AuditMetric]) -> list[str]:
    """
    One headline by average-score tier, then one sentence per low-scoring metric.
    """
    avg_score = sum(m.score for m in metrics) / len(metrics) if metrics else 0.0

    if avg_score >= EXCELLENT_THRESHOLD:
        headline = f"Excellent {pillar_name} performance!"
    elif avg_score >= LOW_SCORE_THRESHOLD:
        headline = f"Good {pillar_name} performance, but there's room for improvement."
    else:
        headline = f"Needs improvement in {pillar_name} performance."

    insights = [headline]
    for metric in metrics:
        if metric.score < LOW_SCORE_THRESHOLD:
            insights.append(f"Low score for {metric.name}: {metric.description}")
    return insights
