"""
DeliverySentinel Scoring Module

Severity bands and the aggregate fraud score. Everything here is a pure
function over module-level tables, so decisions can be replayed exactly
when a driver appeals a suspension.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence

from ..config import ScoringConfig
from ..models import AlertSeverity, FraudAlert


MAX_SCORE = 100

# Points each alert contributes to the overall score
SEVERITY_SCORES: Dict[AlertSeverity, int] = {
    AlertSeverity.LOW: 5,
    AlertSeverity.MEDIUM: 15,
    AlertSeverity.HIGH: 30,
    AlertSeverity.CRITICAL: 50,
}

RECOMMENDATION_BLOCK = "Block driver immediately and investigate"
RECOMMENDATION_REVIEW = "Flag for manual review"
RECOMMENDATION_MONITOR = "Monitor closely"
RECOMMENDATION_NONE = "No action needed"


def clamp_score(value: float) -> int:
    """Clamp a raw score into the 0-100 range."""
    return int(max(0, min(MAX_SCORE, value)))


def severity_for_score(
    score: float,
    medium_at: float,
    high_at: float,
    critical_at: float,
) -> AlertSeverity:
    """
    Map a 0-100 score onto a severity band.

    Bands are contiguous and lower-inclusive:
        [0, medium_at) -> LOW
        [medium_at, high_at) -> MEDIUM
        [high_at, critical_at) -> HIGH
        [critical_at, 100] -> CRITICAL
    """
    if score >= critical_at:
        return AlertSeverity.CRITICAL
    elif score >= high_at:
        return AlertSeverity.HIGH
    elif score >= medium_at:
        return AlertSeverity.MEDIUM
    return AlertSeverity.LOW


def calculate_fraud_score(alerts: Iterable[FraudAlert]) -> int:
    """
    Calculate an overall fraud score from multiple alert sources.

    Each alert adds its severity weight; the total is capped at 100.
    """
    return clamp_score(sum(SEVERITY_SCORES[alert.severity] for alert in alerts))


def should_block_driver(
    score: float,
    alerts: Sequence[FraudAlert],
    config: Optional[ScoringConfig] = None,
) -> bool:
    """
    Determine if a driver should be blocked.

    A driver is blocked when the score reaches the block threshold, or
    when enough CRITICAL alerts are present regardless of the score.
    """
    config = config or ScoringConfig()

    if score >= config.block_threshold:
        return True

    critical_alerts = [a for a in alerts if a.severity == AlertSeverity.CRITICAL]
    return len(critical_alerts) >= config.critical_alerts_to_block


def recommend_action(
    score: float,
    should_block: bool,
    config: Optional[ScoringConfig] = None,
) -> str:
    """Pick the reviewer-facing recommendation, highest threshold first."""
    config = config or ScoringConfig()

    if should_block:
        return RECOMMENDATION_BLOCK
    elif score >= config.review_threshold:
        return RECOMMENDATION_REVIEW
    elif score >= config.monitor_threshold:
        return RECOMMENDATION_MONITOR
    return RECOMMENDATION_NONE


def most_severe(alerts: Sequence[FraudAlert]) -> Optional[FraudAlert]:
    """
    Return the most severe alert, or None for an empty list.

    Ties keep the earliest alert so the pick is stable.
    """
    best: Optional[FraudAlert] = None
    for alert in alerts:
        if best is None or alert.severity.rank > best.severity.rank:
            best = alert
    return best


def severity_counts(alerts: Sequence[FraudAlert]) -> Dict[str, int]:
    """Count alerts per severity, including zero counts."""
    counts: Dict[str, int] = {severity.value: 0 for severity in AlertSeverity}
    for alert in alerts:
        counts[alert.severity.value] += 1
    return counts
