"""
DeliverySentinel Collusion Analyzer

Scores handoff statistics between a driver and one counterpart
(restaurant or customer) for repeat-pattern abuse.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..config import CollusionConfig
from ..core.scoring import clamp_score
from ..models import CollusionData, CollusionResult


logger = logging.getLogger(__name__)


class CollusionAnalyzer:
    """
    Detects potential collusion between a driver and a counterpart.

    Caller-supplied patterns count twice: toward the pattern-count
    threshold and a flat score per pattern. The threshold only looks at
    the caller's list, not the summary patterns this analyzer adds.
    """

    def __init__(self, config: Optional[CollusionConfig] = None):
        self._config = config or CollusionConfig()

    @property
    def config(self) -> CollusionConfig:
        return self._config

    def analyze(
        self,
        shared_order_count: int,
        avg_handoff_time_seconds: float,
        unusual_patterns: Sequence[str],
        involved_entity_ids: Sequence[str],
    ) -> CollusionResult:
        """
        Detect potential collusion.

        Args:
            shared_order_count: Orders shared between the two entities
            avg_handoff_time_seconds: Mean pickup-to-handoff time
            unusual_patterns: Patterns already flagged upstream
            involved_entity_ids: Driver and counterpart identifiers

        Returns:
            CollusionResult with the caller's patterns first
        """
        config = self._config
        patterns: List[str] = list(unusual_patterns)
        suspicion_score = 0

        if shared_order_count >= config.min_shared_orders:
            patterns.append(f"{shared_order_count} shared orders between same entities")
            suspicion_score += config.shared_orders_points

        if avg_handoff_time_seconds < config.max_time_between_handoffs:
            patterns.append(
                f"Average handoff time {avg_handoff_time_seconds:g}s is unusually fast"
            )
            suspicion_score += config.fast_handoff_points

        if len(unusual_patterns) >= config.suspicious_pattern_count:
            suspicion_score += config.pattern_count_points

        suspicion_score += len(unusual_patterns) * config.per_pattern_points

        confidence = clamp_score(suspicion_score)
        is_collusion = confidence >= config.collusion_threshold

        if is_collusion:
            logger.info(
                f"Collusion detected: confidence={confidence}%, "
                f"entities={','.join(involved_entity_ids)}"
            )

        return CollusionResult(
            is_collusion=is_collusion,
            confidence=confidence,
            patterns=patterns,
            involved_ids=list(involved_entity_ids),
        )

    def analyze_data(self, data: CollusionData) -> CollusionResult:
        """Analyze a `CollusionData` bundle."""
        return self.analyze(
            data.shared_order_count,
            data.avg_handoff_time_seconds,
            data.unusual_patterns,
            data.involved_entity_ids,
        )


def detect_collusion(
    shared_order_count: int,
    avg_handoff_time_seconds: float,
    unusual_patterns: Sequence[str],
    involved_entity_ids: Sequence[str],
    config: Optional[CollusionConfig] = None,
) -> CollusionResult:
    """Convenience wrapper around `CollusionAnalyzer.analyze`."""
    return CollusionAnalyzer(config).analyze(
        shared_order_count,
        avg_handoff_time_seconds,
        unusual_patterns,
        involved_entity_ids,
    )
