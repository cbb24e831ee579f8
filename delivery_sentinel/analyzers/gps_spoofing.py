"""
DeliverySentinel GPS Spoofing Analyzer

Inspects a time-ordered batch of GPS readings for signs of location
falsification. Each check is independent and additive:

    1. Mock provider: readings tagged by a mock-location provider
    2. Perfect accuracy: most readings report sub-meter accuracy
    3. Impossible speed / teleportation between consecutive readings
    4. Altitude jumps between consecutive readings
    5. Zero reported speed while the position keeps moving

Per-pair penalties (speed, teleport, altitude) accumulate across every
offending pair; only the final score is capped at 100.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..config import GpsSpoofingConfig
from ..core.geo import distance_km
from ..core.scoring import clamp_score, severity_for_score
from ..models import AlertSeverity, GpsReading, SpoofingResult


logger = logging.getLogger(__name__)


INSUFFICIENT_READINGS = "Insufficient readings for analysis"


class GpsSpoofingAnalyzer:
    """
    Scores a batch of GPS readings for location spoofing.

    Stateless apart from its frozen config; one instance can be shared
    across threads.

    Example:
        analyzer = GpsSpoofingAnalyzer()
        result = analyzer.analyze(readings)
        if result.is_spoofed:
            ...
    """

    # Severity band lower bounds on the 0-100 confidence
    MEDIUM_AT = 40
    HIGH_AT = 60
    CRITICAL_AT = 80

    def __init__(self, config: Optional[GpsSpoofingConfig] = None):
        """
        Initialize the analyzer.

        Args:
            config: Detection thresholds (uses defaults if not provided)
        """
        self._config = config or GpsSpoofingConfig()

    @property
    def config(self) -> GpsSpoofingConfig:
        return self._config

    def analyze(self, readings: Sequence[GpsReading]) -> SpoofingResult:
        """
        Detect GPS spoofing from a sequence of readings.

        Args:
            readings: Chronological readings for one driver and window

        Returns:
            SpoofingResult; batches below the minimum size are never flagged
        """
        config = self._config
        readings = list(readings)

        if len(readings) < config.min_readings_for_analysis:
            return SpoofingResult(
                is_spoofed=False,
                confidence=0,
                indicators=[INSUFFICIENT_READINGS],
                severity=AlertSeverity.LOW,
            )

        indicators: List[str] = []
        suspicion_score = 0

        # =================================================================
        # Check 1: Mock location provider (once per batch)
        # =================================================================
        mock_count = sum(1 for r in readings if r.provider in config.mock_providers)
        if mock_count > 0:
            indicators.append(
                f"Mock location provider detected in {mock_count} readings"
            )
            suspicion_score += config.mock_provider_points

        # =================================================================
        # Check 2: Impossibly perfect accuracy
        # =================================================================
        perfect_count = sum(
            1 for r in readings if r.accuracy < config.suspicious_accuracy_meters
        )
        if perfect_count > len(readings) * 0.5:
            indicators.append(
                f"Suspiciously perfect accuracy (< {config.suspicious_accuracy_meters:g}m) "
                f"in {perfect_count}/{len(readings)} readings"
            )
            suspicion_score += config.perfect_accuracy_points

        # =================================================================
        # Check 3: Impossible speed and teleportation, per pair
        # =================================================================
        for prev, curr in zip(readings, readings[1:]):
            time_diff_s = (curr.timestamp - prev.timestamp) / 1000
            if time_diff_s <= 0:
                continue

            dist_km = distance_km(prev.lat, prev.lng, curr.lat, curr.lng)
            speed_kmh = dist_km / time_diff_s * 3600

            if speed_kmh > config.max_speed_kmh:
                indicators.append(
                    f"Impossible speed: {speed_kmh:.0f} km/h between readings"
                )
                suspicion_score += config.impossible_speed_points

            if (
                dist_km > config.max_teleport_distance_km and
                time_diff_s < config.max_teleport_time_seconds
            ):
                indicators.append(
                    f"Teleportation: {dist_km:.2f} km in {time_diff_s:.0f}s"
                )
                suspicion_score += config.teleport_points

        # =================================================================
        # Check 4: Altitude anomalies, per pair
        # =================================================================
        for prev, curr in zip(readings, readings[1:]):
            alt_change = abs(curr.altitude - prev.altitude)
            if alt_change > config.suspicious_altitude_change_m:
                indicators.append(
                    f"Altitude jump: {alt_change:.0f}m between readings"
                )
                suspicion_score += config.altitude_jump_points

        # =================================================================
        # Check 5: Zero speed while the position changes (once per batch)
        # =================================================================
        zero_speed_moves = sum(
            1
            for prev, curr in zip(readings, readings[1:])
            if curr.speed == 0
            and distance_km(prev.lat, prev.lng, curr.lat, curr.lng) > config.zero_speed_movement_km
        )
        if zero_speed_moves > config.max_zero_speed_moves:
            indicators.append(
                f"Zero speed with position changes in {zero_speed_moves} readings"
            )
            suspicion_score += config.zero_speed_points

        confidence = clamp_score(suspicion_score)
        is_spoofed = confidence >= config.spoofed_threshold
        severity = severity_for_score(
            confidence, self.MEDIUM_AT, self.HIGH_AT, self.CRITICAL_AT
        )

        if is_spoofed:
            logger.info(
                f"GPS spoofing detected: confidence={confidence}%, "
                f"indicators={len(indicators)}"
            )
        else:
            logger.debug(
                f"GPS batch clean: readings={len(readings)}, confidence={confidence}%"
            )

        return SpoofingResult(
            is_spoofed=is_spoofed,
            confidence=confidence,
            indicators=indicators,
            severity=severity,
        )


def detect_gps_spoofing(
    readings: Sequence[GpsReading],
    config: Optional[GpsSpoofingConfig] = None,
) -> SpoofingResult:
    """Convenience wrapper around `GpsSpoofingAnalyzer.analyze`."""
    return GpsSpoofingAnalyzer(config).analyze(readings)
