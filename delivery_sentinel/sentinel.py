"""
DeliverySentinel - Main Decision Engine

This module ties the analyzers together into a single assessment. It
provides the main entry point `run_fraud_assessment()` that orchestrates:
    - GPS spoofing analysis (always)
    - Device risk assessment (always)
    - Cash audit (only when the driver had COD activity)
    - Collusion and delivery verification (when the caller supplies them)

Each analyzer contributes zero or one FraudAlert. The alerts are scored
and turned into a final recommendation:
    - Block driver immediately and investigate
    - Flag for manual review
    - Monitor closely
    - No action needed

Every call is pure and deterministic; instances can be shared across
worker threads without locking.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, List, Dict, Any, Sequence

from .config import DeliverySentinelConfig, get_config
from .models import (
    AlertSeverity,
    AssessmentRequest,
    CashAuditResult,
    CashData,
    CollusionData,
    CollusionResult,
    DeliveryData,
    DeliveryVerification,
    DeviceInfo,
    FraudAlert,
    FraudAlertType,
    FraudAssessmentResult,
    FraudReport,
    GpsReading,
)
from .analyzers import (
    CashAuditor,
    CollusionAnalyzer,
    DeliveryVerifier,
    DeviceRiskAssessor,
    GpsSpoofingAnalyzer,
)
from .core.geo import distance_km
from .core.scoring import (
    calculate_fraud_score,
    most_severe,
    recommend_action,
    severity_counts,
    severity_for_score,
    should_block_driver,
)


logger = logging.getLogger(__name__)


class DeliverySentinel:
    """
    The DeliverySentinel Decision Engine.

    Holds one instance of each analyzer, built from a single config, and
    produces FraudAssessmentResult objects for the driver-lifecycle manager.

    Architecture:
        Telemetry -> Analyzers -> Alerts -> Score -> Decision
                      |  GPS spoofing
                      |  Device risk
                      |  Cash audit (optional)
                      |  Collusion (optional)
                      |  Delivery verification (optional)

    Example:
        sentinel = DeliverySentinel()
        result = sentinel.assess("driver_42", readings, DeviceInfo())

        if result.should_block:
            # Suspend the account and open a review ticket
    """

    def __init__(self, config: Optional[DeliverySentinelConfig] = None):
        """
        Initialize DeliverySentinel.

        Args:
            config: Master configuration (global config if not provided)
        """
        self._config = config or get_config()

        self._gps_analyzer = GpsSpoofingAnalyzer(self._config.gps)
        self._device_assessor = DeviceRiskAssessor(self._config.device)
        self._cash_auditor = CashAuditor(self._config.cash)
        self._collusion_analyzer = CollusionAnalyzer(self._config.collusion)
        self._delivery_verifier = DeliveryVerifier(self._config.delivery)

    @property
    def config(self) -> DeliverySentinelConfig:
        return self._config

    # =========================================================================
    # Drill-down: individual analyzers
    # =========================================================================

    def audit_cash(self, cash_data: CashData) -> CashAuditResult:
        """Run only the cash audit."""
        return self._cash_auditor.audit_data(cash_data)

    def detect_collusion(self, collusion_data: CollusionData) -> CollusionResult:
        """Run only the collusion analysis."""
        return self._collusion_analyzer.analyze_data(collusion_data)

    def verify_delivery(self, delivery_data: DeliveryData) -> DeliveryVerification:
        """Run only the delivery verification."""
        return self._delivery_verifier.verify_data(delivery_data)

    # =========================================================================
    # Full assessment
    # =========================================================================

    def assess(
        self,
        driver_id: str,
        gps_readings: Sequence[GpsReading],
        device_info: DeviceInfo,
        cash_data: Optional[CashData] = None,
        collusion_data: Optional[CollusionData] = None,
        delivery_data: Optional[DeliveryData] = None,
    ) -> FraudAssessmentResult:
        """
        Run a comprehensive fraud assessment for a driver.

        This is the MAIN ENTRY POINT for DeliverySentinel.

        Args:
            driver_id: Driver being assessed
            gps_readings: Chronological GPS readings for the window
            device_info: Device attestation flags
            cash_data: COD ledger totals (omit when no COD activity)
            collusion_data: Handoff stats with one counterpart
            delivery_data: Position and dwell at the last confirmation

        Collusion and delivery alerts are raised only when their data is
        passed. Their severities are local policy: collusion reuses the GPS
        confidence bands, delivery is MEDIUM off-site and LOW otherwise.

        Returns:
            FraudAssessmentResult with score, alerts and recommendation
        """
        alerts: List[FraudAlert] = []

        # =================================================================
        # STAGE 1: GPS spoofing
        # =================================================================
        gps_result = self._gps_analyzer.analyze(gps_readings)
        if gps_result.is_spoofed:
            alerts.append(FraudAlert(
                type=FraudAlertType.GPS_SPOOFING,
                severity=gps_result.severity,
                message=f"GPS spoofing detected (confidence: {gps_result.confidence}%)",
            ))

        # =================================================================
        # STAGE 2: Device risk
        # =================================================================
        device_result = self._device_assessor.assess_info(device_info)
        if device_result.score >= self._config.device.alert_threshold:
            alerts.append(FraudAlert(
                type=FraudAlertType.DEVICE_RISK,
                severity=device_result.risk_level,
                message=f"Device risk: {', '.join(device_result.flags)}",
            ))

        # =================================================================
        # STAGE 3: Cash audit (COD drivers only)
        # =================================================================
        if cash_data is not None:
            cash_result = self._cash_auditor.audit_data(cash_data)
            if not cash_result.is_clean:
                if (
                    cash_result.reconciliation_rate_percent <
                    self._config.cash.high_severity_reconciliation_rate
                ):
                    severity = AlertSeverity.HIGH
                else:
                    severity = AlertSeverity.MEDIUM
                alerts.append(FraudAlert(
                    type=FraudAlertType.CASH_DISCREPANCY,
                    severity=severity,
                    message="; ".join(cash_result.alerts),
                ))

        # =================================================================
        # STAGE 4: Collusion (when handoff stats are supplied)
        # =================================================================
        if collusion_data is not None:
            collusion_result = self._collusion_analyzer.analyze_data(collusion_data)
            if collusion_result.is_collusion:
                alerts.append(FraudAlert(
                    type=FraudAlertType.COLLUSION,
                    severity=severity_for_score(
                        collusion_result.confidence,
                        GpsSpoofingAnalyzer.MEDIUM_AT,
                        GpsSpoofingAnalyzer.HIGH_AT,
                        GpsSpoofingAnalyzer.CRITICAL_AT,
                    ),
                    message=(
                        f"Collusion suspected (confidence: {collusion_result.confidence}%) "
                        f"with {', '.join(collusion_result.involved_ids) or 'unknown entities'}"
                    ),
                ))

        # =================================================================
        # STAGE 5: Delivery verification (when a confirmation is supplied)
        # =================================================================
        if delivery_data is not None:
            delivery_result = self._delivery_verifier.verify_data(delivery_data)
            if not delivery_result.is_verified:
                off_site_km = distance_km(
                    delivery_data.driver_lat, delivery_data.driver_lng,
                    delivery_data.dropoff_lat, delivery_data.dropoff_lng,
                )
                if off_site_km > self._config.delivery.max_distance_from_dropoff_km:
                    severity = AlertSeverity.MEDIUM
                else:
                    severity = AlertSeverity.LOW
                alerts.append(FraudAlert(
                    type=FraudAlertType.DELIVERY_FRAUD,
                    severity=severity,
                    message="; ".join(delivery_result.issues),
                ))

        # =================================================================
        # STAGE 6: Score and decide
        # =================================================================
        overall_score = calculate_fraud_score(alerts)
        block = should_block_driver(overall_score, alerts, self._config.scoring)
        recommendation = recommend_action(overall_score, block, self._config.scoring)

        if block:
            logger.warning(
                f"Driver {driver_id}: BLOCK, score={overall_score}, "
                f"alerts={[a.type.value for a in alerts]}"
            )
        else:
            logger.info(
                f"Driver {driver_id}: score={overall_score}, "
                f"alerts={len(alerts)}, recommendation={recommendation!r}"
            )

        return FraudAssessmentResult(
            driver_id=driver_id,
            overall_score=overall_score,
            alerts=alerts,
            should_block=block,
            recommendation=recommendation,
        )

    def assess_request(self, request: AssessmentRequest) -> FraudAssessmentResult:
        """Assess a complete `AssessmentRequest` bundle."""
        return self.assess(
            driver_id=request.driver_id,
            gps_readings=request.gps_readings,
            device_info=request.device_info,
            cash_data=request.cash_data,
            collusion_data=request.collusion_data,
            delivery_data=request.delivery_data,
        )


def run_fraud_assessment(
    driver_id: str,
    gps_readings: Sequence[GpsReading],
    device_info: DeviceInfo,
    cash_data: Optional[CashData] = None,
    collusion_data: Optional[CollusionData] = None,
    delivery_data: Optional[DeliveryData] = None,
    sentinel: Optional[DeliverySentinel] = None,
) -> FraudAssessmentResult:
    """
    Convenience function to assess a driver.

    This is the main entry point for external callers who don't want
    to manage a DeliverySentinel instance.

    Example:
        result = run_fraud_assessment("driver_42", readings, DeviceInfo())

        if result.should_block:
            suspend(result.driver_id)
    """
    sentinel = sentinel or DeliverySentinel()
    return sentinel.assess(
        driver_id,
        gps_readings,
        device_info,
        cash_data=cash_data,
        collusion_data=collusion_data,
        delivery_data=delivery_data,
    )


def build_fraud_report(assessment: FraudAssessmentResult) -> Optional[FraudReport]:
    """
    Turn an assessment into a review ticket.

    The ticket is typed after the most severe alert; the description lists
    every alert message followed by the recommendation.

    Returns:
        FraudReport, or None when the assessment raised no alerts
    """
    top_alert = most_severe(assessment.alerts)
    if top_alert is None:
        return None

    lines = [f"[{a.severity.value}] {a.type.value}: {a.message}" for a in assessment.alerts]
    lines.append(f"Recommendation: {assessment.recommendation}")
    description = "\n".join(lines)
    if len(description) > 1000:
        description = description[:997] + "..."

    return FraudReport(
        driver_id=assessment.driver_id,
        alert_type=top_alert.type,
        description=description,
        evidence={
            "overall_score": assessment.overall_score,
            "should_block": assessment.should_block,
            "severity_counts": severity_counts(assessment.alerts),
            "alerts": [a.model_dump(mode="json") for a in assessment.alerts],
        },
    )


# =============================================================================
# STREAM PROCESSOR
# =============================================================================

class AssessmentStreamProcessor:
    """
    Stream processor for high-throughput driver assessment.

    Consumes raw telemetry payloads (as dicts, e.g. decoded from a message
    queue), validates them into AssessmentRequest objects, assesses each
    through DeliverySentinel and returns JSON-ready decision dicts.

    Batches are fanned out onto worker threads; assessments share nothing
    but the sentinel's frozen configuration.
    """

    def __init__(self, sentinel: Optional[DeliverySentinel] = None):
        """Initialize the stream processor."""
        self._sentinel = sentinel or DeliverySentinel()
        self._running = False
        self._processed_count = 0

    @property
    def processed_count(self) -> int:
        return self._processed_count

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start processing the stream."""
        self._running = True
        logger.info("Assessment processor started")

    async def stop(self) -> None:
        """Stop processing."""
        self._running = False
        logger.info(f"Assessment processor stopped. Processed {self._processed_count} drivers.")

    def _assess_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        request = AssessmentRequest.model_validate(payload)
        result = self._sentinel.assess_request(request)
        report = build_fraud_report(result)

        output = result.model_dump(mode="json")
        output["report"] = report.model_dump(mode="json") if report else None
        return output

    async def process_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Process a single driver payload from the stream.

        Args:
            payload: Raw AssessmentRequest data

        Returns:
            Assessment data to publish, with the review ticket if any

        Raises:
            RuntimeError: If the processor has not been started
            pydantic.ValidationError: If the payload is malformed
        """
        if not self._running:
            raise RuntimeError("Processor not running")

        output = await asyncio.to_thread(self._assess_payload, payload)
        self._processed_count += 1
        return output

    async def process_batch(self, payloads: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Process many driver payloads in parallel.

        Results are returned in the same order as `payloads`. A malformed
        payload fails the whole batch with its ValidationError.
        """
        if not self._running:
            raise RuntimeError("Processor not running")

        return list(await asyncio.gather(
            *(self.process_payload(payload) for payload in payloads)
        ))
