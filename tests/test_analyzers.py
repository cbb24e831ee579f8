"""
DeliverySentinel Test - Delivery, Cash, Collusion and Device Analyzers

Validates:
- Delivery verification distance and dwell-time windows
- COD reconciliation alerts and rounding
- Collusion scoring, including the caller-patterns-only threshold
- Device attestation weights and risk bands
"""

import logging

import pytest

from delivery_sentinel.analyzers import (
    CashAuditor,
    CollusionAnalyzer,
    DeliveryVerifier,
    DeviceRiskAssessor,
    assess_device_risk,
    audit_cash_handling,
    detect_collusion,
    verify_delivery,
)
from delivery_sentinel.config import CashAuditConfig, DeliveryVerificationConfig
from delivery_sentinel.models import (
    AlertSeverity,
    CashData,
    CollusionData,
    DeliveryData,
    DeviceInfo,
)


DROPOFF_LAT = 33.5731
DROPOFF_LNG = -7.5898


# =============================================================================
# DELIVERY VERIFIER
# =============================================================================

class TestDeliveryVerifier:
    """Tests for delivery verification."""

    @pytest.fixture
    def verifier(self):
        return DeliveryVerifier()

    def test_verified_at_dropoff(self, verifier):
        result = verifier.verify(DROPOFF_LAT, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, 120, True)

        assert result.is_verified is True
        assert result.issues == []
        assert result.distance_from_dropoff_meters == 0
        assert result.time_at_dropoff_seconds == 120
        assert result.photo_verified is True

    def test_missing_photo_does_not_gate(self, verifier):
        result = verifier.verify(DROPOFF_LAT, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, 120, False)

        assert result.is_verified is True
        assert result.photo_verified is False

    def test_too_far_from_dropoff(self, verifier):
        # ~1 km north of the dropoff
        result = verifier.verify(DROPOFF_LAT + 0.009, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, 120, True)

        assert result.is_verified is False
        assert len(result.issues) == 1
        assert result.issues[0].startswith("Driver ")
        assert result.issues[0].endswith("m from dropoff (max 500m)")
        assert 995 <= result.distance_from_dropoff_meters <= 1005

    def test_within_radius(self, verifier):
        # ~220 m away
        result = verifier.verify(DROPOFF_LAT + 0.002, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, 60, True)

        assert result.is_verified is True
        assert 215 <= result.distance_from_dropoff_meters <= 230

    def test_drive_by_confirmation(self, verifier):
        result = verifier.verify(DROPOFF_LAT, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, 10, True)

        assert result.is_verified is False
        assert result.issues == ["Only 10s at dropoff (min 30s)"]

    def test_idling_at_dropoff(self, verifier):
        result = verifier.verify(DROPOFF_LAT, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, 2000, True)

        assert result.is_verified is False
        assert result.issues == ["2000s at dropoff is unusually long (max 1800s)"]

    def test_fractional_dwell(self, verifier):
        result = verifier.verify(DROPOFF_LAT, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, 45.5, True)

        assert result.is_verified is True
        assert result.time_at_dropoff_seconds == 46

    def test_fractional_dwell_checked_before_rounding(self, verifier):
        short = verifier.verify(DROPOFF_LAT, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, 29.5, True)
        idle = verifier.verify(DROPOFF_LAT, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, 1800.4, True)

        assert short.issues == ["Only 29.5s at dropoff (min 30s)"]
        assert short.time_at_dropoff_seconds == 30
        assert idle.issues == ["1800.4s at dropoff is unusually long (max 1800s)"]
        assert idle.time_at_dropoff_seconds == 1800

    @pytest.mark.parametrize("dwell", [30, 1800])
    def test_dwell_boundaries_are_inclusive(self, verifier, dwell):
        result = verifier.verify(DROPOFF_LAT, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, dwell, True)

        assert result.is_verified is True

    def test_issues_stack(self, verifier):
        result = verifier.verify(DROPOFF_LAT + 0.009, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, 5, False)

        assert len(result.issues) == 2

    def test_custom_radius(self):
        verifier = DeliveryVerifier(DeliveryVerificationConfig(max_distance_from_dropoff_km=2.0))

        result = verifier.verify(DROPOFF_LAT + 0.009, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, 120, True)

        assert result.is_verified is True

    def test_verify_data_matches_verify(self, verifier):
        data = DeliveryData(
            driver_lat=DROPOFF_LAT + 0.009,
            driver_lng=DROPOFF_LNG,
            dropoff_lat=DROPOFF_LAT,
            dropoff_lng=DROPOFF_LNG,
            time_at_location_seconds=12,
            has_photo=True,
        )

        assert verifier.verify_data(data) == verify_delivery(
            DROPOFF_LAT + 0.009, DROPOFF_LNG, DROPOFF_LAT, DROPOFF_LNG, 12, True
        )


# =============================================================================
# CASH AUDITOR
# =============================================================================

class TestCashAuditor:
    """Tests for COD reconciliation."""

    @pytest.fixture
    def auditor(self):
        return CashAuditor()

    def test_clean_period(self, auditor):
        result = auditor.audit(10000, 10000, 10000, 20, 0)

        assert result.is_clean is True
        assert result.alerts == []
        assert result.discrepancy_centimes == 0
        assert result.overages == 0
        assert result.shortages == 0
        assert result.reconciliation_rate_percent == 100.0

    def test_discrepancy_at_threshold_not_flagged_but_low_rate_is(self, auditor):
        result = auditor.audit(
            expected_centimes=10000,
            collected_centimes=10500,
            remitted_centimes=10000,
            total_transactions=10,
            shortage_count=1,
        )

        assert result.discrepancy_centimes == 500
        assert result.reconciliation_rate_percent == 90.0
        assert result.alerts == ["Reconciliation rate 90.0% below 95%"]
        assert result.is_clean is False
        assert result.shortages == 1
        assert result.overages == 0

    def test_shortage_discrepancy(self, auditor):
        result = auditor.audit(12000, 12000, 10000, 20, 0)

        assert result.discrepancy_centimes == 2000
        assert result.alerts == ["Cash discrepancy: 2000 centimes (shortage)"]
        assert result.overages == 0

    def test_overage_discrepancy(self, auditor):
        result = auditor.audit(10000, 10000, 11000, 20, 0)

        assert result.discrepancy_centimes == -1000
        assert result.alerts == ["Cash discrepancy: 1000 centimes (overage)"]
        assert result.overages == 1000

    def test_too_many_shortages(self, auditor):
        result = auditor.audit(10000, 10000, 10000, 100, 4)

        assert result.reconciliation_rate_percent == 96.0
        assert result.alerts == ["4 cash shortages (max 3)"]

    def test_collected_more_than_expected(self, auditor):
        result = auditor.audit(10000, 10600, 10600, 20, 0)

        assert result.discrepancy_centimes == 0
        assert result.alerts == ["Collected 600 centimes more than expected"]

    def test_zero_transactions_is_fully_reconciled(self, auditor):
        result = auditor.audit(0, 0, 0, 0, 0)

        assert result.is_clean is True
        assert result.reconciliation_rate_percent == 100.0

    def test_rate_rounded_to_two_decimals(self, auditor):
        result = auditor.audit(0, 0, 0, 3, 1)

        assert result.reconciliation_rate_percent == 66.67
        assert "Reconciliation rate 66.7% below 95%" in result.alerts

    def test_all_alerts_stack(self, auditor):
        result = auditor.audit(10000, 20000, 5000, 10, 5)

        assert len(result.alerts) == 4

    def test_custom_thresholds(self):
        auditor = CashAuditor(CashAuditConfig(min_reconciliation_rate=85.0))

        assert auditor.audit(10000, 10000, 10000, 10, 1).is_clean is True

    def test_audit_data_matches_audit(self, auditor):
        data = CashData(
            expected_centimes=10000,
            collected_centimes=10500,
            remitted_centimes=10000,
            total_transactions=10,
            shortage_count=1,
        )

        assert auditor.audit_data(data) == audit_cash_handling(10000, 10500, 10000, 10, 1)


# =============================================================================
# COLLUSION ANALYZER
# =============================================================================

class TestCollusionAnalyzer:
    """Tests for collusion detection."""

    @pytest.fixture
    def analyzer(self):
        return CollusionAnalyzer()

    def test_no_signals(self, analyzer):
        result = analyzer.analyze(2, 600, [], ["driver_1", "resto_9"])

        assert result.is_collusion is False
        assert result.confidence == 0
        assert result.patterns == []
        assert result.involved_ids == ["driver_1", "resto_9"]

    def test_full_pattern(self, analyzer):
        result = analyzer.analyze(5, 200, ["a", "b", "c"], ["driver_1", "resto_9"])

        # 20 shared + 15 fast + 25 pattern count + 3 x 5
        assert result.confidence == 75
        assert result.is_collusion is True
        assert result.patterns == [
            "a",
            "b",
            "c",
            "5 shared orders between same entities",
            "Average handoff time 200s is unusually fast",
        ]

    def test_threshold_counts_caller_patterns_only(self, analyzer):
        """Four patterns come back, but only two were supplied by the caller."""
        result = analyzer.analyze(5, 100, ["a", "b"], ["driver_1"])

        assert len(result.patterns) == 4
        # 20 + 15 + 2 x 5, no pattern-count bonus
        assert result.confidence == 45
        assert result.is_collusion is False

    def test_handoff_at_threshold_is_not_fast(self, analyzer):
        result = analyzer.analyze(0, 300, [], [])

        assert result.confidence == 0

    def test_fractional_handoff_time_in_pattern(self, analyzer):
        result = analyzer.analyze(0, 12.5, [], [])

        assert result.patterns == ["Average handoff time 12.5s is unusually fast"]

    def test_confidence_capped(self, analyzer):
        patterns = [f"pattern_{i}" for i in range(10)]

        result = analyzer.analyze(50, 10, patterns, ["driver_1"])

        assert result.confidence == 100

    def test_caller_list_not_mutated(self, analyzer):
        patterns = ["a", "b", "c"]

        analyzer.analyze(5, 100, patterns, [])

        assert patterns == ["a", "b", "c"]

    def test_logs_when_collusion(self, analyzer, caplog):
        caplog.set_level(logging.INFO, logger="delivery_sentinel")

        analyzer.analyze(5, 200, ["a", "b", "c"], ["driver_1", "resto_9"])

        assert "entities=driver_1,resto_9" in caplog.text

    def test_analyze_data_matches_analyze(self, analyzer):
        data = CollusionData(
            shared_order_count=6,
            avg_handoff_time_seconds=90,
            unusual_patterns=["same_address"],
            involved_entity_ids=["driver_1", "cust_3"],
        )

        assert analyzer.analyze_data(data) == detect_collusion(
            6, 90, ["same_address"], ["driver_1", "cust_3"]
        )


# =============================================================================
# DEVICE RISK ASSESSOR
# =============================================================================

class TestDeviceRiskAssessor:
    """Tests for device attestation scoring."""

    @pytest.fixture
    def assessor(self):
        return DeviceRiskAssessor()

    def test_clean_device(self, assessor):
        result = assessor.assess(False, False, False, False, True, False)

        assert result.score == 0
        assert result.risk_level == AlertSeverity.LOW
        assert result.flags == []

    def test_emulator_only_is_medium(self, assessor):
        result = assessor.assess(True, False, False, False, True, False)

        assert result.score == 40
        assert result.risk_level == AlertSeverity.MEDIUM
        assert result.flags == ["Running on emulator"]
        assert result.is_emulator is True

    def test_emulator_with_failed_integrity_is_critical(self, assessor):
        result = assessor.assess(True, False, False, False, False, False)

        assert result.score == 70
        assert result.risk_level == AlertSeverity.CRITICAL
        assert result.flags == ["Running on emulator", "App integrity check failed"]

    @pytest.mark.parametrize(
        "flags, expected_score, expected_level",
        [
            (dict(vpn_detected=True), 10, AlertSeverity.LOW),
            (dict(is_rooted=True), 25, AlertSeverity.MEDIUM),
            (dict(is_rooted=True, has_debugger=True), 45, AlertSeverity.MEDIUM),
            (dict(is_mock_location=True, has_debugger=True), 55, AlertSeverity.HIGH),
            (dict(is_mock_location=True, is_rooted=True), 60, AlertSeverity.HIGH),
        ],
    )
    def test_risk_bands(self, assessor, flags, expected_score, expected_level):
        result = assessor.assess_info(DeviceInfo(**flags))

        assert result.score == expected_score
        assert result.risk_level == expected_level

    def test_everything_wrong_is_capped(self, assessor):
        result = assessor.assess(True, True, True, True, False, True)

        assert result.score == 100
        assert result.risk_level == AlertSeverity.CRITICAL
        assert len(result.flags) == 6
        assert result.is_mock_location is True
        assert result.is_rooted is True

    def test_convenience_function(self, assessor):
        assert assess_device_risk(False, True, False, False, True, False) == assessor.assess(
            False, True, False, False, True, False
        )
