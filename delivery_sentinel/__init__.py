"""
DeliverySentinel - Fraud and Trust Scoring for Delivery Drivers

This package turns raw driver telemetry (GPS traces, device attestation
flags, cash-on-delivery ledgers, order-handoff history) into a bounded
risk score and a block / review / monitor / no-action decision.

Modules:
    - analyzers: GPS spoofing, delivery, cash, collusion and device checks
    - core: Geo math and the severity/score tables
    - sentinel: Aggregate assessment and the stream processor
    - models: Telemetry inputs and analyzer results
    - config: Thresholds and logging configuration
"""

from .models import (
    AlertSeverity,
    FraudAlertType,
    GpsReading,
    DeviceInfo,
    CashData,
    CollusionData,
    DeliveryData,
    FraudAlert,
    FraudAssessmentResult,
    FraudReport,
)
from .sentinel import (
    DeliverySentinel,
    AssessmentStreamProcessor,
    run_fraud_assessment,
    build_fraud_report,
)

__version__ = "1.0.0"
__author__ = "DeliverySentinel Trust & Safety Team"
__license__ = "MIT"

__all__ = [
    "AlertSeverity",
    "FraudAlertType",
    "GpsReading",
    "DeviceInfo",
    "CashData",
    "CollusionData",
    "DeliveryData",
    "FraudAlert",
    "FraudAssessmentResult",
    "FraudReport",
    "DeliverySentinel",
    "AssessmentStreamProcessor",
    "run_fraud_assessment",
    "build_fraud_report",
]
