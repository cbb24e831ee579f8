"""
DeliverySentinel Core Data Models

This module defines the data structures shared by every analyzer and the
fraud aggregator. Using Pydantic for validation at the telemetry boundary,
so analyzers can assume well-typed input and never raise.

Design Philosophy:
    - Immutability everywhere (frozen models, created per invocation)
    - Scores and confidences bounded to 0-100 by the model itself
    - Rich enums for severities and alert identifiers
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, ConfigDict


# =============================================================================
# ENUMS - Clear State Definitions
# =============================================================================

class AlertSeverity(str, Enum):
    """
    Severity of an analyzer finding.

    Severities form a total order: LOW < MEDIUM < HIGH < CRITICAL.
    Use `rank` for comparisons; the string value is what gets serialized.
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Position of this severity in the total order (0 = low)."""
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [
    AlertSeverity.LOW,
    AlertSeverity.MEDIUM,
    AlertSeverity.HIGH,
    AlertSeverity.CRITICAL,
]


class FraudAlertType(str, Enum):
    """
    Alert identifiers understood by the review tooling.

    GPS_SPOOFING: Falsified location stream
    DEVICE_RISK: Untrusted device (emulator, root, tamper...)
    CASH_DISCREPANCY: COD collection/remittance mismatch
    COLLUSION: Repeat-pattern abuse with a restaurant or customer
    RATING_MANIPULATION: Reserved for manual reports
    DELIVERY_FRAUD: Delivery confirmed away from the dropoff
    """
    GPS_SPOOFING = "gps_spoofing"
    DEVICE_RISK = "device_risk"
    CASH_DISCREPANCY = "cash_discrepancy"
    COLLUSION = "collusion"
    RATING_MANIPULATION = "rating_manipulation"
    DELIVERY_FRAUD = "delivery_fraud"


# =============================================================================
# TELEMETRY INPUTS
# =============================================================================

class GpsReading(BaseModel):
    """
    A single GPS sample reported by the driver app.

    Attributes:
        lat: WGS84 latitude (-90 to 90)
        lng: WGS84 longitude (-180 to 180)
        accuracy: Reported horizontal accuracy in meters
        speed: Reported ground speed
        altitude: Altitude in meters
        timestamp: Milliseconds since epoch
        provider: Location provider name ("gps", "network", "mock"...)
    """
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    accuracy: float = 10.0
    speed: float = 0.0
    altitude: float = 0.0
    timestamp: int
    provider: str = "gps"

    def __str__(self) -> str:
        return f"({self.lat:.6f}, {self.lng:.6f}) @ {self.timestamp}"


class DeviceInfo(BaseModel):
    """
    Device attestation flags from the on-device integrity SDK.

    `app_integrity_ok` is True when the integrity check PASSED.
    """
    model_config = ConfigDict(frozen=True)

    is_emulator: bool = False
    is_mock_location: bool = False
    is_rooted: bool = False
    has_debugger: bool = False
    app_integrity_ok: bool = True
    vpn_detected: bool = False


class CashData(BaseModel):
    """Cash-on-delivery ledger totals for one reporting period."""
    model_config = ConfigDict(frozen=True)

    expected_centimes: int
    collected_centimes: int
    remitted_centimes: int
    total_transactions: int = Field(default=0, ge=0)
    shortage_count: int = Field(default=0, ge=0)


class CollusionData(BaseModel):
    """Order-handoff statistics between a driver and one counterpart."""
    model_config = ConfigDict(frozen=True)

    shared_order_count: int = Field(default=0, ge=0)
    avg_handoff_time_seconds: float = Field(default=0.0, ge=0.0)
    unusual_patterns: List[str] = Field(default_factory=list)
    involved_entity_ids: List[str] = Field(default_factory=list)


class DeliveryData(BaseModel):
    """Driver position and dwell time at delivery confirmation."""
    model_config = ConfigDict(frozen=True)

    driver_lat: float = Field(..., ge=-90, le=90)
    driver_lng: float = Field(..., ge=-180, le=180)
    dropoff_lat: float = Field(..., ge=-90, le=90)
    dropoff_lng: float = Field(..., ge=-180, le=180)
    time_at_location_seconds: int = Field(default=0, ge=0)
    has_photo: bool = False


# =============================================================================
# ANALYZER RESULTS
# =============================================================================

class SpoofingResult(BaseModel):
    """Outcome of GPS spoofing analysis over one batch of readings."""
    model_config = ConfigDict(frozen=True)

    is_spoofed: bool
    confidence: int = Field(..., ge=0, le=100)
    indicators: List[str] = Field(default_factory=list)
    severity: AlertSeverity = AlertSeverity.LOW


class DeliveryVerification(BaseModel):
    """Outcome of checking a delivery against its dropoff location."""
    model_config = ConfigDict(frozen=True)

    is_verified: bool
    issues: List[str] = Field(default_factory=list)
    distance_from_dropoff_meters: int = Field(default=0, ge=0)
    time_at_dropoff_seconds: int = 0
    photo_verified: bool = False


class CashAuditResult(BaseModel):
    """
    Outcome of a COD reconciliation.

    `discrepancy_centimes` is signed: positive means the driver holds more
    than was remitted (shortage risk), negative means an overage.
    """
    model_config = ConfigDict(frozen=True)

    is_clean: bool
    discrepancy_centimes: int
    alerts: List[str] = Field(default_factory=list)
    shortages: int = 0
    overages: int = Field(default=0, ge=0)
    reconciliation_rate_percent: float = 100.0


class CollusionResult(BaseModel):
    """Outcome of collusion analysis for one driver/counterpart pair."""
    model_config = ConfigDict(frozen=True)

    is_collusion: bool
    confidence: int = Field(..., ge=0, le=100)
    patterns: List[str] = Field(default_factory=list)
    involved_ids: List[str] = Field(default_factory=list)


class DeviceRiskResult(BaseModel):
    """Outcome of scoring device attestation flags."""
    model_config = ConfigDict(frozen=True)

    risk_level: AlertSeverity
    score: int = Field(..., ge=0, le=100)
    flags: List[str] = Field(default_factory=list)
    is_emulator: bool = False
    is_mock_location: bool = False
    is_rooted: bool = False


# =============================================================================
# AGGREGATE DECISION
# =============================================================================

class FraudAlert(BaseModel):
    """
    A single finding raised by an analyzer.

    This is the common currency between analyzers and the aggregator.
    """
    model_config = ConfigDict(frozen=True)

    type: FraudAlertType
    severity: AlertSeverity
    message: str


class FraudAssessmentResult(BaseModel):
    """
    Final assessment for a driver.

    This is what gets returned to the driver-lifecycle manager, which
    enacts `should_block` and files the alerts for human review.
    """
    model_config = ConfigDict(frozen=True)

    driver_id: str
    overall_score: int = Field(..., ge=0, le=100)
    alerts: List[FraudAlert] = Field(default_factory=list)
    should_block: bool = False
    recommendation: str = ""


class FraudReport(BaseModel):
    """
    Review ticket filed for a driver with at least one alert.

    Shaped like the platform's manual fraud report so automated and
    human-filed reports land in the same queue.
    """
    model_config = ConfigDict(frozen=True)

    driver_id: str
    alert_type: FraudAlertType
    description: str = Field(..., min_length=10, max_length=1000)
    evidence: Dict[str, Any] = Field(default_factory=dict)


class AssessmentRequest(BaseModel):
    """
    Complete telemetry bundle for assessing one driver.

    This is the primary input to the stream processor. Optional sections
    are omitted when the driver had no matching activity in the window.
    """
    model_config = ConfigDict(frozen=True)

    driver_id: str
    gps_readings: List[GpsReading] = Field(default_factory=list)
    device_info: DeviceInfo = Field(default_factory=DeviceInfo)
    cash_data: Optional[CashData] = None
    collusion_data: Optional[CollusionData] = None
    delivery_data: Optional[DeliveryData] = None
