"""
DeliverySentinel Analyzers Package

Independent, order-insensitive telemetry analyzers. None depends on
another's output.
"""

from .gps_spoofing import GpsSpoofingAnalyzer, detect_gps_spoofing
from .delivery import DeliveryVerifier, verify_delivery
from .cash_audit import CashAuditor, audit_cash_handling
from .collusion import CollusionAnalyzer, detect_collusion
from .device_risk import DeviceRiskAssessor, assess_device_risk

__all__ = [
    "GpsSpoofingAnalyzer",
    "DeliveryVerifier",
    "CashAuditor",
    "CollusionAnalyzer",
    "DeviceRiskAssessor",
    "detect_gps_spoofing",
    "verify_delivery",
    "audit_cash_handling",
    "detect_collusion",
    "assess_device_risk",
]
