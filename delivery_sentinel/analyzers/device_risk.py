"""
DeliverySentinel Device Risk Assessor

Scores device-integrity signals reported by the attestation SDK.
"""

from __future__ import annotations

from typing import List, Optional

from ..config import DeviceRiskConfig
from ..core.scoring import clamp_score, severity_for_score
from ..models import DeviceInfo, DeviceRiskResult


class DeviceRiskAssessor:
    """Additive scoring of device attestation flags."""

    MEDIUM_AT = 25
    HIGH_AT = 50
    CRITICAL_AT = 70

    def __init__(self, config: Optional[DeviceRiskConfig] = None):
        self._config = config or DeviceRiskConfig()

    @property
    def config(self) -> DeviceRiskConfig:
        return self._config

    def assess(
        self,
        is_emulator: bool,
        is_mock_location: bool,
        is_rooted: bool,
        has_debugger: bool,
        app_integrity_ok: bool,
        vpn_detected: bool,
    ) -> DeviceRiskResult:
        """
        Assess the risk level of a driver's device.

        Note `app_integrity_ok` is inverted: a FAILED integrity check
        (False) adds risk.
        """
        config = self._config
        flags: List[str] = []
        score = 0

        if is_emulator:
            flags.append("Running on emulator")
            score += config.emulator_weight

        if is_mock_location:
            flags.append("Mock location enabled")
            score += config.mock_location_weight

        if is_rooted:
            flags.append("Device is rooted/jailbroken")
            score += config.rooted_weight

        if has_debugger:
            flags.append("Debugger attached")
            score += config.debugger_weight

        if not app_integrity_ok:
            flags.append("App integrity check failed")
            score += config.integrity_failed_weight

        if vpn_detected:
            flags.append("VPN detected")
            score += config.vpn_weight

        score = clamp_score(score)

        return DeviceRiskResult(
            risk_level=severity_for_score(
                score, self.MEDIUM_AT, self.HIGH_AT, self.CRITICAL_AT
            ),
            score=score,
            flags=flags,
            is_emulator=is_emulator,
            is_mock_location=is_mock_location,
            is_rooted=is_rooted,
        )

    def assess_info(self, info: DeviceInfo) -> DeviceRiskResult:
        """Assess a `DeviceInfo` attestation bundle."""
        return self.assess(
            info.is_emulator,
            info.is_mock_location,
            info.is_rooted,
            info.has_debugger,
            info.app_integrity_ok,
            info.vpn_detected,
        )


def assess_device_risk(
    is_emulator: bool,
    is_mock_location: bool,
    is_rooted: bool,
    has_debugger: bool,
    app_integrity_ok: bool,
    vpn_detected: bool,
    config: Optional[DeviceRiskConfig] = None,
) -> DeviceRiskResult:
    """Convenience wrapper around `DeviceRiskAssessor.assess`."""
    return DeviceRiskAssessor(config).assess(
        is_emulator,
        is_mock_location,
        is_rooted,
        has_debugger,
        app_integrity_ok,
        vpn_detected,
    )
