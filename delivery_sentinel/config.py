"""
DeliverySentinel Configuration Module

Central configuration management with environment variable support.
Every threshold used by the analyzers lives here; the defaults are the
production values and tests should rely on them.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple
from enum import Enum


class Environment(Enum):
    """Deployment environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class GpsSpoofingConfig:
    """GPS spoofing detection thresholds."""
    max_speed_kmh: float = 200
    max_teleport_distance_km: float = 5
    max_teleport_time_seconds: float = 60
    min_readings_for_analysis: int = 3
    suspicious_accuracy_meters: float = 1.0
    suspicious_altitude_change_m: float = 500
    zero_speed_movement_km: float = 0.1
    max_zero_speed_moves: int = 2
    mock_providers: Tuple[str, ...] = ("mock", "fused_mock")

    # Score at or above which a batch is reported as spoofed
    spoofed_threshold: int = 50

    # Points per check
    mock_provider_points: int = 40
    perfect_accuracy_points: int = 20
    impossible_speed_points: int = 30
    teleport_points: int = 40
    altitude_jump_points: int = 15
    zero_speed_points: int = 15

    @classmethod
    def from_env(cls) -> "GpsSpoofingConfig":
        """Load configuration from environment variables."""
        return cls(
            max_speed_kmh=float(os.getenv("SENTINEL_GPS_MAX_SPEED_KMH", "200")),
            max_teleport_distance_km=float(os.getenv("SENTINEL_GPS_TELEPORT_DISTANCE_KM", "5")),
            max_teleport_time_seconds=float(os.getenv("SENTINEL_GPS_TELEPORT_TIME_SECONDS", "60")),
            min_readings_for_analysis=int(os.getenv("SENTINEL_GPS_MIN_READINGS", "3")),
            suspicious_accuracy_meters=float(os.getenv("SENTINEL_GPS_SUSPICIOUS_ACCURACY_M", "1.0")),
            suspicious_altitude_change_m=float(os.getenv("SENTINEL_GPS_ALTITUDE_CHANGE_M", "500")),
            spoofed_threshold=int(os.getenv("SENTINEL_GPS_SPOOFED_THRESHOLD", "50")),
        )


@dataclass(frozen=True)
class DeliveryVerificationConfig:
    """Delivery verification thresholds."""
    max_distance_from_dropoff_km: float = 0.5
    min_time_at_dropoff_seconds: int = 30
    max_time_at_dropoff_seconds: int = 1800

    @classmethod
    def from_env(cls) -> "DeliveryVerificationConfig":
        """Load configuration from environment variables."""
        return cls(
            max_distance_from_dropoff_km=float(os.getenv("SENTINEL_DELIVERY_MAX_DISTANCE_KM", "0.5")),
            min_time_at_dropoff_seconds=int(os.getenv("SENTINEL_DELIVERY_MIN_DWELL_SECONDS", "30")),
            max_time_at_dropoff_seconds=int(os.getenv("SENTINEL_DELIVERY_MAX_DWELL_SECONDS", "1800")),
        )


@dataclass(frozen=True)
class CashAuditConfig:
    """Cash-on-delivery audit thresholds (amounts in centimes)."""
    max_discrepancy_centimes: int = 500
    max_shortages: int = 3
    min_reconciliation_rate: float = 95.0

    # Below this rate a dirty audit is raised as HIGH instead of MEDIUM
    high_severity_reconciliation_rate: float = 80.0

    @classmethod
    def from_env(cls) -> "CashAuditConfig":
        """Load configuration from environment variables."""
        return cls(
            max_discrepancy_centimes=int(os.getenv("SENTINEL_CASH_MAX_DISCREPANCY_CENTIMES", "500")),
            max_shortages=int(os.getenv("SENTINEL_CASH_MAX_SHORTAGES", "3")),
            min_reconciliation_rate=float(os.getenv("SENTINEL_CASH_MIN_RECONCILIATION_RATE", "95")),
            high_severity_reconciliation_rate=float(
                os.getenv("SENTINEL_CASH_HIGH_SEVERITY_RATE", "80")
            ),
        )


@dataclass(frozen=True)
class CollusionConfig:
    """Collusion detection thresholds."""
    min_shared_orders: int = 5
    max_time_between_handoffs: float = 300
    suspicious_pattern_count: int = 3
    collusion_threshold: int = 50

    shared_orders_points: int = 20
    fast_handoff_points: int = 15
    pattern_count_points: int = 25
    per_pattern_points: int = 5

    @classmethod
    def from_env(cls) -> "CollusionConfig":
        """Load configuration from environment variables."""
        return cls(
            min_shared_orders=int(os.getenv("SENTINEL_COLLUSION_MIN_SHARED_ORDERS", "5")),
            max_time_between_handoffs=float(os.getenv("SENTINEL_COLLUSION_MAX_HANDOFF_SECONDS", "300")),
            suspicious_pattern_count=int(os.getenv("SENTINEL_COLLUSION_PATTERN_COUNT", "3")),
            collusion_threshold=int(os.getenv("SENTINEL_COLLUSION_THRESHOLD", "50")),
        )


@dataclass(frozen=True)
class DeviceRiskConfig:
    """Device attestation weights."""
    emulator_weight: int = 40
    mock_location_weight: int = 35
    rooted_weight: int = 25
    debugger_weight: int = 20
    integrity_failed_weight: int = 30
    vpn_weight: int = 10

    # Minimum score that produces a device_risk alert
    alert_threshold: int = 25

    @classmethod
    def from_env(cls) -> "DeviceRiskConfig":
        """Load configuration from environment variables."""
        return cls(
            emulator_weight=int(os.getenv("SENTINEL_DEVICE_EMULATOR_WEIGHT", "40")),
            mock_location_weight=int(os.getenv("SENTINEL_DEVICE_MOCK_LOCATION_WEIGHT", "35")),
            rooted_weight=int(os.getenv("SENTINEL_DEVICE_ROOTED_WEIGHT", "25")),
            debugger_weight=int(os.getenv("SENTINEL_DEVICE_DEBUGGER_WEIGHT", "20")),
            integrity_failed_weight=int(os.getenv("SENTINEL_DEVICE_INTEGRITY_WEIGHT", "30")),
            vpn_weight=int(os.getenv("SENTINEL_DEVICE_VPN_WEIGHT", "10")),
            alert_threshold=int(os.getenv("SENTINEL_DEVICE_ALERT_THRESHOLD", "25")),
        )


@dataclass(frozen=True)
class ScoringConfig:
    """Aggregate score and decision thresholds."""
    block_threshold: int = 75
    review_threshold: int = 50
    monitor_threshold: int = 25
    critical_alerts_to_block: int = 2

    @classmethod
    def from_env(cls) -> "ScoringConfig":
        """Load configuration from environment variables."""
        return cls(
            block_threshold=int(os.getenv("SENTINEL_SCORING_BLOCK_THRESHOLD", "75")),
            review_threshold=int(os.getenv("SENTINEL_SCORING_REVIEW_THRESHOLD", "50")),
            monitor_threshold=int(os.getenv("SENTINEL_SCORING_MONITOR_THRESHOLD", "25")),
            critical_alerts_to_block=int(os.getenv("SENTINEL_SCORING_CRITICAL_ALERTS_TO_BLOCK", "2")),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Log destinations
    console: bool = True
    file_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Load configuration from environment variables."""
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO"),
            console=_env_bool("LOG_CONSOLE", "true"),
            file_path=os.getenv("LOG_FILE_PATH"),
        )


@dataclass
class DeliverySentinelConfig:
    """Master configuration for DeliverySentinel."""
    environment: Environment = Environment.DEVELOPMENT

    # Sub-configurations
    gps: GpsSpoofingConfig = field(default_factory=GpsSpoofingConfig)
    delivery: DeliveryVerificationConfig = field(default_factory=DeliveryVerificationConfig)
    cash: CashAuditConfig = field(default_factory=CashAuditConfig)
    collusion: CollusionConfig = field(default_factory=CollusionConfig)
    device: DeviceRiskConfig = field(default_factory=DeviceRiskConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "DeliverySentinelConfig":
        """Load all configuration from environment variables."""
        env_str = os.getenv("ENVIRONMENT", "development").lower()
        try:
            environment = Environment(env_str)
        except ValueError:
            environment = Environment.DEVELOPMENT

        return cls(
            environment=environment,
            gps=GpsSpoofingConfig.from_env(),
            delivery=DeliveryVerificationConfig.from_env(),
            cash=CashAuditConfig.from_env(),
            collusion=CollusionConfig.from_env(),
            device=DeviceRiskConfig.from_env(),
            scoring=ScoringConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    def validate(self) -> Dict[str, Any]:
        """
        Validate configuration and return any warnings/errors.

        Returns:
            Dictionary with 'valid' boolean and 'messages' list
        """
        messages = []
        valid = True

        scoring = self.scoring
        if not (scoring.monitor_threshold <= scoring.review_threshold <= scoring.block_threshold):
            messages.append(
                "ERROR: Scoring thresholds must satisfy monitor <= review <= block"
            )
            valid = False

        if scoring.critical_alerts_to_block < 1:
            messages.append("ERROR: critical_alerts_to_block must be at least 1")
            valid = False

        if self.delivery.min_time_at_dropoff_seconds > self.delivery.max_time_at_dropoff_seconds:
            messages.append("ERROR: Minimum dropoff dwell exceeds maximum dwell")
            valid = False

        if self.gps.min_readings_for_analysis < 2:
            messages.append("WARNING: GPS analysis needs at least 2 readings to compare pairs")

        # Block threshold below the shipped default
        if self.environment == Environment.PRODUCTION:
            if scoring.block_threshold < ScoringConfig.block_threshold:
                messages.append("WARNING: Block threshold lowered below default in production")

        return {"valid": valid, "messages": messages}


def configure_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Attach handlers to the package logger.

    Safe to call more than once; previously attached handlers are replaced.

    Returns:
        The configured `delivery_sentinel` logger
    """
    config = config or LoggingConfig()
    package_logger = logging.getLogger("delivery_sentinel")
    package_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)
    if config.console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)
    if config.file_path:
        file_handler = logging.FileHandler(config.file_path)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    return package_logger


# Global configuration instance
_config: Optional[DeliverySentinelConfig] = None


def get_config() -> DeliverySentinelConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = DeliverySentinelConfig.from_env()
    return _config


def set_config(config: DeliverySentinelConfig) -> None:
    """Set the global configuration instance (for testing)."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
