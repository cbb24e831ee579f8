"""
DeliverySentinel Delivery Verifier

Checks whether a completed delivery plausibly happened at the stated
dropoff. Both a too-short dwell (drive-by confirmation) and a too-long
dwell (idling) are reported.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..config import DeliveryVerificationConfig
from ..core.geo import distance_km, round_half_up
from ..models import DeliveryData, DeliveryVerification


logger = logging.getLogger(__name__)


class DeliveryVerifier:
    """Verifies delivery confirmations against the dropoff location."""

    def __init__(self, config: Optional[DeliveryVerificationConfig] = None):
        self._config = config or DeliveryVerificationConfig()

    @property
    def config(self) -> DeliveryVerificationConfig:
        return self._config

    def verify(
        self,
        driver_lat: float,
        driver_lng: float,
        dropoff_lat: float,
        dropoff_lng: float,
        time_at_location_seconds: float,
        has_photo: bool,
    ) -> DeliveryVerification:
        """
        Verify that a delivery was completed at the dropoff location.

        Args:
            driver_lat, driver_lng: Driver position at confirmation time
            dropoff_lat, dropoff_lng: Stated dropoff coordinates
            time_at_location_seconds: Dwell time at the driver position; checks use
                the raw value, the result reports it rounded half-up
            has_photo: Whether a proof-of-delivery photo exists

        Returns:
            DeliveryVerification; the photo flag is informational only
        """
        config = self._config
        issues: List[str] = []
        distance = distance_km(driver_lat, driver_lng, dropoff_lat, dropoff_lng)
        max_distance_m = config.max_distance_from_dropoff_km * 1000

        if distance > config.max_distance_from_dropoff_km:
            issues.append(
                f"Driver {distance * 1000:.0f}m from dropoff (max {max_distance_m:g}m)"
            )

        if time_at_location_seconds < config.min_time_at_dropoff_seconds:
            issues.append(
                f"Only {time_at_location_seconds:g}s at dropoff "
                f"(min {config.min_time_at_dropoff_seconds}s)"
            )

        if time_at_location_seconds > config.max_time_at_dropoff_seconds:
            issues.append(
                f"{time_at_location_seconds:g}s at dropoff is unusually long "
                f"(max {config.max_time_at_dropoff_seconds}s)"
            )

        if issues:
            logger.debug(f"Delivery not verified: {'; '.join(issues)}")

        return DeliveryVerification(
            is_verified=not issues,
            issues=issues,
            distance_from_dropoff_meters=int(round_half_up(distance * 1000)),
            time_at_dropoff_seconds=int(round_half_up(time_at_location_seconds)),
            photo_verified=has_photo,
        )

    def verify_data(self, data: DeliveryData) -> DeliveryVerification:
        """Verify a delivery from a `DeliveryData` bundle."""
        return self.verify(
            data.driver_lat,
            data.driver_lng,
            data.dropoff_lat,
            data.dropoff_lng,
            data.time_at_location_seconds,
            data.has_photo,
        )


def verify_delivery(
    driver_lat: float,
    driver_lng: float,
    dropoff_lat: float,
    dropoff_lng: float,
    time_at_location_seconds: float,
    has_photo: bool,
    config: Optional[DeliveryVerificationConfig] = None,
) -> DeliveryVerification:
    """Convenience wrapper around `DeliveryVerifier.verify`."""
    return DeliveryVerifier(config).verify(
        driver_lat,
        driver_lng,
        dropoff_lat,
        dropoff_lng,
        time_at_location_seconds,
        has_photo,
    )
