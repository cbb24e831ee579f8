"""
DeliverySentinel Geo Module

Great-circle distance helpers used wherever the physical plausibility of
a driver's movement or position has to be checked.
"""

from __future__ import annotations

import math


EARTH_RADIUS_KM = 6371.0


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Calculate the great-circle distance between two points.

    Uses the Haversine formula on a spherical Earth.

    Args:
        lat1, lng1: First point coordinates (degrees)
        lat2, lng2: Second point coordinates (degrees)

    Returns:
        Distance in kilometers
    """
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(delta_phi / 2) ** 2 +
        math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
        math.sin(delta_lambda / 2) ** 2
    )
    # Float error can push `a` a hair past 1 for antipodal points
    a = min(1.0, a)

    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def distance_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Same as `distance_km`, in meters."""
    return distance_km(lat1, lng1, lat2, lng2) * 1000


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round to `ndigits` decimals with ties going up (2.5 -> 3, -2.5 -> -2).

    Unlike round(), the result does not depend on the parity of the last digit.
    """
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor
