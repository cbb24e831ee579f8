"""
DeliverySentinel Core Package

Geo math and the severity/score tables shared by every analyzer.
"""

from .geo import distance_km, distance_meters
from .scoring import calculate_fraud_score, should_block_driver, severity_for_score

__all__ = [
    "distance_km",
    "distance_meters",
    "calculate_fraud_score",
    "should_block_driver",
    "severity_for_score",
]
