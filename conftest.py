"""
DeliverySentinel - pytest Configuration

Shared fixtures and configuration for all tests.
"""

import pytest


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# Casablanca city centre; the platform's reference market
BASE_LAT = 33.5731
BASE_LNG = -7.5898

# ~10 km of latitude
TEN_KM_LAT = 0.09


# =============================================================================
# TELEMETRY FIXTURES
# =============================================================================

@pytest.fixture
def make_reading():
    """Factory for GPS readings with plausible defaults."""
    from delivery_sentinel.models import GpsReading

    def _make(
        lat: float = BASE_LAT,
        lng: float = BASE_LNG,
        timestamp: int = 0,
        accuracy: float = 5.0,
        speed: float = 8.0,
        altitude: float = 50.0,
        provider: str = "gps",
    ) -> GpsReading:
        return GpsReading(
            lat=lat,
            lng=lng,
            timestamp=timestamp,
            accuracy=accuracy,
            speed=speed,
            altitude=altitude,
            provider=provider,
        )

    return _make


@pytest.fixture
def clean_readings(make_reading):
    """Three readings ~111m apart, 30 seconds apart (about 13 km/h)."""
    return [
        make_reading(lat=BASE_LAT + i * 0.001, timestamp=i * 30_000)
        for i in range(3)
    ]


@pytest.fixture
def teleport_readings(make_reading):
    """
    A 10 km jump in 30 seconds, followed by a stationary reading.

    Fires both the impossible-speed and the teleportation checks once.
    """
    return [
        make_reading(lat=BASE_LAT, timestamp=0),
        make_reading(lat=BASE_LAT + TEN_KM_LAT, timestamp=30_000),
        make_reading(lat=BASE_LAT + TEN_KM_LAT, timestamp=60_000),
    ]


@pytest.fixture
def clean_device():
    """Device that passes every attestation check."""
    from delivery_sentinel.models import DeviceInfo
    return DeviceInfo()


# =============================================================================
# CONFIGURATION FIXTURES
# =============================================================================

@pytest.fixture
def test_config():
    """Create a test configuration."""
    from delivery_sentinel.config import DeliverySentinelConfig, Environment

    return DeliverySentinelConfig(
        environment=Environment.DEVELOPMENT,
    )


@pytest.fixture(autouse=True)
def reset_config_fixture():
    """Reset global configuration before each test."""
    from delivery_sentinel.config import reset_config
    reset_config()
    yield
    reset_config()
