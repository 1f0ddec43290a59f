"""
Root conftest.py - Global configuration for all test layers.

Test Layers:
    - component/  : Component tests (service and API over in-memory doubles)
    - unit/       : Unit tests (pure functions, no I/O)
    - contracts/  : Shared test data factories
"""
import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)


# =============================================================================
# Test Configuration
# =============================================================================

class TestConfig:
    """Centralized test configuration"""

    SERVICE_NAME = "creator_campaign_service"
    SERVICE_PORT = int(os.getenv("SERVICE_PORT", "8260"))
    API_PREFIX = "/api/v1/creator-campaigns"


def pytest_configure(config):
    """Register markers shared by every layer"""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "component: marks tests as component tests")


@pytest.fixture(scope="session")
def test_config() -> TestConfig:
    return TestConfig()
