"""
Component Test Layer Configuration

Structure:
    tests/component/
    └── creator_campaign/   Service and HTTP API over in-memory doubles

Usage:
    pytest tests/component -v
    pytest tests/component -m component -v
"""
import os
import sys

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"
os.environ["NATS_ENABLED"] = "false"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


def pytest_collection_modifyitems(config, items):
    """Everything under tests/component carries the component marker"""
    for item in items:
        if "/component/" in str(item.fspath):
            item.add_marker(pytest.mark.component)
