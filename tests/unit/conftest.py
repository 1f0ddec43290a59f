"""
Unit Test Layer Configuration

Structure:
    tests/unit/
    └── creator_campaign/   Pure decision logic (matcher, state machine,
                            recommender, ROI aggregation)

Usage:
    pytest tests/unit -v
    pytest tests/unit -m unit -v
"""
import os
import sys

import pytest

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


def pytest_collection_modifyitems(config, items):
    """Everything under tests/unit carries the unit marker"""
    for item in items:
        if "/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
