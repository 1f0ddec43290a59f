"""
Unit Test Fixtures for Creator Campaign Service

Pure decision logic only: no repository, no network.
"""

import pytest

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from core.config import MatchingConfig
from tests.contracts.creator_campaign.data_contract import CreatorCampaignTestDataFactory


@pytest.fixture
def factory():
    """Provide CreatorCampaignTestDataFactory"""
    return CreatorCampaignTestDataFactory


@pytest.fixture
def matching_config() -> MatchingConfig:
    """Default weights, independent of the environment"""
    return MatchingConfig()
