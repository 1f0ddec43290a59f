"""
Creator Campaign Service Events

Event models and publisher for creator campaign service.
"""

from .models import (
    CreatorCampaignEventType,
    CampaignCreatedEventData,
    CampaignUpdatedEventData,
    LinkStatusChangedEventData,
    LinkApprovedEventData,
    OrderCreatedEventData,
)
from .publishers import CreatorCampaignEventPublisher

__all__ = [
    # Event Types
    "CreatorCampaignEventType",
    # Event Data Models
    "CampaignCreatedEventData",
    "CampaignUpdatedEventData",
    "LinkStatusChangedEventData",
    "LinkApprovedEventData",
    "OrderCreatedEventData",
    # Publisher
    "CreatorCampaignEventPublisher",
]
