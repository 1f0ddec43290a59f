"""
Creator Campaign Event Data Models

Event type definitions and payloads published by creator_campaign_service.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# Event Type Definitions
# =============================================================================


class CreatorCampaignEventType(str, Enum):
    """
    Events published by creator_campaign_service.

    Other services should reference these when subscribing.
    """
    # Campaign events
    CAMPAIGN_CREATED = "creator_campaign.created"
    CAMPAIGN_UPDATED = "creator_campaign.updated"

    # Link lifecycle events
    LINK_INVITED = "campaign_link.invited"
    LINK_APPLIED = "campaign_link.applied"
    LINK_STATUS_CHANGED = "campaign_link.status_changed"
    LINK_APPROVED = "campaign_link.approved"

    # Order events
    ORDER_CREATED = "campaign_order.created"


# =============================================================================
# Event Data Models
# =============================================================================


class CampaignCreatedEventData(BaseModel):
    campaign_id: str
    brand_id: str
    name: str
    status: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class CampaignUpdatedEventData(BaseModel):
    campaign_id: str
    brand_id: str
    changed_fields: list = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class LinkStatusChangedEventData(BaseModel):
    """Payload for invited/applied/status_changed events"""
    link_id: str
    campaign_id: str
    creator_id: str
    from_status: Optional[str] = None
    to_status: str
    actor_id: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class LinkApprovedEventData(BaseModel):
    link_id: str
    campaign_id: str
    creator_id: str
    brand_id: str
    package_id: str
    order_id: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class OrderCreatedEventData(BaseModel):
    order_id: str
    campaign_id: str
    campaign_link_id: str
    buyer_id: str
    seller_id: str
    offering_id: Optional[str] = None
    total_price: Decimal
    status: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)


__all__ = [
    "CreatorCampaignEventType",
    "CampaignCreatedEventData",
    "CampaignUpdatedEventData",
    "LinkStatusChangedEventData",
    "LinkApprovedEventData",
    "OrderCreatedEventData",
]
