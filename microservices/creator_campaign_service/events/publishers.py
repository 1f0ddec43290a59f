"""
Creator Campaign Event Publishers

Publishes events to NATS. Publishing never raises: a missing or failing
bus is logged and reported as False.
"""

import logging
from typing import Any, Dict, Optional

from core.nats_client import Event

from ..models import Campaign, CampaignCreatorLink, CampaignOrder, LinkStatus
from .models import (
    CreatorCampaignEventType,
    CampaignCreatedEventData,
    CampaignUpdatedEventData,
    LinkStatusChangedEventData,
    LinkApprovedEventData,
    OrderCreatedEventData,
)

logger = logging.getLogger(__name__)


class CreatorCampaignEventPublisher:
    """Publisher for creator campaign service events"""

    def __init__(self, event_bus=None):
        self.event_bus = event_bus
        self.source = "creator_campaign_service"

    async def publish(
        self,
        event_type: CreatorCampaignEventType,
        data: Dict[str, Any],
    ) -> bool:
        """
        Publish an event to NATS.

        Args:
            event_type: The event type enum
            data: Event data payload

        Returns:
            True if published successfully, False otherwise
        """
        if not self.event_bus:
            logger.debug(f"Event bus not configured, skipping publish: {event_type.value}")
            return False

        try:
            event = Event(event_type=event_type, source=self.source, data=data)
            published = await self.event_bus.publish_event(event)
            logger.debug(f"Published event: {event_type.value}")
            return bool(published)

        except Exception as e:
            logger.error(f"Failed to publish event {event_type.value}: {e}")
            return False

    # ====================
    # Campaign Events
    # ====================

    async def publish_campaign_created(self, campaign: Campaign) -> bool:
        data = CampaignCreatedEventData(
            campaign_id=campaign.campaign_id,
            brand_id=campaign.brand_id,
            name=campaign.name,
            status=campaign.status.value,
        )
        return await self.publish(CreatorCampaignEventType.CAMPAIGN_CREATED, data.model_dump(mode="json"))

    async def publish_campaign_updated(self, campaign: Campaign, changed_fields: list) -> bool:
        data = CampaignUpdatedEventData(
            campaign_id=campaign.campaign_id,
            brand_id=campaign.brand_id,
            changed_fields=changed_fields,
        )
        return await self.publish(CreatorCampaignEventType.CAMPAIGN_UPDATED, data.model_dump(mode="json"))

    # ====================
    # Link Events
    # ====================

    async def publish_link_status_changed(
        self,
        link: CampaignCreatorLink,
        from_status: Optional[LinkStatus],
        actor_id: str,
    ) -> bool:
        """Publish invited/applied/status_changed depending on the new status"""
        if link.status == LinkStatus.INVITED:
            event_type = CreatorCampaignEventType.LINK_INVITED
        elif link.status == LinkStatus.APPLIED:
            event_type = CreatorCampaignEventType.LINK_APPLIED
        else:
            event_type = CreatorCampaignEventType.LINK_STATUS_CHANGED

        data = LinkStatusChangedEventData(
            link_id=link.link_id,
            campaign_id=link.campaign_id,
            creator_id=link.creator_id,
            from_status=from_status.value if from_status else None,
            to_status=link.status.value,
            actor_id=actor_id,
        )
        return await self.publish(event_type, data.model_dump(mode="json"))

    async def publish_link_approved(
        self,
        link: CampaignCreatorLink,
        brand_id: str,
        order: CampaignOrder,
    ) -> bool:
        data = LinkApprovedEventData(
            link_id=link.link_id,
            campaign_id=link.campaign_id,
            creator_id=link.creator_id,
            brand_id=brand_id,
            package_id=link.selected_package_id or order.offering_id or "",
            order_id=order.order_id,
        )
        return await self.publish(CreatorCampaignEventType.LINK_APPROVED, data.model_dump(mode="json"))

    # ====================
    # Order Events
    # ====================

    async def publish_order_created(self, order: CampaignOrder) -> bool:
        data = OrderCreatedEventData(
            order_id=order.order_id,
            campaign_id=order.campaign_id or "",
            campaign_link_id=order.campaign_link_id or "",
            buyer_id=order.buyer_id,
            seller_id=order.seller_id,
            offering_id=order.offering_id,
            total_price=order.total_price,
            status=order.status,
        )
        return await self.publish(CreatorCampaignEventType.ORDER_CREATED, data.model_dump(mode="json"))


__all__ = ["CreatorCampaignEventPublisher"]
