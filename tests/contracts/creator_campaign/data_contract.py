"""
Creator Campaign Service Data Contract

Test data factories for the Creator Campaign Service. Models are the
service's own pydantic models, re-exported here so every test layer
builds data through one place.
"""

import random
import string
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import uuid4

from microservices.creator_campaign_service.models import (
    # Enums
    CampaignStatus,
    LinkStatus,
    OrderStatus,
    OrderType,
    TrackEventKind,
    MessageMetaType,
    # Models
    Campaign,
    CampaignRequirements,
    CampaignCreatorLink,
    ServiceOffering,
    CampaignOrder,
    SocialAccount,
    CreatorProfile,
    CampaignStats,
    # Requests
    CampaignCreateRequest,
    CampaignUpdateRequest,
)


class CreatorCampaignTestDataFactory:
    """Factory for generating test data for creator campaign tests

    Usage:
        factory = CreatorCampaignTestDataFactory()
        campaign = factory.make_campaign(min_budget=Decimal("2000"))
        link = factory.make_link(campaign_id=campaign.campaign_id)
    """

    @staticmethod
    def make_campaign_id() -> str:
        return f"cmp_{uuid4().hex[:16]}"

    @staticmethod
    def make_brand_id() -> str:
        return f"brand_{uuid4().hex[:12]}"

    @staticmethod
    def make_creator_id() -> str:
        return f"cr_{uuid4().hex[:12]}"

    @staticmethod
    def make_offering_id() -> str:
        return f"off_{uuid4().hex[:12]}"

    @staticmethod
    def make_order_id() -> str:
        return f"ord_{uuid4().hex[:16]}"

    @staticmethod
    def make_name(prefix: str = "Campaign") -> str:
        suffix = "".join(random.choices(string.ascii_uppercase, k=5))
        return f"{prefix} {suffix}"

    @staticmethod
    def make_requirements(**overrides) -> CampaignRequirements:
        defaults = {
            "categories": ["fashion", "beauty"],
            "languages": ["english", "hindi"],
            "locations": [],
        }
        defaults.update(overrides)
        return CampaignRequirements(**defaults)

    @classmethod
    def make_campaign(
        cls,
        campaign_id: Optional[str] = None,
        brand_id: Optional[str] = None,
        status: CampaignStatus = CampaignStatus.LIVE,
        min_budget: Optional[Decimal] = None,
        max_budget: Optional[Decimal] = None,
        requirements: Optional[CampaignRequirements] = None,
        **overrides,
    ) -> Campaign:
        now = datetime.now(timezone.utc)
        return Campaign(
            campaign_id=campaign_id or cls.make_campaign_id(),
            brand_id=brand_id or cls.make_brand_id(),
            name=overrides.pop("name", None) or cls.make_name(),
            status=status,
            min_budget=min_budget,
            max_budget=max_budget,
            requirements=requirements or CampaignRequirements(),
            created_at=now,
            updated_at=now,
            **overrides,
        )

    @classmethod
    def make_profile(
        cls,
        creator_id: Optional[str] = None,
        followers: Optional[List[str]] = None,
        **overrides,
    ) -> CreatorProfile:
        """Profile with one instagram account per followers entry"""
        socials = [
            SocialAccount(platform="instagram" if i == 0 else f"platform_{i}", followers=f)
            for i, f in enumerate(followers or [])
        ]
        data = {
            "creator_id": creator_id or cls.make_creator_id(),
            "name": cls.make_name("Creator"),
            "city": "Mumbai",
            "categories": [],
            "languages": [],
            "socials": socials,
        }
        data.update(overrides)
        return CreatorProfile(**data)

    @classmethod
    def make_link(
        cls,
        campaign_id: Optional[str] = None,
        creator_id: Optional[str] = None,
        status: LinkStatus = LinkStatus.APPLIED,
        **overrides,
    ) -> CampaignCreatorLink:
        now = datetime.now(timezone.utc)
        return CampaignCreatorLink(
            link_id=overrides.pop("link_id", None) or f"lnk_{uuid4().hex[:16]}",
            campaign_id=campaign_id or cls.make_campaign_id(),
            creator_id=creator_id or cls.make_creator_id(),
            status=status,
            created_at=now,
            updated_at=now,
            **overrides,
        )

    @classmethod
    def make_offering(
        cls,
        seller_id: Optional[str] = None,
        price: Decimal = Decimal("2500"),
        is_active: bool = True,
        **overrides,
    ) -> ServiceOffering:
        return ServiceOffering(
            offering_id=overrides.pop("offering_id", None) or cls.make_offering_id(),
            seller_id=seller_id or cls.make_creator_id(),
            title=overrides.pop("title", None) or cls.make_name("Package"),
            price=price,
            is_active=is_active,
            **overrides,
        )

    @classmethod
    def make_order(
        cls,
        offering_id: Optional[str] = None,
        seller_id: Optional[str] = None,
        status: str = OrderStatus.PENDING.value,
        order_type: str = OrderType.CAMPAIGN.value,
        total_price: Decimal = Decimal("1000"),
        **overrides,
    ) -> CampaignOrder:
        return CampaignOrder(
            order_id=overrides.pop("order_id", None) or cls.make_order_id(),
            order_type=order_type,
            buyer_id=overrides.pop("buyer_id", None) or cls.make_brand_id(),
            seller_id=seller_id or cls.make_creator_id(),
            offering_id=offering_id,
            total_price=total_price,
            status=status,
            created_at=datetime.now(timezone.utc),
            **overrides,
        )

    @classmethod
    def make_orders(
        cls,
        offering_id: str,
        count: int,
        completed: int = 0,
        **overrides,
    ) -> List[CampaignOrder]:
        """count orders for an offering, the first `completed` of them completed"""
        return [
            cls.make_order(
                offering_id=offering_id,
                status=OrderStatus.COMPLETED.value if i < completed else OrderStatus.PENDING.value,
                **overrides,
            )
            for i in range(count)
        ]

    @classmethod
    def make_create_request(cls, **overrides) -> CampaignCreateRequest:
        data = {"name": cls.make_name()}
        data.update(overrides)
        return CampaignCreateRequest(**data)


__all__ = [
    "CampaignStatus",
    "LinkStatus",
    "OrderStatus",
    "OrderType",
    "TrackEventKind",
    "MessageMetaType",
    "Campaign",
    "CampaignRequirements",
    "CampaignCreatorLink",
    "ServiceOffering",
    "CampaignOrder",
    "SocialAccount",
    "CreatorProfile",
    "CampaignStats",
    "CampaignCreateRequest",
    "CampaignUpdateRequest",
    "CreatorCampaignTestDataFactory",
]
