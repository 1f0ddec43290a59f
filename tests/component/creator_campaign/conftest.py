"""
Component Test Fixtures for Creator Campaign Service

Provides the service wired to in-memory doubles, plus a FastAPI
TestClient whose factory is replaced by the same doubles.
"""

import asyncio
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import pytest

import sys
import os

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"
os.environ["NATS_ENABLED"] = "false"

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from core.config import MatchingConfig
from microservices.creator_campaign_service.creator_campaign_service import CreatorCampaignService
from microservices.creator_campaign_service.protocols import TransitionGuard
from tests.contracts.creator_campaign.data_contract import (
    Campaign,
    CampaignCreatorLink,
    CampaignOrder,
    CampaignStats,
    CreatorProfile,
    LinkStatus,
    ServiceOffering,
    TrackEventKind,
    CreatorCampaignTestDataFactory,
)


# ====================
# Mock Repository
# ====================


class MockCreatorCampaignRepository:
    """
    In-memory repository honouring the same contract as the asyncpg one:
    one order per link, guard runs under the lock, nothing changes when the
    guard raises.
    """

    def __init__(self):
        self.campaigns: Dict[str, Campaign] = {}
        self.profiles: Dict[str, CreatorProfile] = {}
        self.links: Dict[Tuple[str, str], CampaignCreatorLink] = {}
        self.offerings: Dict[str, ServiceOffering] = {}
        self.orders: Dict[str, CampaignOrder] = {}
        self.stats: Dict[str, CampaignStats] = {}
        self._lock = asyncio.Lock()

    async def initialize(self):
        pass

    async def close(self):
        pass

    async def health_check(self) -> bool:
        return True

    # Campaigns
    async def save_campaign(self, campaign: Campaign) -> Campaign:
        self.campaigns[campaign.campaign_id] = campaign.model_copy(deep=True)
        return campaign

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        campaign = self.campaigns.get(campaign_id)
        return campaign.model_copy(deep=True) if campaign else None

    async def get_campaign_for_brand(self, campaign_id: str, brand_id: str) -> Optional[Campaign]:
        campaign = await self.get_campaign(campaign_id)
        if campaign and campaign.brand_id == brand_id:
            return campaign
        return None

    async def list_campaigns_for_brand(self, brand_id: str) -> List[Campaign]:
        results = [c for c in self.campaigns.values() if c.brand_id == brand_id]
        return sorted(results, key=lambda c: c.created_at, reverse=True)

    # Creators
    async def get_creator_profile(self, creator_id: str) -> Optional[CreatorProfile]:
        return self.profiles.get(creator_id)

    async def list_creator_profiles(self, limit: int = 200) -> List[CreatorProfile]:
        return list(self.profiles.values())[:limit]

    # Links
    async def get_link(self, campaign_id: str, creator_id: str) -> Optional[CampaignCreatorLink]:
        link = self.links.get((campaign_id, creator_id))
        return link.model_copy() if link else None

    async def list_links(self, campaign_id: str) -> List[CampaignCreatorLink]:
        return [l.model_copy() for (cid, _), l in self.links.items() if cid == campaign_id]

    async def insert_link_if_absent(
        self, link: CampaignCreatorLink
    ) -> Tuple[CampaignCreatorLink, bool]:
        async with self._lock:
            key = (link.campaign_id, link.creator_id)
            if key in self.links:
                return self.links[key].model_copy(), False
            self.links[key] = link.model_copy()
            return link.model_copy(), True

    async def transition_link(
        self,
        campaign_id: str,
        creator_id: str,
        to_status: LinkStatus,
        updates: Dict[str, Any],
        guard: TransitionGuard,
        order_draft: Optional[CampaignOrder] = None,
    ):
        async with self._lock:
            current = self.links.get((campaign_id, creator_id))
            if current is None:
                return None, None

            guard(current.status, to_status)
            # Yield while holding the lock so concurrent callers interleave
            await asyncio.sleep(0)

            order = None
            if order_draft is not None:
                order = next(
                    (o for o in self.orders.values() if o.campaign_link_id == current.link_id),
                    None,
                )
                if order is None:
                    order = order_draft.model_copy(update={"campaign_link_id": current.link_id})
                    self.orders[order.order_id] = order
                updates = {**updates, "selected_package_id": order.offering_id}

            updated = current.model_copy(update={**updates, "status": to_status})

            self.links[(campaign_id, creator_id)] = updated
            return updated.model_copy(), order

    # Offerings and orders
    async def get_offering(self, offering_id: str) -> Optional[ServiceOffering]:
        return self.offerings.get(offering_id)

    async def list_offerings_for_seller(self, seller_id: str) -> List[ServiceOffering]:
        return [o for o in self.offerings.values() if o.seller_id == seller_id]

    async def list_orders_for_offerings(self, offering_ids: List[str]) -> List[CampaignOrder]:
        wanted = set(offering_ids)
        return [o for o in self.orders.values() if o.offering_id in wanted]

    async def list_campaign_orders(self, campaign_id: str) -> List[CampaignOrder]:
        results = []
        for order in self.orders.values():
            if order.campaign_id != campaign_id or order.order_type.lower() != "campaign":
                continue
            profile = self.profiles.get(order.seller_id)
            offering = self.offerings.get(order.offering_id or "")
            results.append(order.model_copy(update={
                "seller_name": profile.name if profile else None,
                "offering_title": offering.title if offering else None,
            }))
        return results

    # Engagement stats
    async def increment_campaign_stat(self, campaign_id: str, kind: TrackEventKind) -> CampaignStats:
        column = {
            TrackEventKind.VIEW: "views",
            TrackEventKind.CLICK: "clicks",
            TrackEventKind.SAVE: "saves",
            TrackEventKind.ORDER: "orders",
        }[kind]
        async with self._lock:
            stats = self.stats.setdefault(campaign_id, CampaignStats(campaign_id=campaign_id))
            setattr(stats, column, getattr(stats, column) + 1)
            return stats.model_copy()

    async def get_campaign_stats(self, campaign_id: str) -> CampaignStats:
        stats = self.stats.get(campaign_id)
        return stats.model_copy() if stats else CampaignStats(campaign_id=campaign_id)

    # Seeding helpers
    def add_campaign(self, campaign: Campaign) -> Campaign:
        self.campaigns[campaign.campaign_id] = campaign
        return campaign

    def add_profile(self, profile: CreatorProfile) -> CreatorProfile:
        self.profiles[profile.creator_id] = profile
        return profile

    def add_link(self, link: CampaignCreatorLink) -> CampaignCreatorLink:
        self.links[(link.campaign_id, link.creator_id)] = link
        return link

    def add_offering(self, offering: ServiceOffering) -> ServiceOffering:
        self.offerings[offering.offering_id] = offering
        return offering

    def add_order(self, order: CampaignOrder) -> CampaignOrder:
        self.orders[order.order_id] = order
        return order


# ====================
# Mock Collaborators
# ====================


class MockMessagingClient:
    """Mock messaging service client"""

    def __init__(self, fail: bool = False):
        self.threads: Dict[Tuple[str, ...], str] = {}
        self.messages: List[Dict[str, Any]] = []
        self.fail = fail

    async def get_or_create_thread(self, participant_ids: List[str]) -> str:
        if self.fail:
            raise ConnectionError("messaging_service unavailable")
        key = tuple(sorted(participant_ids))
        return self.threads.setdefault(key, f"thr_{len(self.threads) + 1}")

    async def post_message(self, thread_id, sender_id, body, meta=None):
        if self.fail:
            raise ConnectionError("messaging_service unavailable")
        message = {"thread_id": thread_id, "sender_id": sender_id, "body": body, "meta": meta or {}}
        self.messages.append(message)
        return message

    async def close(self):
        pass


class MockEventBus:
    """Mock event bus for component testing"""

    def __init__(self):
        self.published_events: List[Dict[str, Any]] = []
        self.is_connected = True

    async def publish_event(self, event) -> bool:
        self.published_events.append(
            {
                "event_type": event.type,
                "source": event.source,
                "data": event.data,
            }
        )
        return True

    async def close(self) -> None:
        self.is_connected = False

    def get_events_by_type(self, event_type: str) -> List[Dict]:
        return [e for e in self.published_events if e["event_type"] == event_type]


class MockFactory:
    """Stands in for CreatorCampaignServiceFactory in API tests"""

    def __init__(self, service, repository, nats_client=None):
        self.service = service
        self.repository = repository
        self.nats_client = nats_client


# ====================
# Fixtures
# ====================


@pytest.fixture
def factory():
    """Provide CreatorCampaignTestDataFactory"""
    return CreatorCampaignTestDataFactory


@pytest.fixture
def mock_repository():
    return MockCreatorCampaignRepository()


@pytest.fixture
def mock_messaging():
    return MockMessagingClient()


@pytest.fixture
def mock_event_bus():
    return MockEventBus()


@pytest.fixture
def service(mock_repository, mock_messaging, mock_event_bus):
    return CreatorCampaignService(
        repository=mock_repository,
        messaging_client=mock_messaging,
        event_bus=mock_event_bus,
        config=MatchingConfig(),
    )


@pytest.fixture
def live_campaign(mock_repository, factory):
    """Saved live campaign with a [2000, 4000] budget"""
    campaign = factory.make_campaign(
        min_budget=Decimal("2000"),
        max_budget=Decimal("4000"),
        name="Summer Drop",
    )
    return mock_repository.add_campaign(campaign)


@pytest.fixture
def applied_link(mock_repository, live_campaign, factory):
    """Creator linked in applied status with a messaging thread"""
    creator = mock_repository.add_profile(factory.make_profile(name="Asha"))
    return mock_repository.add_link(
        factory.make_link(
            campaign_id=live_campaign.campaign_id,
            creator_id=creator.creator_id,
            status=LinkStatus.APPLIED,
            thread_id="thr_existing",
        )
    )


@pytest.fixture
def client(service, mock_repository, mock_event_bus):
    """TestClient with the module factory replaced by in-memory doubles"""
    from fastapi.testclient import TestClient
    from microservices.creator_campaign_service import main

    original = main.factory
    main.factory = MockFactory(service, mock_repository, mock_event_bus)
    try:
        yield TestClient(main.app)
    finally:
        main.factory = original
