"""
Component Tests for CreatorCampaignService

Service logic against in-memory repository, messaging and event bus.
"""

import asyncio
from decimal import Decimal

import pytest

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.creator_campaign_service.events import CreatorCampaignEventType
from microservices.creator_campaign_service.protocols import (
    BudgetRangeError,
    CampaignNotFoundError,
    CreatorNotFoundError,
    EngineValidationError,
    InvalidCampaignStateError,
    InvalidTransitionError,
    LinkNotFoundError,
    OfferingNotFoundError,
    PackageOwnershipError,
)
from tests.contracts.creator_campaign.data_contract import (
    CampaignRequirements,
    CampaignStatus,
    CampaignUpdateRequest,
    LinkStatus,
    OrderStatus,
    TrackEventKind,
)


class TestCampaignCrud:

    @pytest.mark.asyncio
    async def test_create_defaults(self, service, mock_repository, mock_event_bus, factory):
        # Given: a minimal request
        request = factory.make_create_request(name="  Diwali Collab  ")

        # When
        campaign = await service.create_campaign(request, brand_id="brand_1")

        # Then: defaults applied and campaign stored
        assert campaign.name == "Diwali Collab"
        assert campaign.status == CampaignStatus.DRAFT
        assert campaign.objective == "awareness"
        assert campaign.platform == "instagram"
        assert campaign.campaign_id in mock_repository.campaigns
        assert mock_event_bus.get_events_by_type(CreatorCampaignEventType.CAMPAIGN_CREATED.value)

    @pytest.mark.asyncio
    async def test_create_rejects_inverted_budget(self, service, mock_repository, factory):
        request = factory.make_create_request(min_budget=Decimal("5000"), max_budget=Decimal("1000"))

        with pytest.raises(BudgetRangeError) as exc_info:
            await service.create_campaign(request, brand_id="brand_1")

        assert "minBudget cannot be greater than maxBudget" in str(exc_info.value)
        assert mock_repository.campaigns == {}

    @pytest.mark.asyncio
    async def test_update_validates_merged_budget(self, service, live_campaign):
        # Given: stored range [2000, 4000]; only min is raised above max
        request = CampaignUpdateRequest(min_budget=Decimal("4500"))

        with pytest.raises(BudgetRangeError):
            await service.update_campaign(live_campaign.campaign_id, live_campaign.brand_id, request)

    @pytest.mark.asyncio
    async def test_update_requirements(self, service, live_campaign, mock_event_bus):
        request = CampaignUpdateRequest(
            requirements=CampaignRequirements(categories=["tech"], min_followers=1000),
            status=CampaignStatus.PAUSED,
        )

        updated = await service.update_campaign(
            live_campaign.campaign_id, live_campaign.brand_id, request
        )

        assert updated.requirements.categories == ["tech"]
        assert updated.status == CampaignStatus.PAUSED
        events = mock_event_bus.get_events_by_type(CreatorCampaignEventType.CAMPAIGN_UPDATED.value)
        assert events[0]["data"]["changed_fields"] == ["requirements", "status"]

    @pytest.mark.asyncio
    async def test_other_brand_sees_not_found(self, service, live_campaign):
        with pytest.raises(CampaignNotFoundError):
            await service.get_campaign(live_campaign.campaign_id, "brand_other")


class TestMatchAndRecommend:

    @pytest.mark.asyncio
    async def test_match_candidates_uses_requirements(self, service, mock_repository, factory):
        campaign = mock_repository.add_campaign(
            factory.make_campaign(
                requirements=CampaignRequirements(categories=["fashion"], min_followers=10_000)
            )
        )
        big = mock_repository.add_profile(factory.make_profile(categories=["fashion"], followers=["50k"]))
        mock_repository.add_profile(factory.make_profile(categories=["fashion"], followers=["2,000"]))

        ranked = await service.match_candidates(campaign.campaign_id, campaign.brand_id)

        assert [c.creator_id for c in ranked] == [big.creator_id]
        assert ranked[0].followers == 50_000

    @pytest.mark.asyncio
    async def test_recommend_requires_creator(self, service, live_campaign):
        with pytest.raises(EngineValidationError) as exc_info:
            await service.recommend_package(live_campaign.campaign_id, live_campaign.brand_id, None)
        assert exc_info.value.field == "creator_id"

    @pytest.mark.asyncio
    async def test_recommend_requires_link(self, service, live_campaign):
        with pytest.raises(LinkNotFoundError):
            await service.recommend_package(
                live_campaign.campaign_id, live_campaign.brand_id, "cr_unlinked"
            )

    @pytest.mark.asyncio
    async def test_recommend_scenario(self, service, mock_repository, live_campaign, applied_link, factory):
        # Given: a proven 2500 package and an unproven 6000 package
        proven = mock_repository.add_offering(
            factory.make_offering(seller_id=applied_link.creator_id, price=Decimal("2500"))
        )
        mock_repository.add_offering(
            factory.make_offering(seller_id=applied_link.creator_id, price=Decimal("6000"))
        )
        for order in factory.make_orders(proven.offering_id, 12, completed=10):
            mock_repository.add_order(order)

        # When
        result = await service.recommend_package(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id
        )

        # Then
        assert result.recommended.offering_id == proven.offering_id
        assert "Fits your budget range" in result.recommended.reasons
        assert "Proven package (12 past orders)" in result.recommended.reasons

    @pytest.mark.asyncio
    async def test_recommend_without_offerings(self, service, live_campaign, applied_link):
        result = await service.recommend_package(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id
        )
        assert result.recommended is None
        assert result.note


class TestApproval:

    @pytest.mark.asyncio
    async def test_approval_creates_single_order(
        self, service, mock_repository, mock_messaging, mock_event_bus, live_campaign, applied_link, factory
    ):
        # Given
        package = mock_repository.add_offering(
            factory.make_offering(seller_id=applied_link.creator_id, price=Decimal("2500"))
        )

        # When: approving twice
        first = await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id,
            "approved", package_id=package.offering_id,
        )
        second = await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id,
            "APPROVED", package_id=package.offering_id,
        )

        # Then: same order, exactly one stored
        assert first.order_id is not None
        assert first.order_id == second.order_id
        assert len(mock_repository.orders) == 1

        order = mock_repository.orders[first.order_id]
        assert order.status == OrderStatus.PENDING.value
        assert order.total_price == Decimal("2500")
        assert order.buyer_id == live_campaign.brand_id
        assert order.seller_id == applied_link.creator_id
        assert order.campaign_link_id == applied_link.link_id

        link = await mock_repository.get_link(live_campaign.campaign_id, applied_link.creator_id)
        assert link.status == LinkStatus.APPROVED
        assert link.selected_package_id == package.offering_id
        assert link.approved_at is not None

        assert mock_messaging.messages[0]["thread_id"] == "thr_existing"
        assert f"Order #{first.order_id}" in mock_messaging.messages[0]["body"]
        assert mock_messaging.messages[0]["meta"]["type"] == "campaign_approved"
        assert len(mock_event_bus.get_events_by_type(CreatorCampaignEventType.ORDER_CREATED.value)) == 1

    @pytest.mark.asyncio
    async def test_reapproval_with_other_package_keeps_ordered_package(
        self, service, mock_repository, live_campaign, applied_link, factory
    ):
        # Given: two packages from the same creator
        ordered = mock_repository.add_offering(
            factory.make_offering(seller_id=applied_link.creator_id, price=Decimal("2500"))
        )
        other = mock_repository.add_offering(
            factory.make_offering(seller_id=applied_link.creator_id, price=Decimal("9000"))
        )

        # When: approved with one, then approved again with the other
        first = await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id,
            "approved", package_id=ordered.offering_id,
        )
        second = await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id,
            "approved", package_id=other.offering_id,
        )

        # Then: the link still points at the package the order was placed for
        assert second.order_id == first.order_id
        order = mock_repository.orders[first.order_id]
        assert order.offering_id == ordered.offering_id
        assert second.link.selected_package_id == ordered.offering_id

        report = await service.get_funnel_and_roi(live_campaign.campaign_id, live_campaign.brand_id)
        assert report.spend == 2500.0

    @pytest.mark.asyncio
    async def test_concurrent_approvals_create_one_order(
        self, service, mock_repository, live_campaign, applied_link, factory
    ):
        package = mock_repository.add_offering(
            factory.make_offering(seller_id=applied_link.creator_id)
        )

        results = await asyncio.gather(*[
            service.transition_link(
                live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id,
                "approved", package_id=package.offering_id,
            )
            for _ in range(5)
        ])

        assert len({r.order_id for r in results}) == 1
        assert len(mock_repository.orders) == 1

    @pytest.mark.asyncio
    async def test_foreign_package_leaves_link_applied(
        self, service, mock_repository, live_campaign, applied_link, factory
    ):
        # Given: a package owned by another creator
        foreign = mock_repository.add_offering(factory.make_offering(seller_id="cr_someone_else"))

        # When/Then
        with pytest.raises(PackageOwnershipError):
            await service.transition_link(
                live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id,
                "approved", package_id=foreign.offering_id,
            )

        link = await mock_repository.get_link(live_campaign.campaign_id, applied_link.creator_id)
        assert link.status == LinkStatus.APPLIED
        assert mock_repository.orders == {}

    @pytest.mark.asyncio
    async def test_approval_requires_package(self, service, live_campaign, applied_link):
        with pytest.raises(EngineValidationError) as exc_info:
            await service.transition_link(
                live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id, "approved"
            )
        assert exc_info.value.field == "package_id"

    @pytest.mark.asyncio
    async def test_missing_package(self, service, live_campaign, applied_link):
        with pytest.raises(OfferingNotFoundError):
            await service.transition_link(
                live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id,
                "approved", package_id="off_missing",
            )


class TestStatusTransitions:

    @pytest.mark.asyncio
    async def test_reject_posts_note(self, service, mock_repository, mock_messaging, live_campaign, applied_link):
        result = await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id,
            "rejected", note="Budget exhausted",
        )

        assert result.link.status == LinkStatus.REJECTED
        assert result.order_id is None
        assert result.link.last_note == "Budget exhausted"
        assert mock_messaging.messages[0]["body"].endswith("Note: Budget exhausted")
        assert mock_messaging.messages[0]["meta"]["type"] == "campaign_status"

    @pytest.mark.asyncio
    async def test_transition_without_note_keeps_stored_note(
        self, service, mock_repository, live_campaign, applied_link
    ):
        # Given: a rejection carrying a note
        await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id,
            "rejected", note="Budget exhausted",
        )

        # When: the same transition again without a note
        result = await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id, "rejected"
        )

        # Then
        assert result.link.last_note == "Budget exhausted"
        link = await mock_repository.get_link(live_campaign.campaign_id, applied_link.creator_id)
        assert link.last_note == "Budget exhausted"

    @pytest.mark.asyncio
    async def test_invalid_transition_leaves_link_unchanged(
        self, service, mock_repository, mock_messaging, live_campaign, applied_link
    ):
        await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id, "rejected"
        )

        with pytest.raises(InvalidTransitionError):
            await service.transition_link(
                live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id, "applied"
            )

        link = await mock_repository.get_link(live_campaign.campaign_id, applied_link.creator_id)
        assert link.status == LinkStatus.REJECTED
        assert len(mock_messaging.messages) == 1

    @pytest.mark.asyncio
    async def test_repeated_reject_is_noop(self, service, live_campaign, applied_link):
        for _ in range(2):
            result = await service.transition_link(
                live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id, "rejected"
            )
        assert result.link.status == LinkStatus.REJECTED

    @pytest.mark.asyncio
    async def test_complete_stamps_timestamp(self, service, mock_repository, live_campaign, applied_link, factory):
        package = mock_repository.add_offering(factory.make_offering(seller_id=applied_link.creator_id))
        await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id,
            "approved", package_id=package.offering_id,
        )

        result = await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id, "completed"
        )

        assert result.link.completed_at is not None

    @pytest.mark.asyncio
    async def test_unknown_status(self, service, live_campaign, applied_link):
        with pytest.raises(EngineValidationError):
            await service.transition_link(
                live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id, "shortlisted"
            )

    @pytest.mark.asyncio
    async def test_unlinked_creator(self, service, live_campaign):
        with pytest.raises(LinkNotFoundError):
            await service.transition_link(
                live_campaign.campaign_id, live_campaign.brand_id, "cr_nobody", "rejected"
            )

    @pytest.mark.asyncio
    async def test_messaging_failure_does_not_undo_transition(
        self, service, mock_messaging, live_campaign, applied_link
    ):
        # Given: messaging service is down
        mock_messaging.fail = True

        result = await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id, "withdrawn"
        )

        assert result.link.status == LinkStatus.WITHDRAWN


class TestInviteAndApply:

    @pytest.mark.asyncio
    async def test_invite_creates_link_and_thread(
        self, service, mock_repository, mock_messaging, mock_event_bus, live_campaign, factory
    ):
        creator = mock_repository.add_profile(factory.make_profile())

        link = await service.invite_creator(
            live_campaign.campaign_id, live_campaign.brand_id, creator.creator_id, message="Join us!"
        )

        assert link.status == LinkStatus.INVITED
        assert link.invited_at is not None
        assert link.thread_id is not None
        assert mock_messaging.messages[0]["body"] == "Join us!"
        assert mock_messaging.messages[0]["meta"]["type"] == "campaign_invite"
        assert mock_event_bus.get_events_by_type(CreatorCampaignEventType.LINK_INVITED.value)

    @pytest.mark.asyncio
    async def test_invite_unknown_creator(self, service, live_campaign):
        with pytest.raises(CreatorNotFoundError):
            await service.invite_creator(live_campaign.campaign_id, live_campaign.brand_id, "cr_ghost")

    @pytest.mark.asyncio
    async def test_invite_twice_keeps_one_link(self, service, mock_repository, live_campaign, factory):
        creator = mock_repository.add_profile(factory.make_profile())

        first = await service.invite_creator(live_campaign.campaign_id, live_campaign.brand_id, creator.creator_id)
        second = await service.invite_creator(live_campaign.campaign_id, live_campaign.brand_id, creator.creator_id)

        assert first.link_id == second.link_id
        assert len(await mock_repository.list_links(live_campaign.campaign_id)) == 1

    @pytest.mark.asyncio
    async def test_invite_after_rejection_is_invalid(self, service, live_campaign, applied_link):
        await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id, "rejected"
        )

        with pytest.raises(InvalidTransitionError):
            await service.invite_creator(
                live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id
            )

    @pytest.mark.asyncio
    async def test_apply_posts_default_message(self, service, mock_messaging, live_campaign):
        link = await service.apply_to_campaign(live_campaign.campaign_id, "cr_fan")

        assert link.status == LinkStatus.APPLIED
        assert link.applied_at is not None
        assert mock_messaging.messages[0]["sender_id"] == "cr_fan"
        assert 'collaborating on "Summer Drop"' in mock_messaging.messages[0]["body"]

    @pytest.mark.asyncio
    async def test_apply_after_invite_transitions(self, service, mock_repository, live_campaign, factory):
        creator = mock_repository.add_profile(factory.make_profile())
        invited = await service.invite_creator(
            live_campaign.campaign_id, live_campaign.brand_id, creator.creator_id
        )

        applied = await service.apply_to_campaign(live_campaign.campaign_id, creator.creator_id, "Count me in")

        assert applied.link_id == invited.link_id
        assert applied.status == LinkStatus.APPLIED

    @pytest.mark.asyncio
    async def test_apply_requires_live_campaign(self, service, mock_repository, factory):
        draft = mock_repository.add_campaign(factory.make_campaign(status=CampaignStatus.DRAFT))

        with pytest.raises(InvalidCampaignStateError):
            await service.apply_to_campaign(draft.campaign_id, "cr_fan")


class TestReporting:

    @pytest.mark.asyncio
    async def test_roi_after_approval(self, service, mock_repository, live_campaign, applied_link, factory):
        package = mock_repository.add_offering(
            factory.make_offering(seller_id=applied_link.creator_id, price=Decimal("3000"))
        )
        mock_repository.add_link(factory.make_link(campaign_id=live_campaign.campaign_id, status=LinkStatus.INVITED))
        await service.transition_link(
            live_campaign.campaign_id, live_campaign.brand_id, applied_link.creator_id,
            "approved", package_id=package.offering_id,
        )

        report = await service.get_funnel_and_roi(live_campaign.campaign_id, live_campaign.brand_id)

        assert report.funnel["approved"] == 1
        assert report.funnel["invited"] == 1
        assert sum(report.funnel.values()) == 2
        assert report.spend == 3000.0
        assert report.orders.pending == 1
        assert report.efficiency.spend_per_approved_creator == 3000.0
        assert report.creators[0].name == "Asha"
        assert report.creators[0].selected_package_id == package.offering_id

    @pytest.mark.asyncio
    async def test_track_and_analytics(self, service, live_campaign, applied_link):
        await service.track_campaign_event(live_campaign.campaign_id, TrackEventKind.VIEW)
        await service.track_campaign_event(live_campaign.campaign_id, TrackEventKind.VIEW)
        await service.track_campaign_event(live_campaign.campaign_id, TrackEventKind.CLICK)

        analytics = await service.get_campaign_analytics(live_campaign.campaign_id, live_campaign.brand_id)

        assert analytics.stats.views == 2
        assert analytics.stats.clicks == 1
        assert analytics.stats.saves == 0
        assert analytics.funnel["applied"] == 1

    @pytest.mark.asyncio
    async def test_track_unknown_campaign(self, service):
        with pytest.raises(CampaignNotFoundError):
            await service.track_campaign_event("cmp_missing", TrackEventKind.SAVE)
