"""
Creator Campaign Service Business Logic

Orchestrates campaign CRUD, creator matching, the link approval state
machine, package recommendation and ROI reporting. Decisions are delegated
to the pure modules (matcher, link_state_machine, recommender,
roi_aggregator); this layer owns authorization, persistence and the
messaging/event side effects.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.config import MatchingConfig

from .events import CreatorCampaignEventPublisher
from .link_state_machine import (
    DEFAULT_APPLY_MESSAGE,
    PHASE_TIMESTAMPS,
    build_approval_message,
    build_status_message,
    ensure_transition,
    message_meta_type,
    parse_link_status,
)
from .matcher import match_candidates as rank_candidates
from .models import (
    Campaign,
    CampaignAnalytics,
    CampaignCreateRequest,
    CampaignCreatorLink,
    CampaignOrder,
    CampaignRequirements,
    CampaignStats,
    CampaignStatus,
    CampaignUpdateRequest,
    LinkStatus,
    MessageMetaType,
    OrderStatus,
    OrderType,
    PackageRecommendation,
    RankedCandidate,
    RoiReport,
    TrackEventKind,
    TransitionResult,
)
from .protocols import (
    BudgetRangeError,
    CampaignNotFoundError,
    CreatorCampaignRepositoryProtocol,
    CreatorNotFoundError,
    EngineValidationError,
    EventBusProtocol,
    InvalidCampaignStateError,
    LinkNotFoundError,
    MessagingClientProtocol,
    OfferingNotFoundError,
    PackageOwnershipError,
)
from .recommender import recommend_package as rank_packages
from .roi_aggregator import aggregate_roi, build_funnel

logger = logging.getLogger(__name__)


class CreatorCampaignService:
    """Creator campaign service business logic layer"""

    def __init__(
        self,
        repository: CreatorCampaignRepositoryProtocol,
        messaging_client: Optional[MessagingClientProtocol] = None,
        event_bus: Optional[EventBusProtocol] = None,
        config: Optional[MatchingConfig] = None,
    ):
        self.repository = repository
        self.messaging_client = messaging_client
        self.event_bus = event_bus
        self.config = config or MatchingConfig()
        self.publisher = CreatorCampaignEventPublisher(event_bus)

    # ====================
    # Campaign CRUD
    # ====================

    async def create_campaign(
        self,
        request: CampaignCreateRequest,
        brand_id: str,
    ) -> Campaign:
        """Create a campaign owned by the brand (draft unless told otherwise)"""
        self._validate_budget_range(request.min_budget, request.max_budget)

        now = datetime.now(timezone.utc)
        campaign = Campaign(
            campaign_id=f"cmp_{uuid.uuid4().hex[:16]}",
            brand_id=brand_id,
            name=request.name.strip(),
            description=request.description,
            objective=request.objective or "awareness",
            platform=request.platform or "instagram",
            status=request.status or CampaignStatus.DRAFT,
            budget_type=request.budget_type or "fixed",
            content_types=request.content_types,
            min_budget=request.min_budget,
            max_budget=request.max_budget,
            start_date=request.start_date,
            end_date=request.end_date,
            requirements=request.requirements or CampaignRequirements(),
            created_at=now,
            updated_at=now,
        )

        campaign = await self.repository.save_campaign(campaign)
        logger.info(f"Campaign created: {campaign.campaign_id} by brand {brand_id}")

        await self.publisher.publish_campaign_created(campaign)
        return campaign

    async def update_campaign(
        self,
        campaign_id: str,
        brand_id: str,
        request: CampaignUpdateRequest,
    ) -> Campaign:
        """Apply a partial update; the merged budget range is re-validated"""
        campaign = await self.get_campaign(campaign_id, brand_id)

        changes = request.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] is not None:
            changes["name"] = changes["name"].strip()

        merged = campaign.model_copy(update={
            k: v for k, v in changes.items() if k != "requirements"
        })
        if request.requirements is not None:
            merged.requirements = request.requirements

        self._validate_budget_range(merged.min_budget, merged.max_budget)

        if not changes:
            return campaign

        merged.updated_at = datetime.now(timezone.utc)
        updated = await self.repository.save_campaign(merged)
        logger.info(f"Campaign updated: {campaign_id} fields={sorted(changes)}")

        await self.publisher.publish_campaign_updated(updated, sorted(changes))
        return updated

    async def get_campaign(self, campaign_id: str, brand_id: str) -> Campaign:
        """Get a campaign; another brand's campaign is reported as not found"""
        campaign = await self.repository.get_campaign_for_brand(campaign_id, brand_id)
        if not campaign:
            raise CampaignNotFoundError(f"Campaign not found: {campaign_id}")
        return campaign

    async def list_campaigns(self, brand_id: str) -> List[Campaign]:
        return await self.repository.list_campaigns_for_brand(brand_id)

    # ====================
    # Matching and Recommendation
    # ====================

    async def match_candidates(
        self,
        campaign_id: str,
        brand_id: str,
    ) -> List[RankedCandidate]:
        """Ranked creator suggestions for the campaign's requirement set"""
        campaign = await self.get_campaign(campaign_id, brand_id)
        profiles = await self.repository.list_creator_profiles(
            limit=self.config.candidate_pool_limit
        )
        return rank_candidates(campaign.requirements, profiles, self.config)

    async def recommend_package(
        self,
        campaign_id: str,
        brand_id: str,
        creator_id: Optional[str],
    ) -> PackageRecommendation:
        """Rank the linked creator's offerings against the campaign budget"""
        if not creator_id:
            raise EngineValidationError("creator_id is required", field="creator_id")

        campaign = await self.get_campaign(campaign_id, brand_id)
        link = await self.repository.get_link(campaign_id, creator_id)
        if not link:
            raise LinkNotFoundError("Creator is not part of this campaign")

        offerings = await self.repository.list_offerings_for_seller(creator_id)
        orders = await self.repository.list_orders_for_offerings(
            [o.offering_id for o in offerings]
        )
        return rank_packages(campaign, creator_id, offerings, orders, self.config)

    # ====================
    # Link State Machine
    # ====================

    async def transition_link(
        self,
        campaign_id: str,
        brand_id: str,
        creator_id: str,
        status: str,
        note: Optional[str] = None,
        package_id: Optional[str] = None,
    ) -> TransitionResult:
        """
        Move a campaign-creator link to a new status.

        Approval requires a package owned by the link's creator and
        get-or-creates exactly one order for the link. A repeated approval
        returns the existing order. Invalid transitions leave the link
        unchanged.

        Raises:
            EngineValidationError: unknown status or approval without package
            CampaignNotFoundError: campaign absent or owned by another brand
            LinkNotFoundError: creator not linked to the campaign
            OfferingNotFoundError: selected package does not exist
            PackageOwnershipError: selected package belongs to another creator
            InvalidTransitionError: transition not in the table
        """
        to_status = parse_link_status(status)
        if to_status == LinkStatus.APPROVED and not package_id:
            raise EngineValidationError("package_id is required for approval", field="package_id")

        campaign = await self.get_campaign(campaign_id, brand_id)
        link = await self.repository.get_link(campaign_id, creator_id)
        if not link:
            raise LinkNotFoundError("Creator is not part of this campaign")

        note = note.strip() if note and note.strip() else None
        if to_status == LinkStatus.APPROVED:
            return await self._approve_link(campaign, link, package_id, note)

        updates: Dict[str, Any] = {}
        if note:
            updates["last_note"] = note
        phase_column = PHASE_TIMESTAMPS.get(to_status)
        if phase_column:
            updates[phase_column] = datetime.now(timezone.utc)

        updated, _ = await self.repository.transition_link(
            campaign_id, creator_id, to_status, updates, guard=ensure_transition
        )
        if not updated:
            raise LinkNotFoundError("Creator is not part of this campaign")

        logger.info(
            f"Link transitioned: {updated.link_id} {link.status.value} -> {to_status.value}"
        )

        await self._post_thread_message(
            updated.thread_id,
            brand_id,
            build_status_message(to_status, campaign.name, note),
            {
                "type": message_meta_type(to_status).value,
                "campaign_id": campaign_id,
                "status": to_status.value,
            },
        )
        await self.publisher.publish_link_status_changed(updated, link.status, brand_id)

        return TransitionResult(link=updated)

    async def _approve_link(
        self,
        campaign: Campaign,
        link: CampaignCreatorLink,
        package_id: str,
        note: Optional[str],
    ) -> TransitionResult:
        offering = await self.repository.get_offering(package_id)
        if not offering:
            raise OfferingNotFoundError("Selected package not found")
        if offering.seller_id != link.creator_id:
            raise PackageOwnershipError(package_id, link.creator_id)

        now = datetime.now(timezone.utc)
        draft = CampaignOrder(
            order_id=f"ord_{uuid.uuid4().hex[:16]}",
            order_type=OrderType.CAMPAIGN.value,
            campaign_id=campaign.campaign_id,
            campaign_link_id=link.link_id,
            buyer_id=campaign.brand_id,
            seller_id=offering.seller_id,
            offering_id=offering.offering_id,
            total_price=offering.price,
            status=OrderStatus.PENDING.value,
            created_at=now,
        )
        updates: Dict[str, Any] = {
            "selected_package_id": offering.offering_id,
            "approved_at": now,
        }
        if note:
            updates["last_note"] = note

        updated, order = await self.repository.transition_link(
            campaign.campaign_id,
            link.creator_id,
            LinkStatus.APPROVED,
            updates,
            guard=ensure_transition,
            order_draft=draft,
        )
        if not updated:
            raise LinkNotFoundError("Creator is not part of this campaign")

        order_created = order.order_id == draft.order_id
        if order_created:
            logger.info(f"Order created: {order.order_id} for link {updated.link_id}")
        else:
            logger.info(f"Reusing order {order.order_id} for link {updated.link_id}")

        await self._post_thread_message(
            updated.thread_id,
            campaign.brand_id,
            build_approval_message(campaign.name, order.order_id, note),
            {
                "type": MessageMetaType.CAMPAIGN_APPROVED.value,
                "campaign_id": campaign.campaign_id,
                "order_id": order.order_id,
            },
        )
        await self.publisher.publish_link_approved(updated, campaign.brand_id, order)
        if order_created:
            await self.publisher.publish_order_created(order)

        return TransitionResult(link=updated, order_id=order.order_id)

    async def invite_creator(
        self,
        campaign_id: str,
        brand_id: str,
        creator_id: str,
        message: Optional[str] = None,
    ) -> CampaignCreatorLink:
        """Invite a creator, creating the link or moving it back to invited"""
        campaign = await self.get_campaign(campaign_id, brand_id)
        creator = await self.repository.get_creator_profile(creator_id)
        if not creator:
            raise CreatorNotFoundError(f"Creator not found: {creator_id}")

        message = message.strip() if message and message.strip() else None
        thread_id = await self._resolve_thread([brand_id, creator_id])

        link = await self._enter_link(
            campaign, creator_id, LinkStatus.INVITED, thread_id, message
        )

        if message:
            await self._post_thread_message(
                link.thread_id,
                brand_id,
                message,
                {
                    "type": MessageMetaType.CAMPAIGN_INVITE.value,
                    "campaign_id": campaign_id,
                },
            )
        return link

    async def apply_to_campaign(
        self,
        campaign_id: str,
        creator_id: str,
        message: Optional[str] = None,
    ) -> CampaignCreatorLink:
        """Creator-initiated entry into a live campaign"""
        campaign = await self.repository.get_campaign(campaign_id)
        if not campaign:
            raise CampaignNotFoundError(f"Campaign not found: {campaign_id}")
        if campaign.status != CampaignStatus.LIVE:
            raise InvalidCampaignStateError(
                "Campaign is not accepting applications", campaign.status
            )

        message = message.strip() if message and message.strip() else None
        body = message or DEFAULT_APPLY_MESSAGE.format(name=campaign.name)
        thread_id = await self._resolve_thread([campaign.brand_id, creator_id])

        link = await self._enter_link(
            campaign, creator_id, LinkStatus.APPLIED, thread_id, message, actor_id=creator_id
        )

        await self._post_thread_message(
            link.thread_id,
            creator_id,
            body,
            {
                "type": MessageMetaType.CAMPAIGN_APPLY.value,
                "campaign_id": campaign_id,
            },
        )
        return link

    async def _enter_link(
        self,
        campaign: Campaign,
        creator_id: str,
        status: LinkStatus,
        thread_id: Optional[str],
        note: Optional[str],
        actor_id: Optional[str] = None,
    ) -> CampaignCreatorLink:
        """Create the link in an entry status or run the guarded transition"""
        now = datetime.now(timezone.utc)
        phase_column = PHASE_TIMESTAMPS[status]
        actor_id = actor_id or campaign.brand_id

        link = CampaignCreatorLink(
            link_id=f"lnk_{uuid.uuid4().hex[:16]}",
            campaign_id=campaign.campaign_id,
            creator_id=creator_id,
            status=status,
            thread_id=thread_id,
            last_note=note,
            created_at=now,
            updated_at=now,
            **{phase_column: now},
        )
        stored, created = await self.repository.insert_link_if_absent(link)
        if created:
            logger.info(f"Link created: {stored.link_id} in {status.value}")
            await self.publisher.publish_link_status_changed(stored, None, actor_id)
            return stored

        updates: Dict[str, Any] = {phase_column: now}
        if note:
            updates["last_note"] = note
        if thread_id:
            updates["thread_id"] = thread_id

        updated, _ = await self.repository.transition_link(
            campaign.campaign_id, creator_id, status, updates, guard=ensure_transition
        )
        if not updated:
            raise LinkNotFoundError("Creator is not part of this campaign")

        logger.info(
            f"Link transitioned: {updated.link_id} {stored.status.value} -> {status.value}"
        )
        await self.publisher.publish_link_status_changed(updated, stored.status, actor_id)
        return updated

    # ====================
    # Reporting
    # ====================

    async def get_funnel_and_roi(self, campaign_id: str, brand_id: str) -> RoiReport:
        """Funnel, spend and efficiency for one campaign"""
        await self.get_campaign(campaign_id, brand_id)
        links = await self.repository.list_links(campaign_id)
        orders = await self.repository.list_campaign_orders(campaign_id)
        return aggregate_roi(campaign_id, links, orders, self.config)

    async def track_campaign_event(
        self,
        campaign_id: str,
        kind: TrackEventKind,
    ) -> CampaignStats:
        """Increment an engagement counter for a campaign"""
        campaign = await self.repository.get_campaign(campaign_id)
        if not campaign:
            raise CampaignNotFoundError(f"Campaign not found: {campaign_id}")

        stats = await self.repository.increment_campaign_stat(campaign_id, kind)
        logger.debug(f"Tracked {kind.value} for campaign {campaign_id}")
        return stats

    async def get_campaign_analytics(
        self,
        campaign_id: str,
        brand_id: str,
    ) -> CampaignAnalytics:
        await self.get_campaign(campaign_id, brand_id)
        stats = await self.repository.get_campaign_stats(campaign_id)
        links = await self.repository.list_links(campaign_id)
        return CampaignAnalytics(
            campaign_id=campaign_id,
            stats=stats,
            funnel=build_funnel(links),
        )

    # ====================
    # Validation
    # ====================

    def _validate_budget_range(self, min_budget, max_budget) -> None:
        if min_budget is not None and max_budget is not None and min_budget > max_budget:
            raise BudgetRangeError()

    # ====================
    # Messaging
    # ====================

    async def _resolve_thread(self, participant_ids: List[str]) -> Optional[str]:
        """Get or create the shared thread; None when messaging is unavailable"""
        if not self.messaging_client:
            logger.debug("Messaging client not configured, skipping thread resolve")
            return None

        try:
            return await self.messaging_client.get_or_create_thread(participant_ids)
        except Exception as e:
            logger.warning(f"Failed to resolve thread for {participant_ids}: {e}")
            return None

    async def _post_thread_message(
        self,
        thread_id: Optional[str],
        sender_id: str,
        body: str,
        meta: Dict[str, Any],
    ) -> None:
        """Post into the link's thread; failures never undo a committed change"""
        if not thread_id:
            logger.debug("Link has no thread, skipping message")
            return
        if not self.messaging_client:
            logger.debug("Messaging client not configured, skipping message")
            return

        try:
            await self.messaging_client.post_message(thread_id, sender_id, body, meta)
        except Exception as e:
            logger.warning(f"Failed to post message to thread {thread_id}: {e}")


__all__ = ["CreatorCampaignService"]
