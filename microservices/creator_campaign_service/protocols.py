"""
Creator Campaign Service Protocols

Defines interfaces for dependency injection and testing.
Following the protocol-based architecture pattern.
"""

from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from .models import (
    Campaign,
    CampaignCreatorLink,
    CampaignOrder,
    CampaignStats,
    CampaignStatus,
    CreatorProfile,
    LinkStatus,
    ServiceOffering,
    TrackEventKind,
)


TransitionGuard = Callable[[LinkStatus, LinkStatus], None]


# ====================
# Repository Protocol
# ====================


class CreatorCampaignRepositoryProtocol(Protocol):
    """Protocol for the campaign engine store"""

    async def initialize(self) -> None:
        """Initialize repository connection"""
        ...

    async def close(self) -> None:
        """Close repository connection"""
        ...

    async def health_check(self) -> bool:
        """Check repository health"""
        ...

    # Campaigns
    async def save_campaign(self, campaign: Campaign) -> Campaign:
        """Insert or update a campaign"""
        ...

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        """Get campaign by ID"""
        ...

    async def get_campaign_for_brand(
        self, campaign_id: str, brand_id: str
    ) -> Optional[Campaign]:
        """Get campaign only if owned by the brand"""
        ...

    async def list_campaigns_for_brand(self, brand_id: str) -> List[Campaign]:
        """List a brand's campaigns, newest first"""
        ...

    # Creators
    async def get_creator_profile(self, creator_id: str) -> Optional[CreatorProfile]:
        """Get creator profile"""
        ...

    async def list_creator_profiles(self, limit: int = 200) -> List[CreatorProfile]:
        """Candidate pool for matching"""
        ...

    # Links
    async def get_link(
        self, campaign_id: str, creator_id: str
    ) -> Optional[CampaignCreatorLink]:
        """Get link for a (campaign, creator) pair"""
        ...

    async def list_links(self, campaign_id: str) -> List[CampaignCreatorLink]:
        """All links of a campaign"""
        ...

    async def insert_link_if_absent(
        self, link: CampaignCreatorLink
    ) -> Tuple[CampaignCreatorLink, bool]:
        """Insert link unless the pair exists; returns (link, created)"""
        ...

    async def transition_link(
        self,
        campaign_id: str,
        creator_id: str,
        to_status: LinkStatus,
        updates: Dict[str, Any],
        guard: TransitionGuard,
        order_draft: Optional[CampaignOrder] = None,
    ) -> Tuple[Optional[CampaignCreatorLink], Optional[CampaignOrder]]:
        """
        Atomically lock the link, run guard(current, to_status), apply the
        status and column updates, and get-or-create the order keyed by the
        link when order_draft is given. When the order already exists, the
        link's selected_package_id is set to the order's offering. Returns
        (None, None) if no link.
        """
        ...

    # Offerings and orders
    async def get_offering(self, offering_id: str) -> Optional[ServiceOffering]:
        """Get offering by ID"""
        ...

    async def list_offerings_for_seller(self, seller_id: str) -> List[ServiceOffering]:
        """All offerings owned by a creator"""
        ...

    async def list_orders_for_offerings(
        self, offering_ids: List[str]
    ) -> List[CampaignOrder]:
        """All historical orders for the given offerings"""
        ...

    async def list_campaign_orders(self, campaign_id: str) -> List[CampaignOrder]:
        """Campaign-typed orders of a campaign"""
        ...

    # Engagement stats
    async def increment_campaign_stat(
        self, campaign_id: str, kind: TrackEventKind
    ) -> CampaignStats:
        """Upsert-increment a counter"""
        ...

    async def get_campaign_stats(self, campaign_id: str) -> CampaignStats:
        """Counters for a campaign (zeros if none yet)"""
        ...


# ====================
# Event Bus Protocol
# ====================


class EventBusProtocol(Protocol):
    """Protocol for event bus operations"""

    async def publish_event(self, event: Any) -> bool:
        """Publish an event to the event bus"""
        ...

    async def close(self) -> None:
        """Close event bus connection"""
        ...


# ====================
# Service Client Protocols
# ====================


class MessagingClientProtocol(Protocol):
    """Protocol for the messaging collaborator"""

    async def get_or_create_thread(self, participant_ids: List[str]) -> str:
        """Return the thread shared by the participants, creating it if needed"""
        ...

    async def post_message(
        self,
        thread_id: str,
        sender_id: str,
        body: str,
        meta: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Append a message to a thread"""
        ...


# ====================
# Custom Exceptions
# ====================


class CreatorCampaignServiceError(Exception):
    """Base exception for creator campaign service errors"""
    error_code = "creator_campaign_error"


class EngineValidationError(CreatorCampaignServiceError):
    """Raised when a request is missing or has an invalid field"""
    error_code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ResourceNotFoundError(CreatorCampaignServiceError):
    """Raised when a resource is absent or not visible to the caller"""
    error_code = "not_found"


class CampaignNotFoundError(ResourceNotFoundError):
    """Raised when campaign is not found or owned by another brand"""
    error_code = "campaign_not_found"


class LinkNotFoundError(ResourceNotFoundError):
    """Raised when the creator is not linked to the campaign"""
    error_code = "link_not_found"


class OfferingNotFoundError(ResourceNotFoundError):
    """Raised when a package is not found"""
    error_code = "offering_not_found"


class CreatorNotFoundError(ResourceNotFoundError):
    """Raised when a creator is not found"""
    error_code = "creator_not_found"


class InvariantViolationError(CreatorCampaignServiceError):
    """Raised when a request would break a domain rule"""
    error_code = "invariant_violation"


class InvalidTransitionError(InvariantViolationError):
    """Raised when a link status change is outside the transition table"""
    error_code = "invalid_transition"

    def __init__(self, from_status: LinkStatus, to_status: LinkStatus):
        super().__init__(
            f"Invalid transition {from_status.value} → {to_status.value}"
        )
        self.from_status = from_status
        self.to_status = to_status


class PackageOwnershipError(InvariantViolationError):
    """Raised when the selected package belongs to another creator"""
    error_code = "package_ownership"

    def __init__(self, offering_id: str, creator_id: str):
        super().__init__("Selected package does not belong to this creator")
        self.offering_id = offering_id
        self.creator_id = creator_id


class BudgetRangeError(InvariantViolationError):
    """Raised when min budget exceeds max budget"""
    error_code = "budget_range"

    def __init__(self, message: str = "minBudget cannot be greater than maxBudget"):
        super().__init__(message)
        self.field = "min_budget"


class InvalidCampaignStateError(CreatorCampaignServiceError):
    """Raised when campaign is in invalid state for operation"""
    error_code = "invalid_campaign_state"

    def __init__(self, message: str, current_status: Optional[CampaignStatus] = None):
        super().__init__(message)
        self.current_status = current_status


class AuthorizationError(CreatorCampaignServiceError):
    """Raised when the caller's role may not perform the operation"""
    error_code = "forbidden"


__all__ = [
    "TransitionGuard",
    "CreatorCampaignRepositoryProtocol",
    "EventBusProtocol",
    "MessagingClientProtocol",
    "CreatorCampaignServiceError",
    "EngineValidationError",
    "ResourceNotFoundError",
    "CampaignNotFoundError",
    "LinkNotFoundError",
    "OfferingNotFoundError",
    "CreatorNotFoundError",
    "InvariantViolationError",
    "InvalidTransitionError",
    "PackageOwnershipError",
    "BudgetRangeError",
    "InvalidCampaignStateError",
    "AuthorizationError",
]
