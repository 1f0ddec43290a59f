"""
Creator Campaign Service Data Models

Canonical data structures for campaigns, campaign-creator links,
service offerings, orders and the scoring/aggregation results.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


# ====================
# Enums
# ====================


class CampaignStatus(str, Enum):
    """Campaign lifecycle status"""
    DRAFT = "draft"
    LIVE = "live"
    PAUSED = "paused"
    COMPLETED = "completed"


class LinkStatus(str, Enum):
    """Campaign-creator link pipeline status"""
    INVITED = "invited"
    APPLIED = "applied"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    WITHDRAWN = "withdrawn"


class OrderStatus(str, Enum):
    """Order status values written by this service"""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderType(str, Enum):
    """Order origin"""
    CAMPAIGN = "campaign"
    LISTING = "listing"


class TrackEventKind(str, Enum):
    """Engagement counters kept per campaign"""
    VIEW = "view"
    CLICK = "click"
    SAVE = "save"
    ORDER = "order"


class MessageMetaType(str, Enum):
    """Meta type attached to messages posted into a thread"""
    CAMPAIGN_INVITE = "campaign_invite"
    CAMPAIGN_APPLY = "campaign_apply"
    CAMPAIGN_APPROVED = "campaign_approved"
    CAMPAIGN_STATUS = "campaign_status"


# ====================
# Core Models
# ====================


class CampaignRequirements(BaseModel):
    """Requirement set a campaign matches creators against"""
    categories: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    min_followers: Optional[int] = Field(None, ge=0)
    max_followers: Optional[int] = Field(None, ge=0)
    gender: Optional[str] = None

    @field_validator("categories", "languages", "locations", mode="before")
    @classmethod
    def _clean_tags(cls, v):
        if v is None:
            return []
        return [str(x).strip() for x in v if x is not None and str(x).strip()]


class Campaign(BaseModel):
    """Brand-owned campaign"""
    campaign_id: str
    brand_id: str
    name: str
    description: Optional[str] = None
    objective: str = "awareness"
    platform: str = "instagram"
    status: CampaignStatus = CampaignStatus.DRAFT
    budget_type: str = "fixed"
    content_types: List[str] = Field(default_factory=list)
    min_budget: Optional[Decimal] = None
    max_budget: Optional[Decimal] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    requirements: CampaignRequirements = Field(default_factory=CampaignRequirements)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_budget(self) -> bool:
        return self.min_budget is not None or self.max_budget is not None


class CampaignCreatorLink(BaseModel):
    """Per (campaign, creator) pipeline record"""
    link_id: str
    campaign_id: str
    creator_id: str
    status: LinkStatus
    thread_id: Optional[str] = None
    last_note: Optional[str] = None
    selected_package_id: Optional[str] = None
    invited_at: Optional[datetime] = None
    applied_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ServiceOffering(BaseModel):
    """Creator-owned purchasable package"""
    offering_id: str
    seller_id: str
    title: str
    price: Decimal = Decimal("0")
    is_active: bool = True


class CampaignOrder(BaseModel):
    """Financial order; campaign orders are keyed by campaign_link_id"""
    order_id: str
    order_type: str = OrderType.CAMPAIGN.value
    campaign_id: Optional[str] = None
    campaign_link_id: Optional[str] = None
    buyer_id: str
    seller_id: str
    offering_id: Optional[str] = None
    total_price: Decimal = Decimal("0")
    status: str = OrderStatus.PENDING.value
    created_at: Optional[datetime] = None

    # Populated by joins for display
    seller_name: Optional[str] = None
    offering_title: Optional[str] = None


class SocialAccount(BaseModel):
    """Connected social account; followers is free text as entered"""
    platform: str
    handle: Optional[str] = None
    followers: Optional[str] = None

    @field_validator("followers", mode="before")
    @classmethod
    def _followers_as_text(cls, v):
        return None if v is None else str(v)


class CreatorProfile(BaseModel):
    """Creator attributes consulted by the matcher"""
    creator_id: str
    name: Optional[str] = None
    username: Optional[str] = None
    image: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    gender: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    socials: List[SocialAccount] = Field(default_factory=list)
    is_locked: bool = False


class CampaignStats(BaseModel):
    """Engagement counters for a campaign"""
    campaign_id: str
    views: int = 0
    clicks: int = 0
    saves: int = 0
    orders: int = 0


# ====================
# Result Models
# ====================


class RankedCandidate(BaseModel):
    """Creator suggestion with its match score"""
    creator_id: str
    name: Optional[str] = None
    username: Optional[str] = None
    image: Optional[str] = None
    city: Optional[str] = None
    gender: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    followers: int = 0
    has_social: bool = False
    score: int = 0


class PackageCandidate(BaseModel):
    """Scored offering with human-readable reasons"""
    offering_id: str
    title: str
    price: Decimal
    is_active: bool
    score: int
    budget_fit: float
    volume: float
    completion: float
    order_count: int
    completed_count: int
    reasons: List[str] = Field(default_factory=list)


class PackageRecommendation(BaseModel):
    """Recommended offering plus ranked alternatives"""
    campaign_id: str
    creator_id: str
    recommended: Optional[PackageCandidate] = None
    alternatives: List[PackageCandidate] = Field(default_factory=list)
    note: Optional[str] = None


class TransitionResult(BaseModel):
    """Outcome of a link transition"""
    link: CampaignCreatorLink
    order_id: Optional[str] = None


class OrderCounts(BaseModel):
    total: int = 0
    pending: int = 0
    completed: int = 0
    cancelled: int = 0


class EfficiencyMetrics(BaseModel):
    spend_per_order: float = 0.0
    spend_per_approved_creator: float = 0.0
    approved_to_order_ratio: float = 0.0


class OfferingBreakdown(BaseModel):
    offering_id: str
    title: Optional[str] = None
    count: int = 0


class CreatorBreakdown(BaseModel):
    """Per-creator spend within a campaign"""
    creator_id: str
    name: str = "Creator"
    status: str = "unknown"
    selected_package_id: Optional[str] = None
    orders: int = 0
    spend: float = 0.0
    avg_order_value: float = 0.0
    top_offerings: List[OfferingBreakdown] = Field(default_factory=list)


class RoiReport(BaseModel):
    """Funnel and ROI metrics for one campaign"""
    campaign_id: str
    funnel: Dict[str, int]
    spend: float = 0.0
    orders: OrderCounts = Field(default_factory=OrderCounts)
    avg_order_value: float = 0.0
    efficiency: EfficiencyMetrics = Field(default_factory=EfficiencyMetrics)
    creators: List[CreatorBreakdown] = Field(default_factory=list)


class CampaignAnalytics(BaseModel):
    """Engagement counters plus funnel"""
    campaign_id: str
    stats: CampaignStats
    funnel: Dict[str, int]


# ====================
# Request/Response Models
# ====================


class CampaignCreateRequest(BaseModel):
    """Request to create a campaign"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    objective: Optional[str] = "awareness"
    platform: Optional[str] = "instagram"
    status: Optional[CampaignStatus] = CampaignStatus.DRAFT
    budget_type: Optional[str] = "fixed"
    content_types: List[str] = Field(default_factory=list)
    min_budget: Optional[Decimal] = Field(None, ge=0)
    max_budget: Optional[Decimal] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    requirements: Optional[CampaignRequirements] = None


class CampaignUpdateRequest(BaseModel):
    """Partial campaign update; unset fields are left unchanged"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    objective: Optional[str] = None
    platform: Optional[str] = None
    status: Optional[CampaignStatus] = None
    budget_type: Optional[str] = None
    content_types: Optional[List[str]] = None
    min_budget: Optional[Decimal] = Field(None, ge=0)
    max_budget: Optional[Decimal] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    requirements: Optional[CampaignRequirements] = None


class CampaignResponse(BaseModel):
    campaign: Campaign
    message: Optional[str] = None


class CampaignListResponse(BaseModel):
    campaigns: List[Campaign]
    total: int


class LinkTransitionRequest(BaseModel):
    """Request to move a link to a new status"""
    status: str = Field(..., min_length=1)
    note: Optional[str] = Field(None, max_length=2000)
    package_id: Optional[str] = None


class InviteRequest(BaseModel):
    creator_id: str = Field(..., min_length=1)
    message: Optional[str] = Field(None, max_length=2000)


class ApplyRequest(BaseModel):
    message: Optional[str] = Field(None, max_length=2000)


class TrackRequest(BaseModel):
    campaign_id: str = Field(..., min_length=1)


class SuggestionsResponse(BaseModel):
    campaign_id: str
    suggested: List[RankedCandidate]


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, str] = Field(default_factory=dict)


class ReadinessResponse(BaseModel):
    """Readiness check response"""
    ready: bool
    checks: Dict[str, bool] = Field(default_factory=dict)
    details: Dict[str, str] = Field(default_factory=dict)


class LivenessResponse(BaseModel):
    """Liveness check response"""
    alive: bool
    uptime_seconds: float


class ErrorResponse(BaseModel):
    """Standard error response"""
    detail: str
    error_code: Optional[str] = None
    field: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


__all__ = [
    # Enums
    "CampaignStatus",
    "LinkStatus",
    "OrderStatus",
    "OrderType",
    "TrackEventKind",
    "MessageMetaType",
    # Core Models
    "CampaignRequirements",
    "Campaign",
    "CampaignCreatorLink",
    "ServiceOffering",
    "CampaignOrder",
    "SocialAccount",
    "CreatorProfile",
    "CampaignStats",
    # Results
    "RankedCandidate",
    "PackageCandidate",
    "PackageRecommendation",
    "TransitionResult",
    "OrderCounts",
    "EfficiencyMetrics",
    "OfferingBreakdown",
    "CreatorBreakdown",
    "RoiReport",
    "CampaignAnalytics",
    # Request/Response
    "CampaignCreateRequest",
    "CampaignUpdateRequest",
    "CampaignResponse",
    "CampaignListResponse",
    "LinkTransitionRequest",
    "InviteRequest",
    "ApplyRequest",
    "TrackRequest",
    "SuggestionsResponse",
    "HealthResponse",
    "ReadinessResponse",
    "LivenessResponse",
    "ErrorResponse",
]
