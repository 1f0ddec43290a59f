"""
Package Recommender

Scores a creator's service offerings for one campaign:

    score = 100 * (w_fit * budget_fit + w_volume * volume + w_completion * completion)

budget_fit measures how well the price sits in the campaign budget range,
volume and completion come from the offering's past orders. Reasons are
derived from the same inputs so they always agree with the score.
"""

import logging
import math
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from core.config import MatchingConfig

from .models import (
    Campaign,
    CampaignOrder,
    OrderType,
    PackageCandidate,
    PackageRecommendation,
    ServiceOffering,
)

logger = logging.getLogger(__name__)

NO_OFFERINGS_NOTE = (
    "Creator has no packages/listings yet. "
    "Ask creator to add packages to get smart suggestions."
)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def budget_fit(
    price: Decimal,
    min_budget: Optional[Decimal],
    max_budget: Optional[Decimal],
    neutral: float = 0.6,
) -> float:
    """
    Budget-fit sub-score in [0, 1].

    No bounds gives the neutral value, a price inside [min, max] gives 1.0,
    otherwise the fit decays linearly with the distance past the nearest
    bound relative to that bound.
    """
    if min_budget is None and max_budget is None:
        return neutral

    p = float(price or 0)
    if p <= 0:
        return 0.0

    low = float(min_budget) if min_budget is not None else None
    high = float(max_budget) if max_budget is not None else None

    if low is not None and p < low:
        return _clamp01(1 - (low - p) / max(1.0, low))
    if high is not None and p > high:
        return _clamp01(1 - (p - high) / max(1.0, high))
    return 1.0


def _is_completed(order: CampaignOrder) -> bool:
    return str(order.status or "").strip().lower() == "completed"


def order_history(
    offering_id: str,
    orders: Iterable[CampaignOrder],
) -> Tuple[int, int]:
    """
    (total, completed) past orders of an offering.

    Campaign-typed orders are used when any exist; otherwise all orders of
    the offering are counted.
    """
    own = [o for o in orders if o.offering_id == offering_id]
    campaign_orders = [
        o for o in own
        if str(o.order_type or "").lower() == OrderType.CAMPAIGN.value
    ]
    history = campaign_orders or own
    return len(history), sum(1 for o in history if _is_completed(o))


def build_reasons(
    fit: float,
    total_orders: int,
    completion: float,
    is_active: bool,
    config: MatchingConfig,
) -> List[str]:
    reasons: List[str] = []

    if fit >= config.fits_budget_threshold:
        reasons.append("Fits your budget range")
    elif fit >= config.near_budget_threshold:
        reasons.append("Near your budget range")
    else:
        reasons.append("Outside your budget range")

    if total_orders >= config.proven_package_orders:
        reasons.append(f"Proven package ({total_orders} past orders)")
    elif total_orders > 0:
        reasons.append(f"Some history ({total_orders} past orders)")
    else:
        reasons.append("New package (no past orders yet)")

    if total_orders > 0:
        if completion >= config.high_completion_threshold:
            reasons.append("High completion rate")
        else:
            reasons.append("Average completion rate")

    if is_active:
        reasons.append("Active listing")

    return reasons


def score_offering(
    campaign: Campaign,
    offering: ServiceOffering,
    orders: Iterable[CampaignOrder],
    config: Optional[MatchingConfig] = None,
) -> PackageCandidate:
    config = config or MatchingConfig()

    fit = budget_fit(
        offering.price,
        campaign.min_budget,
        campaign.max_budget,
        neutral=config.neutral_budget_fit,
    )
    total, completed = order_history(offering.offering_id, orders)
    volume = _clamp01(total / max(1, config.volume_saturation_orders))
    completion = completed / total if total else 0.0

    score = _round_half_up(
        100 * (
            config.budget_fit_weight * fit
            + config.volume_weight * volume
            + config.completion_weight * completion
        )
    )

    return PackageCandidate(
        offering_id=offering.offering_id,
        title=offering.title,
        price=offering.price,
        is_active=offering.is_active,
        score=score,
        budget_fit=round(fit, 4),
        volume=round(volume, 4),
        completion=round(completion, 4),
        order_count=total,
        completed_count=completed,
        reasons=build_reasons(fit, total, completion, offering.is_active, config),
    )


def recommend_package(
    campaign: Campaign,
    creator_id: str,
    offerings: List[ServiceOffering],
    orders: List[CampaignOrder],
    config: Optional[MatchingConfig] = None,
) -> PackageRecommendation:
    """
    Rank a creator's offerings for a campaign.

    Active offerings sort before inactive ones, then by score. The first is
    the recommendation and the top entries form the alternatives.
    """
    config = config or MatchingConfig()

    if not offerings:
        return PackageRecommendation(
            campaign_id=campaign.campaign_id,
            creator_id=creator_id,
            recommended=None,
            alternatives=[],
            note=NO_OFFERINGS_NOTE,
        )

    scored = [score_offering(campaign, o, orders, config) for o in offerings]
    scored.sort(key=lambda c: (0 if c.is_active else 1, -c.score))

    logger.debug(
        f"Scored {len(scored)} offerings for creator {creator_id} "
        f"on campaign {campaign.campaign_id}"
    )

    return PackageRecommendation(
        campaign_id=campaign.campaign_id,
        creator_id=creator_id,
        recommended=scored[0],
        alternatives=scored[: config.alternatives_limit],
    )


__all__ = [
    "NO_OFFERINGS_NOTE",
    "budget_fit",
    "order_history",
    "build_reasons",
    "score_offering",
    "recommend_package",
]
