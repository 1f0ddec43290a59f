"""
ROI Aggregator

Read-only aggregation of a campaign's links and orders into funnel counts,
spend, order buckets, efficiency metrics and a per-creator breakdown.
"""

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from core.config import MatchingConfig

from .models import (
    CampaignCreatorLink,
    CampaignOrder,
    CreatorBreakdown,
    EfficiencyMetrics,
    LinkStatus,
    OfferingBreakdown,
    OrderCounts,
    RoiReport,
)

# Substrings that place an order status into a bucket
ORDER_BUCKETS = (
    ("pending", "pending"),
    ("completed", "completed"),
    ("cancelled", "cancel"),
)


def _money(value: float) -> float:
    return round(value, 2)


def build_funnel(links: Iterable[CampaignCreatorLink]) -> Dict[str, int]:
    """Link count per status, every status present"""
    funnel = {status.value: 0 for status in LinkStatus}
    for link in links:
        key = link.status.value if isinstance(link.status, LinkStatus) else str(link.status).lower()
        if key in funnel:
            funnel[key] += 1
    return funnel


def order_bucket(status: Optional[str]) -> Optional[str]:
    text = str(status or "").lower()
    for bucket, needle in ORDER_BUCKETS:
        if needle in text:
            return bucket
    return None


def count_orders(orders: List[CampaignOrder]) -> OrderCounts:
    counts = OrderCounts(total=len(orders))
    for order in orders:
        bucket = order_bucket(order.status)
        if bucket:
            setattr(counts, bucket, getattr(counts, bucket) + 1)
    return counts


def build_creator_breakdown(
    links: List[CampaignCreatorLink],
    orders: List[CampaignOrder],
    top_offerings: int = 3,
) -> List[CreatorBreakdown]:
    """Group orders by seller; sort by spend, keep the most bought offerings"""
    link_by_creator = {link.creator_id: link for link in links}
    groups: "OrderedDict[str, dict]" = OrderedDict()

    for order in orders:
        if not order.seller_id:
            continue

        group = groups.get(order.seller_id)
        if group is None:
            link = link_by_creator.get(order.seller_id)
            group = {
                "name": order.seller_name or "Creator",
                "status": link.status.value if link else "unknown",
                "selected_package_id": link.selected_package_id if link else None,
                "orders": 0,
                "spend": 0.0,
                "offerings": OrderedDict(),
            }
            groups[order.seller_id] = group

        group["orders"] += 1
        group["spend"] += float(order.total_price or 0)

        if order.offering_id:
            item = group["offerings"].setdefault(
                order.offering_id,
                OfferingBreakdown(offering_id=order.offering_id, title=order.offering_title),
            )
            item.count += 1

    creators = []
    for creator_id, group in groups.items():
        offerings = sorted(group["offerings"].values(), key=lambda o: o.count, reverse=True)
        creators.append(
            CreatorBreakdown(
                creator_id=creator_id,
                name=group["name"],
                status=group["status"],
                selected_package_id=group["selected_package_id"],
                orders=group["orders"],
                spend=_money(group["spend"]),
                avg_order_value=_money(group["spend"] / group["orders"]) if group["orders"] else 0.0,
                top_offerings=offerings[:top_offerings],
            )
        )

    creators.sort(key=lambda c: c.spend, reverse=True)
    return creators


def aggregate_roi(
    campaign_id: str,
    links: List[CampaignCreatorLink],
    orders: List[CampaignOrder],
    config: Optional[MatchingConfig] = None,
) -> RoiReport:
    """Compute the full funnel and ROI report"""
    config = config or MatchingConfig()

    funnel = build_funnel(links)
    counts = count_orders(orders)
    spend = sum(float(o.total_price or 0) for o in orders)
    approved = funnel[LinkStatus.APPROVED.value]

    avg_order_value = spend / counts.total if counts.total else 0.0
    efficiency = EfficiencyMetrics(
        spend_per_order=_money(avg_order_value),
        spend_per_approved_creator=_money(spend / approved) if approved else 0.0,
        approved_to_order_ratio=round(counts.total / approved, 4) if approved else 0.0,
    )

    return RoiReport(
        campaign_id=campaign_id,
        funnel=funnel,
        spend=_money(spend),
        orders=counts,
        avg_order_value=_money(avg_order_value),
        efficiency=efficiency,
        creators=build_creator_breakdown(links, orders, config.top_offerings_per_creator),
    )


__all__ = [
    "build_funnel",
    "order_bucket",
    "count_orders",
    "build_creator_breakdown",
    "aggregate_roi",
]
