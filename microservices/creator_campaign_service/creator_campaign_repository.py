"""
Creator Campaign Service Data Repository

Data access layer - PostgreSQL (Async)
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from core.config import InfraConfig, get_settings
from core.postgres_client import AsyncPostgresClient

from .models import (
    Campaign,
    CampaignCreatorLink,
    CampaignOrder,
    CampaignRequirements,
    CampaignStats,
    CampaignStatus,
    CreatorProfile,
    LinkStatus,
    ServiceOffering,
    SocialAccount,
    TrackEventKind,
)
from .protocols import CreatorCampaignServiceError, TransitionGuard


class ExtendedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and datetime types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


def json_dumps(obj):
    """JSON dumps with Decimal and datetime support"""
    return json.dumps(obj, cls=ExtendedJSONEncoder)


def _json_value(value, default):
    """JSONB arrives as text from asyncpg unless a codec is set"""
    if value is None:
        return default
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except ValueError:
            return default
    return value


logger = logging.getLogger(__name__)


class CreatorCampaignRepository:
    """Creator campaign data repository - PostgreSQL (Async)"""

    # Columns a link transition may set besides status
    LINK_UPDATABLE_COLUMNS = frozenset({
        "thread_id",
        "last_note",
        "selected_package_id",
        "invited_at",
        "applied_at",
        "approved_at",
        "completed_at",
    })

    STAT_COLUMNS = {
        TrackEventKind.VIEW: "views",
        TrackEventKind.CLICK: "clicks",
        TrackEventKind.SAVE: "saves",
        TrackEventKind.ORDER: "orders",
    }

    def __init__(
        self,
        config: Optional[InfraConfig] = None,
        db: Optional[AsyncPostgresClient] = None,
    ):
        config = config or get_settings().infrastructure
        self.db = db or AsyncPostgresClient("creator_campaign_service", config=config)
        self.schema = config.postgres_schema

        # Table names
        self.campaigns_table = f"{self.schema}.campaigns"
        self.profiles_table = f"{self.schema}.creator_profiles"
        self.links_table = f"{self.schema}.campaign_creator_links"
        self.offerings_table = f"{self.schema}.service_offerings"
        self.orders_table = f"{self.schema}.orders"
        self.stats_table = f"{self.schema}.campaign_stats"

    async def initialize(self):
        """Initialize database connection"""
        await self.db.connect()
        logger.info("Creator campaign repository initialized with PostgreSQL")

    async def close(self):
        """Close database connection"""
        await self.db.close()
        logger.info("Creator campaign repository database connection closed")

    async def health_check(self) -> bool:
        """Check repository health"""
        return await self.db.health_check()

    # ====================
    # Campaigns
    # ====================

    async def save_campaign(self, campaign: Campaign) -> Campaign:
        """Insert or update a campaign"""
        try:
            now = datetime.now(timezone.utc)

            query = f'''
                INSERT INTO {self.campaigns_table} (
                    campaign_id, brand_id, name, description, objective,
                    platform, status, budget_type, content_types,
                    min_budget, max_budget, start_date, end_date,
                    requirements, created_at, updated_at
                ) VALUES (
                    $1, $2, $3, $4, $5, $6, $7, $8, $9::jsonb,
                    $10, $11, $12, $13, $14::jsonb, $15, $16
                )
                ON CONFLICT (campaign_id) DO UPDATE SET
                    name = EXCLUDED.name,
                    description = EXCLUDED.description,
                    objective = EXCLUDED.objective,
                    platform = EXCLUDED.platform,
                    status = EXCLUDED.status,
                    budget_type = EXCLUDED.budget_type,
                    content_types = EXCLUDED.content_types,
                    min_budget = EXCLUDED.min_budget,
                    max_budget = EXCLUDED.max_budget,
                    start_date = EXCLUDED.start_date,
                    end_date = EXCLUDED.end_date,
                    requirements = EXCLUDED.requirements,
                    updated_at = EXCLUDED.updated_at
                RETURNING *
            '''

            params = [
                campaign.campaign_id,
                campaign.brand_id,
                campaign.name,
                campaign.description,
                campaign.objective,
                campaign.platform,
                campaign.status.value,
                campaign.budget_type,
                json_dumps(campaign.content_types),
                campaign.min_budget,
                campaign.max_budget,
                campaign.start_date,
                campaign.end_date,
                json_dumps(campaign.requirements.model_dump()),
                campaign.created_at or now,
                now,
            ]

            async with self.db:
                result = await self.db.query_row(query, params=params)

            return self._row_to_campaign(result) if result else campaign

        except Exception as e:
            logger.error(f"Error saving campaign: {e}", exc_info=True)
            raise

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        """Get campaign by ID"""
        try:
            query = f'SELECT * FROM {self.campaigns_table} WHERE campaign_id = $1'

            async with self.db:
                result = await self.db.query_row(query, params=[campaign_id])

            return self._row_to_campaign(result) if result else None

        except Exception as e:
            logger.error(f"Error getting campaign {campaign_id}: {e}")
            raise

    async def get_campaign_for_brand(
        self, campaign_id: str, brand_id: str
    ) -> Optional[Campaign]:
        """Get campaign only if owned by the brand"""
        try:
            query = f'''
                SELECT * FROM {self.campaigns_table}
                WHERE campaign_id = $1 AND brand_id = $2
            '''

            async with self.db:
                result = await self.db.query_row(query, params=[campaign_id, brand_id])

            return self._row_to_campaign(result) if result else None

        except Exception as e:
            logger.error(f"Error getting campaign {campaign_id} for brand {brand_id}: {e}")
            raise

    async def list_campaigns_for_brand(self, brand_id: str) -> List[Campaign]:
        """List a brand's campaigns, newest first"""
        try:
            query = f'''
                SELECT * FROM {self.campaigns_table}
                WHERE brand_id = $1
                ORDER BY created_at DESC
            '''

            async with self.db:
                results = await self.db.query(query, params=[brand_id])

            return [self._row_to_campaign(r) for r in results]

        except Exception as e:
            logger.error(f"Error listing campaigns for brand {brand_id}: {e}")
            raise

    # ====================
    # Creator Profiles
    # ====================

    async def get_creator_profile(self, creator_id: str) -> Optional[CreatorProfile]:
        """Get creator profile"""
        try:
            query = f'SELECT * FROM {self.profiles_table} WHERE creator_id = $1'

            async with self.db:
                result = await self.db.query_row(query, params=[creator_id])

            return self._row_to_profile(result) if result else None

        except Exception as e:
            logger.error(f"Error getting creator profile {creator_id}: {e}")
            raise

    async def list_creator_profiles(self, limit: int = 200) -> List[CreatorProfile]:
        """Candidate pool for matching, in stable enumeration order"""
        try:
            query = f'''
                SELECT * FROM {self.profiles_table}
                ORDER BY created_at ASC, creator_id ASC
                LIMIT $1
            '''

            async with self.db:
                results = await self.db.query(query, params=[limit])

            return [self._row_to_profile(r) for r in results]

        except Exception as e:
            logger.error(f"Error listing creator profiles: {e}")
            raise

    # ====================
    # Links
    # ====================

    async def get_link(
        self, campaign_id: str, creator_id: str
    ) -> Optional[CampaignCreatorLink]:
        """Get link for a (campaign, creator) pair"""
        try:
            query = f'''
                SELECT * FROM {self.links_table}
                WHERE campaign_id = $1 AND creator_id = $2
            '''

            async with self.db:
                result = await self.db.query_row(query, params=[campaign_id, creator_id])

            return self._row_to_link(result) if result else None

        except Exception as e:
            logger.error(f"Error getting link {campaign_id}/{creator_id}: {e}")
            raise

    async def list_links(self, campaign_id: str) -> List[CampaignCreatorLink]:
        """All links of a campaign"""
        try:
            query = f'''
                SELECT * FROM {self.links_table}
                WHERE campaign_id = $1
                ORDER BY created_at ASC
            '''

            async with self.db:
                results = await self.db.query(query, params=[campaign_id])

            return [self._row_to_link(r) for r in results]

        except Exception as e:
            logger.error(f"Error listing links for campaign {campaign_id}: {e}")
            raise

    async def insert_link_if_absent(
        self, link: CampaignCreatorLink
    ) -> Tuple[CampaignCreatorLink, bool]:
        """Insert link unless the pair exists; returns (link, created)"""
        try:
            now = datetime.now(timezone.utc)

            query = f'''
                INSERT INTO {self.links_table} (
                    link_id, campaign_id, creator_id, status, thread_id,
                    last_note, selected_package_id, invited_at, applied_at,
                    approved_at, completed_at, created_at, updated_at
                ) VALUES (
                    $1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13
                )
                ON CONFLICT (campaign_id, creator_id) DO NOTHING
                RETURNING *
            '''

            params = [
                link.link_id,
                link.campaign_id,
                link.creator_id,
                link.status.value,
                link.thread_id,
                link.last_note,
                link.selected_package_id,
                link.invited_at,
                link.applied_at,
                link.approved_at,
                link.completed_at,
                link.created_at or now,
                now,
            ]

            async with self.db:
                result = await self.db.query_row(query, params=params)

            if result:
                return self._row_to_link(result), True

            existing = await self.get_link(link.campaign_id, link.creator_id)
            return existing, False

        except Exception as e:
            logger.error(f"Error inserting link {link.campaign_id}/{link.creator_id}: {e}", exc_info=True)
            raise

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
        Lock the link row, run the guard, update it and get-or-create the
        link's order, all in one transaction.

        The order insert relies on the UNIQUE (campaign_link_id) constraint,
        so concurrent approvals of the same link end with a single order.
        """
        unknown = set(updates) - self.LINK_UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update link columns: {sorted(unknown)}")

        try:
            now = datetime.now(timezone.utc)
            order = None

            async with self.db.transaction() as tx:
                row = await tx.query_row(
                    f'''
                    SELECT * FROM {self.links_table}
                    WHERE campaign_id = $1 AND creator_id = $2
                    FOR UPDATE
                    ''',
                    params=[campaign_id, creator_id],
                )
                if not row:
                    return None, None

                current = self._row_to_link(row)
                guard(current.status, to_status)

                if order_draft is not None:
                    await tx.execute(
                        f'''
                        INSERT INTO {self.orders_table} (
                            order_id, order_type, campaign_id, campaign_link_id,
                            buyer_id, seller_id, offering_id, total_price,
                            status, created_at, updated_at
                        ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $10)
                        ON CONFLICT (campaign_link_id) DO NOTHING
                        ''',
                        params=[
                            order_draft.order_id,
                            order_draft.order_type,
                            campaign_id,
                            current.link_id,
                            order_draft.buyer_id,
                            order_draft.seller_id,
                            order_draft.offering_id,
                            order_draft.total_price,
                            order_draft.status,
                            now,
                        ],
                    )
                    order_row = await tx.query_row(
                        f'SELECT * FROM {self.orders_table} WHERE campaign_link_id = $1',
                        params=[current.link_id],
                    )
                    order = self._row_to_order(order_row)
                    # An existing order keeps the link on the package it was placed for
                    updates = {**updates, "selected_package_id": order.offering_id}

                params: List[Any] = [to_status.value, now]
                set_clauses = ["status = $1", "updated_at = $2"]
                for column, value in updates.items():
                    params.append(value)
                    set_clauses.append(f"{column} = ${len(params)}")
                params.append(current.link_id)

                updated = await tx.query_row(
                    f'''
                    UPDATE {self.links_table}
                    SET {", ".join(set_clauses)}
                    WHERE link_id = ${len(params)}
                    RETURNING *
                    ''',
                    params=params,
                )

            return self._row_to_link(updated), order

        except CreatorCampaignServiceError:
            raise
        except Exception as e:
            logger.error(f"Error transitioning link {campaign_id}/{creator_id}: {e}", exc_info=True)
            raise

    # ====================
    # Offerings and Orders
    # ====================

    async def get_offering(self, offering_id: str) -> Optional[ServiceOffering]:
        """Get offering by ID"""
        try:
            query = f'SELECT * FROM {self.offerings_table} WHERE offering_id = $1'

            async with self.db:
                result = await self.db.query_row(query, params=[offering_id])

            return self._row_to_offering(result) if result else None

        except Exception as e:
            logger.error(f"Error getting offering {offering_id}: {e}")
            raise

    async def list_offerings_for_seller(self, seller_id: str) -> List[ServiceOffering]:
        """All offerings owned by a creator"""
        try:
            query = f'''
                SELECT * FROM {self.offerings_table}
                WHERE seller_id = $1
                ORDER BY created_at DESC
            '''

            async with self.db:
                results = await self.db.query(query, params=[seller_id])

            return [self._row_to_offering(r) for r in results]

        except Exception as e:
            logger.error(f"Error listing offerings for seller {seller_id}: {e}")
            raise

    async def list_orders_for_offerings(
        self, offering_ids: List[str]
    ) -> List[CampaignOrder]:
        """All historical orders for the given offerings"""
        if not offering_ids:
            return []

        try:
            query = f'''
                SELECT * FROM {self.orders_table}
                WHERE offering_id = ANY($1::varchar[])
            '''

            async with self.db:
                results = await self.db.query(query, params=[list(offering_ids)])

            return [self._row_to_order(r) for r in results]

        except Exception as e:
            logger.error(f"Error listing orders for offerings: {e}")
            raise

    async def list_campaign_orders(self, campaign_id: str) -> List[CampaignOrder]:
        """Campaign-typed orders of a campaign with seller and offering names"""
        try:
            query = f'''
                SELECT o.*, p.name AS seller_name, s.title AS offering_title
                FROM {self.orders_table} o
                LEFT JOIN {self.profiles_table} p ON p.creator_id = o.seller_id
                LEFT JOIN {self.offerings_table} s ON s.offering_id = o.offering_id
                WHERE o.campaign_id = $1 AND LOWER(o.order_type) = 'campaign'
                ORDER BY o.created_at DESC
            '''

            async with self.db:
                results = await self.db.query(query, params=[campaign_id])

            return [self._row_to_order(r) for r in results]

        except Exception as e:
            logger.error(f"Error listing orders for campaign {campaign_id}: {e}")
            raise

    # ====================
    # Engagement Stats
    # ====================

    async def increment_campaign_stat(
        self, campaign_id: str, kind: TrackEventKind
    ) -> CampaignStats:
        """Upsert-increment a counter"""
        column = self.STAT_COLUMNS[kind]
        try:
            query = f'''
                INSERT INTO {self.stats_table} (campaign_id, {column}, updated_at)
                VALUES ($1, 1, NOW())
                ON CONFLICT (campaign_id) DO UPDATE SET
                    {column} = {self.stats_table}.{column} + 1,
                    updated_at = NOW()
                RETURNING *
            '''

            async with self.db:
                result = await self.db.query_row(query, params=[campaign_id])

            return self._row_to_stats(result)

        except Exception as e:
            logger.error(f"Error tracking {kind.value} for campaign {campaign_id}: {e}")
            raise

    async def get_campaign_stats(self, campaign_id: str) -> CampaignStats:
        """Counters for a campaign (zeros if none yet)"""
        try:
            query = f'SELECT * FROM {self.stats_table} WHERE campaign_id = $1'

            async with self.db:
                result = await self.db.query_row(query, params=[campaign_id])

            return self._row_to_stats(result) if result else CampaignStats(campaign_id=campaign_id)

        except Exception as e:
            logger.error(f"Error getting stats for campaign {campaign_id}: {e}")
            raise

    # ====================
    # Row Converters
    # ====================

    def _row_to_campaign(self, row: Dict[str, Any]) -> Campaign:
        return Campaign(
            campaign_id=row["campaign_id"],
            brand_id=row["brand_id"],
            name=row["name"],
            description=row.get("description"),
            objective=row.get("objective") or "awareness",
            platform=row.get("platform") or "instagram",
            status=CampaignStatus(str(row.get("status") or "draft").lower()),
            budget_type=row.get("budget_type") or "fixed",
            content_types=_json_value(row.get("content_types"), []),
            min_budget=row.get("min_budget"),
            max_budget=row.get("max_budget"),
            start_date=row.get("start_date"),
            end_date=row.get("end_date"),
            requirements=CampaignRequirements(**_json_value(row.get("requirements"), {})),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def _row_to_profile(self, row: Dict[str, Any]) -> CreatorProfile:
        socials = [
            SocialAccount(**s) for s in _json_value(row.get("socials"), [])
            if isinstance(s, dict) and s.get("platform")
        ]
        return CreatorProfile(
            creator_id=row["creator_id"],
            name=row.get("name"),
            username=row.get("username"),
            image=row.get("image"),
            city=row.get("city"),
            district=row.get("district"),
            state=row.get("state"),
            gender=row.get("gender"),
            categories=_json_value(row.get("categories"), []),
            languages=_json_value(row.get("languages"), []),
            socials=socials,
            is_locked=bool(row.get("is_locked")),
        )

    def _row_to_link(self, row: Dict[str, Any]) -> CampaignCreatorLink:
        return CampaignCreatorLink(
            link_id=row["link_id"],
            campaign_id=row["campaign_id"],
            creator_id=row["creator_id"],
            status=LinkStatus(str(row["status"]).lower()),
            thread_id=row.get("thread_id"),
            last_note=row.get("last_note"),
            selected_package_id=row.get("selected_package_id"),
            invited_at=row.get("invited_at"),
            applied_at=row.get("applied_at"),
            approved_at=row.get("approved_at"),
            completed_at=row.get("completed_at"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def _row_to_offering(self, row: Dict[str, Any]) -> ServiceOffering:
        return ServiceOffering(
            offering_id=row["offering_id"],
            seller_id=row["seller_id"],
            title=row.get("title") or "",
            price=row.get("price") or Decimal("0"),
            is_active=bool(row.get("is_active", True)),
        )

    def _row_to_order(self, row: Dict[str, Any]) -> CampaignOrder:
        return CampaignOrder(
            order_id=row["order_id"],
            order_type=row.get("order_type") or "listing",
            campaign_id=row.get("campaign_id"),
            campaign_link_id=row.get("campaign_link_id"),
            buyer_id=row["buyer_id"],
            seller_id=row["seller_id"],
            offering_id=row.get("offering_id"),
            total_price=row.get("total_price") or Decimal("0"),
            status=row.get("status") or "pending",
            created_at=row.get("created_at"),
            seller_name=row.get("seller_name"),
            offering_title=row.get("offering_title"),
        )

    def _row_to_stats(self, row: Dict[str, Any]) -> CampaignStats:
        return CampaignStats(
            campaign_id=row["campaign_id"],
            views=row.get("views") or 0,
            clicks=row.get("clicks") or 0,
            saves=row.get("saves") or 0,
            orders=row.get("orders") or 0,
        )


__all__ = ["CreatorCampaignRepository", "json_dumps"]
