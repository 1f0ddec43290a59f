"""
PostgreSQL Client for Microservices

Async PostgreSQL access on top of an asyncpg connection pool.
Provides a consistent query/execute API and scoped transactions.

Usage:
    from core.postgres_client import AsyncPostgresClient

    db = AsyncPostgresClient("creator_campaign_service")

    # Execute queries
    async with db:
        rows = await db.query("SELECT * FROM t WHERE id = $1", params=[item_id])

    # Run several statements atomically
    async with db.transaction() as tx:
        row = await tx.query_row("SELECT ... FOR UPDATE", params=[item_id])
        await tx.execute("UPDATE ...", params=[...])
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import asyncpg

from core.config import InfraConfig, get_settings

logger = logging.getLogger(__name__)


class PostgresTransaction:
    """Query API bound to a single connection inside a transaction"""

    def __init__(self, connection: asyncpg.Connection):
        self._conn = connection

    async def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        rows = await self._conn.fetch(sql, *(params or []))
        return [dict(r) for r in rows]

    async def query_row(self, sql: str, params: Optional[List[Any]] = None) -> Optional[Dict[str, Any]]:
        row = await self._conn.fetchrow(sql, *(params or []))
        return dict(row) if row else None

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> str:
        return await self._conn.execute(sql, *(params or []))


class AsyncPostgresClient:
    """
    PostgreSQL client backed by an asyncpg pool.

    The pool is created lazily on first use and shared by every
    `async with client:` block until close() is called.
    """

    def __init__(
        self,
        service_name: str,
        config: Optional[InfraConfig] = None,
        dsn: Optional[str] = None,
    ):
        """
        Initialize PostgreSQL client.

        Args:
            service_name: Name of the service using this client
            config: Infrastructure config (defaults to global settings)
            dsn: Explicit DSN override
        """
        self.service_name = service_name
        self.config = config or get_settings().infrastructure
        self.dsn = dsn or self.config.postgres_dsn
        self._pool: Optional[asyncpg.Pool] = None

        logger.info(
            f"PostgreSQL client initialized for {service_name}: "
            f"{self.config.postgres_host}:{self.config.postgres_port}/{self.config.postgres_db}"
        )

    async def connect(self) -> None:
        """Create the connection pool if needed"""
        if self._pool is None:
            self._pool = await asyncpg.create_pool(
                dsn=self.dsn,
                min_size=self.config.postgres_min_pool,
                max_size=self.config.postgres_max_pool,
            )
            logger.info(f"PostgreSQL pool created for {self.service_name}")

    async def __aenter__(self):
        """Async context manager entry"""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Pool stays open between blocks"""
        return False

    async def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """Execute query and return results"""
        await self.connect()
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(sql, *(params or []))
        return [dict(r) for r in rows]

    async def query_row(self, sql: str, params: Optional[List[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute query and return single row"""
        await self.connect()
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(sql, *(params or []))
        return dict(row) if row else None

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> str:
        """Execute SQL statement"""
        await self.connect()
        async with self._pool.acquire() as conn:
            return await conn.execute(sql, *(params or []))

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[PostgresTransaction]:
        """Run statements on one connection, committed together or rolled back"""
        await self.connect()
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                yield PostgresTransaction(conn)

    async def health_check(self) -> bool:
        """Check database health"""
        try:
            row = await self.query_row("SELECT 1 AS healthy")
            return row is not None
        except Exception as e:
            logger.error(f"PostgreSQL health check failed: {e}")
            return False

    async def close(self):
        """Close the pool"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info(f"PostgreSQL pool closed for {self.service_name}")


__all__ = ["AsyncPostgresClient", "PostgresTransaction"]
