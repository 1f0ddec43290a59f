"""
Creator Campaign Service Factory

Factory for creating creator campaign service instances with proper dependency injection.
"""

import logging
from typing import Optional

from core.config import EngineConfig, get_settings
from core.nats_client import NATSEventBus

from .clients.messaging_client import MessagingClient
from .creator_campaign_repository import CreatorCampaignRepository
from .creator_campaign_service import CreatorCampaignService

logger = logging.getLogger(__name__)


class CreatorCampaignServiceFactory:
    """Factory for creating creator campaign service components"""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or get_settings()
        self._repository: Optional[CreatorCampaignRepository] = None
        self._service: Optional[CreatorCampaignService] = None
        self._nats_client: Optional[NATSEventBus] = None
        self._messaging_client: Optional[MessagingClient] = None

    async def initialize(self) -> None:
        """Initialize all components"""
        logger.info("Initializing Creator Campaign Service components...")

        # Initialize repository
        self._repository = CreatorCampaignRepository(self.config.infrastructure)
        await self._repository.initialize()

        # Initialize NATS client
        if self.config.infrastructure.nats_enabled:
            try:
                self._nats_client = NATSEventBus(
                    service_name="creator_campaign_service",
                    config=self.config.infrastructure,
                )
                await self._nats_client.connect()
                logger.info("NATS client connected")
            except Exception as e:
                logger.warning(f"NATS client initialization failed: {e}")
                self._nats_client = None
        else:
            logger.info("NATS disabled, events will not be published")

        # Initialize service clients
        self._messaging_client = MessagingClient(self.config.services)

        # Initialize main service
        self._service = CreatorCampaignService(
            repository=self._repository,
            messaging_client=self._messaging_client,
            event_bus=self._nats_client,
            config=self.config.matching,
        )

        logger.info("Creator Campaign Service components initialized")

    async def close(self) -> None:
        """Close all components"""
        logger.info("Closing Creator Campaign Service components...")

        if self._messaging_client:
            await self._messaging_client.close()

        if self._nats_client:
            await self._nats_client.close()

        if self._repository:
            await self._repository.close()

        logger.info("Creator Campaign Service components closed")

    @property
    def repository(self) -> CreatorCampaignRepository:
        """Get creator campaign repository"""
        if not self._repository:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._repository

    @property
    def service(self) -> CreatorCampaignService:
        """Get creator campaign service"""
        if not self._service:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._service

    @property
    def nats_client(self) -> Optional[NATSEventBus]:
        """Get NATS client"""
        return self._nats_client

    @property
    def messaging_client(self) -> MessagingClient:
        """Get messaging client"""
        if not self._messaging_client:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._messaging_client


__all__ = ["CreatorCampaignServiceFactory"]
