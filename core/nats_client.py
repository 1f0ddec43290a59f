"""
NATS Client for Python Microservices

Provides event-driven communication between services on top of nats-py.
Events are JSON envelopes published on a subject equal to the event type.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union

import nats
from nats.aio.client import Client as NATSClient

from core.config import InfraConfig, get_settings


class DecimalEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles Decimal and datetime types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


logger = logging.getLogger(__name__)


class Event:
    """Event model"""

    def __init__(
        self,
        event_type: Union[str, Enum],
        source: str,
        data: Dict[str, Any],
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        self.id = str(uuid.uuid4())
        self.type = event_type.value if isinstance(event_type, Enum) else event_type
        self.source = source
        self.data = data
        self.subject = subject
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.metadata = metadata or {}
        self.version = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "subject": self.subject,
            "timestamp": self.timestamp,
            "data": self.data,
            "metadata": self.metadata,
            "version": self.version,
        }


class NATSEventBus:
    """NATS event bus using the nats-py asyncio client."""

    def __init__(
        self,
        service_name: str,
        config: Optional[InfraConfig] = None,
    ):
        """
        Initialize NATS Event Bus.

        Args:
            service_name: Name of the service (used as connection name)
            config: Optional infrastructure config
        """
        self.service_name = service_name
        self.config = config or get_settings().infrastructure
        self.server = self.config.nats_server

        self._client: Optional[NATSClient] = None
        self._is_connected = False

        logger.info(f"NATS EventBus initialized: {self.server}")

    async def connect(self):
        """Connect to the NATS server"""
        try:
            self._client = await nats.connect(
                servers=[self.server],
                name=self.service_name,
            )
            self._is_connected = True
            logger.info(f"Connected to NATS as {self.service_name}")
        except Exception as e:
            logger.error(f"Failed to connect to NATS: {e}")
            raise

    async def publish_event(self, event: Event) -> bool:
        """
        Publish an event to NATS.

        The subject is the event type (e.g. "campaign_link.approved").
        Returns False instead of raising when the bus is unavailable.
        """
        if not self._is_connected or not self._client:
            logger.error("Not connected to NATS")
            return False

        try:
            subject = event.subject or event.type
            data = json.dumps(event.to_dict(), cls=DecimalEncoder).encode()
            await self._client.publish(subject, data)
            logger.info(f"Published event {event.type} [{event.id}]")
            return True

        except Exception as e:
            logger.error(f"Error publishing event {event.id}: {e}")
            return False

    async def close(self):
        """Drain and close the NATS connection"""
        if self._client:
            await self._client.drain()
            self._client = None

        self._is_connected = False
        logger.info("Disconnected from NATS")

    @property
    def is_connected(self) -> bool:
        """Check if connected to NATS"""
        return self._is_connected


__all__ = ["Event", "NATSEventBus", "DecimalEncoder"]
