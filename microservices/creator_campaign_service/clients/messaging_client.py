"""
Messaging Service Client

Client for calling messaging_service to find/create brand-creator threads
and post campaign notifications into them.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from core.config import ServiceConfig, get_settings
from core.service_client_base import BaseServiceClient

logger = logging.getLogger(__name__)


class MessagingClient(BaseServiceClient):
    """Client for messaging_service"""

    service_name = "messaging_service"

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        config = config or get_settings().services
        super().__init__(
            base_url=config.messaging_service_url,
            timeout=config.request_timeout,
            transport=transport,
        )

    async def get_or_create_thread(self, participant_ids: List[str]) -> str:
        """
        Get the thread shared by the participants, creating it if missing.

        Args:
            participant_ids: User IDs of every participant

        Returns:
            Thread ID
        """
        try:
            response = await self.post(
                "/api/v1/threads/resolve",
                json={"participant_ids": participant_ids},
            )
            response.raise_for_status()
            return response.json()["thread_id"]

        except httpx.HTTPStatusError as e:
            logger.error(f"Error resolving thread: {e.response.text}")
            raise

        except Exception as e:
            logger.error(f"Error resolving thread: {e}")
            raise

    async def post_message(
        self,
        thread_id: str,
        sender_id: str,
        body: str,
        meta: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Append a message to a thread.

        Args:
            thread_id: Target thread
            sender_id: User ID the message is sent as
            body: Message text
            meta: Structured metadata (type, campaign_id, order_id...)

        Returns:
            Created message
        """
        try:
            response = await self.post(
                f"/api/v1/threads/{thread_id}/messages",
                json={
                    "sender_id": sender_id,
                    "body": body,
                    "meta": meta or {},
                },
            )
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            logger.error(f"Error posting message to thread {thread_id}: {e.response.text}")
            raise

        except Exception as e:
            logger.error(f"Error posting message to thread {thread_id}: {e}")
            raise


__all__ = ["MessagingClient"]
