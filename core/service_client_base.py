"""
Base Service Client for Internal Microservice Communication

Base class for HTTP clients of peer services. Handles the base URL,
internal service authentication headers, the shared httpx client and timeouts.
"""

import httpx
import logging
from typing import Optional, Dict, Any
from abc import ABC

from core.auth_dependencies import internal_service_headers

logger = logging.getLogger(__name__)


class BaseServiceClient(ABC):
    """
    Base class for peer service clients.

    Example:
        class MessagingClient(BaseServiceClient):
            service_name = "messaging_service"

            async def get_thread(self, thread_id: str):
                response = await self.get(f"/api/v1/threads/{thread_id}")
                return response.json()
    """

    # Subclasses define these
    service_name: str = None
    default_url: str = "http://localhost:8000"

    def __init__(
        self,
        base_url: Optional[str] = None,
        use_internal_auth: bool = True,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize service client.

        Args:
            base_url: Service base URL (defaults to default_url)
            use_internal_auth: Send internal service auth headers
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if not self.service_name:
            raise ValueError(f"{self.__class__.__name__} must define 'service_name'")

        self.base_url = (base_url or self.default_url).rstrip('/')

        default_headers = self._build_default_headers(use_internal_auth)

        self.client = httpx.AsyncClient(
            timeout=timeout,
            headers=default_headers,
            transport=transport,
        )

        logger.debug(
            f"Initialized {self.service_name} client: {self.base_url} "
            f"(internal_auth={'enabled' if use_internal_auth else 'disabled'})"
        )

    def _build_default_headers(self, use_internal_auth: bool) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": f"creator-campaign-engine/{self.service_name}"
        }

        if use_internal_auth:
            headers.update(internal_service_headers())

        return headers

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()
        logger.debug(f"Closed {self.service_name} client")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ========================================
    # HTTP helpers
    # ========================================

    async def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        return await self.client.get(url, params=params, headers=headers)

    async def post(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        return await self.client.post(url, json=json, headers=headers)

    async def health_check(self) -> bool:
        """Check whether the peer service answers /health"""
        try:
            response = await self.get("/health")
            return response.status_code == 200
        except Exception as e:
            logger.warning(f"{self.service_name} health check failed: {e}")
            return False


__all__ = ["BaseServiceClient"]
