"""
FastAPI Authentication Dependencies for Microservices

The gateway authenticates the caller and forwards the identity as
X-User-ID / X-User-Role headers. Services only read those headers.
"""

from fastapi import Header, HTTPException, status
from pydantic import BaseModel
from typing import Dict, Optional
import logging
import os

logger = logging.getLogger(__name__)

# Internal service authentication
INTERNAL_SERVICE_SECRET = os.getenv(
    "INTERNAL_SERVICE_SECRET",
    "dev-internal-secret-change-in-production"
)
INTERNAL_SERVICE_HEADER = "X-Internal-Service"
INTERNAL_SERVICE_SECRET_HEADER = "X-Internal-Service-Secret"


class AuthContext(BaseModel):
    """Authenticated caller identity"""
    user_id: str
    role: str = "user"

    @property
    def is_brand(self) -> bool:
        return self.role.lower() == "brand"

    @property
    def is_creator(self) -> bool:
        return self.role.lower() in ("creator", "influencer")


def internal_service_headers() -> Dict[str, str]:
    """Headers a service sends when calling a peer service"""
    return {
        INTERNAL_SERVICE_HEADER: "true",
        INTERNAL_SERVICE_SECRET_HEADER: INTERNAL_SERVICE_SECRET,
    }


async def require_auth_context(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
) -> AuthContext:
    """
    Authentication dependency: the caller must carry a user identity.

    Raises:
        HTTPException 401: no identity header present
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User authentication required"
        )

    return AuthContext(user_id=x_user_id, role=x_user_role or "user")


async def optional_auth_context(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
) -> Optional[AuthContext]:
    """Optional authentication: anonymous callers get None"""
    if not x_user_id:
        return None
    return AuthContext(user_id=x_user_id, role=x_user_role or "user")


__all__ = [
    "AuthContext",
    "internal_service_headers",
    "require_auth_context",
    "optional_auth_context",
]
