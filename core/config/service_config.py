#!/usr/bin/env python3
"""Service configuration for peer services

Endpoints of the collaborators the engine calls over HTTP
(messaging threads).
"""
import os
from dataclasses import dataclass

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class ServiceConfig:
    """Peer service endpoints"""

    # ===========================================
    # This service
    # ===========================================
    service_name: str = "creator_campaign_service"
    service_host: str = "0.0.0.0"
    service_port: int = 8260

    # ===========================================
    # Peer services
    # ===========================================
    messaging_service_url: str = "http://localhost:8261"
    request_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> 'ServiceConfig':
        """Load service configuration from environment variables"""
        return cls(
            service_name=os.getenv("SERVICE_NAME", "creator_campaign_service"),
            service_host=os.getenv("SERVICE_HOST", "0.0.0.0"),
            service_port=_int(os.getenv("SERVICE_PORT", "8260"), 8260),
            messaging_service_url=os.getenv("MESSAGING_SERVICE_URL", "http://localhost:8261"),
            request_timeout=_float(os.getenv("SERVICE_REQUEST_TIMEOUT", "30"), 30.0),
        )
