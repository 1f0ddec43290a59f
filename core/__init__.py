#!/usr/bin/env python3
"""
Core Module for Microservices Architecture

Shared infrastructure components for the creator campaign engine.

COMPONENTS:
    - config/: dataclass configuration loaded from the environment
    - logger.py: service logger setup
    - postgres_client.py: asyncpg-backed PostgreSQL client
    - nats_client.py: NATS event bus
    - service_client_base.py: base HTTP client for peer services
    - auth_dependencies.py: FastAPI identity dependencies

USAGE:
    from core.config import get_settings
    from core.logger import setup_service_logger

    settings = get_settings()
    logger = setup_service_logger("service_name")
"""

__version__ = "2.0.0"
