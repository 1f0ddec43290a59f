#!/usr/bin/env python3
"""Modular configuration system for the creator campaign engine

Configuration hierarchy:
- infra_config: PostgreSQL and NATS endpoints
- service_config: this service's port and peer service URLs
- logging_config: Logging configuration
- matching_config: scoring weights and caps
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .infra_config import InfraConfig
from .service_config import ServiceConfig
from .matching_config import MatchingConfig
from .engine_config import EngineConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = EngineConfig.from_env()

def get_settings() -> EngineConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> EngineConfig:
    """Reload settings from environment"""
    global settings
    settings = EngineConfig.from_env()
    return settings

__all__ = [
    # Main config
    'EngineConfig',
    'get_settings',
    'reload_settings',
    'settings',
    # Sub-configs
    'LoggingConfig',
    'InfraConfig',
    'ServiceConfig',
    'MatchingConfig',
]
