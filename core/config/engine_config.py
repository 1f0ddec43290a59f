#!/usr/bin/env python3
"""Creator campaign engine main configuration

Combines all sub-configs for the creator campaign service.
"""
import os
from dataclasses import dataclass, field

from .infra_config import InfraConfig
from .logging_config import LoggingConfig
from .matching_config import MatchingConfig
from .service_config import ServiceConfig


def _bool(val: str) -> bool:
    return val.lower() == "true"


@dataclass
class EngineConfig:
    """Main configuration for the creator campaign engine"""

    environment: str = "development"
    debug: bool = False

    infrastructure: InfraConfig = field(default_factory=InfraConfig)
    services: ServiceConfig = field(default_factory=ServiceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> 'EngineConfig':
        """Load complete configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            environment=env,
            debug=_bool(os.getenv("DEBUG", "false")),
            infrastructure=InfraConfig.from_env(),
            services=ServiceConfig.from_env(),
            logging=LoggingConfig.from_env(),
            matching=MatchingConfig.from_env(),
        )
