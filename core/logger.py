"""
Service Logger Setup

Configures the standard library logger for a microservice from LoggingConfig.

Usage:
    from core.logger import setup_service_logger

    logger = setup_service_logger("creator_campaign_service", level="INFO")
"""

import logging
import sys
from typing import Optional

from core.config import LoggingConfig, get_settings


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure root handlers once and return the named service logger.

    Args:
        service_name: Logger name, usually the service name
        level: Level override (defaults to LOG_LEVEL)
        config: Logging config (defaults to global settings)

    Returns:
        Configured logger
    """
    config = config or get_settings().logging
    log_level = (level or config.log_level or "INFO").upper()
    formatter = logging.Formatter(config.log_format)

    root = logging.getLogger()
    root.setLevel(log_level)

    # Only attach handlers once, uvicorn reload re-imports main
    if not getattr(root, "_service_handlers_installed", False):
        if config.enable_console:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(formatter)
            root.addHandler(console)

        if config.log_file:
            file_handler = logging.FileHandler(config.log_file)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

        root._service_handlers_installed = True

    logger = logging.getLogger(service_name)
    logger.setLevel(log_level)
    return logger


__all__ = ["setup_service_logger"]
