"""Logging settings consumed by core.logger.setup_service_logger"""
import os
from dataclasses import dataclass

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass
class LoggingConfig:
    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT
    log_file: str = ""
    enable_console: bool = True

    @classmethod
    def from_env(cls) -> 'LoggingConfig':
        """LOG_LEVEL falls back to DEBUG in development and INFO elsewhere"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        level = os.getenv("LOG_LEVEL", "DEBUG" if env == "development" else "INFO").upper()
        # Unknown names would make logging.setLevel raise at startup
        if level not in LOG_LEVELS:
            level = "INFO"
        return cls(
            log_level=level,
            log_format=os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT),
            log_file=os.getenv("LOG_FILE", ""),
            enable_console=os.getenv("LOG_CONSOLE", "true").lower() == "true",
        )
