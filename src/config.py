"""Configuration for the payments ledger."""

import os
from dataclasses import dataclass
from typing import Optional

from errors import ConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("standard", "json")
DEFAULT_LOG_FILE = "transaction-processor-logs.log"


@dataclass
class EngineConfig:
    """Runtime configuration of a ledger replay."""

    num_workers: int = 4
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from environment variables."""
        workers = os.getenv("PAYMENTS_WORKERS", "4")
        try:
            num_workers = int(workers)
        except ValueError:
            raise ConfigurationError(f"PAYMENTS_WORKERS must be an integer, got {workers!r}") from None

        config = cls(
            num_workers=num_workers,
            log_level=os.getenv("PAYMENTS_LOG_LEVEL", "INFO"),
            log_file=os.getenv("PAYMENTS_LOG_FILE") or None,
            log_format=os.getenv("PAYMENTS_LOG_FORMAT", "standard"),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Raise ConfigurationError if any value is out of range."""
        if self.num_workers < 1:
            raise ConfigurationError(f"num_workers must be at least 1, got {self.num_workers}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"unknown log level {self.log_level!r}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(f"unknown log format {self.log_format!r}")
