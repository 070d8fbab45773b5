"""
HPMA — Engine Configuration

Loads runtime configuration from environment variables (and an optional .env
file) using Pydantic Settings.  Only operational knobs live here; the scoring
contract (midpoint, SD, softmax temperature, roster thresholds) is defined as
class-level constants on the services and is not configurable.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGED_CONTENT_DIR = Path(__file__).resolve().parent / "content"


class Settings(BaseSettings):
    """Central configuration for the HPMA scoring engine."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HPMA_",
        extra="ignore",
    )

    # ------------------------------------------------------------------ #
    # Runtime environment
    # ------------------------------------------------------------------ #
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # ------------------------------------------------------------------ #
    # Field-guide content bundle
    # ------------------------------------------------------------------ #
    CONTENT_DIR: str = ""  # empty -> packaged hpma/content
    REPORT_VERSION: str = "HPMA-Report-1.0"

    # ------------------------------------------------------------------ #
    # Validity handling
    # ------------------------------------------------------------------ #
    FAULT_ON_INVALID_RESPONSES: bool = False

    # ------------------------------------------------------------------ #
    # Derived helpers
    # ------------------------------------------------------------------ #
    @property
    def content_path(self) -> Path:
        """Directory holding the JSON content bundle."""
        return Path(self.CONTENT_DIR) if self.CONTENT_DIR else PACKAGED_CONTENT_DIR

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.LOG_LEVEL)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @field_validator("LOG_LEVEL")
    @classmethod
    def _log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level {v!r}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached, validated ``Settings`` instance.

    The environment is read once per process::

        from hpma.config import get_settings
        settings = get_settings()
    """
    return Settings()
