"""
Runtime settings for Kairos.

Values come from ``KAIROS_*`` environment variables:

    KAIROS_DATABASE_URL     SQLAlchemy URL (default: sqlite:///./kairos.db)
    KAIROS_DEV_MODE         "1" for console logs and auto-reload
    KAIROS_ENVIRONMENT      development | production
    KAIROS_HOST / KAIROS_PORT
    KAIROS_CORS_ORIGINS     comma-separated origins
    KAIROS_SELF_HOSTED      "true" lifts plan limits
    KAIROS_MAX_CONTEXTS_FREE
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from kairos.lib.exceptions import ConfigurationError


def _split_origins(raw: str) -> tuple[str, ...]:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read once at startup."""

    database_url: str = "sqlite:///./kairos.db"
    dev_mode: bool = False
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: tuple[str, ...] = field(default_factory=tuple)
    self_hosted: bool = False
    max_contexts_free: int = 3

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the environment, validating numeric fields."""
        try:
            port = int(os.getenv("KAIROS_PORT", "8000"))
            max_contexts_free = int(os.getenv("KAIROS_MAX_CONTEXTS_FREE", "3"))
        except ValueError as exc:
            raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc

        settings = cls(
            database_url=os.getenv("KAIROS_DATABASE_URL", "sqlite:///./kairos.db"),
            dev_mode=os.getenv("KAIROS_DEV_MODE", "0") == "1",
            environment=os.getenv("KAIROS_ENVIRONMENT", "development"),
            host=os.getenv("KAIROS_HOST", "0.0.0.0"),
            port=port,
            cors_origins=_split_origins(os.getenv("KAIROS_CORS_ORIGINS", "")),
            self_hosted=os.getenv("KAIROS_SELF_HOSTED", "false").lower() == "true",
            max_contexts_free=max_contexts_free,
        )

        if settings.is_production and "*" in settings.cors_origins:
            raise ConfigurationError(
                "KAIROS_CORS_ORIGINS contains wildcard '*' which is forbidden in production."
            )
        return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings.from_env()


__all__ = ["Settings", "get_settings"]
