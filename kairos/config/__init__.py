"""Configuration for Kairos: urgency constants and runtime settings."""

from kairos.config.settings import Settings, get_settings
from kairos.config.urgency import DEFAULT_URGENCY_CONFIG, UrgencyConfig

__all__ = ["UrgencyConfig", "DEFAULT_URGENCY_CONFIG", "Settings", "get_settings"]
