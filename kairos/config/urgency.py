"""
Urgency scoring configuration for Kairos.

All coefficients live in one immutable record that is injected into the
scoring engine. Tests and experiments build alternate records with
``dataclasses.replace`` instead of patching module globals.

Reference values (the defaults below):
    priority   HIGH 1.0 / MEDIUM 0.65 / LOW 0.3, times 6.0
    age        2.0, saturating after 30 days
    due        12.0, ramping over the last 4 days, doubling by 7 days overdue
    project    1.0
    tags       "next" +15.0, "blocked" -5.0
    colors     high >= 14, medium >= 7
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from kairos.core.task_types import Priority
from kairos.lib.exceptions import ConfigurationError


def _default_priority_weights() -> Mapping[Priority, float]:
    return MappingProxyType({
        Priority.HIGH: 1.0,
        Priority.MEDIUM: 0.65,
        Priority.LOW: 0.3,
    })


@dataclass(frozen=True)
class UrgencyConfig:
    """Immutable set of urgency coefficients and color thresholds."""

    priority_coefficient: float = 6.0
    priority_weights: Mapping[Priority, float] = field(default_factory=_default_priority_weights)

    age_coefficient: float = 2.0
    age_horizon_days: int = 30

    due_coefficient: float = 12.0
    near_window_days: int = 4
    overdue_saturation_days: int = 7

    project_coefficient: float = 1.0

    next_tag: str = "next"
    next_tag_bonus: float = 15.0
    blocked_tag: str = "blocked"
    blocked_tag_penalty: float = -5.0

    high_threshold: float = 14.0
    medium_threshold: float = 7.0

    def validate(self) -> UrgencyConfig:
        """Raise ConfigurationError if the record cannot produce sane scores."""
        for name in ("age_horizon_days", "near_window_days", "overdue_saturation_days"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")
        missing = [p.value for p in Priority if p not in self.priority_weights]
        if missing:
            raise ConfigurationError(f"priority_weights missing {', '.join(missing)}")
        if self.medium_threshold > self.high_threshold:
            raise ConfigurationError(
                "medium_threshold must not exceed high_threshold "
                f"({self.medium_threshold} > {self.high_threshold})"
            )
        return self


DEFAULT_URGENCY_CONFIG = UrgencyConfig().validate()


__all__ = ["UrgencyConfig", "DEFAULT_URGENCY_CONFIG"]
