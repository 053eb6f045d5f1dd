"""
Lib package for Kairos.

Contains shared utilities:
- dates.py: Local calendar-day arithmetic
- tags.py: Tag parsing and normalization
- exceptions.py: Exception hierarchy
- errors.py: Error codes and response builder
- logging.py: structlog configuration
"""

from kairos.lib.dates import add_days, diff_in_calendar_days, end_of_day, start_of_day
from kairos.lib.exceptions import (
    ConfigurationError,
    KairosException,
    LimitReachedError,
    NotFoundError,
    StateError,
    UnknownTaskTypeError,
    ValidationError,
)
from kairos.lib.tags import format_tags_for_input, normalize_tags, parse_tags

__all__ = [
    # Dates
    "start_of_day",
    "end_of_day",
    "add_days",
    "diff_in_calendar_days",
    # Tags
    "parse_tags",
    "format_tags_for_input",
    "normalize_tags",
    # Exceptions
    "KairosException",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "StateError",
    "UnknownTaskTypeError",
    "LimitReachedError",
]
