"""Tag parsing helpers for the task form and the scoring engine."""

from __future__ import annotations

from collections.abc import Iterable


def parse_tags(tags_string: str | None) -> list[str]:
    """
    Split a comma-separated tag string into a clean list.

    Tags are stored lowercase. Whitespace around each tag is stripped,
    empty entries are dropped and duplicates keep their first position.

    Example:
        >>> parse_tags("  Next , home,, NEXT")
        ['next', 'home']
    """
    if not tags_string or not tags_string.strip():
        return []

    tags: list[str] = []
    seen: set[str] = set()
    for raw in tags_string.split(","):
        tag = raw.strip().lower()
        if not tag or tag in seen:
            continue
        seen.add(tag)
        tags.append(tag)
    return tags


def format_tags_for_input(tags: Iterable[str]) -> str:
    """Join tags back into the form field representation."""
    return ", ".join(tags)


def normalize_tags(tags: Iterable[str] | None) -> frozenset[str]:
    """Lowercased tag set used for case-insensitive matching."""
    if not tags:
        return frozenset()
    return frozenset(tag.strip().lower() for tag in tags if tag and tag.strip())


__all__ = ["parse_tags", "format_tags_for_input", "normalize_tags"]
