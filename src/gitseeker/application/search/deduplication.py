"""
First-seen-wins deduplication.

Source clients call this on raw registry items before normalization, keyed by
the registry-native identifier; the trending sampler calls it on normalized
projects keyed by `UnifiedProject.id`. Order is preserved and no fields are
merged across duplicates.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from gitseeker.models import UnifiedProject

T = TypeVar("T")


def dedupe_by_key(
    items: Iterable[T],
    key: Callable[[T], Hashable],
    seen: set[Hashable] | None = None,
) -> list[T]:
    """
    Drop items whose key was already seen, keeping the first occurrence.

    Items whose key function raises or returns None are skipped. Pass a
    shared `seen` set to deduplicate across several batches.
    """
    seen = set() if seen is None else seen
    unique: list[T] = []
    for item in items:
        try:
            item_key = key(item)
        except (KeyError, TypeError, AttributeError):
            continue
        if item_key is None or item_key in seen:
            continue
        seen.add(item_key)
        unique.append(item)
    return unique


def dedupe_projects(projects: Iterable[UnifiedProject]) -> list[UnifiedProject]:
    """Deduplicate normalized projects by their unified id."""
    return dedupe_by_key(projects, lambda p: p.id)
