"""
SourceClient - shared search contract for every registry adapter.

A source client turns one free-text query into one or more registry requests
and maps the raw items into UnifiedProject. The contract:

- search() never raises; any failure yields an empty SearchResult
- shallow mode issues exactly one upstream request
- deep mode issues several request variants sequentially, pausing between
  them, and merges them first-seen-wins by registry-native id
- a rate-limit response stops further requests for the current call but
  keeps what was already collected
- an item that fails to normalize is skipped, not the whole response
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Any

from gitseeker.application.search.deduplication import dedupe_by_key
from gitseeker.core.async_utils import sleep_between
from gitseeker.core.exceptions import RateLimitError
from gitseeker.models import SearchResult, SourceType, UnifiedProject

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RequestVariant:
    """One upstream request of a search strategy."""

    url: str
    params: dict[str, Any] = field(default_factory=dict)
    extract: Callable[[Any], list[Any]] | None = None

    def items(self, data: Any) -> list[Any]:
        if self.extract is not None:
            items = self.extract(data)
        else:
            items = data
        return items if isinstance(items, list) else []


class SourceClient(BaseAPIClient):
    """
    Base class for the five registry adapters.

    Subclasses set `source` and implement `_collect()` (raw items, already
    deduplicated), `_native_id()` and `_normalize()`.
    """

    source: SourceType

    async def search(self, query: str, deep_search: bool = True) -> SearchResult:
        """
        Search this registry.

        Args:
            query: Free-text query (non-empty after trimming)
            deep_search: Issue several request variants for better recall

        Returns:
            SearchResult for this source only; empty on any failure
        """
        query = (query or "").strip()
        if not query:
            return SearchResult.empty(self.source)

        try:
            raw_items = await self._collect(query, deep_search)
        except Exception as e:
            logger.exception(f"{self._service_name} search failed for {query!r}: {e}")
            return SearchResult.empty(self.source)

        projects: list[UnifiedProject] = []
        for item in raw_items:
            try:
                projects.append(self._normalize(item))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"{self._service_name}: skipping malformed item ({e})")

        logger.debug(f"{self._service_name}: {len(projects)} projects for {query!r} (deep={deep_search})")
        return SearchResult.of(self.source, projects)

    async def _collect(self, query: str, deep_search: bool) -> list[Any]:
        """Fetch raw registry items for a query."""
        raise NotImplementedError

    def _native_id(self, item: Any) -> Hashable:
        """Registry-native identity of a raw item."""
        raise NotImplementedError

    def _normalize(self, item: Any) -> UnifiedProject:
        """Map a raw registry item onto UnifiedProject."""
        raise NotImplementedError

    async def _run_variants(self, variants: list[RequestVariant]) -> list[Any]:
        """
        Issue request variants sequentially and merge their items.

        Later duplicates are dropped. A rate-limit response ends the loop
        and returns whatever was collected so far.
        """
        seen: set[Hashable] = set()
        collected: list[Any] = []
        for index, variant in enumerate(variants):
            if index > 0:
                await sleep_between(self._deep_search_delay)
            try:
                data = await self._make_request(variant.url, params=variant.params)
            except RateLimitError:
                logger.warning(f"{self._service_name}: stopping after {len(collected)} items (rate limited)")
                break
            if data is None:
                continue
            collected.extend(dedupe_by_key(variant.items(data), self._native_id, seen))
        return collected
