"""
MultiSourceSearcher - Concurrent Fan-Out Across Registries

Fans one query out to the selected source clients, waits for all of them
(never fail-fast), flattens the per-source lists and ranks the result.

    query ──► validate ──► ┌ GitHub ┐
                           │ HF     │  concurrent, failures isolated
                           │ GitLab │
                           │ npm    │
                           └ PyPI   ┘
                               │
                               ▼
                     flatten (source order) ──► rank_projects()

There is no cross-source deduplication: the same library published on
GitHub and npm appears twice, once per source.

Example:
    >>> searcher = MultiSourceSearcher()
    >>> projects = await searcher.search("vector database", {"github", "pypi"})
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING

from gitseeker.core.async_utils import gather_settled
from gitseeker.core.exceptions import InvalidParameterError, InvalidQueryError
from gitseeker.infrastructure.sources import get_source_client
from gitseeker.models import SearchResult, SourceType, UnifiedProject

from .relevance import rank_projects

if TYPE_CHECKING:
    from gitseeker.infrastructure.sources.source_client import SourceClient

logger = logging.getLogger(__name__)

ALL_SOURCES: tuple[SourceType, ...] = tuple(SourceType)


def resolve_sources(sources: Iterable[SourceType | str] | None) -> list[SourceType]:
    """
    Validate a source selection and return it in canonical order.

    None selects every source. An empty selection or an unknown name raises
    InvalidParameterError.
    """
    if sources is None:
        return list(ALL_SOURCES)
    if isinstance(sources, (str, SourceType)):
        sources = [sources]

    selected: set[SourceType] = set()
    for source in sources:
        try:
            selected.add(SourceType.parse(source))
        except ValueError:
            raise InvalidParameterError(
                "sources",
                source,
                f"one of {', '.join(s.value for s in ALL_SOURCES)}",
            ) from None
    if not selected:
        raise InvalidParameterError("sources", [], "at least one source")
    return [s for s in ALL_SOURCES if s in selected]


class MultiSourceSearcher:
    """
    Aggregation controller over the registry clients.

    Args:
        clients: Optional source -> client mapping. Sources missing from it
            fall back to the shared process-wide clients.
    """

    def __init__(self, clients: Mapping[SourceType, SourceClient] | None = None):
        self._clients = dict(clients or {})

    def client_for(self, source: SourceType) -> SourceClient:
        client = self._clients.get(source)
        if client is None:
            client = get_source_client(source)
        return client

    async def search_sources(
        self,
        query: str,
        sources: Iterable[SourceType | str] | None = None,
        deep_search: bool = True,
    ) -> dict[SourceType, SearchResult]:
        """
        Run the selected sources concurrently and return their raw results.

        A source whose client raises contributes an empty SearchResult.
        """
        query = _validate_query(query)
        selected = resolve_sources(sources)

        outcomes = await gather_settled(
            *(self.client_for(source).search(query, deep_search=deep_search) for source in selected)
        )

        results: dict[SourceType, SearchResult] = {}
        for source, outcome in zip(selected, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning(f"Source {source.value} failed for {query!r}: {outcome}")
                results[source] = SearchResult.empty(source)
            else:
                results[source] = outcome
        return results

    async def search(
        self,
        query: str,
        sources: Iterable[SourceType | str] | None = None,
        deep_search: bool = True,
        now: datetime | None = None,
    ) -> list[UnifiedProject]:
        """
        Search the selected sources and return one ranked list.

        Args:
            query: Free-text query, must be non-blank
            sources: Selected sources (default: all five)
            deep_search: Let each client issue several request variants
            now: Clock used for the recency signal (default: current time)

        Returns:
            Projects from every source, sorted by descending relevance

        Raises:
            InvalidQueryError: Blank query
            InvalidParameterError: Empty or unknown source selection
        """
        results = await self.search_sources(query, sources, deep_search=deep_search)

        merged: list[UnifiedProject] = []
        for result in results.values():
            merged.extend(result.projects)

        counts = ", ".join(f"{source.value}={len(result.projects)}" for source, result in results.items())
        logger.info(f"Search {query!r}: {len(merged)} projects ({counts})")

        return rank_projects(merged, query, now=now)


def _validate_query(query: str) -> str:
    stripped = (query or "").strip()
    if not stripped:
        raise InvalidQueryError(query or "")
    return stripped


async def search_all_sources(
    query: str,
    sources: Iterable[SourceType | str] | None = None,
    deep_search: bool = True,
) -> list[UnifiedProject]:
    """Search with the shared process-wide clients."""
    return await MultiSourceSearcher().search(query, sources, deep_search=deep_search)
