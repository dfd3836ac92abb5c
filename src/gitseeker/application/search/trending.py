"""
Trending Sampler - landing-page content without a user query.

Issues a hand-curated batch of short, shallow queries per source, ranks each
query's hits by relevance and keeps only the top few, then mixes everything
into one shuffled list so the landing view is not grouped by source.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass

from gitseeker.core.async_utils import gather_settled
from gitseeker.models import SourceType, UnifiedProject

from .aggregator import MultiSourceSearcher, resolve_sources
from .deduplication import dedupe_projects
from .relevance import rank_projects

logger = logging.getLogger(__name__)

DISPLAY_BUDGET = 60


@dataclass(frozen=True, slots=True)
class TrendingBatch:
    """Curated queries for one source and the per-query result cap."""

    queries: tuple[str, ...]
    per_query_cap: int


TRENDING_QUERIES: dict[SourceType, TrendingBatch] = {
    SourceType.GITHUB: TrendingBatch(
        queries=(
            "react",
            "vue",
            "nextjs",
            "typescript",
            "python",
            "rust",
            "go",
            "docker",
            "kubernetes",
            "vscode",
        ),
        per_query_cap=3,
    ),
    SourceType.HUGGINGFACE: TrendingBatch(
        queries=("llm", "text-generation", "image-generation", "transformers"),
        per_query_cap=3,
    ),
    SourceType.NPM: TrendingBatch(
        queries=("react", "vue", "express", "next", "typescript"),
        per_query_cap=2,
    ),
    SourceType.PYPI: TrendingBatch(
        queries=("django", "fastapi", "pandas", "numpy", "tensorflow"),
        per_query_cap=2,
    ),
    SourceType.GITLAB: TrendingBatch(
        queries=("ci-cd", "devops", "kubernetes"),
        per_query_cap=2,
    ),
}


class TrendingSampler:
    """
    Builds the trending set.

    Args:
        searcher: Provides the per-source clients
        rng: Random source for the shuffle (inject a seeded one in tests)
        display_budget: Maximum number of projects returned
    """

    def __init__(
        self,
        searcher: MultiSourceSearcher | None = None,
        rng: random.Random | None = None,
        display_budget: int = DISPLAY_BUDGET,
    ):
        self._searcher = searcher or MultiSourceSearcher()
        self._rng = rng or random.Random()
        self._display_budget = display_budget

    async def _sample_query(self, source: SourceType, query: str, cap: int) -> list[UnifiedProject]:
        result = await self._searcher.client_for(source).search(query, deep_search=False)
        return rank_projects(result.projects, query)[:cap]

    async def sample(self, sources: Iterable[SourceType | str] | None = None) -> list[UnifiedProject]:
        """
        Run the curated batch and return a shuffled, deduplicated selection.

        Every query runs concurrently in shallow mode. A failing query adds
        nothing; it never aborts the batch.
        """
        selected = resolve_sources(sources)
        jobs = [
            (source, query)
            for source in selected
            for query in TRENDING_QUERIES[source].queries
        ]

        outcomes = await gather_settled(
            *(self._sample_query(source, query, TRENDING_QUERIES[source].per_query_cap) for source, query in jobs)
        )

        collected: list[UnifiedProject] = []
        failures = 0
        for (source, query), outcome in zip(jobs, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                failures += 1
                logger.warning(f"Trending query {source.value}:{query!r} failed: {outcome}")
                continue
            collected.extend(outcome)

        unique = dedupe_projects(collected)
        self._rng.shuffle(unique)
        logger.info(
            f"Trending: {len(unique)} unique projects from {len(jobs)} queries "
            f"({failures} failed), showing {min(len(unique), self._display_budget)}"
        )
        return unique[: self._display_budget]


async def get_trending_projects(sources: Iterable[SourceType | str] | None = None) -> list[UnifiedProject]:
    """Trending set using the shared process-wide clients."""
    return await TrendingSampler().sample(sources)
