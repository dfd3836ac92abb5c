"""
GitSeeker - Multi-Source Project Search

Searches GitHub, Hugging Face, GitLab, npm and PyPI concurrently, normalizes
every hit into one UnifiedProject shape and ranks the merged list by
relevance.

Usage:
    import asyncio
    from gitseeker import MultiSourceSearcher

    async def main():
        searcher = MultiSourceSearcher()
        for project in (await searcher.search("react", {"github", "npm"}))[:10]:
            print(f"{project.source.value:12} {project.full_name} ({project.stars})")

    asyncio.run(main())

Features:
    - Concurrent fan-out with per-source failure isolation
    - Deep search with several request variants per source
    - Additive multi-signal relevance ranking
    - Trending sampler for query-less browsing
    - README-grounded AI analysis over local or hosted chat models
"""

from .application.analysis import ProjectAnalyzer
from .application.search import (
    MultiSourceSearcher,
    TrendingSampler,
    calculate_relevance_score,
    explain_score,
    get_trending_projects,
    rank_projects,
    search_all_sources,
)
from .core import GitSeekerError, configure, configure_logging, get_config
from .models import ProjectAuthor, SearchResult, SourceType, UnifiedProject, get_source_config

__version__ = "0.1.0"

__all__ = [
    # Search
    "MultiSourceSearcher",
    "TrendingSampler",
    "calculate_relevance_score",
    "explain_score",
    "get_trending_projects",
    "rank_projects",
    "search_all_sources",
    # Analysis
    "ProjectAnalyzer",
    # Models
    "ProjectAuthor",
    "SearchResult",
    "SourceType",
    "UnifiedProject",
    "get_source_config",
    # Core
    "GitSeekerError",
    "configure",
    "configure_logging",
    "get_config",
]
