"""
Multi-Source Search

Key Components:
- MultiSourceSearcher: Concurrent fan-out to the selected registries
- Relevance scorer: Additive multi-signal ranking
- TrendingSampler: Curated shallow queries for the landing view

Architecture:
    User Query
        │
        ▼
    ┌─────────────────────┐
    │ MultiSourceSearcher │  ← Validates query and source selection
    └──────────┬──────────┘
               │
    ┌──────┬───┴───┬──────┬──────┐
    ▼      ▼       ▼      ▼      ▼
  GitHub  HF    GitLab   npm   PyPI   ← Concurrent, failures isolated
    │      │       │      │      │
    └──────┴───┬───┴──────┴──────┘
               │
               ▼
    ┌─────────────────────┐
    │   rank_projects()   │  ← Stable descending sort by relevance
    └──────────┬──────────┘
               │
               ▼
    UnifiedProject[]
"""

from __future__ import annotations

from .aggregator import ALL_SOURCES, MultiSourceSearcher, resolve_sources, search_all_sources
from .deduplication import dedupe_by_key, dedupe_projects
from .relevance import (
    SIGNALS,
    QueryTerms,
    calculate_relevance_score,
    explain_score,
    name_segments,
    rank_projects,
)
from .trending import DISPLAY_BUDGET, TRENDING_QUERIES, TrendingBatch, TrendingSampler, get_trending_projects

__all__ = [
    # Aggregation
    "ALL_SOURCES",
    "MultiSourceSearcher",
    "resolve_sources",
    "search_all_sources",
    # Deduplication
    "dedupe_by_key",
    "dedupe_projects",
    # Relevance
    "SIGNALS",
    "QueryTerms",
    "calculate_relevance_score",
    "explain_score",
    "name_segments",
    "rank_projects",
    # Trending
    "DISPLAY_BUDGET",
    "TRENDING_QUERIES",
    "TrendingBatch",
    "TrendingSampler",
    "get_trending_projects",
]
