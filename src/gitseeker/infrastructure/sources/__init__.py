"""
Registry Source Clients

One client per registry, all sharing the SourceClient search contract:

    ┌──────────────────────────────────────────────────────────┐
    │                  MultiSourceSearcher                      │
    │  ┌────────┬─────────────┬────────┬────────┬────────────┐  │
    │  │ GitHub │ HuggingFace │ GitLab │  npm   │    PyPI    │  │
    │  │ search │ models/data │ search │ search │ name lookup│  │
    │  └────────┴─────────────┴────────┴────────┴────────────┘  │
    └──────────────────────────────────────────────────────────┘

Clients are created lazily and cached per process.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gitseeker.models import SourceType

if TYPE_CHECKING:
    from .readme import ReadmeFetcher
    from .source_client import SourceClient

logger = logging.getLogger(__name__)

_source_clients: dict[SourceType, SourceClient] = {}
_readme_fetcher: ReadmeFetcher | None = None


def create_source_client(source: SourceType | str) -> SourceClient:
    """Create a new client for a source."""
    source = SourceType.parse(source)
    if source == SourceType.GITHUB:
        from .github import GitHubClient

        return GitHubClient()
    if source == SourceType.HUGGINGFACE:
        from .huggingface import HuggingFaceClient

        return HuggingFaceClient()
    if source == SourceType.GITLAB:
        from .gitlab import GitLabClient

        return GitLabClient()
    if source == SourceType.NPM:
        from .npm import NpmClient

        return NpmClient()
    from .pypi import PyPIClient

    return PyPIClient()


def get_source_client(source: SourceType | str) -> SourceClient:
    """Get or create the shared client for a source (lazy initialization)."""
    source = SourceType.parse(source)
    if source not in _source_clients:
        _source_clients[source] = create_source_client(source)
    return _source_clients[source]


def get_readme_fetcher() -> ReadmeFetcher:
    """Get or create the shared README fetcher."""
    global _readme_fetcher
    if _readme_fetcher is None:
        from .readme import ReadmeFetcher

        _readme_fetcher = ReadmeFetcher()
    return _readme_fetcher


async def close_source_clients() -> None:
    """Close every cached client and forget it."""
    global _readme_fetcher
    clients = list(_source_clients.values())
    _source_clients.clear()
    if _readme_fetcher is not None:
        clients.append(_readme_fetcher)
        _readme_fetcher = None
    for client in clients:
        await client.close()
    logger.debug(f"Closed {len(clients)} source clients")


__all__ = [
    "close_source_clients",
    "create_source_client",
    "get_readme_fetcher",
    "get_source_client",
]
