"""
GitHub Integration

Repository search via the GitHub REST API.

API Documentation: https://docs.github.com/en/rest/search/search#search-repositories

Field mapping:
- stars      <- stargazers_count (literal star count)
- downloads  <- not available
- updatedAt  <- updated_at
- license    <- license.name

Deep search runs two strategies one after the other: a field-scoped query
(`<q> in:name,description,topics`) and the plain query. Unauthenticated
callers get a small search quota, so a 403 carrying a rate-limit indicator
ends the call with the results gathered so far. Set GITHUB_TOKEN to raise
the quota.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from gitseeker.core.config import get_config
from gitseeker.models import ProjectAuthor, SourceType, UnifiedProject, make_project_id, utc_now_iso

from .source_client import RequestVariant, SourceClient

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
GITHUB_SEARCH_URL = f"{GITHUB_API_BASE}/search/repositories"
GITHUB_PER_PAGE = 50


class GitHubClient(SourceClient):
    """
    GitHub repository search client.

    Usage:
        async with GitHubClient() as client:
            result = await client.search("react", deep_search=True)
    """

    _service_name = "GitHub"
    source = SourceType.GITHUB

    def __init__(self, token: str | None = None, timeout: float | None = None):
        headers = {"Accept": "application/vnd.github.v3+json"}
        token = token or get_config()["github_token"]
        if token:
            headers["Authorization"] = f"Bearer {token}"
        super().__init__(base_url=GITHUB_API_BASE, timeout=timeout, headers=headers)

    def _is_rate_limited(self, response: httpx.Response) -> bool:
        """GitHub answers 403 (primary quota) or 429 (secondary limits)."""
        if response.status_code == 429:
            return True
        if response.status_code != 403:
            return False
        if str(response.headers.get("X-RateLimit-Remaining", "")) == "0":
            return True
        try:
            message = str(response.json().get("message", ""))
        except (ValueError, AttributeError):
            return False
        return "rate limit" in message.lower()

    def search_strategies(self, query: str, deep_search: bool) -> list[str]:
        """Search expressions issued for a query, in order."""
        if deep_search:
            return [f"{query} in:name,description,topics", query]
        return [query]

    async def _collect(self, query: str, deep_search: bool) -> list[dict[str, Any]]:
        variants = [
            RequestVariant(
                url=GITHUB_SEARCH_URL,
                params={
                    "q": expression,
                    "sort": "stars",
                    "order": "desc",
                    "page": "1",
                    "per_page": str(GITHUB_PER_PAGE),
                },
                extract=lambda data: data.get("items", []) if isinstance(data, dict) else [],
            )
            for expression in self.search_strategies(query, deep_search)
        ]
        return await self._run_variants(variants)

    def _native_id(self, item: dict[str, Any]) -> int:
        return item["id"]

    def _normalize(self, item: dict[str, Any]) -> UnifiedProject:
        owner = item.get("owner") or {}
        login = owner.get("login") or "Unknown"
        license_info = item.get("license") or {}
        return UnifiedProject(
            id=make_project_id(self.source, item["id"]),
            source=self.source,
            name=item["name"],
            full_name=item.get("full_name") or f"{login}/{item['name']}",
            description=item.get("description"),
            url=item.get("html_url") or f"https://github.com/{item.get('full_name', '')}",
            stars=item.get("stargazers_count") or 0,
            language=item.get("language"),
            topics=tuple(item.get("topics") or ()),
            author=ProjectAuthor(
                name=login,
                avatar=owner.get("avatar_url") or f"https://github.com/{login}.png?size=96",
            ),
            updated_at=item.get("updated_at") or utc_now_iso(),
            license=license_info.get("name") if isinstance(license_info, dict) else None,
        )
