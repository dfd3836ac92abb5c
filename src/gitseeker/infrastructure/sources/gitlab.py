"""
GitLab Integration

Project search via the GitLab REST API (gitlab.com).

API Documentation: https://docs.gitlab.com/ee/api/projects.html#list-all-projects

Field mapping:
- stars      <- star_count
- downloads  <- not available
- topics     <- topics, falling back to the older tag_list
- author     <- namespace, falling back to owner
- updatedAt  <- last_activity_at

GitLab has a single search strategy, so deep and shallow mode both issue
one request.
"""

from __future__ import annotations

import logging
from typing import Any

from gitseeker.core.config import get_config
from gitseeker.models import ProjectAuthor, SourceType, UnifiedProject, make_project_id, utc_now_iso

from .source_client import RequestVariant, SourceClient

logger = logging.getLogger(__name__)

GITLAB_BASE = "https://gitlab.com"
GITLAB_PROJECTS_URL = f"{GITLAB_BASE}/api/v4/projects"
GITLAB_PER_PAGE = 50


class GitLabClient(SourceClient):
    """GitLab project search client."""

    _service_name = "GitLab"
    source = SourceType.GITLAB

    def __init__(self, token: str | None = None, timeout: float | None = None):
        headers = {}
        token = token or get_config()["gitlab_token"]
        if token:
            headers["PRIVATE-TOKEN"] = token
        super().__init__(base_url=GITLAB_BASE, timeout=timeout, headers=headers)

    async def _collect(self, query: str, deep_search: bool) -> list[dict[str, Any]]:
        variant = RequestVariant(
            url=GITLAB_PROJECTS_URL,
            params={
                "search": query,
                "order_by": "star_count",
                "sort": "desc",
                "page": "1",
                "per_page": str(GITLAB_PER_PAGE),
            },
        )
        return await self._run_variants([variant])

    def _native_id(self, item: dict[str, Any]) -> int:
        return item["id"]

    def _normalize(self, item: dict[str, Any]) -> UnifiedProject:
        namespace = item.get("namespace") or {}
        owner = item.get("owner") or {}
        path = item.get("path_with_namespace") or item["name"]
        return UnifiedProject(
            id=make_project_id(self.source, item["id"]),
            source=self.source,
            name=item["name"],
            full_name=path,
            description=item.get("description"),
            url=item.get("web_url") or f"{GITLAB_BASE}/{path}",
            stars=item.get("star_count") or 0,
            language=item.get("programming_language"),
            topics=tuple(item.get("topics") or item.get("tag_list") or ()),
            author=ProjectAuthor(
                name=namespace.get("name") or owner.get("name") or "Unknown",
                avatar=namespace.get("avatar_url") or owner.get("avatar_url") or "",
            ),
            updated_at=item.get("last_activity_at") or utc_now_iso(),
        )
