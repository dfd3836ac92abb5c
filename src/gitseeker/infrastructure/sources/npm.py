"""
npm Integration

Package search via the npm registry full-text search endpoint.

API Documentation: https://github.com/npm/registry/blob/main/docs/REGISTRY-API.md#get-v1search

Field mapping:
- stars      <- score.detail.quality * 1000, rounded. npm has no stars; the
                registry's quality sub-score (0..1) is scaled to an integer
                so it lands in the same log-scaled popularity term as stars.
- downloads  <- package.downloads when the registry includes it, else 0
- language   <- always "JavaScript"
- updatedAt  <- package.date (last publish)

npm search is already full-text, so deep and shallow mode both issue one
request.
"""

from __future__ import annotations

import logging
from typing import Any

from gitseeker.models import ProjectAuthor, SourceType, UnifiedProject, make_project_id, utc_now_iso

from .source_client import RequestVariant, SourceClient

logger = logging.getLogger(__name__)

NPM_REGISTRY = "https://registry.npmjs.org"
NPM_SEARCH_URL = f"{NPM_REGISTRY}/-/v1/search"
NPM_SEARCH_SIZE = 50
NPM_QUALITY_SCALE = 1000


class NpmClient(SourceClient):
    """npm registry search client."""

    _service_name = "npm"
    source = SourceType.NPM

    def __init__(self, timeout: float | None = None):
        super().__init__(base_url=NPM_REGISTRY, timeout=timeout)

    async def _collect(self, query: str, deep_search: bool) -> list[dict[str, Any]]:
        variant = RequestVariant(
            url=NPM_SEARCH_URL,
            params={"text": query, "size": str(NPM_SEARCH_SIZE)},
            extract=lambda data: data.get("objects", []) if isinstance(data, dict) else [],
        )
        return await self._run_variants([variant])

    def _native_id(self, item: dict[str, Any]) -> str:
        return item["package"]["name"]

    def _normalize(self, item: dict[str, Any]) -> UnifiedProject:
        package = item["package"]
        name = package["name"]
        detail = (item.get("score") or {}).get("detail") or {}
        quality = float(detail.get("quality") or 0.0)
        publisher = package.get("publisher") or {}
        author = package.get("author") or {}
        links = package.get("links") or {}
        downloads = package.get("downloads") or 0
        if isinstance(downloads, dict):
            downloads = downloads.get("monthly") or downloads.get("weekly") or 0
        return UnifiedProject(
            id=make_project_id(self.source, name),
            source=self.source,
            name=name,
            full_name=name,
            description=package.get("description"),
            url=links.get("npm") or f"https://www.npmjs.com/package/{name}",
            stars=round(quality * NPM_QUALITY_SCALE),
            downloads=int(downloads),
            language="JavaScript",
            topics=tuple(package.get("keywords") or ()),
            author=ProjectAuthor(
                name=publisher.get("username") or (author.get("name") if isinstance(author, dict) else None) or "Unknown",
                avatar=(publisher.get("avatars") or {}).get("small") or "",
            ),
            updated_at=package.get("date") or utc_now_iso(),
            license=package.get("license") if isinstance(package.get("license"), str) else None,
        )
