"""
PyPI Integration

Package lookup via the PyPI JSON API.

API Documentation: https://warehouse.pypa.io/api-reference/json.html

PyPI has no search API, only exact-name lookup (`/pypi/<name>/json`). This
client is therefore a best-effort recall strategy, not a real search:

1. Look up the query as an exact package name.
2. Deep mode, fewer than 10 hits: try the name variants `<q>-python`,
   `python-<q>` and `py<q>`.
3. Deep mode, fewer than 5 hits: look up up to five names from a fixed list
   of popular packages whose name contains the query or is contained in it.

Shallow mode only performs step 1.

Field mapping:
- stars      <- 0 (the JSON API exposes no popularity signal)
- downloads  <- 0 (download statistics were removed from the JSON API)
- topics     <- info.keywords split on commas
- updatedAt  <- upload time of the newest file of the current release,
                or the current time when the release has no files
- language   <- always "Python"
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any

import httpx

from gitseeker.core.async_utils import sleep_between
from gitseeker.core.exceptions import RateLimitError
from gitseeker.models import ProjectAuthor, SourceType, UnifiedProject, make_project_id, utc_now_iso

from .base_client import _CONTINUE
from .source_client import SourceClient

logger = logging.getLogger(__name__)

PYPI_BASE = "https://pypi.org"

VARIANT_THRESHOLD = 10
POPULAR_THRESHOLD = 5
MAX_POPULAR_LOOKUPS = 5

POPULAR_PACKAGES: tuple[str, ...] = (
    "django",
    "flask",
    "fastapi",
    "requests",
    "numpy",
    "pandas",
    "tensorflow",
    "torch",
    "scikit-learn",
    "matplotlib",
    "pytest",
    "sqlalchemy",
    "celery",
    "redis",
    "pillow",
    "beautifulsoup4",
)


def name_variants(query: str) -> list[str]:
    """Heuristic package names tried when the exact name is not enough."""
    return [f"{query}-python", f"python-{query}", f"py{query}"]


def related_popular_packages(query: str, limit: int = MAX_POPULAR_LOOKUPS) -> list[str]:
    """Popular package names related to the query by substring, either direction."""
    query_lower = query.lower()
    related = [name for name in POPULAR_PACKAGES if query_lower in name or name in query_lower]
    return related[:limit]


class PyPIClient(SourceClient):
    """PyPI exact-name lookup client."""

    _service_name = "PyPI"
    source = SourceType.PYPI

    def __init__(self, timeout: float | None = None):
        super().__init__(base_url=PYPI_BASE, timeout=timeout)

    def _handle_expected_status(self, response: httpx.Response, url: str) -> Any:
        """Handle 404 (no package with that name)."""
        if response.status_code == 404:
            logger.debug(f"PyPI: package not found - {url}")
            return None
        return _CONTINUE

    async def get_package(self, name: str) -> dict[str, Any] | None:
        """Fetch the JSON document of one package, or None."""
        encoded = urllib.parse.quote(name.strip(), safe="")
        data = await self._make_request(f"/pypi/{encoded}/json")
        if not isinstance(data, dict) or not isinstance(data.get("info"), dict):
            return None
        return data

    async def _collect(self, query: str, deep_search: bool) -> list[dict[str, Any]]:
        collected: list[dict[str, Any]] = []
        seen: set[str] = set()
        requests_issued = 0

        async def lookup(name: str) -> None:
            nonlocal requests_issued
            if requests_issued:
                await sleep_between(self._deep_search_delay)
            requests_issued += 1
            data = await self.get_package(name)
            if data is None:
                return
            key = self._native_id(data)
            if key not in seen:
                seen.add(key)
                collected.append(data)

        try:
            await lookup(query)
            if deep_search and len(collected) < VARIANT_THRESHOLD:
                for name in name_variants(query):
                    await lookup(name)
            if deep_search and len(collected) < POPULAR_THRESHOLD:
                for name in related_popular_packages(query):
                    if name not in seen:
                        await lookup(name)
        except RateLimitError:
            logger.warning(f"PyPI: stopping after {len(collected)} packages (rate limited)")

        return collected

    def _native_id(self, item: dict[str, Any]) -> str:
        return str(item["info"]["name"]).lower()

    def _normalize(self, item: dict[str, Any]) -> UnifiedProject:
        info = item["info"]
        name = info["name"]
        keywords = info.get("keywords") or ""
        topics = tuple(k.strip() for k in keywords.split(",") if k.strip()) if isinstance(keywords, str) else ()
        return UnifiedProject(
            id=make_project_id(self.source, name),
            source=self.source,
            name=name,
            full_name=name,
            description=info.get("summary"),
            url=info.get("project_url") or info.get("home_page") or f"{PYPI_BASE}/project/{name}",
            stars=0,
            downloads=0,
            language="Python",
            topics=topics,
            author=ProjectAuthor(name=info.get("author") or "Unknown"),
            updated_at=_latest_upload(item) or utc_now_iso(),
            license=_license_from(info),
        )


def _latest_upload(item: dict[str, Any]) -> str | None:
    uploads = [
        f.get("upload_time_iso_8601") or f.get("upload_time")
        for f in item.get("urls") or ()
        if isinstance(f, dict)
    ]
    uploads = [u for u in uploads if u]
    return max(uploads) if uploads else None


def _license_from(info: dict[str, Any]) -> str | None:
    """Prefer the SPDX expression; otherwise the first line of the license text."""
    expression = info.get("license_expression")
    if expression:
        return str(expression)
    text = info.get("license")
    if not text or not isinstance(text, str):
        return None
    first_line = text.strip().splitlines()[0] if text.strip() else ""
    return first_line or None
