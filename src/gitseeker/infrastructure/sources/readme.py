"""
README Retrieval

Fetches raw project documentation from a source-specific well-known location:

- GitHub:       raw.githubusercontent.com/<owner>/<repo>/main/<README variant>
- Hugging Face: huggingface.co/<id>/raw/main/README.md
- GitLab:       gitlab.com/<path>/-/raw/main/README.md
- npm:          `readme` field of the registry document
- PyPI:         `info.description` of the JSON document

Never raises; absence is reported as None.
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any

import httpx

from gitseeker.models import SourceType, UnifiedProject

from .base_client import _CONTINUE, BaseAPIClient

logger = logging.getLogger(__name__)

README_CHAR_BUDGET = 6000
TRUNCATION_MARKER = "\n\n[Documentation truncated...]"
GITHUB_README_NAMES = ("README.md", "readme.md", "Readme.md")


def truncate_readme(text: str, limit: int = README_CHAR_BUDGET) -> str:
    """Cut documentation to the character budget forwarded to a chat model."""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


class ReadmeFetcher(BaseAPIClient):
    """Project documentation fetcher."""

    _service_name = "README"

    def _handle_expected_status(self, response: httpx.Response, url: str) -> Any:
        if response.status_code == 404:
            logger.debug(f"README not found - {url}")
            return None
        return _CONTINUE

    async def get_readme(self, project: UnifiedProject) -> str | None:
        """Return the raw documentation text of a project, or None."""
        try:
            if project.source == SourceType.GITHUB:
                for filename in GITHUB_README_NAMES:
                    text = await self._text(f"https://raw.githubusercontent.com/{project.full_name}/main/{filename}")
                    if text:
                        return text
                return None

            if project.source == SourceType.HUGGINGFACE:
                return await self._text(f"https://huggingface.co/{project.full_name}/raw/main/README.md")

            if project.source == SourceType.GITLAB:
                return await self._text(f"https://gitlab.com/{project.full_name}/-/raw/main/README.md")

            if project.source == SourceType.NPM:
                data = await self._make_request(
                    f"https://registry.npmjs.org/{urllib.parse.quote(project.name, safe='@')}"
                )
                return _non_empty(data.get("readme")) if isinstance(data, dict) else None

            if project.source == SourceType.PYPI:
                data = await self._make_request(f"https://pypi.org/pypi/{urllib.parse.quote(project.name, safe='')}/json")
                if isinstance(data, dict) and isinstance(data.get("info"), dict):
                    return _non_empty(data["info"].get("description"))
                return None

        except Exception as e:
            logger.warning(f"Error fetching README for {project.id}: {e}")
        return None

    async def _text(self, url: str) -> str | None:
        return _non_empty(await self._make_request(url, expect_json=False))


def _non_empty(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None
