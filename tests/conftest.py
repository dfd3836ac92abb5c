"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from gitseeker.core.config import reset_config
from gitseeker.models import ProjectAuthor, SourceType, UnifiedProject

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================
# Environment Fixtures
# ============================================================


@pytest.fixture(autouse=True)
def _restore_config():
    """Undo configure() overrides made by a test."""
    yield
    reset_config()


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fixed_now():
    """Clock used by relevance tests."""
    return FIXED_NOW


# ============================================================
# Project Factory
# ============================================================


@pytest.fixture
def make_project():
    """Build a UnifiedProject with neutral defaults; override any field."""

    def _make(
        name: str = "sample",
        source: SourceType | str = SourceType.GITHUB,
        native_id: str | int | None = None,
        **overrides,
    ) -> UnifiedProject:
        source = SourceType.parse(source)
        fields = {
            "id": f"{source.value}-{native_id if native_id is not None else name}",
            "source": source,
            "name": name,
            "full_name": f"someone/{name}",
            "url": f"https://example.com/{name}",
            "author": ProjectAuthor(name="someone"),
            "updated_at": "2025-03-01T00:00:00Z",
        }
        fields.update(overrides)
        return UnifiedProject(**fields)

    return _make


# ============================================================
# Mock HTTP Responses
# ============================================================


@pytest.fixture
def mock_response():
    """Build a MagicMock shaped like an httpx.Response."""

    def _make(status_code: int = 200, json_data=None, text: str = "", headers: dict | None = None):
        response = MagicMock()
        response.status_code = status_code
        response.headers = headers or {}
        response.text = text
        response.reason_phrase = "OK" if status_code < 400 else "Error"
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
        else:
            response.json.return_value = json_data
        if status_code >= 400:
            response.raise_for_status.side_effect = httpx.HTTPStatusError(
                "error", request=MagicMock(), response=response
            )
        else:
            response.raise_for_status = MagicMock()
        return response

    return _make


# ============================================================
# Mock Registry Payloads
# ============================================================


@pytest.fixture
def github_repo_item():
    """One item of GitHub /search/repositories."""
    return {
        "id": 10270250,
        "name": "react",
        "full_name": "facebook/react",
        "description": "The library for web and native user interfaces.",
        "html_url": "https://github.com/facebook/react",
        "stargazers_count": 228000,
        "language": "JavaScript",
        "topics": ["javascript", "react", "ui", "frontend"],
        "owner": {"login": "facebook", "avatar_url": "https://avatars.githubusercontent.com/u/69631?v=4"},
        "updated_at": "2025-05-30T10:00:00Z",
        "license": {"key": "mit", "name": "MIT License"},
    }


@pytest.fixture
def hf_model_item():
    """One item of Hugging Face /api/models."""
    return {
        "id": "meta-llama/Llama-3.1-8B-Instruct",
        "modelId": "meta-llama/Llama-3.1-8B-Instruct",
        "author": "meta-llama",
        "likes": 4200,
        "downloads": 5_000_000,
        "pipeline_tag": "text-generation",
        "library_name": "transformers",
        "tags": ["transformers", "llama", "text-generation", "license:llama3.1"],
        "lastModified": "2025-05-01T08:00:00.000Z",
    }


@pytest.fixture
def gitlab_project_item():
    """One item of GitLab /api/v4/projects."""
    return {
        "id": 278964,
        "name": "GitLab",
        "path_with_namespace": "gitlab-org/gitlab",
        "description": "GitLab is an open source end-to-end software development platform.",
        "web_url": "https://gitlab.com/gitlab-org/gitlab",
        "star_count": 5000,
        "topics": ["devops", "ci-cd"],
        "namespace": {"name": "GitLab.org", "avatar_url": "https://gitlab.com/uploads/group/avatar/9970/logo.png"},
        "last_activity_at": "2025-05-31T23:00:00.000Z",
    }


@pytest.fixture
def npm_search_object():
    """One entry of npm /-/v1/search `objects`."""
    return {
        "package": {
            "name": "express",
            "description": "Fast, unopinionated, minimalist web framework",
            "keywords": ["express", "framework", "web"],
            "date": "2025-03-31T14:00:00.000Z",
            "links": {"npm": "https://www.npmjs.com/package/express"},
            "publisher": {"username": "wesleytodd", "avatars": {"small": "https://example.com/a.png"}},
            "license": "MIT",
        },
        "score": {"final": 0.9, "detail": {"quality": 0.9567, "popularity": 0.8, "maintenance": 0.9}},
    }


@pytest.fixture
def make_pypi_document():
    """Build a PyPI /pypi/<name>/json document."""

    def _make(name: str = "requests", **info_overrides):
        info = {
            "name": name,
            "summary": f"{name} package",
            "author": "Someone",
            "keywords": "http, client",
            "license": "Apache 2.0",
            "project_url": f"https://pypi.org/project/{name}/",
            "home_page": "",
        }
        info.update(info_overrides)
        return {
            "info": info,
            "urls": [
                {"upload_time_iso_8601": "2024-05-29T15:37:00.000000Z"},
                {"upload_time_iso_8601": "2024-05-29T15:38:00.000000Z"},
            ],
        }

    return _make
