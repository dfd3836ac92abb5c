"""Tests for PyPIClient."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from gitseeker.core.exceptions import RateLimitError
from gitseeker.infrastructure.sources.pypi import (
    MAX_POPULAR_LOOKUPS,
    PyPIClient,
    name_variants,
    related_popular_packages,
)
from gitseeker.models import SourceType


@pytest.fixture
def client():
    c = PyPIClient()
    c._deep_search_delay = 0
    return c


def _requested_names(mock_get_package):
    return [c.args[0] for c in mock_get_package.call_args_list]


# ============================================================
# Heuristics
# ============================================================


class TestHeuristics:
    async def test_name_variants(self):
        assert name_variants("yaml") == ["yaml-python", "python-yaml", "pyyaml"]

    async def test_related_popular_substring(self):
        assert related_popular_packages("flask") == ["flask"]
        assert "scikit-learn" in related_popular_packages("learn")

    async def test_related_popular_reverse_containment(self):
        assert "requests" in related_popular_packages("python requests library")

    async def test_related_popular_capped(self):
        assert len(related_popular_packages("e")) <= MAX_POPULAR_LOOKUPS


# ============================================================
# get_package
# ============================================================


class TestGetPackage:
    async def test_404_is_absent(self, client):
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=httpx.Response(404))
        assert await client.get_package("does-not-exist") is None

    @patch.object(PyPIClient, "_make_request")
    async def test_url(self, mock_req, client, make_pypi_document):
        mock_req.return_value = make_pypi_document("requests")
        assert await client.get_package("requests") is not None
        assert mock_req.call_args.args[0] == "/pypi/requests/json"

    @patch.object(PyPIClient, "_make_request")
    async def test_missing_info(self, mock_req, client):
        mock_req.return_value = {"releases": {}}
        assert await client.get_package("odd") is None


# ============================================================
# search
# ============================================================


class TestSearch:
    async def test_shallow_exact_lookup_only(self, client, make_pypi_document):
        with patch.object(client, "get_package", AsyncMock(return_value=make_pypi_document("flask"))) as get:
            result = await client.search("flask", deep_search=False)
        assert _requested_names(get) == ["flask"]
        assert [p.id for p in result.projects] == ["pypi-flask"]

    async def test_shallow_miss(self, client):
        with patch.object(client, "get_package", AsyncMock(return_value=None)) as get:
            result = await client.search("nothing-here", deep_search=False)
        assert get.call_count == 1
        assert result.projects == ()

    async def test_deep_tries_variants_then_popular(self, client, make_pypi_document):
        documents = {"yaml-python": None, "python-yaml": None, "pyyaml": make_pypi_document("PyYAML")}

        async def fake_get(name):
            return documents.get(name)

        with patch.object(client, "get_package", AsyncMock(side_effect=fake_get)) as get:
            result = await client.search("yaml", deep_search=True)
        assert _requested_names(get)[:4] == ["yaml", "yaml-python", "python-yaml", "pyyaml"]
        assert [p.name for p in result.projects] == ["PyYAML"]

    async def test_deep_popular_lookup(self, client, make_pypi_document):
        async def fake_get(name):
            return make_pypi_document(name) if name == "scikit-learn" else None

        with patch.object(client, "get_package", AsyncMock(side_effect=fake_get)) as get:
            result = await client.search("learn", deep_search=True)
        assert "scikit-learn" in _requested_names(get)
        assert [p.id for p in result.projects] == ["pypi-scikit-learn"]

    async def test_deep_deduplicates_by_name(self, client, make_pypi_document):
        with patch.object(client, "get_package", AsyncMock(return_value=make_pypi_document("flask"))):
            result = await client.search("flask", deep_search=True)
        assert [p.id for p in result.projects] == ["pypi-flask"]

    async def test_popular_skips_already_found(self, client, make_pypi_document):
        with patch.object(client, "get_package", AsyncMock(return_value=make_pypi_document("flask"))) as get:
            await client.search("flask", deep_search=True)
        assert _requested_names(get).count("flask") == 1

    async def test_rate_limit_stops_lookups(self, client, make_pypi_document):
        get = AsyncMock(side_effect=[make_pypi_document("flask"), RateLimitError(service="PyPI")])
        with patch.object(client, "get_package", get):
            result = await client.search("flask", deep_search=True)
        assert get.call_count == 2
        assert [p.name for p in result.projects] == ["flask"]

    async def test_deep_pauses_between_lookups(self, client):
        client._deep_search_delay = 0.1
        with (
            patch.object(client, "get_package", AsyncMock(return_value=None)) as get,
            patch("gitseeker.infrastructure.sources.pypi.sleep_between", new_callable=AsyncMock) as mock_sleep,
        ):
            await client.search("zzz", deep_search=True)
        assert mock_sleep.await_count == get.call_count - 1


# ============================================================
# _normalize
# ============================================================


class TestNormalize:
    async def test_fields(self, client, make_pypi_document):
        project = client._normalize(make_pypi_document("requests"))
        assert project.id == "pypi-requests"
        assert project.source == SourceType.PYPI
        assert project.description == "requests package"
        assert project.url == "https://pypi.org/project/requests/"
        assert project.stars == 0
        assert project.downloads == 0
        assert project.language == "Python"
        assert project.topics == ("http", "client")
        assert project.author.name == "Someone"
        assert project.updated_at == "2024-05-29T15:38:00.000000Z"
        assert project.license == "Apache 2.0"

    async def test_no_files_uses_now(self, client, make_pypi_document):
        document = make_pypi_document("fresh")
        document["urls"] = []
        assert client._normalize(document).updated_datetime is not None

    async def test_license_expression_preferred(self, client, make_pypi_document):
        document = make_pypi_document("x", license_expression="MIT", license="long text")
        assert client._normalize(document).license == "MIT"

    async def test_license_first_line(self, client, make_pypi_document):
        document = make_pypi_document("x", license="BSD 3-Clause\n\nCopyright ...")
        assert client._normalize(document).license == "BSD 3-Clause"

    async def test_url_fallback(self, client, make_pypi_document):
        document = make_pypi_document("x", project_url=None, home_page=None)
        assert client._normalize(document).url == "https://pypi.org/project/x"
