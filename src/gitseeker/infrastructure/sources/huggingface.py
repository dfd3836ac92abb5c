"""
Hugging Face Integration

Model and dataset search via the Hugging Face Hub API.

API Documentation: https://huggingface.co/docs/hub/api

Field mapping:
- stars      <- likes. The hub has no star concept; likes are used as the
                popularity signal so the scorer's log scale applies to it.
                This is an approximation, not an equivalence with code-host
                stars.
- downloads  <- downloads
- language   <- library_name, defaulting to "transformers"
- updatedAt  <- lastModified, or the current time when missing

Deep search adds a dataset lookup after the model lookup.
"""

from __future__ import annotations

import logging
from typing import Any

from gitseeker.models import ProjectAuthor, SourceType, UnifiedProject, make_project_id, utc_now_iso

from .source_client import RequestVariant, SourceClient

logger = logging.getLogger(__name__)

HF_BASE = "https://huggingface.co"
HF_MODELS_URL = f"{HF_BASE}/api/models"
HF_DATASETS_URL = f"{HF_BASE}/api/datasets"
HF_AVATAR_URL = "https://cdn-avatars.huggingface.co/v1/production/uploads/{owner}/avatar.jpg"

HF_MODEL_LIMIT = 50
HF_DATASET_LIMIT = 20


class HuggingFaceClient(SourceClient):
    """Hugging Face Hub search client."""

    _service_name = "HuggingFace"
    source = SourceType.HUGGINGFACE

    def __init__(self, timeout: float | None = None):
        super().__init__(base_url=HF_BASE, timeout=timeout)

    async def _collect(self, query: str, deep_search: bool) -> list[dict[str, Any]]:
        variants = [self._listing(HF_MODELS_URL, query, HF_MODEL_LIMIT)]
        if deep_search:
            variants.append(self._listing(HF_DATASETS_URL, query, HF_DATASET_LIMIT))
        return await self._run_variants(variants)

    @staticmethod
    def _listing(url: str, query: str, limit: int) -> RequestVariant:
        return RequestVariant(
            url=url,
            params={
                "search": query,
                "sort": "downloads",
                "direction": "-1",
                "limit": str(limit),
            },
        )

    def _native_id(self, item: dict[str, Any]) -> str:
        return item.get("id") or item["modelId"]

    def _normalize(self, item: dict[str, Any]) -> UnifiedProject:
        repo_id: str = self._native_id(item)
        owner = repo_id.split("/")[0]
        return UnifiedProject(
            id=make_project_id(self.source, repo_id),
            source=self.source,
            name=repo_id.split("/")[-1] or repo_id,
            full_name=repo_id,
            description=item.get("description") or item.get("pipeline_tag") or "AI Model",
            url=f"{HF_BASE}/{repo_id}",
            stars=item.get("likes") or 0,
            downloads=item.get("downloads") or 0,
            language=item.get("library_name") or "transformers",
            topics=tuple(item.get("tags") or ()),
            author=ProjectAuthor(
                name=item.get("author") or owner,
                avatar=HF_AVATAR_URL.format(owner=owner),
            ),
            updated_at=item.get("lastModified") or utc_now_iso(),
            license=_license_from(item),
        )


def _license_from(item: dict[str, Any]) -> str | None:
    """License comes either as a field or as a `license:<id>` tag."""
    if item.get("license"):
        return str(item["license"])
    for tag in item.get("tags") or ():
        if isinstance(tag, str) and tag.startswith("license:"):
            return tag.split(":", 1)[1]
    return None
