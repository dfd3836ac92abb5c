"""
Unified Data Models for Multi-Source Project Search

This module provides standardized data structures for representing
projects from multiple registries (GitHub, Hugging Face, GitLab, npm, PyPI).
"""

from .unified_project import (
    ID_PREFIXES,
    ProjectAuthor,
    SearchResult,
    SourceType,
    UnifiedProject,
    get_source_config,
    make_project_id,
    parse_timestamp,
    utc_now_iso,
)

__all__ = [
    "ID_PREFIXES",
    "ProjectAuthor",
    "SearchResult",
    "SourceType",
    "UnifiedProject",
    "get_source_config",
    "make_project_id",
    "parse_timestamp",
    "utc_now_iso",
]
