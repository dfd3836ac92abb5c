"""
UnifiedProject - Standardized Project Model for Multi-Source Search

This module defines the canonical data structure for projects found on code
hosts, model hubs and package registries. Every source client normalizes its
registry's raw JSON into this shape; raw payloads never travel further.

Architecture Decision:
    We use frozen dataclasses instead of Pydantic for:
    1. Lightweight - no external dependency
    2. Immutability - a result set is never mutated after creation
    3. Simplicity - easy to understand and maintain

Popularity semantics differ per source. `stars` is a literal star count on
code hosts, "likes" on the model hub and a synthesized quality score on the
JS registry. Compare raw `stars` across sources only through the relevance
scorer.

Example:
    >>> project = UnifiedProject(
    ...     id="github-10270250",
    ...     source=SourceType.GITHUB,
    ...     name="react",
    ...     full_name="facebook/react",
    ...     url="https://github.com/facebook/react",
    ...     stars=230000,
    ...     author=ProjectAuthor(name="facebook"),
    ...     updated_at="2024-05-01T12:00:00Z",
    ... )
    >>> project.native_id
    '10270250'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class SourceType(Enum):
    """Closed set of registries a project can come from."""

    GITHUB = "github"
    HUGGINGFACE = "huggingface"
    GITLAB = "gitlab"
    NPM = "npm"
    PYPI = "pypi"

    @classmethod
    def parse(cls, value: SourceType | str) -> SourceType:
        """Accept an enum member or its string value."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


# Prefix used to build UnifiedProject.id; the model hub keeps its short form.
ID_PREFIXES: dict[SourceType, str] = {
    SourceType.GITHUB: "github",
    SourceType.HUGGINGFACE: "hf",
    SourceType.GITLAB: "gitlab",
    SourceType.NPM: "npm",
    SourceType.PYPI: "pypi",
}

SOURCE_DISPLAY: dict[SourceType, dict[str, str]] = {
    SourceType.GITHUB: {"name": "GitHub", "icon": "🐙"},
    SourceType.HUGGINGFACE: {"name": "Hugging Face", "icon": "🤗"},
    SourceType.GITLAB: {"name": "GitLab", "icon": "🦊"},
    SourceType.NPM: {"name": "npm", "icon": "📦"},
    SourceType.PYPI: {"name": "PyPI", "icon": "🐍"},
}


def get_source_config(source: SourceType | str) -> dict[str, str]:
    """Return display name and icon for a source."""
    return dict(SOURCE_DISPLAY[SourceType.parse(source)])


def make_project_id(source: SourceType, native_id: str | int) -> str:
    """Build the globally unique `<source>-<native id>` identifier."""
    return f"{ID_PREFIXES[source]}-{native_id}"


def utc_now_iso() -> str:
    """Current time as an ISO-8601 string, used when a registry has no timestamp."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Naive values are treated as UTC. Returns None when unparseable.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True, slots=True)
class ProjectAuthor:
    """Owner or publisher of a project. The avatar may be empty."""

    name: str = "Unknown"
    avatar: str = ""


@dataclass(frozen=True, slots=True)
class UnifiedProject:
    """
    Unified project representation across all registries.

    Invariants:
    - `id` is `<source>-<native id>` and unique within one result set
    - `stars` and `downloads` are never negative
    - `topics` is never None (empty tuple when absent upstream)
    """

    id: str
    source: SourceType
    name: str
    full_name: str
    url: str
    author: ProjectAuthor
    updated_at: str
    description: str | None = None
    stars: int = 0
    downloads: int | None = None
    language: str | None = None
    topics: tuple[str, ...] = field(default_factory=tuple)
    license: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.source, SourceType):
            object.__setattr__(self, "source", SourceType.parse(self.source))
        for name in ("id", "name", "full_name", "url"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"UnifiedProject.{name} must be a non-empty string, got {value!r}")
        if not isinstance(self.updated_at, str):
            raise TypeError(f"UnifiedProject.updated_at must be a string, got {self.updated_at!r}")
        for name in ("description", "language", "license"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise TypeError(f"UnifiedProject.{name} must be a string or None, got {value!r}")
        if not isinstance(self.author, ProjectAuthor) or not isinstance(self.author.name, str):
            raise TypeError(f"UnifiedProject.author must be a ProjectAuthor with a string name, got {self.author!r}")
        if self.topics is None:
            object.__setattr__(self, "topics", ())
        elif not isinstance(self.topics, tuple):
            object.__setattr__(self, "topics", tuple(self.topics))
        if not all(isinstance(topic, str) for topic in self.topics):
            raise TypeError(f"UnifiedProject.topics must contain only strings, got {self.topics!r}")
        object.__setattr__(self, "stars", max(0, int(self.stars or 0)))
        if self.downloads is not None:
            object.__setattr__(self, "downloads", max(0, int(self.downloads)))

    @property
    def native_id(self) -> str:
        """Registry-native identifier (the part after the source prefix)."""
        prefix = ID_PREFIXES[self.source] + "-"
        return self.id[len(prefix):] if self.id.startswith(prefix) else self.id

    @property
    def updated_datetime(self) -> datetime | None:
        return parse_timestamp(self.updated_at)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "id": self.id,
            "source": self.source.value,
            "name": self.name,
            "fullName": self.full_name,
            "description": self.description,
            "url": self.url,
            "stars": self.stars,
            "language": self.language,
            "topics": list(self.topics),
            "author": {"name": self.author.name, "avatar": self.author.avatar},
            "updatedAt": self.updated_at,
        }
        if self.downloads is not None:
            result["downloads"] = self.downloads
        if self.license:
            result["license"] = self.license
        return result


@dataclass(frozen=True, slots=True)
class SearchResult:
    """One source's contribution to a search. Consumed only by the aggregator."""

    source: SourceType
    projects: tuple[UnifiedProject, ...] = ()
    total_count: int = 0

    @classmethod
    def empty(cls, source: SourceType) -> SearchResult:
        return cls(source=source)

    @classmethod
    def of(cls, source: SourceType, projects: list[UnifiedProject]) -> SearchResult:
        return cls(source=source, projects=tuple(projects), total_count=len(projects))
