"""
Relevance Scorer - Multi-Signal Ranking for Unified Projects

Computes one non-negative score per project for a raw query string. The score
is the sum of independent, individually bounded signals:

    name match          dominant; tiered, only the best tier applies
    multi-word name     every query word found in a name segment
    word overlap        each (query word, name segment) pair
    full name           query or words inside owner/repo or scoped name
    description         phrase, all words, occurrences, early position
    topics              exact and substring tag hits
    author              query inside the author name
    popularity          log-scaled stars and downloads
    recency             bonus for fresh updates, penalty for stale ones
    source prior        small fixed per-source constant
    license             permissive licenses preferred
    language            language label and query contain one another
    documentation       topic count and description length thresholds

Popularity is log-scaled so that a 100k-star project does not outrank a
better textual match. Every signal is a pure function of
(project, query terms, now) so each can be tested in isolation.

Ranking uses Python's stable sort: equal scores keep their merge order.

Example:
    >>> ranked = rank_projects(projects, "react")
    >>> breakdown = explain_score(ranked[0], "react")
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from gitseeker.models import SourceType, UnifiedProject

# =============================================================================
# Constants
# =============================================================================

SEPARATORS = re.compile(r"[-_\s.]+")

# Name tiers (mutually exclusive, best applicable wins)
NAME_EXACT = 15000
NAME_EXACT_IGNORING_SEPARATORS = 12000
NAME_PREFIX = 8000
NAME_SUFFIX = 6000
NAME_SEGMENT = 5000
NAME_SUBSTRING = 3000

MULTI_WORD_ALL = 4000
MULTI_WORD_EACH = 1000

WORD_EXACT = 1200
WORD_PREFIX = 800
WORD_CONTAINS = 400

FULL_NAME_PHRASE = 600
FULL_NAME_WORD = 250

DESCRIPTION_PHRASE = 800
DESCRIPTION_ALL_WORDS = 600
DESCRIPTION_OCCURRENCE = 150
DESCRIPTION_OCCURRENCE_CAP = 600
DESCRIPTION_EARLY_WINDOW = 10
DESCRIPTION_EARLY_STEP = 20

TOPIC_EXACT = 2000
TOPIC_CONTAINS = 800
TOPIC_WORD = 500

AUTHOR_MATCH = 400

STARS_SCALE = 200
STARS_CAP = 2000
STARS_TIERS: tuple[tuple[int, int], ...] = ((10_000, 500), (50_000, 500))
DOWNLOADS_SCALE = 150
DOWNLOADS_CAP = 1500

# (max days exclusive, bonus) checked in order
RECENCY_BONUSES: tuple[tuple[int, int], ...] = ((7, 500), (30, 300), (90, 150), (180, 50))
# (min days exclusive, penalty) checked in order, harshest first
STALENESS_PENALTIES: tuple[tuple[int, int], ...] = ((730, -500), (365, -200))

SOURCE_PRIOR: dict[SourceType, int] = {
    SourceType.GITHUB: 150,
    SourceType.HUGGINGFACE: 140,
    SourceType.NPM: 120,
    SourceType.PYPI: 120,
    SourceType.GITLAB: 100,
}

# (substring, bonus) checked in order; anything else non-proprietary gets LICENSE_OTHER
LICENSE_BONUSES: tuple[tuple[str, int], ...] = (("mit", 100), ("apache", 100), ("bsd", 80), ("gpl", 60))
LICENSE_OTHER = 40

LANGUAGE_MATCH = 600

TOPIC_COUNT_TIERS: tuple[tuple[int, int], ...] = ((3, 100), (6, 100))
DESCRIPTION_LENGTH_TIERS: tuple[tuple[int, int], ...] = ((50, 150), (150, 100))


# =============================================================================
# Query preparation
# =============================================================================


@dataclass(frozen=True, slots=True)
class QueryTerms:
    """Normalized forms of a raw query, computed once per ranking."""

    raw: str
    lower: str
    words: tuple[str, ...]

    @classmethod
    def parse(cls, query: str) -> QueryTerms:
        lower = (query or "").strip().lower()
        words = tuple(w for w in lower.split() if len(w) > 1)
        return cls(raw=query, lower=lower, words=words)

    @property
    def compact(self) -> str:
        return SEPARATORS.sub("", self.lower)


def name_segments(name: str) -> list[str]:
    """Split a lowercase name on `-`, `_`, `.` and whitespace."""
    return [s for s in SEPARATORS.split(name.lower()) if s]


def _word_in_segment(word: str, segment: str) -> bool:
    return word in segment or segment in word


# =============================================================================
# Signals
# =============================================================================


def score_name_match(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    """Best applicable name tier."""
    q = terms.lower
    if not q:
        return 0.0
    name = project.name.lower()
    if name == q:
        return NAME_EXACT
    if SEPARATORS.sub("", name) == terms.compact:
        return NAME_EXACT_IGNORING_SEPARATORS
    if name.startswith(q):
        return NAME_PREFIX
    if name.endswith(q):
        return NAME_SUFFIX
    if q in name_segments(name):
        return NAME_SEGMENT
    if q in name:
        return NAME_SUBSTRING
    return 0.0


def score_multi_word_name(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    if len(terms.words) <= 1:
        return 0.0
    segments = name_segments(project.name)
    matching = sum(1 for w in terms.words if any(_word_in_segment(w, s) for s in segments))
    score = matching * MULTI_WORD_EACH
    if matching == len(terms.words):
        score += MULTI_WORD_ALL
    return float(score)


def score_word_overlap(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    """Summed over every (query word, name segment) pair."""
    score = 0
    segments = name_segments(project.name)
    for word in terms.words:
        for segment in segments:
            if segment == word:
                score += WORD_EXACT
            elif segment.startswith(word):
                score += WORD_PREFIX
            elif word in segment:
                score += WORD_CONTAINS
    return float(score)


def score_full_name(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    full_name = project.full_name.lower()
    score = FULL_NAME_PHRASE if terms.lower and terms.lower in full_name else 0
    score += sum(FULL_NAME_WORD for w in terms.words if w in full_name)
    return float(score)


def score_description(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    if not project.description:
        return 0.0
    description = project.description.lower()
    tokens = description.split()
    score = 0
    if terms.lower and terms.lower in description:
        score += DESCRIPTION_PHRASE
    if len(terms.words) > 1 and all(w in description for w in terms.words):
        score += DESCRIPTION_ALL_WORDS
    for word in terms.words:
        score += min(description.count(word) * DESCRIPTION_OCCURRENCE, DESCRIPTION_OCCURRENCE_CAP)
        first = next((i for i, token in enumerate(tokens) if word in token), None)
        if first is not None and first < DESCRIPTION_EARLY_WINDOW:
            score += (DESCRIPTION_EARLY_WINDOW - first) * DESCRIPTION_EARLY_STEP
    return float(score)


def score_topics(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    topics = [t.lower() for t in project.topics]
    score = 0
    if terms.lower:
        score += sum(TOPIC_EXACT for t in topics if t == terms.lower)
        score += sum(TOPIC_CONTAINS for t in topics if terms.lower in t)
    for word in terms.words:
        score += sum(TOPIC_WORD for t in topics if word in t)
    return float(score)


def score_author(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    if terms.lower and terms.lower in project.author.name.lower():
        return AUTHOR_MATCH
    return 0.0


def score_popularity(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    score = 0.0
    if project.stars > 0:
        score += min(math.log10(project.stars + 1) * STARS_SCALE, STARS_CAP)
        score += sum(bonus for threshold, bonus in STARS_TIERS if project.stars > threshold)
    if project.downloads:
        score += min(math.log10(project.downloads + 1) * DOWNLOADS_SCALE, DOWNLOADS_CAP)
    return score


def days_since(updated_at: datetime | None, now: datetime) -> int | None:
    """Whole days between a timestamp and now."""
    if updated_at is None:
        return None
    return math.floor((now - updated_at).total_seconds() / 86400)


def score_recency(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    days = days_since(project.updated_datetime, now)
    if days is None:
        return 0.0
    for max_days, bonus in RECENCY_BONUSES:
        if days < max_days:
            return float(bonus)
    for min_days, penalty in STALENESS_PENALTIES:
        if days > min_days:
            return float(penalty)
    return 0.0


def score_source_prior(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    return float(SOURCE_PRIOR.get(project.source, 0))


def score_license(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    if not project.license:
        return 0.0
    license_lower = project.license.lower()
    for needle, bonus in LICENSE_BONUSES:
        if needle in license_lower:
            return float(bonus)
    if "proprietary" in license_lower:
        return 0.0
    return float(LICENSE_OTHER)


def score_language(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    if not project.language or not terms.lower:
        return 0.0
    language = project.language.lower()
    if language in terms.lower or terms.lower in language:
        return LANGUAGE_MATCH
    return 0.0


def score_documentation(project: UnifiedProject, terms: QueryTerms, now: datetime) -> float:
    score = sum(bonus for threshold, bonus in TOPIC_COUNT_TIERS if len(project.topics) > threshold)
    length = len(project.description or "")
    score += sum(bonus for threshold, bonus in DESCRIPTION_LENGTH_TIERS if length > threshold)
    return float(score)


Signal = Callable[[UnifiedProject, QueryTerms, datetime], float]

# Priority order; also the key order of explain_score()
SIGNALS: tuple[tuple[str, Signal], ...] = (
    ("name_match", score_name_match),
    ("multi_word_name", score_multi_word_name),
    ("word_overlap", score_word_overlap),
    ("full_name", score_full_name),
    ("description", score_description),
    ("topics", score_topics),
    ("author", score_author),
    ("popularity", score_popularity),
    ("recency", score_recency),
    ("source_prior", score_source_prior),
    ("license", score_license),
    ("language", score_language),
    ("documentation", score_documentation),
)


# =============================================================================
# Public API
# =============================================================================


def _resolve_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def explain_score(
    project: UnifiedProject,
    query: str | QueryTerms,
    now: datetime | None = None,
) -> dict[str, float]:
    """Per-signal breakdown of a project's score."""
    terms = query if isinstance(query, QueryTerms) else QueryTerms.parse(query)
    at = _resolve_now(now)
    return {name: signal(project, terms, at) for name, signal in SIGNALS}


def calculate_relevance_score(
    project: UnifiedProject,
    query: str | QueryTerms,
    now: datetime | None = None,
) -> float:
    """Total relevance score, clamped to be non-negative."""
    return max(0.0, sum(explain_score(project, query, now).values()))


def rank_projects(
    projects: Iterable[UnifiedProject],
    query: str,
    now: datetime | None = None,
) -> list[UnifiedProject]:
    """
    Sort projects by descending relevance.

    `now` is fixed once for the whole list so every project is judged
    against the same clock. Ties keep their input order.
    """
    terms = QueryTerms.parse(query)
    at = _resolve_now(now)
    items = list(projects)
    scores = {id(p): calculate_relevance_score(p, terms, at) for p in items}
    return sorted(items, key=lambda p: scores[id(p)], reverse=True)
