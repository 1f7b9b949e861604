"""
Bounty and category search.

Matching and scoring are plain heuristics over lower-cased text: substring and
word-boundary checks plus fixed point weights. Each query word earns only its
best tier, so an exact title match always outranks a partial one.
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Iterable
from urllib.parse import quote
from bounty_platform.schemas.bounty import Bounty
from bounty_platform.schemas.search import SearchMetadata, SearchResult
from bounty_platform.services.normalize import extract_summary, normalize_status, split_categories

SCORE_TITLE_EXACT = 100
SCORE_TITLE_PREFIX = 80
SCORE_TITLE_CONTAINS = 60
SCORE_WORD_EXACT = 40
SCORE_WORD_PREFIX = 30
SCORE_WORD_CONTAINS = 20
SCORE_WORD_ELSEWHERE = 10
TYPE_BONUS = {"bounty": 5, "category": 0}
TYPE_ORDER = {"bounty": 0, "category": 1}

MAX_LIMIT = 50
DEFAULT_LIMIT = 10
DESCRIPTION_PREVIEW = 150

_WORD = re.compile(r"\w+")


def tokenize(text: str) -> list[str]:
    return text.lower().split()


def squash(text: str) -> str:
    """Lower-case and collapse runs of whitespace to single spaces."""
    return " ".join(tokenize(text))


def words_of(text: str) -> list[str]:
    return _WORD.findall(text.lower())


def _searchable_text(b: Bounty) -> str:
    parts = [b.title, b.description, b.category, *b.skills, *b.tags]
    return " ".join(p for p in parts if p).lower()


def _token_matches(token: str, text: str, words: list[str]) -> bool:
    if re.search(r"\b" + re.escape(token), text):
        return True
    return any(w.startswith(token) or token in w for w in words)


def matches_query(query: str, text: str) -> bool:
    """Whole-query substring, or every token hits a word boundary / word prefix / word substring."""
    q = squash(query)
    if not q:
        return True
    text = squash(text)
    if q in text:
        return True
    words = words_of(text)
    return all(_token_matches(tok, text, words) for tok in tokenize(q))


def score(query: str, title: str, other_text: str, result_type: str) -> int:
    q = squash(query)
    t = squash(title)
    other = squash(other_text)
    points = 0
    if t == q:
        points += SCORE_TITLE_EXACT
    if t.startswith(q):
        points += SCORE_TITLE_PREFIX
    if q in t:
        points += SCORE_TITLE_CONTAINS

    title_words = words_of(t)
    for word in tokenize(q):
        if word in title_words:
            points += SCORE_WORD_EXACT
        elif any(tw.startswith(word) for tw in title_words):
            points += SCORE_WORD_PREFIX
        elif any(word in tw for tw in title_words):
            points += SCORE_WORD_CONTAINS
        elif word in other:
            points += SCORE_WORD_ELSEWHERE
    return points + TYPE_BONUS.get(result_type, 0)


@dataclass
class BountyFilters:
    categories: list[str]
    statuses: list[str]
    min_reward: float | None = None
    max_reward: float | None = None
    include_inactive: bool = False

    def accepts(self, b: Bounty) -> bool:
        if self.categories:
            cats = [c.lower() for c in split_categories(b.category)]
            if not any(want.lower() in c for want in self.categories for c in cats):
                return False
        if self.statuses:
            wanted = {normalize_status(s) for s in self.statuses}
            if b.status not in wanted:
                return False
        elif not self.include_inactive and b.status == "closed":
            return False
        if self.min_reward is not None and b.reward < self.min_reward:
            return False
        if self.max_reward is not None and b.reward > self.max_reward:
            return False
        return True


def search_bounties(query: str, bounties: Iterable[Bounty], filters: BountyFilters) -> list[SearchResult]:
    out: list[SearchResult] = []
    for b in bounties:
        if not filters.accepts(b):
            continue
        if not matches_query(query, _searchable_text(b)):
            continue
        out.append(SearchResult(
            id=b.id,
            title=b.title,
            description=extract_summary(b.description, DESCRIPTION_PREVIEW),
            type="bounty",
            url=f"/bounties/{b.id}",
            metadata=SearchMetadata(reward=b.reward, deadline=b.deadline, status=b.status, category=b.category),
        ))
    return out


def category_slug(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


def search_categories(query: str, categories: Iterable[str]) -> list[SearchResult]:
    q = squash(query)
    return [
        SearchResult(
            id=f"category-{category_slug(c)}",
            title=c,
            description=f"Browse all bounties in the {c} category",
            type="category",
            url=f"/bounties?category={quote(c)}",
        )
        for c in categories
        if not q or q in c.lower()
    ]


def rank(results: list[SearchResult], query: str, bodies: dict[str, str] | None = None) -> list[SearchResult]:
    """
    Sort by score desc, then content type (bounties first), then title.
    bodies maps result id -> full non-title text used for the per-word fallback tier;
    without it the result description is used.
    """
    bodies = bodies or {}

    def key(r: SearchResult):
        s = score(query, r.title, bodies.get(r.id, r.description), r.type)
        return (-s, TYPE_ORDER.get(r.type, 99), r.title.lower())

    return sorted(results, key=key)


def run_search(
    query: str,
    *,
    bounties: list[Bounty],
    categories: list[str],
    types: list[str],
    filters: BountyFilters,
    limit: int = DEFAULT_LIMIT,
) -> tuple[list[SearchResult], bool]:
    """Returns (page, has_more)."""
    limit = max(1, min(limit, MAX_LIMIT))
    results: list[SearchResult] = []
    bodies: dict[str, str] = {}
    if "bounty" in types:
        results.extend(search_bounties(query, bounties, filters))
        bodies = {b.id: _searchable_text(b) for b in bounties}
    if "category" in types:
        results.extend(search_categories(query, categories))
    ranked = rank(results, query, bodies)
    return ranked[:limit], len(ranked) > limit
