from __future__ import annotations

from typing import Any

from .models import RelevanceType, SearchContext

TOKEN_WEIGHT = 10
CATEGORY_WEIGHT = 3
TITLE_TOKEN_WEIGHT = 5
REMOVED_PENALTY = 100

_REMOVED_BODIES = {"[removed]", "[deleted]"}


def calculate_relevance(post: dict[str, Any], context: SearchContext) -> int:
    """
    Heuristic relevance of a raw Reddit post to the search context.

    Name tokens anywhere in the post weigh most, category keywords add a
    little, name tokens in the title add a bonus, and removed or deleted
    posts are pushed far below any threshold.
    """
    title = (post.get("title") or "").lower()
    body = post.get("selftext") or ""
    content = f"{title} {body.lower()}"

    score = 0
    score += TOKEN_WEIGHT * sum(1 for t in context.name_tokens if t in content)
    score += CATEGORY_WEIGHT * sum(1 for k in context.category_keywords if k in content)

    if body in _REMOVED_BODIES:
        score -= REMOVED_PENALTY

    score += TITLE_TOKEN_WEIGHT * sum(1 for t in context.name_tokens if t in title)
    return score


def classify_relevance(score: int, specific_threshold: int = 20) -> RelevanceType:
    if score > specific_threshold:
        return RelevanceType.specific_building
    return RelevanceType.neighborhood_context
