from __future__ import annotations

import logging
from typing import Any

import requests

from .config import DEFAULT_COMMUNITY_CONFIG, CommunityConfig
from .context import build_queries, build_subreddits
from .models import RedditPost, RelevanceType, SearchContext
from .scoring import calculate_relevance, classify_relevance

logger = logging.getLogger(__name__)


def fetch_subreddit_search(
    subreddit: str,
    query: str,
    limit: int,
    config: CommunityConfig = DEFAULT_COMMUNITY_CONFIG,
) -> list[dict[str, Any]]:
    """
    Raw post dicts from Reddit's per-subreddit search.

    Returns an empty list on any HTTP or decoding failure.
    """
    url = f"{config.base_url}/r/{subreddit}/search.json"
    params = {
        "q": query,
        "restrict_sr": 1,
        "sort": "relevance",
        "limit": limit,
    }
    try:
        response = requests.get(
            url,
            params=params,
            headers={"User-Agent": config.user_agent},
            timeout=config.timeout,
        )
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError):
        logger.warning("Reddit search failed for r/%s q=%r", subreddit, query, exc_info=True)
        return []

    children = (payload.get("data") or {}).get("children") or []
    return [child.get("data") or {} for child in children]


def _to_post(raw: dict[str, Any], relevance: int, relevance_type: RelevanceType) -> RedditPost:
    return RedditPost(
        title=raw.get("title") or "",
        body=raw.get("selftext") or "",
        url=f"https://reddit.com{raw.get('permalink', '')}",
        score=int(raw.get("score") or 0),
        created=float(raw.get("created_utc") or 0.0),
        subreddit=raw.get("subreddit") or "",
        relevance_score=relevance,
        relevance_type=relevance_type,
    )


def _rank(posts: list[RedditPost], limit: int) -> list[RedditPost]:
    # Later duplicates of a URL replace earlier ones, keeping first-seen order
    unique: dict[str, RedditPost] = {}
    for post in posts:
        unique[post.url] = post
    ranked = sorted(unique.values(), key=lambda p: p.relevance_score, reverse=True)
    return ranked[:limit]


def smart_search(
    context: SearchContext,
    config: CommunityConfig = DEFAULT_COMMUNITY_CONFIG,
) -> list[RedditPost]:
    """
    Search broadly with several query variations, then filter locally.

    Every post is scored against the context as soon as it arrives and
    dropped when it falls below the relevance threshold.
    """
    queries = build_queries(context)
    subreddits = build_subreddits(
        context, config.fallback_subreddits, config.subreddits_per_query,
    )
    logger.info("Community search queries=%s subreddits=%s", queries, subreddits)

    kept: list[RedditPost] = []
    for query in queries:
        for sub in subreddits:
            for raw in fetch_subreddit_search(sub, query, config.results_per_query, config):
                relevance = calculate_relevance(raw, context)
                if relevance < config.relevance_threshold:
                    continue
                kept.append(_to_post(
                    raw, relevance, classify_relevance(relevance, config.specific_threshold),
                ))

    return _rank(kept, config.max_posts)


def locality_fallback(
    context: SearchContext,
    config: CommunityConfig = DEFAULT_COMMUNITY_CONFIG,
) -> list[RedditPost]:
    """
    Neighbourhood-level posts ("living in <locality>") for when nothing
    mentions the specific place. Every result is tagged as context only.
    """
    if not context.locality:
        return []

    area_context = context.model_copy(update={
        "raw_input": context.locality,
        "name_tokens": [context.locality],
    })
    query = f"living in {context.locality}"

    kept: list[RedditPost] = []
    for raw in fetch_subreddit_search(context.city, query, config.locality_results, config):
        relevance = calculate_relevance(raw, area_context)
        if relevance < config.relevance_threshold:
            continue
        kept.append(_to_post(raw, relevance, RelevanceType.neighborhood_context))

    return _rank(kept, config.max_posts)
