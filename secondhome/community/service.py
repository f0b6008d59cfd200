from __future__ import annotations

import logging
import time

from ..analytics.store import record_event
from ..listings.cache import cache_get, cache_set
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from .config import DEFAULT_COMMUNITY_CONFIG, CommunityConfig
from .context import parse_search_context
from .models import CommunityReviewData, RelevanceType, ReviewSource
from .reddit import locality_fallback, smart_search
from .summarizer import summarize_posts

logger = logging.getLogger(__name__)

NO_DISCUSSIONS = "No relevant discussions found."


def get_community_reviews(
    location_name: str,
    address: str = "",
    config: CommunityConfig = DEFAULT_COMMUNITY_CONFIG,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> CommunityReviewData:
    start_time = time.time()
    cache_key = {"location_name": location_name.strip().lower(), "address": address.strip().lower()}

    cached = cache_get("community", cache_key)
    if cached is not None:
        record_event("community_review", {
            "location": location_name,
            "source_count": cached.source_count,
            "found_specific": cached.found_specific_reviews,
            "used_fallback": cached.used_locality_fallback,
            "cache_hit": True,
            "response_time_ms": round((time.time() - start_time) * 1000, 1),
        })
        return cached

    # 1. Analyze the place name
    context = parse_search_context(location_name, address)
    logger.info("Community context: %s", context.model_dump())

    # 2. Fetch and filter
    posts = smart_search(context, config)
    used_fallback = False

    # 3. Nothing about the specific place: fall back to the neighbourhood
    if not posts and context.locality:
        logger.info("No specific matches for %r, falling back to locality %r",
                    location_name, context.locality)
        posts = locality_fallback(context, config)
        used_fallback = bool(posts)

    logger.info("Found %d relevant posts for %r", len(posts), location_name)

    if not posts:
        result = CommunityReviewData(
            summary=NO_DISCUSSIONS,
            sentiment="neutral",
            found_specific_reviews=False,
            source_count=0,
            sources=[],
        )
    else:
        # 4. Summarize
        analysis = summarize_posts(context, posts, config.body_excerpt_chars, llm_config)
        found_specific = not used_fallback and any(
            p.relevance_type == RelevanceType.specific_building for p in posts
        )
        result = CommunityReviewData(
            **analysis.model_dump(),
            found_specific_reviews=found_specific,
            source_count=len(posts),
            used_locality_fallback=used_fallback,
            sources=[
                ReviewSource(
                    title=p.title,
                    url=p.url,
                    subreddit=p.subreddit,
                    score=p.score,
                    relevance_type=p.relevance_type,
                )
                for p in posts
            ],
        )

    cache_set("community", cache_key, result, ttl=config.cache_ttl)

    record_event("community_review", {
        "location": location_name,
        "source_count": result.source_count,
        "found_specific": result.found_specific_reviews,
        "used_fallback": result.used_locality_fallback,
        "cache_hit": False,
        "response_time_ms": round((time.time() - start_time) * 1000, 1),
    })
    return result
