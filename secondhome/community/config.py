from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CommunityConfig:
    base_url: str = "https://old.reddit.com"
    user_agent: str = "Mozilla/5.0 (StudentHousingBot)"
    timeout: float = 8.0
    fallback_subreddits: tuple[str, ...] = ("india", "hyderabad", "bangalore")
    subreddits_per_query: int = 2
    results_per_query: int = 10
    locality_results: int = 5
    relevance_threshold: int = 10
    specific_threshold: int = 20
    max_posts: int = 8
    body_excerpt_chars: int = 300
    cache_ttl: float = 30 * 60


DEFAULT_COMMUNITY_CONFIG = CommunityConfig()
