from __future__ import annotations

from collections import Counter
from typing import Any

from .views import get_views


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total else 0.0


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "search"]
    community = [e for e in events if e["type"] == "community_review"]
    reviews = [e for e in events if e["type"] == "ai_review"]
    moderation = [e for e in events if e["type"] == "moderation"]
    chats = [e for e in events if e["type"] == "chatbot"]

    # Average search response time
    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Top cities searched
    city_counter: Counter[str] = Counter()
    for s in searches:
        city_counter[s.get("city") or "any"] += 1
    top_cities = [{"name": n, "count": c} for n, c in city_counter.most_common(10)]

    # Property type usage
    type_counter: Counter[str] = Counter()
    for s in searches:
        for t in s.get("types", []) or []:
            type_counter[t] += 1

    # Community reviews
    community_total = len(community)
    specific = sum(1 for e in community if e.get("found_specific"))
    fallback = sum(1 for e in community if e.get("used_fallback"))
    empty = sum(1 for e in community if not e.get("source_count"))
    cache_hits = sum(1 for e in community if e.get("cache_hit"))
    top_places = Counter(e.get("location", "unknown") for e in community).most_common(10)

    # AI review recommendation mix and admin decisions
    recommendation_counter = Counter(e.get("recommendation") for e in reviews)
    actions = Counter(e.get("action") for e in moderation)

    # Property views
    views = get_views()
    viewed = Counter(v["property_id"] for v in views).most_common(10)

    return {
        "total_searches": len(searches),
        "avg_response_time_ms": avg_time,
        "top_cities": top_cities,
        "property_type_usage": dict(type_counter),
        "community_reviews": {
            "total": community_total,
            "specific_rate": _rate(specific, community_total),
            "fallback_rate": _rate(fallback, community_total),
            "empty_rate": _rate(empty, community_total),
            "cache_hit_rate": _rate(cache_hits, community_total),
            "top_places": [{"name": n, "count": c} for n, c in top_places],
        },
        "ai_reviews": {
            "total": len(reviews),
            "recommendations": dict(recommendation_counter),
        },
        "moderation": {
            "approved": actions.get("approve", 0),
            "rejected": actions.get("reject", 0),
        },
        "chatbot": {
            "total": len(chats),
            "executive_requests": sum(1 for e in chats if e.get("wants_executive")),
            "logged_in_rate": _rate(sum(1 for e in chats if e.get("logged_in")), len(chats)),
        },
        "property_views": {
            "total": len(views),
            "most_viewed": [{"property_id": pid, "count": c} for pid, c in viewed],
        },
    }
