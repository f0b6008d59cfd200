from __future__ import annotations

import re

from .models import SearchContext

KNOWN_CITIES = [
    "hyderabad", "bangalore", "bengaluru", "mumbai",
    "delhi", "pune", "chennai", "kolkata",
]

GENERIC_WORDS = {
    "hostel", "pg", "hotel", "building", "towers", "heights",
    "residency", "stadium", "college", "school", "mall",
}

# Keyword list per place category; first match wins
_CATEGORY_RULES: list[tuple[tuple[str, ...], list[str]]] = [
    (("stadium", "ground"), ["sports", "match", "cricket", "football", "arena"]),
    (("hostel", "pg", "residency"), ["stay", "food", "rent", "room", "owner"]),
    (("mall",), ["shopping", "theatre", "movie", "parking"]),
    (("college", "institute"), ["campus", "faculty", "placement", "fest"]),
    (("hospital",), ["doctor", "treatment", "emergency"]),
]

# Matched anywhere in the name, "opp" before "opposite"
_DIRECTION_RE = re.compile(r"near|behind|opp|opposite|beside", re.IGNORECASE)
_TOKEN_SPLIT_RE = re.compile(r"[\s,]+")


def infer_category_keywords(name: str) -> list[str]:
    """Related words for the kind of place, e.g. a stadium gets sports terms."""
    lower = name.lower()
    for markers, keywords in _CATEGORY_RULES:
        if any(m in lower for m in markers):
            return list(keywords)
    return []


def parse_search_context(location_name: str, address: str = "") -> SearchContext:
    clean_name = _DIRECTION_RE.sub(" ", location_name).strip()

    full_string = f"{location_name} {address}".lower()
    city = next((c for c in KNOWN_CITIES if c in full_string), "")

    name_tokens = [t for t in _TOKEN_SPLIT_RE.split(clean_name.lower()) if len(t) > 2]

    # The distinctive part of the name, e.g. "gachibowli" in "Gachibowli Stadium"
    locality = next(
        (t for t in name_tokens if t not in GENERIC_WORDS and t != city),
        "",
    )

    return SearchContext(
        raw_input=location_name,
        name_tokens=name_tokens,
        locality=locality,
        city=city or "india",
        category_keywords=infer_category_keywords(clean_name),
    )


def build_queries(context: SearchContext) -> list[str]:
    """Search query variations, from most to least specific, deduplicated."""
    full_name = f'"{context.raw_input}"'
    all_tokens = " ".join(context.name_tokens)
    locality_category = ""
    if context.category_keywords:
        locality_category = f"{context.locality} {context.category_keywords[0]}".strip()

    queries: list[str] = []
    for q in (full_name, all_tokens, locality_category):
        if len(q) > 2 and q not in queries:
            queries.append(q)
    return queries


def build_subreddits(context: SearchContext, fallbacks: tuple[str, ...], limit: int) -> list[str]:
    subs: list[str] = []
    for sub in (context.city, *fallbacks):
        if sub and sub not in subs:
            subs.append(sub)
    return subs[:limit]
