from __future__ import annotations

from secondhome.community.context import (
    build_queries,
    build_subreddits,
    infer_category_keywords,
    parse_search_context,
)
from secondhome.community.models import SearchContext


class TestParseSearchContext:
    def test_stadium_with_city(self):
        ctx = parse_search_context("Gachibowli Stadium", "Gachibowli, Hyderabad")
        assert ctx.raw_input == "Gachibowli Stadium"
        assert ctx.name_tokens == ["gachibowli", "stadium"]
        assert ctx.locality == "gachibowli"
        assert ctx.city == "hyderabad"
        assert ctx.category_keywords[0] == "sports"

    def test_city_defaults_to_india(self):
        ctx = parse_search_context("Sunrise Boys PG")
        assert ctx.city == "india"

    def test_direction_words_removed(self):
        ctx = parse_search_context("Hostel near Madhapur Metro")
        assert "near" not in ctx.name_tokens
        assert ctx.locality == "madhapur"

    def test_direction_words_removed_inside_other_words(self):
        ctx = parse_search_context("Nearby Residency")
        assert ctx.name_tokens == ["residency"]
        assert ctx.locality == ""

    def test_opp_matched_before_opposite(self):
        ctx = parse_search_context("Opposite Inorbit Mall")
        assert ctx.name_tokens == ["osite", "inorbit", "mall"]
        assert ctx.locality == "osite"

    def test_short_tokens_dropped(self):
        ctx = parse_search_context("ABC PG Koramangala, Bangalore")
        assert ctx.name_tokens == ["abc", "koramangala", "bangalore"]
        assert ctx.city == "bangalore"
        assert ctx.locality == "abc"

    def test_city_token_is_not_locality(self):
        ctx = parse_search_context("Hyderabad Hostel")
        assert ctx.locality == ""

    def test_generic_only_name(self):
        ctx = parse_search_context("PG Hostel")
        assert ctx.locality == ""
        assert ctx.name_tokens == ["hostel"]


class TestCategoryKeywords:
    def test_known_categories(self):
        assert "food" in infer_category_keywords("Lotus Girls Hostel")
        assert "shopping" in infer_category_keywords("Inorbit Mall")
        assert "campus" in infer_category_keywords("Christ College")
        assert "doctor" in infer_category_keywords("Care Hospital")

    def test_unknown_category(self):
        assert infer_category_keywords("Skyline Towers") == []


class TestBuildQueries:
    def test_three_variations(self):
        ctx = parse_search_context("Gachibowli Stadium")
        assert build_queries(ctx) == [
            '"Gachibowli Stadium"',
            "gachibowli stadium",
            "gachibowli sports",
        ]

    def test_no_category_query_without_keywords(self):
        ctx = parse_search_context("Skyline Towers")
        assert build_queries(ctx) == ['"Skyline Towers"', "skyline towers"]

    def test_short_queries_dropped(self):
        ctx = SearchContext(raw_input="", name_tokens=[])
        assert build_queries(ctx) == []


class TestBuildSubreddits:
    def test_city_first_then_fallbacks(self):
        ctx = SearchContext(raw_input="x", city="pune")
        assert build_subreddits(ctx, ("india", "hyderabad"), 2) == ["pune", "india"]

    def test_duplicates_removed(self):
        ctx = SearchContext(raw_input="x", city="hyderabad")
        assert build_subreddits(ctx, ("hyderabad", "india", "bangalore"), 3) == [
            "hyderabad", "india", "bangalore",
        ]
