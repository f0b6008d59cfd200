from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class RelevanceType(str, Enum):
    specific_building = "specific_building"
    neighborhood_context = "neighborhood_context"


class SearchContext(BaseModel):
    raw_input: str
    name_tokens: list[str] = Field(default_factory=list)
    locality: str = ""
    city: str = "india"
    category_keywords: list[str] = Field(default_factory=list)


class RedditPost(BaseModel):
    title: str
    body: str = ""
    url: str
    score: int = 0
    created: float = 0.0
    subreddit: str = ""
    relevance_score: int
    relevance_type: RelevanceType


class CommunityReviewRequest(BaseModel):
    location_name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(default="", max_length=500)


class ReviewSource(BaseModel):
    title: str
    url: str
    subreddit: str
    score: int
    relevance_type: RelevanceType


class CommunityAnalysis(BaseModel):
    summary: str
    sentiment: str = "neutral"
    safety_rating: str | None = None
    verdict: str | None = None
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)


class CommunityReviewData(CommunityAnalysis):
    found_specific_reviews: bool = False
    source_count: int = 0
    used_locality_fallback: bool = False
    sources: list[ReviewSource] = Field(default_factory=list)


class CommunityReviewResponse(BaseModel):
    success: bool = True
    data: CommunityReviewData
