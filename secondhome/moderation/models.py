from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..listings.models import Mess


class ReviewRecommendation(str, Enum):
    approve = "APPROVE"
    reject = "REJECT"
    manual_review = "MANUAL_REVIEW"


class ReviewAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    legitimacy: str = ""
    pricing: str = ""
    completeness: str = ""
    safety: str = ""
    delivery_packaging: str = Field(default="", alias="deliveryPackaging")


class AIReviewResult(BaseModel):
    confidence: int = Field(default=0, ge=0, le=100)
    score: int = Field(default=0, ge=0, le=100)
    recommendation: ReviewRecommendation = ReviewRecommendation.manual_review
    summary: str = ""
    analysis: ReviewAnalysis = Field(default_factory=ReviewAnalysis)
    red_flags: list[str] = Field(default_factory=list)
    reason: str = ""


class AIReviewResponse(BaseModel):
    message: str
    result: AIReviewResult
    mess: Mess


class RejectRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class ModerationResponse(BaseModel):
    message: str
    mess: Mess
