from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from ..analytics.store import record_event
from ..listings.data_store import get_mess
from ..listings.models import AIReview, Mess
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import chat_completion, parse_json_object
from .errors import AIReviewFailed, AIServiceUnavailable, MessNotFound
from .models import AIReviewResult, ReviewAnalysis, ReviewRecommendation

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------

REVIEW_PROMPT = """\
You are an AI moderation assistant for a student mess/food subscription platform.
Review the following mess listing and provide a suggestion-only assessment (DO NOT auto-approve or auto-reject).

Mess Details:
{details}

Analyze the listing for:
1) Realness/Legitimacy: does it look genuine?
2) Pricing reasonableness: price vs details and location fields.
3) Completeness: required fields, contact clarity, menu/timings, photos count.
4) Safety & compliance: suspicious claims, spam/scam indicators.
5) Delivery/Packaging: are charges reasonable and consistent?

Return ONLY valid JSON (no markdown) in this exact shape:
{{
  "confidence": 0-100,
  "score": 0-100,
  "recommendation": "APPROVE" | "REJECT" | "MANUAL_REVIEW",
  "summary": "short human summary",
  "analysis": {{
    "legitimacy": "...",
    "pricing": "...",
    "completeness": "...",
    "safety": "...",
    "deliveryPackaging": "..."
  }},
  "redFlags": ["..."],
  "reason": "one-liner why this recommendation"
}}

Important: This is only a suggestion to help the admin. Never state that you approved/rejected it."""

_INVALID_NOTE = "AI returned invalid JSON"

INVALID_OUTPUT_RESULT = AIReviewResult(
    confidence=0,
    score=0,
    recommendation=ReviewRecommendation.manual_review,
    summary="AI response was invalid; please review manually.",
    analysis=ReviewAnalysis(
        legitimacy=_INVALID_NOTE,
        pricing=_INVALID_NOTE,
        completeness=_INVALID_NOTE,
        safety=_INVALID_NOTE,
        delivery_packaging=_INVALID_NOTE,
    ),
    red_flags=[_INVALID_NOTE],
    reason="AI response parsing failed",
)


def build_listing_payload(mess: Mess) -> dict[str, Any]:
    """The listing fields the model gets to see, keyed the way owners fill them in."""
    return {
        "name": mess.name,
        "description": mess.description,
        "address": mess.address,
        "location": mess.location,
        "city": mess.city,
        "state": mess.state,
        "pincode": mess.pincode,
        "monthlyPrice": mess.monthly_price,
        "dailyPrice": mess.daily_price,
        "trialDays": mess.trial_days,
        "homeDeliveryAvailable": mess.home_delivery_available,
        "deliveryRadius": mess.delivery_radius,
        "deliveryCharges": mess.delivery_charges,
        "packagingAvailable": mess.packaging_available,
        "packagingPrice": mess.packaging_price,
        "mealTypes": mess.meal_types,
        "cuisineTypes": mess.cuisine_types,
        "dietTypes": mess.diet_types,
        "openingHours": mess.opening_hours.model_dump(),
        "amenities": mess.amenities,
        "capacity": mess.capacity,
        "contactName": mess.contact_name,
        "contactPhone": mess.contact_phone,
        "contactEmail": mess.contact_email,
        "imagesCount": len(mess.images),
    }


def build_review_prompt(mess: Mess) -> str:
    details = json.dumps(build_listing_payload(mess), indent=2, ensure_ascii=False)
    return REVIEW_PROMPT.format(details=details)


# ---------------------------------------------------------------------------
# Output parsing
# ---------------------------------------------------------------------------


def _clamp_percent(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return int(round(max(0.0, min(100.0, number))))


def _coerce_recommendation(value: Any) -> ReviewRecommendation:
    normalized = str(value or "").strip().upper().replace(" ", "_").replace("-", "_")
    try:
        return ReviewRecommendation(normalized)
    except ValueError:
        return ReviewRecommendation.manual_review


def parse_review_output(text: str | None) -> AIReviewResult:
    """
    Turn raw model output into a review result.

    Output that holds no JSON object becomes the invalid-output result,
    which always asks for a manual review.
    """
    parsed = parse_json_object(text)
    if parsed is None:
        return INVALID_OUTPUT_RESULT.model_copy(deep=True)

    raw_analysis = parsed.get("analysis")
    if not isinstance(raw_analysis, dict):
        raw_analysis = {}
    analysis = ReviewAnalysis(
        legitimacy=str(raw_analysis.get("legitimacy", "")),
        pricing=str(raw_analysis.get("pricing", "")),
        completeness=str(raw_analysis.get("completeness", "")),
        safety=str(raw_analysis.get("safety", "")),
        delivery_packaging=str(
            raw_analysis.get("deliveryPackaging", raw_analysis.get("delivery_packaging", ""))
        ),
    )

    red_flags = parsed.get("redFlags", parsed.get("red_flags", []))
    if not isinstance(red_flags, list):
        red_flags = [red_flags] if red_flags else []

    return AIReviewResult(
        confidence=_clamp_percent(parsed.get("confidence")),
        score=_clamp_percent(parsed.get("score")),
        recommendation=_coerce_recommendation(parsed.get("recommendation")),
        summary=str(parsed.get("summary") or ""),
        analysis=analysis,
        red_flags=[str(f) for f in red_flags if str(f).strip()],
        reason=str(parsed.get("reason") or ""),
    )


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


def run_ai_review(
    mess_id: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    now: datetime | None = None,
) -> tuple[AIReviewResult, Mess]:
    """
    Ask the LLM for a moderation suggestion and store it on the mess.

    The mess's approval state is never changed here.
    """
    if not config.available:
        raise AIServiceUnavailable("AI service not configured")

    mess = get_mess(mess_id)
    if mess is None:
        raise MessNotFound(mess_id)

    try:
        content = chat_completion(
            [{"role": "user", "content": build_review_prompt(mess)}],
            temperature=0.3,
            config=config,
        )
    except Exception as exc:
        logger.error("AI review call failed for mess %s", mess_id, exc_info=True)
        raise AIReviewFailed(str(exc)) from exc

    result = parse_review_output(content)
    if result == INVALID_OUTPUT_RESULT:
        logger.warning("AI review for mess %s returned unparseable output", mess_id)

    mess.ai_review = AIReview(
        reviewed=True,
        reviewed_at=now or datetime.now(),
        confidence=result.confidence,
        score=result.score,
        recommendation=result.recommendation.value,
        summary=result.summary,
        analysis=result.analysis.model_dump(by_alias=True),
        red_flags=list(result.red_flags),
        reason=result.reason,
    )

    record_event("ai_review", {
        "mess_id": mess_id,
        "recommendation": result.recommendation.value,
        "confidence": result.confidence,
        "score": result.score,
    })
    return result, mess
