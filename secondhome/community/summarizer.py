from __future__ import annotations

import logging

from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import chat_completion, parse_json_object
from .models import CommunityAnalysis, RedditPost, SearchContext

logger = logging.getLogger(__name__)

SENTIMENTS = {"positive", "negative", "mixed", "neutral"}
SAFETY_RATINGS = {"High", "Medium", "Low"}

SUMMARY_PROMPT = """\
Analyze these Reddit posts about "{place}" ({categories}).

Strictly ignore posts that are clearly about something else (even if they share a keyword).

Data:
{posts}

Return JSON:
{{
  "summary": "Concise summary of user opinions.",
  "sentiment": "positive/negative/mixed",
  "safety_rating": "High/Medium/Low",
  "verdict": "One sentence verdict.",
  "pros": [],
  "cons": []
}}"""


def _format_posts(posts: list[RedditPost], excerpt_chars: int) -> str:
    return "\n\n".join(
        f"[{i}] (Score: {p.relevance_score}) {p.title}\n{p.body[:excerpt_chars]}"
        for i, p in enumerate(posts, start=1)
    )


def build_summary_prompt(
    context: SearchContext,
    posts: list[RedditPost],
    excerpt_chars: int = 300,
) -> str:
    return SUMMARY_PROMPT.format(
        place=context.raw_input,
        categories=", ".join(context.category_keywords),
        posts=_format_posts(posts, excerpt_chars),
    )


def _fallback_analysis(context: SearchContext, posts: list[RedditPost]) -> CommunityAnalysis:
    return CommunityAnalysis(
        summary=(
            f"Found {len(posts)} Reddit discussion(s) mentioning {context.raw_input}. "
            "An AI summary is unavailable right now; open the sources to read them."
        ),
        sentiment="neutral",
    )


def _clean_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if str(v).strip()]


def summarize_posts(
    context: SearchContext,
    posts: list[RedditPost],
    excerpt_chars: int = 300,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> CommunityAnalysis:
    """
    LLM summary of the posts' sentiment.

    Falls back to a plain count-based summary when the LLM is disabled,
    fails, or returns something that is not a JSON object.
    """
    if not config.available or not posts:
        return _fallback_analysis(context, posts)

    try:
        content = chat_completion(
            [{"role": "user", "content": build_summary_prompt(context, posts, excerpt_chars)}],
            temperature=0.1,
            json_mode=True,
            config=config,
        )
    except Exception:
        logger.warning("Community review summary failed, using fallback", exc_info=True)
        return _fallback_analysis(context, posts)

    parsed = parse_json_object(content)
    if not parsed or not parsed.get("summary"):
        logger.warning("Community review summary was not usable JSON: %r", content[:200])
        return _fallback_analysis(context, posts)

    sentiment = str(parsed.get("sentiment", "")).strip().lower()
    safety = str(parsed.get("safety_rating", "")).strip().capitalize()

    return CommunityAnalysis(
        summary=str(parsed["summary"]).strip(),
        sentiment=sentiment if sentiment in SENTIMENTS else "mixed",
        safety_rating=safety if safety in SAFETY_RATINGS else None,
        verdict=str(parsed.get("verdict") or "").strip() or None,
        pros=_clean_list(parsed.get("pros")),
        cons=_clean_list(parsed.get("cons")),
    )
