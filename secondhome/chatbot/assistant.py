from __future__ import annotations

import logging
import math
import re
from typing import Any

import pandas as pd

from ..analytics.store import record_event
from ..analytics.views import recent_views
from ..listings.data_store import approved_messes, approved_properties, get_property
from ..listings.distances import round_half_up
from ..listings.models import Mess, Property
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import chat_completion
from .models import (
    CatalogStats,
    ChatbotRequest,
    ChatbotResponse,
    TopRatedProperty,
    ViewedProperty,
)

logger = logging.getLogger(__name__)

_EXECUTIVE_RE = re.compile(
    r"executive|human|agent|talk to someone|speak with|connect with|help me"
    r"|frustrated|angry|complaint|issue|problem",
    re.IGNORECASE,
)

_BUDGET_BINS = [0, 5000, 10000, 15000, 20000, math.inf]
_BUDGET_LABELS = ["under5k", "5k-10k", "10k-15k", "15k-20k", "above20k"]
_MAX_RECENT = 5

EMPTY_MESSAGE_REPLY = "Please ask me something!"
NO_KEY_REPLY = (
    "Hi! I'm currently learning. You can browse our properties at /listings or "
    "contact us at /contact. How can I help you find your perfect accommodation? 😊"
)
FAILURE_REPLY = (
    "I'm having trouble right now. Please try asking something else or refresh the page! 😊"
)
EXECUTIVE_NOTE = (
    "USER IS REQUESTING TO SPEAK WITH AN EXECUTIVE/HUMAN. "
    "Acknowledge this and offer to connect them."
)


def detect_executive_request(message: str) -> bool:
    return bool(_EXECUTIVE_RE.search(message or ""))


# ---------------------------------------------------------------------------
# Catalogue statistics
# ---------------------------------------------------------------------------


def compute_catalog_stats(properties: list[Property], messes: list[Mess]) -> CatalogStats:
    """Aggregate figures the assistant is allowed to quote."""
    df = pd.DataFrame(
        [p.model_dump(include={"title", "location", "city", "price", "type", "gender", "rating"})
         for p in properties],
        columns=["title", "location", "city", "price", "type", "gender", "rating"],
    )

    cities = sorted(
        set(df["city"].dropna().tolist()) | {m.city for m in messes if m.city}
    )
    colleges = sorted({c.name for p in properties for c in p.nearby_colleges if c.name})

    if df.empty:
        return CatalogStats(
            total_messes=len(messes),
            total_cities=len(cities),
            budget_ranges=dict.fromkeys(_BUDGET_LABELS, 0),
            gender_counts={"boys": 0, "girls": 0, "unisex": 0},
            cities=cities,
            colleges=colleges,
        )

    type_counts = df["type"].value_counts()
    gender_counts = df["gender"].value_counts()

    budget = pd.cut(df["price"], bins=_BUDGET_BINS, labels=_BUDGET_LABELS, right=False)
    budget_counts = budget.value_counts()

    positive_prices = df.loc[df["price"] > 0, "price"]
    rated = df[df["rating"] > 0].sort_values("rating", ascending=False).head(5)

    return CatalogStats(
        total_properties=len(df),
        total_messes=len(messes),
        total_cities=len(cities),
        pg_count=int(type_counts.get("PG", 0)),
        flat_count=int(type_counts.get("Flat", 0)),
        hostel_count=int(type_counts.get("Hostel", 0)),
        avg_price=int(round_half_up(df["price"].mean())),
        min_price=int(positive_prices.min()) if not positive_prices.empty else 0,
        max_price=int(df["price"].max()),
        budget_ranges={label: int(budget_counts.get(label, 0)) for label in _BUDGET_LABELS},
        gender_counts={
            "boys": int(gender_counts.get("Male", 0)),
            "girls": int(gender_counts.get("Female", 0)),
            "unisex": int(gender_counts.get("Unisex", 0)),
        },
        top_rated=[
            TopRatedProperty(
                title=row["title"], location=row["location"],
                price=row["price"], rating=row["rating"],
            )
            for _, row in rated.iterrows()
        ],
        cities=cities,
        colleges=colleges,
    )


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


def build_system_context(
    stats: CatalogStats,
    user: dict[str, Any] | None = None,
    recent: list[Property] | None = None,
    user_context: str | None = None,
) -> str:
    if user:
        who = f"- Current user: {user.get('name') or user.get('username')} (logged in)"
    else:
        who = "- Current user: Guest (not logged in)"

    b = stats.budget_ranges
    lines = [
        "You are SecondHome AI Assistant, a friendly and helpful chatbot for SecondHome, "
        "a student accommodation platform in India.",
        "",
        "YOUR IDENTITY:",
        "- You help students find PGs, Flats, Hostels, and Messes near their colleges",
        "- You have access to REAL-TIME data from our database",
        "- You ONLY answer questions about SecondHome and student accommodations",
        who,
        "",
        "REAL-TIME DATABASE STATISTICS:",
        f"- Total Properties Listed: {stats.total_properties}",
        f"- Total Messes: {stats.total_messes}",
        f"- Cities We Serve: {stats.total_cities}",
        f"- PGs Available: {stats.pg_count}",
        f"- Flats Available: {stats.flat_count}",
        f"- Hostels Available: {stats.hostel_count}",
        f"- Average Price: ₹{stats.avg_price}/month",
        f"- Price Range: ₹{stats.min_price} - ₹{stats.max_price}",
        "",
        "AVAILABLE CITIES:",
        ", ".join(stats.cities[:20]),
        "",
        "TOP COLLEGES WE SERVE:",
        ", ".join(stats.colleges[:20]),
        "",
        "BUDGET-WISE BREAKDOWN:",
        f"- Under ₹5,000: {b.get('under5k', 0)} properties",
        f"- ₹5,000 - ₹10,000: {b.get('5k-10k', 0)} properties",
        f"- ₹10,000 - ₹15,000: {b.get('10k-15k', 0)} properties",
        f"- ₹15,000 - ₹20,000: {b.get('15k-20k', 0)} properties",
        f"- Above ₹20,000: {b.get('above20k', 0)} properties",
        "",
        "GENDER-WISE AVAILABILITY:",
        f"- Boys PG/Hostels: {stats.gender_counts.get('boys', 0)}",
        f"- Girls PG/Hostels: {stats.gender_counts.get('girls', 0)}",
        f"- Co-living/Unisex: {stats.gender_counts.get('unisex', 0)}",
        "",
        "TOP RATED PROPERTIES:",
    ]
    lines.extend(
        f"{i}. {p.title} - {p.location} - ₹{p.price:.0f}/month - ⭐{p.rating}"
        for i, p in enumerate(stats.top_rated, start=1)
    )

    if recent:
        lines.append("")
        lines.append("USER'S RECENT BROWSING ACTIVITY (Last 24 hours):")
        lines.extend(
            f"{i}. {p.title} - {p.location}, {p.city} - ₹{p.price:.0f}/month - {p.type} - {p.gender}"
            for i, p in enumerate(recent, start=1)
        )
        lines.append(
            "This user has been actively looking at these properties. Use this context "
            "to understand their preferences and provide personalized recommendations."
        )

    if user_context:
        lines.append("")
        lines.append("ADDITIONAL USER CONTEXT:")
        lines.append(user_context)

    lines.extend([
        "",
        "HOW TO RESPOND:",
        "1. Be conversational, friendly, and helpful",
        "2. Use the REAL data provided above - NO MADE UP INFORMATION",
        "3. When suggesting properties, reference actual listings",
        "4. If asked about something not related to accommodations, politely redirect",
        "5. Format prices in Indian Rupees (₹)",
        "6. Use bullet points (•) for multiple items and keep each point short",
        "7. Always end with a helpful suggestion or question",
        "8. If the user asks for a human or seems frustrated, offer to connect them "
        "with one of our executives instead of solving complex issues yourself",
        "9. Keep it under 150 words",
    ])
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Reply
# ---------------------------------------------------------------------------


def _recent_properties(user: dict[str, Any] | None) -> list[Property]:
    if not user:
        return []
    found: list[Property] = []
    for pid in recent_views(user["username"]):
        prop = get_property(pid)
        if prop is not None:
            found.append(prop)
    return found


def generate_reply(
    request: ChatbotRequest,
    user: dict[str, Any] | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> ChatbotResponse:
    message = request.message.strip()
    if not message:
        return ChatbotResponse(response=EMPTY_MESSAGE_REPLY, error="Empty message")

    wants_executive = detect_executive_request(message)

    if not config.available:
        logger.error("GROQ_API_KEY not configured, chatbot replying statically")
        return ChatbotResponse(
            response=NO_KEY_REPLY,
            wants_executive=wants_executive,
            error="API key missing",
        )

    properties = approved_properties()
    stats = compute_catalog_stats(properties, approved_messes())
    recent = _recent_properties(user)

    messages: list[dict[str, str]] = [
        {"role": "system", "content": build_system_context(stats, user, recent, request.user_context)},
    ]
    for turn in request.conversation_history:
        messages.append({"role": turn.role, "content": turn.content})
    user_content = message
    if wants_executive:
        user_content = f"{message}\n\n⚠️ {EXECUTIVE_NOTE}"
    messages.append({"role": "user", "content": user_content})

    viewed = [
        ViewedProperty(id=p.id, title=p.title, location=p.location, city=p.city, price=p.price)
        for p in recent[:_MAX_RECENT]
    ]
    summary_stats = {
        "total_properties": stats.total_properties,
        "cities_served": stats.total_cities,
    }

    try:
        text = chat_completion(messages, temperature=0.7, max_tokens=500, config=config)
    except Exception as exc:
        logger.warning("Chatbot completion failed", exc_info=True)
        return ChatbotResponse(
            response=FAILURE_REPLY,
            wants_executive=wants_executive,
            recent_properties_viewed=viewed,
            error=str(exc) or "Unknown error",
        )

    logger.info("Chatbot query %r -> %d chars", message[:80], len(text))
    record_event("chatbot", {
        "logged_in": user is not None,
        "wants_executive": wants_executive,
        "history_turns": len(request.conversation_history),
    })

    return ChatbotResponse(
        response=text,
        stats=summary_stats,
        wants_executive=wants_executive,
        recent_properties_viewed=viewed,
    )
