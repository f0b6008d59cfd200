from __future__ import annotations

import hashlib
import logging
from datetime import date, datetime, timedelta
from typing import Any

import requests
from pydantic import BaseModel

from ..listings.cache import cache_get, cache_set
from .config import DEFAULT_NEWS_CONFIG, RELEVANT_KEYWORDS, NewsConfig

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "/placeholder.svg?height=400&width=600"

# First matching rule wins
_CATEGORY_RULES: list[tuple[str, tuple[str, ...], tuple[str, ...]]] = [
    # (category, words checked in title and description, extra words checked in title only)
    ("Student Life", ("student",), ()),
    ("Real Estate", ("rental",), ("property",)),
    ("Education", ("education",), ("college",)),
    ("Finance", ("budget",), ("finance",)),
    ("Food & Nutrition", ("food",), ("mess",)),
]


class NewsNotConfigured(Exception):
    """Neither NewsAPI nor GNews credentials are set."""


class NewsProviderError(Exception):
    def __init__(self, status_code: int, details: Any) -> None:
        super().__init__(f"News provider returned {status_code}")
        self.status_code = status_code
        self.details = details


class Article(BaseModel):
    id: str
    title: str
    excerpt: str
    image: str
    date: str
    author: str
    category: str
    source: str
    url: str
    published_at: str | None = None


class NewsPage(BaseModel):
    articles: list[Article]
    total_results: int
    page: int
    page_size: int
    provider: str


def categorize_article(article: dict[str, Any]) -> str:
    title = (article.get("title") or "").lower()
    description = (article.get("description") or "").lower()
    for category, both_words, title_words in _CATEGORY_RULES:
        if any(w in title or w in description for w in both_words):
            return category
        if any(w in title for w in title_words):
            return category
    return "General"


def _display_date(published_at: str | None) -> str:
    if not published_at:
        return "Unknown date"
    try:
        parsed = datetime.fromisoformat(published_at.replace("Z", "+00:00"))
    except ValueError:
        return "Unknown date"
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def _article_digest(article: dict[str, Any]) -> str:
    key = article.get("url") or article.get("title") or ""
    return hashlib.sha1(key.encode()).hexdigest()[:10]


def normalize_article(article: dict[str, Any], index: int) -> Article:
    """Reshape a NewsAPI or GNews article into the blog-post card shape."""
    published_at = article.get("publishedAt") or article.get("published_date")
    source = article.get("source")
    source_name = (source.get("name") if isinstance(source, dict) else source) or "Unknown"
    content = article.get("content") or ""

    return Article(
        id=f"news-{index}-{_article_digest(article)}",
        title=article.get("title") or "Untitled Article",
        excerpt=article.get("description") or content[:150] or "No description available.",
        image=article.get("urlToImage") or article.get("image") or PLACEHOLDER_IMAGE,
        date=_display_date(published_at),
        author=article.get("author") or source_name or "News Source",
        category=categorize_article(article),
        source=source_name,
        url=article.get("url") or article.get("link") or "#",
        published_at=published_at,
    )


def _build_request(
    provider: str,
    query: str,
    page: int,
    page_size: int,
    config: NewsConfig,
    today: date,
) -> tuple[str, dict[str, Any]]:
    if provider == "gnews":
        return config.gnews_url, {
            "q": query,
            "token": config.gnews_key,
            "lang": "en",
            "max": page_size,
        }

    return config.newsapi_url, {
        "q": query,
        "apiKey": config.newsapi_key,
        "language": "en",
        "sortBy": "publishedAt",
        "page": page,
        "pageSize": page_size,
        "from": (today - timedelta(days=config.lookback_days)).isoformat(),
        "to": today.isoformat(),
    }


def fetch_news(
    page: int = 1,
    page_size: int = 12,
    query: str | None = None,
    config: NewsConfig = DEFAULT_NEWS_CONFIG,
    today: date | None = None,
) -> NewsPage:
    """
    Recent housing and education news from NewsAPI, or GNews when only a
    GNews key is configured. Responses are cached for an hour.
    """
    provider = config.provider
    if provider is None:
        raise NewsNotConfigured("Set NEWS_API_KEY or GNEWS_API_KEY")

    query = query or " OR ".join(RELEVANT_KEYWORDS)
    cache_key = {"provider": provider, "q": query, "page": page, "page_size": page_size}
    cached = cache_get("news", cache_key)
    if cached is not None:
        return cached

    url, params = _build_request(provider, query, page, page_size, config, today or date.today())
    try:
        response = requests.get(
            url, params=params, headers={"User-Agent": config.user_agent}, timeout=config.timeout,
        )
    except requests.RequestException as exc:
        logger.error("News request to %s failed", provider, exc_info=True)
        raise NewsProviderError(502, str(exc)) from exc

    if not response.ok:
        try:
            details = response.json()
        except ValueError:
            details = {}
        logger.error("News provider %s error %s: %s", provider, response.status_code, details)
        raise NewsProviderError(response.status_code, details)

    try:
        data = response.json()
    except ValueError as exc:
        logger.error("News provider %s returned a non-JSON body", provider, exc_info=True)
        raise NewsProviderError(response.status_code, {}) from exc
    if not isinstance(data, dict):
        raise NewsProviderError(response.status_code, {})

    articles = [normalize_article(a, i) for i, a in enumerate(data.get("articles") or [])]
    result = NewsPage(
        articles=articles,
        total_results=data.get("totalResults") or data.get("totalArticles") or 0,
        page=page,
        page_size=page_size,
        provider=provider,
    )
    cache_set("news", cache_key, result, ttl=config.cache_ttl)
    return result
