from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

RELEVANT_KEYWORDS = (
    "student accommodation",
    "student housing",
    "real estate",
    "rental property",
    "college housing",
    "student living",
    "property rental",
    "education",
    "student life",
    "housing market",
    "rental market",
    "property investment",
    "student budget",
    "accommodation",
)


@dataclass(frozen=True)
class NewsConfig:
    newsapi_key: str = os.getenv("NEWS_API_KEY", "")
    gnews_key: str = os.getenv("GNEWS_API_KEY", "")
    newsapi_url: str = "https://newsapi.org/v2/everything"
    gnews_url: str = "https://gnews.io/api/v4/search"
    lookback_days: int = 30
    timeout: float = 10.0
    cache_ttl: float = 60 * 60
    user_agent: str = "SecondHome/1.0"

    @property
    def provider(self) -> str | None:
        if self.newsapi_key:
            return "newsapi"
        if self.gnews_key:
            return "gnews"
        return None


DEFAULT_NEWS_CONFIG = NewsConfig()
