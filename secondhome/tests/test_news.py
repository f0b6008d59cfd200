from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock, PropertyMock, patch

import pytest
import requests
from fastapi.testclient import TestClient

from secondhome.app import app
from secondhome.listings.cache import clear_cache
from secondhome.news.config import NewsConfig
from secondhome.news.feed import (
    PLACEHOLDER_IMAGE,
    NewsNotConfigured,
    NewsProviderError,
    categorize_article,
    fetch_news,
    normalize_article,
)

client = TestClient(app)

NEWSAPI = NewsConfig(newsapi_key="news-key", gnews_key="")
GNEWS = NewsConfig(newsapi_key="", gnews_key="gnews-key")

NEWSAPI_ARTICLE = {
    "source": {"id": None, "name": "The Hindu"},
    "author": "Staff Reporter",
    "title": "Rental demand near IT corridor rises",
    "description": "Landlords report higher occupancy.",
    "url": "https://example.com/rental-demand",
    "urlToImage": "https://example.com/img.jpg",
    "publishedAt": "2026-10-02T08:15:00Z",
    "content": "Full text",
}


def _mock_response(payload, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.json.return_value = payload
    return resp


class TestCategorize:
    def test_rules(self):
        assert categorize_article({"title": "Student protests fee hike"}) == "Student Life"
        assert categorize_article({"title": "x", "description": "rental yields up"}) == "Real Estate"
        assert categorize_article({"title": "Property prices cool"}) == "Real Estate"
        assert categorize_article({"title": "New college opens"}) == "Education"
        assert categorize_article({"title": "Budget 2026 highlights"}) == "Finance"
        assert categorize_article({"title": "Mess workers strike"}) == "Food & Nutrition"
        assert categorize_article({"title": "Weather update"}) == "General"

    def test_title_only_words_ignore_description(self):
        assert categorize_article({"title": "Weather", "description": "college closed"}) == "General"

    def test_first_rule_wins(self):
        assert categorize_article({"title": "Student rental guide"}) == "Student Life"


class TestNormalizeArticle:
    def test_newsapi_shape(self):
        article = normalize_article(NEWSAPI_ARTICLE, 3)
        assert article.id.startswith("news-3-")
        assert article.title == "Rental demand near IT corridor rises"
        assert article.excerpt == "Landlords report higher occupancy."
        assert article.image == "https://example.com/img.jpg"
        assert article.date == "October 2, 2026"
        assert article.author == "Staff Reporter"
        assert article.source == "The Hindu"
        assert article.category == "Real Estate"

    def test_id_is_stable(self):
        assert normalize_article(NEWSAPI_ARTICLE, 0).id == normalize_article(NEWSAPI_ARTICLE, 0).id

    def test_gnews_shape(self):
        article = normalize_article({
            "title": "Hostel fees",
            "description": "",
            "content": "c" * 200,
            "url": "https://example.com/a",
            "image": "https://example.com/g.jpg",
            "publishedAt": "2026-09-30T10:00:00Z",
            "source": {"name": "GNews Source", "url": "https://example.com"},
        }, 0)
        assert article.image == "https://example.com/g.jpg"
        assert article.excerpt == "c" * 150
        assert article.author == "GNews Source"

    def test_missing_fields(self):
        article = normalize_article({}, 0)
        assert article.title == "Untitled Article"
        assert article.excerpt == "No description available."
        assert article.image == PLACEHOLDER_IMAGE
        assert article.date == "Unknown date"
        assert article.source == "Unknown"
        assert article.url == "#"

    def test_bad_date(self):
        assert normalize_article({"publishedAt": "yesterday"}, 0).date == "Unknown date"


class TestFetchNews:
    def setup_method(self):
        clear_cache()

    def test_not_configured(self):
        with pytest.raises(NewsNotConfigured):
            fetch_news(config=NewsConfig(newsapi_key="", gnews_key=""))

    @patch("secondhome.news.feed.requests.get")
    def test_newsapi_request(self, mock_get):
        mock_get.return_value = _mock_response({"totalResults": 1, "articles": [NEWSAPI_ARTICLE]})

        page = fetch_news(page=2, page_size=5, config=NEWSAPI, today=date(2026, 10, 19))

        assert page.provider == "newsapi"
        assert page.total_results == 1
        assert page.page == 2
        assert len(page.articles) == 1

        args, kwargs = mock_get.call_args
        assert args[0] == NEWSAPI.newsapi_url
        params = kwargs["params"]
        assert params["apiKey"] == "news-key"
        assert params["page"] == 2
        assert params["pageSize"] == 5
        assert params["from"] == "2026-09-19"
        assert params["to"] == "2026-10-19"
        assert "student accommodation" in params["q"]

    @patch("secondhome.news.feed.requests.get")
    def test_gnews_request(self, mock_get):
        mock_get.return_value = _mock_response({"totalArticles": 7, "articles": []})

        page = fetch_news(query="hostel", config=GNEWS)

        assert page.provider == "gnews"
        assert page.total_results == 7
        args, kwargs = mock_get.call_args
        assert args[0] == GNEWS.gnews_url
        assert kwargs["params"] == {"q": "hostel", "token": "gnews-key", "lang": "en", "max": 12}

    @patch("secondhome.news.feed.requests.get")
    def test_newsapi_preferred_when_both_keys(self, mock_get):
        mock_get.return_value = _mock_response({"articles": []})
        page = fetch_news(config=NewsConfig(newsapi_key="a", gnews_key="b"))
        assert page.provider == "newsapi"

    @patch("secondhome.news.feed.requests.get")
    def test_provider_error(self, mock_get):
        mock_get.return_value = _mock_response({"code": "rateLimited"}, status_code=429)
        with pytest.raises(NewsProviderError) as exc_info:
            fetch_news(config=NEWSAPI)
        assert exc_info.value.status_code == 429
        assert exc_info.value.details == {"code": "rateLimited"}

    @patch("secondhome.news.feed.requests.get")
    def test_non_json_body(self, mock_get):
        resp = _mock_response(None)
        resp.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = resp
        with pytest.raises(NewsProviderError) as exc_info:
            fetch_news(config=NEWSAPI)
        assert exc_info.value.status_code == 200
        assert exc_info.value.details == {}

    @patch("secondhome.news.feed.requests.get")
    def test_network_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("offline")
        with pytest.raises(NewsProviderError) as exc_info:
            fetch_news(config=NEWSAPI)
        assert exc_info.value.status_code == 502

    @patch("secondhome.news.feed.requests.get")
    def test_cached(self, mock_get):
        mock_get.return_value = _mock_response({"articles": [NEWSAPI_ARTICLE]})
        fetch_news(config=NEWSAPI)
        fetch_news(config=NEWSAPI)
        assert mock_get.call_count == 1


class TestNewsEndpoint:
    def setup_method(self):
        clear_cache()

    @patch.object(NewsConfig, "provider", new_callable=PropertyMock, return_value=None)
    def test_not_configured(self, _mock_provider):
        resp = client.get("/news")
        assert resp.status_code == 503

    @patch.object(NewsConfig, "provider", new_callable=PropertyMock, return_value="newsapi")
    @patch("secondhome.news.feed.requests.get")
    def test_provider_error(self, mock_get, _mock_provider):
        mock_get.return_value = _mock_response({"message": "bad key"}, status_code=401)
        resp = client.get("/news")
        assert resp.status_code == 502
        assert resp.json()["detail"]["status"] == 401

    @patch.object(NewsConfig, "provider", new_callable=PropertyMock, return_value="newsapi")
    @patch("secondhome.news.feed.requests.get")
    def test_html_error_page(self, mock_get, _mock_provider):
        html_page = _mock_response(None)
        html_page.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = html_page
        resp = client.get("/news")
        assert resp.status_code == 502
        assert resp.json()["detail"]["details"] == {}

    @patch.object(NewsConfig, "provider", new_callable=PropertyMock, return_value="newsapi")
    @patch("secondhome.news.feed.requests.get")
    def test_page_size_alias(self, mock_get, _mock_provider):
        mock_get.return_value = _mock_response({"totalResults": 1, "articles": [NEWSAPI_ARTICLE]})
        resp = client.get("/news", params={"page": 1, "pageSize": 3})
        assert resp.status_code == 200
        body = resp.json()
        assert body["page_size"] == 3
        assert body["articles"][0]["source"] == "The Hindu"
        assert mock_get.call_args.kwargs["params"]["pageSize"] == 3

    def test_page_size_bounds(self):
        assert client.get("/news", params={"pageSize": 0}).status_code == 422
