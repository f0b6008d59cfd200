from __future__ import annotations

import json
from datetime import datetime
from unittest.mock import MagicMock, PropertyMock, patch

import pytest
from fastapi.testclient import TestClient

from secondhome.analytics.store import clear_events, get_events
from secondhome.app import app
from secondhome.listings.data_store import get_mess, reset_store
from secondhome.llm.config import LLMConfig
from secondhome.moderation.actions import approve_mess, list_pending_messes, reject_mess
from secondhome.moderation.errors import AIReviewFailed, AIServiceUnavailable, MessNotFound
from secondhome.moderation.models import ReviewRecommendation
from secondhome.moderation.review import (
    INVALID_OUTPUT_RESULT,
    build_listing_payload,
    build_review_prompt,
    parse_review_output,
    run_ai_review,
)

client = TestClient(app)

LLM = LLMConfig(api_key="gsk-test")

GOOD_REVIEW = {
    "confidence": 85,
    "score": 78,
    "recommendation": "APPROVE",
    "summary": "Looks like a genuine student mess.",
    "analysis": {
        "legitimacy": "Consistent details",
        "pricing": "Reasonable for Bangalore",
        "completeness": "Menu missing",
        "safety": "No issues",
        "deliveryPackaging": "Charges fair",
    },
    "redFlags": [],
    "reason": "Complete and plausible listing",
}


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def _mock_groq_response(content: str) -> MagicMock:
    mock_message = MagicMock()
    mock_message.content = content
    mock_choice = MagicMock()
    mock_choice.message = mock_message
    mock_response = MagicMock()
    mock_response.choices = [mock_choice]
    return mock_response


# ── Prompt ───────────────────────────────────────────────────────────────


class TestPrompt:
    def setup_method(self):
        reset_store()

    def test_payload_uses_listing_field_names(self):
        payload = build_listing_payload(get_mess("m3"))
        assert payload["name"] == "Campus Bites"
        assert payload["monthlyPrice"] == 2800
        assert payload["dietTypes"] == ["Veg", "Jain"]
        assert payload["imagesCount"] == 1
        assert "images" not in payload

    def test_prompt_embeds_listing_json(self):
        prompt = build_review_prompt(get_mess("m3"))
        assert '"name": "Campus Bites"' in prompt
        assert '"recommendation": "APPROVE" | "REJECT" | "MANUAL_REVIEW"' in prompt
        assert "Never state that you approved/rejected it." in prompt


# ── Output parsing ───────────────────────────────────────────────────────


class TestParseReviewOutput:
    def test_valid_output(self):
        result = parse_review_output(json.dumps(GOOD_REVIEW))
        assert result.recommendation == ReviewRecommendation.approve
        assert result.confidence == 85
        assert result.score == 78
        assert result.analysis.delivery_packaging == "Charges fair"
        assert result.red_flags == []

    def test_snake_case_keys_accepted(self):
        raw = {**GOOD_REVIEW, "red_flags": ["no photos"]}
        del raw["redFlags"]
        raw["analysis"] = {"delivery_packaging": "ok"}
        result = parse_review_output(json.dumps(raw))
        assert result.red_flags == ["no photos"]
        assert result.analysis.delivery_packaging == "ok"

    def test_values_clamped(self):
        raw = {**GOOD_REVIEW, "confidence": 140, "score": -5}
        result = parse_review_output(json.dumps(raw))
        assert result.confidence == 100
        assert result.score == 0

    def test_non_numeric_scores(self):
        raw = {**GOOD_REVIEW, "confidence": "high", "score": None}
        result = parse_review_output(json.dumps(raw))
        assert result.confidence == 0
        assert result.score == 0

    def test_recommendation_normalized(self):
        raw = {**GOOD_REVIEW, "recommendation": "manual review"}
        assert parse_review_output(json.dumps(raw)).recommendation == ReviewRecommendation.manual_review
        raw = {**GOOD_REVIEW, "recommendation": "reject"}
        assert parse_review_output(json.dumps(raw)).recommendation == ReviewRecommendation.reject

    def test_unknown_recommendation_needs_manual_review(self):
        raw = {**GOOD_REVIEW, "recommendation": "MAYBE"}
        assert parse_review_output(json.dumps(raw)).recommendation == ReviewRecommendation.manual_review

    def test_single_red_flag_string(self):
        raw = {**GOOD_REVIEW, "redFlags": "fake phone number"}
        assert parse_review_output(json.dumps(raw)).red_flags == ["fake phone number"]

    def test_json_wrapped_in_prose(self):
        text = "Here is my assessment:\n" + json.dumps(GOOD_REVIEW) + "\nThanks"
        assert parse_review_output(text).score == 78

    def test_invalid_output(self):
        result = parse_review_output("I think this listing is fine.")
        assert result == INVALID_OUTPUT_RESULT
        assert result.recommendation == ReviewRecommendation.manual_review
        assert result.confidence == 0
        assert result.reason == "AI response parsing failed"
        assert result.analysis.pricing == "AI returned invalid JSON"


# ── Running a review ─────────────────────────────────────────────────────


class TestRunAIReview:
    def setup_method(self):
        reset_store()
        clear_events()

    def test_unconfigured(self):
        with pytest.raises(AIServiceUnavailable):
            run_ai_review("m3", config=LLMConfig(api_key=""))

    def test_unconfigured_checked_before_lookup(self):
        with pytest.raises(AIServiceUnavailable):
            run_ai_review("missing", config=LLMConfig(api_key=""))

    def test_unknown_mess(self):
        with pytest.raises(MessNotFound):
            run_ai_review("missing", config=LLM)

    @patch("secondhome.llm.groq_client.Groq")
    def test_llm_failure(self, mock_groq_cls):
        mock_client = MagicMock()
        mock_groq_cls.return_value = mock_client
        mock_client.chat.completions.create.side_effect = RuntimeError("503 from Groq")

        with pytest.raises(AIReviewFailed):
            run_ai_review("m3", config=LLM)
        assert get_mess("m3").ai_review is None

    @patch("secondhome.llm.groq_client.Groq")
    def test_review_stored_without_deciding(self, mock_groq_cls):
        mock_client = MagicMock()
        mock_groq_cls.return_value = mock_client
        mock_client.chat.completions.create.return_value = _mock_groq_response(json.dumps(GOOD_REVIEW))

        now = datetime(2026, 10, 19, 12, 0)
        result, mess = run_ai_review("m3", config=LLM, now=now)

        assert result.recommendation == ReviewRecommendation.approve
        assert mess.is_approved is False
        assert mess.is_rejected is False
        assert mess.ai_review.reviewed is True
        assert mess.ai_review.reviewed_at == now
        assert mess.ai_review.recommendation == "APPROVE"
        assert mess.ai_review.analysis["deliveryPackaging"] == "Charges fair"
        assert get_mess("m3").ai_review is not None

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["temperature"] == 0.3
        assert "Campus Bites" in kwargs["messages"][0]["content"]

        events = get_events("ai_review")
        assert events[-1]["recommendation"] == "APPROVE"

    @patch("secondhome.llm.groq_client.Groq")
    def test_invalid_output_still_stored(self, mock_groq_cls):
        mock_client = MagicMock()
        mock_groq_cls.return_value = mock_client
        mock_client.chat.completions.create.return_value = _mock_groq_response("no json here")

        result, mess = run_ai_review("m4", config=LLM)
        assert result.recommendation == ReviewRecommendation.manual_review
        assert mess.ai_review.red_flags == ["AI returned invalid JSON"]


# ── Approve / reject ─────────────────────────────────────────────────────


class TestModerationActions:
    def setup_method(self):
        reset_store()
        clear_events()

    def test_pending_oldest_first(self):
        assert [m.id for m in list_pending_messes()] == ["m3", "m4"]

    def test_approve(self):
        now = datetime(2026, 10, 19, 9, 30)
        mess = approve_mess("m3", "admin", now=now)
        assert mess.is_approved is True
        assert mess.is_rejected is False
        assert mess.approved_by == "admin"
        assert mess.approved_at == now
        assert [m.id for m in list_pending_messes()] == ["m4"]

    def test_reject_with_reason(self):
        mess = reject_mess("m4", "admin", "Fake contact number")
        assert mess.is_rejected is True
        assert mess.is_approved is False
        assert mess.rejection_reason == "Fake contact number"
        assert mess.rejected_by == "admin"

    def test_reject_after_approve(self):
        approve_mess("m3", "admin")
        mess = reject_mess("m3", "admin")
        assert mess.is_approved is False
        assert mess.is_rejected is True

    def test_unknown_mess(self):
        with pytest.raises(MessNotFound):
            approve_mess("nope", "admin")
        with pytest.raises(MessNotFound):
            reject_mess("nope", "admin")

    def test_events_recorded(self):
        approve_mess("m3", "admin")
        reject_mess("m4", "admin")
        actions = [e["action"] for e in get_events("moderation")]
        assert actions == ["approve", "reject"]


# ── Endpoints ────────────────────────────────────────────────────────────


class TestModerationEndpoints:
    def setup_method(self):
        reset_store()
        clear_events()

    def test_pending_list(self):
        c = TestClient(app)
        _login_admin(c)
        resp = c.get("/admin/messes/pending")
        assert resp.status_code == 200
        assert [m["id"] for m in resp.json()] == ["m3", "m4"]

    @patch.object(LLMConfig, "available", new_callable=PropertyMock, return_value=False)
    def test_ai_review_unconfigured(self, _mock_available):
        c = TestClient(app)
        _login_admin(c)
        resp = c.post("/admin/messes/m3/ai-review")
        assert resp.status_code == 503

    @patch.object(LLMConfig, "available", new_callable=PropertyMock, return_value=True)
    def test_ai_review_unknown_mess(self, _mock_available):
        c = TestClient(app)
        _login_admin(c)
        resp = c.post("/admin/messes/nope/ai-review")
        assert resp.status_code == 404

    @patch.object(LLMConfig, "available", new_callable=PropertyMock, return_value=True)
    @patch("secondhome.llm.groq_client.Groq")
    def test_ai_review_llm_failure(self, mock_groq_cls, _mock_available):
        mock_client = MagicMock()
        mock_groq_cls.return_value = mock_client
        mock_client.chat.completions.create.side_effect = RuntimeError("boom")

        c = TestClient(app)
        _login_admin(c)
        resp = c.post("/admin/messes/m3/ai-review")
        assert resp.status_code == 502
        assert "boom" in resp.json()["detail"]

    @patch.object(LLMConfig, "available", new_callable=PropertyMock, return_value=True)
    @patch("secondhome.llm.groq_client.Groq")
    def test_ai_review_success(self, mock_groq_cls, _mock_available):
        mock_client = MagicMock()
        mock_groq_cls.return_value = mock_client
        mock_client.chat.completions.create.return_value = _mock_groq_response(json.dumps(GOOD_REVIEW))

        c = TestClient(app)
        _login_admin(c)
        resp = c.post("/admin/messes/m3/ai-review")

        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "AI review completed - awaiting admin decision"
        assert body["result"]["recommendation"] == "APPROVE"
        assert body["result"]["analysis"]["deliveryPackaging"] == "Charges fair"
        assert body["mess"]["ai_review"]["reviewed"] is True
        assert body["mess"]["is_approved"] is False

    def test_approve_endpoint(self):
        c = TestClient(app)
        _login_admin(c)
        resp = c.post("/admin/messes/m3/approve")
        assert resp.status_code == 200
        assert resp.json()["mess"]["is_approved"] is True
        assert resp.json()["mess"]["approved_by"] == "admin"
        # Approved messes become publicly visible
        assert TestClient(app).get("/messes/m3").status_code == 200

    def test_reject_endpoint_with_reason(self):
        c = TestClient(app)
        _login_admin(c)
        resp = c.post("/admin/messes/m4/reject", json={"reason": "Suspicious pricing"})
        assert resp.status_code == 200
        assert resp.json()["mess"]["rejection_reason"] == "Suspicious pricing"

    def test_reject_endpoint_without_body(self):
        c = TestClient(app)
        _login_admin(c)
        resp = c.post("/admin/messes/m4/reject")
        assert resp.status_code == 200
        assert resp.json()["mess"]["is_rejected"] is True
        assert resp.json()["mess"]["rejection_reason"] is None

    def test_approve_unknown(self):
        c = TestClient(app)
        _login_admin(c)
        assert c.post("/admin/messes/nope/approve").status_code == 404
        assert c.post("/admin/messes/nope/reject").status_code == 404
