"""
AI advisory tests: Gemini is never called for real.

Tests:
1-2. Missing key → 503
3-4. Parsed insights and material suggestions (mocked urlopen)
5.   Upstream failure → 502
6.   Prompt cache
"""

import io
import json
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from studio import insights
from studio.config import settings
from studio.schemas import Calculations


def _gemini_response(payload: dict):
    body = json.dumps({"candidates": [{"content": {"parts": [{"text": json.dumps(payload)}]}}]})
    response = MagicMock()
    response.read.return_value = body.encode()
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


@pytest.fixture(autouse=True)
def clear_cache():
    insights._prompt_cache.clear()
    yield
    insights._prompt_cache.clear()


@pytest.fixture
def api_key():
    with patch.object(settings, "GEMINI_API_KEY", "test-key"):
        yield


# ============================================================
# 1-2. No key
# ============================================================

def test_insights_without_key(client, sample_form):
    with patch.object(settings, "GEMINI_API_KEY", ""):
        response = client.post("/api/ai/insights", json={"form_values": sample_form})
    assert response.status_code == 503


def test_insights_needs_input(client):
    assert client.post("/api/ai/insights", json={}).status_code == 400


# ============================================================
# 3-4. Mocked Gemini
# ============================================================

def test_quote_insights_parsed(client, api_key, sample_form):
    reply = {"quote_insight": "Healthy 25% markup.", "business_strategy": "Upsell lighting."}
    with patch("studio.insights.urllib.request.urlopen", return_value=_gemini_response(reply)) as mock_open:
        response = client.post("/api/ai/insights", json={"form_values": sample_form})
    assert response.status_code == 200
    assert response.json() == reply
    request = mock_open.call_args[0][0]
    prompt = json.loads(request.data)["contents"][0]["parts"][0]["text"]
    assert "23,200.00" in prompt
    assert "VAT Registered" in prompt


def test_material_suggestions_parsed(client, api_key):
    reply = {"suggestions": [
        {"material_name": "Vinyl plank", "price": "1800", "availability": "Nairobi", "pros": "Cheap", "cons": "Less durable"},
    ]}
    with patch("studio.insights.urllib.request.urlopen", return_value=_gemini_response(reply)):
        response = client.post("/api/ai/materials", json={
            "budget": 50000, "material_type": "Hardwood flooring", "quantity": 20, "location": "Nairobi",
        })
    assert response.status_code == 200
    data = response.json()
    assert data[0]["material_name"] == "Vinyl plank"
    assert data[0]["price"] == 1800.0


# ============================================================
# 5-6. Failures and cache
# ============================================================

def test_upstream_error_is_502(api_key):
    error = urllib.error.HTTPError("url", 500, "boom", {}, io.BytesIO(b"server error"))
    with patch("studio.insights.urllib.request.urlopen", side_effect=error):
        with pytest.raises(Exception) as exc_info:
            insights.get_quote_insights(Calculations(total_price=100.0))
    assert exc_info.value.status_code == 502


def test_prompt_cache_reused(api_key):
    reply = {"quote_insight": "ok", "business_strategy": "ok"}
    with patch("studio.insights.urllib.request.urlopen", return_value=_gemini_response(reply)) as mock_open:
        insights.get_quote_insights(Calculations(total_price=100.0))
        insights.get_quote_insights(Calculations(total_price=100.0))
    assert mock_open.call_count == 1
