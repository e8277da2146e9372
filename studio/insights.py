"""
AI advisory: quote insights and material suggestions, powered by Gemini.

Advisory only: nothing here feeds back into the cost engine. The costing
screen recomputes without waiting on these calls.
"""

import json
import logging
import urllib.error
import urllib.request

from fastapi import HTTPException

from .config import settings
from .schemas import Calculations

logger = logging.getLogger(__name__)

BUSINESS_TYPE_NAMES = {
    "vat_registered": "VAT Registered",
    "sole_proprietor": "Sole Proprietor (Turnover Tax)",
    "no_tax": "Not tax registered",
}

QUOTE_INSIGHTS_PROMPT = """
You are a world-class business consultant for interior design studios in Kenya.
Analyze the following project quote data and provide:
1. A concise insight into the health and structure of the quote.
2. Actionable business strategies or next moves based on the final quote.

Keep the tone professional, encouraging, and strategic. Your analysis should be aware of the business context in Kenya.

Project Data:
- Total Cost: KES {total_cost:,.2f}
- Profit: KES {profit_amount:,.2f}
- Profit Margin (markup on cost): {profit_margin}%
- Final Client Quote (Gross Revenue): KES {total_price:,.2f}
- Business Type: {business_type}

Return ONLY valid JSON, no markdown:
{{"quote_insight": "", "business_strategy": ""}}
"""

MATERIAL_SUGGESTIONS_PROMPT = """
You are an expert in interior design materials, skilled at finding cost-effective alternatives.

Based on the budget, material type, quantity, and location provided, suggest alternative materials.
Analyze price and availability in the specified location, and provide a list of recommendations with clear pros and cons for each.

Budget: {budget}
Material Type: {material_type}
Quantity: {quantity}
Location: {location}

Return ONLY valid JSON, no markdown:
{{"suggestions": [{{"material_name": "", "price": 0.0, "availability": "", "pros": "", "cons": ""}}]}}
"""

# Simple in-memory prompt cache: keyed on the full prompt, max 50 entries
_prompt_cache: dict = {}
_CACHE_MAX = 50


def call_gemini(prompt: str) -> dict:
    """Call Gemini and return the parsed JSON body of its answer."""
    if prompt in _prompt_cache:
        return _prompt_cache[prompt]

    api_key = settings.GEMINI_API_KEY
    if not api_key:
        logger.warning("GEMINI_API_KEY not configured: AI advisory disabled")
        raise HTTPException(status_code=503, detail="GEMINI_API_KEY not configured")

    url = (
        "https://generativelanguage.googleapis.com/v1beta/models/"
        f"{settings.GEMINI_MODEL}:generateContent?key={api_key}"
    )
    payload = json.dumps({
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": 0.4,
            "responseMimeType": "application/json",
        },
    }).encode("utf-8")

    req = urllib.request.Request(
        url,
        data=payload,
        headers={"Content-Type": "application/json"},
        method="POST",
    )

    try:
        with urllib.request.urlopen(req, timeout=30) as response:
            result = json.loads(response.read())
            text = result["candidates"][0]["content"]["parts"][0]["text"]
            parsed = json.loads(text)
    except urllib.error.HTTPError as e:
        error_body = e.read().decode()
        logger.warning(f"Gemini API error {e.code}: {error_body}")
        raise HTTPException(status_code=502, detail=f"Gemini API error: {error_body}")
    except (urllib.error.URLError, KeyError, IndexError, ValueError) as e:
        logger.warning(f"Gemini call failed: {e}")
        raise HTTPException(status_code=502, detail=f"Gemini call failed: {str(e)}")

    if len(_prompt_cache) >= _CACHE_MAX:
        _prompt_cache.pop(next(iter(_prompt_cache)))
    _prompt_cache[prompt] = parsed
    return parsed


def get_quote_insights(calculations: Calculations) -> dict:
    prompt = QUOTE_INSIGHTS_PROMPT.format(
        total_cost=calculations.total_cost,
        profit_amount=calculations.profit_amount,
        profit_margin=calculations.profit_margin,
        total_price=calculations.total_price,
        business_type=BUSINESS_TYPE_NAMES.get(calculations.business_type, calculations.business_type),
    )
    result = call_gemini(prompt)
    return {
        "quote_insight": result.get("quote_insight", ""),
        "business_strategy": result.get("business_strategy", ""),
    }


def get_material_suggestions(budget: float, material_type: str, quantity: float, location: str) -> list:
    prompt = MATERIAL_SUGGESTIONS_PROMPT.format(
        budget=budget, material_type=material_type, quantity=quantity, location=location,
    )
    result = call_gemini(prompt)
    suggestions = []
    for item in result.get("suggestions", []):
        suggestions.append({
            "material_name": item.get("material_name", ""),
            "price": float(item.get("price") or 0.0),
            "availability": item.get("availability", ""),
            "pros": item.get("pros", ""),
            "cons": item.get("cons", ""),
        })
    return suggestions
