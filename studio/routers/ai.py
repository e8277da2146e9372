"""
AI advisory endpoints (Gemini).

POST /api/ai/insights   commentary on a quote's numbers
POST /api/ai/materials  cheaper / available material alternatives

Both return 503 when GEMINI_API_KEY is unset and 502 when the call fails.
"""

from fastapi import APIRouter, HTTPException
from typing import List

from .. import schemas
from ..config import settings
from ..cost_engine import CostEngine
from ..insights import get_material_suggestions, get_quote_insights

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/insights", response_model=schemas.QuoteInsights)
def quote_insights(request: schemas.InsightsRequest):
    calculations = request.calculations
    if calculations is None:
        if request.form_values is None:
            raise HTTPException(status_code=400, detail="Provide form_values or calculations")
        calculations = CostEngine(nssf_cap=settings.NSSF_PER_PERSON_CAP).calculate(request.form_values)
    return get_quote_insights(calculations)


@router.post("/materials", response_model=List[schemas.MaterialSuggestion])
def material_suggestions(request: schemas.MaterialSuggestionRequest):
    return get_material_suggestions(
        budget=request.budget,
        material_type=request.material_type,
        quantity=request.quantity,
        location=request.location,
    )
