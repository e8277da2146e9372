"""
Quotes API.

POST   /api/quotes/calculate          run the cost engine on a form, nothing saved
POST   /api/quotes/publish            snapshot a form into a new or existing quote
GET    /api/quotes                    list, newest publish first
GET    /api/quotes/{id}               one quote with client / project
PATCH  /api/quotes/{id}/status        moves along STATUS_TRANSITIONS, 400 otherwise
PUT    /api/quotes/{id}/project       attach a quote to one of the client's projects
DELETE /api/quotes/{id}
GET    /api/quotes/{id}/variance      suggested vs. final figures
GET    /api/quotes/{id}/allocation    profit split by the quote's allocation
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified
from typing import Optional

from .. import models, schemas
from ..allocation import allocate_profit
from ..config import settings
from ..cost_engine import CostEngine
from ..database import get_db
from ..models import QuoteStatus
from ..publishing import publish_quote
from ..records import commit, get_state, optimistic, to_record, unlink
from ..state import StudioState
from ..variance import quote_variance

router = APIRouter(prefix="/quotes", tags=["quotes"])

# Re-publishing always lands back on Draft, whatever the status was.
STATUS_TRANSITIONS = {
    QuoteStatus.DRAFT: {QuoteStatus.SENT, QuoteStatus.ARCHIVED},
    QuoteStatus.SENT: {QuoteStatus.DRAFT, QuoteStatus.APPROVED, QuoteStatus.REJECTED, QuoteStatus.ARCHIVED},
    QuoteStatus.APPROVED: {QuoteStatus.ARCHIVED},
    QuoteStatus.REJECTED: {QuoteStatus.DRAFT, QuoteStatus.ARCHIVED},
    QuoteStatus.ARCHIVED: {QuoteStatus.DRAFT},
}


def quote_to_dict(q: models.Quote) -> dict:
    data = schemas.Quote.model_validate(q).model_dump(mode="json")
    data["client"] = {
        "id": q.client.id,
        "name": q.client.name,
        "email": q.client.email,
        "phone": q.client.phone,
    } if q.client else None
    data["project"] = {
        "id": q.project.id,
        "name": q.project.name,
        "status": q.project.status,
    } if q.project else None
    return data


def _get_quote(quote_id: int, db: Session) -> models.Quote:
    quote = db.query(models.Quote).filter(models.Quote.id == quote_id).first()
    if not quote:
        raise HTTPException(status_code=404, detail="Quote not found")
    return quote


def check_transition(current: QuoteStatus, new: QuoteStatus):
    current, new = QuoteStatus(current), QuoteStatus(new)
    if current != new and new not in STATUS_TRANSITIONS[current]:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot move a quote from {current.value} to {new.value}",
        )


@router.post("/calculate", response_model=schemas.Calculations)
def calculate(form_values: schemas.FormValues):
    """Live totals for the costing screen."""
    return CostEngine(nssf_cap=settings.NSSF_PER_PERSON_CAP).calculate(form_values)


@router.post("/publish", response_model=schemas.PublishResponse)
def publish(
    request: schemas.PublishRequest,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    with state.optimistic("quotes") as quotes:
        quote, was_existing = publish_quote(
            db,
            request.form_values,
            request.allocations,
            override_price=request.override_price,
            quote_id=request.quote_id,
        )
        quotes[quote.id] = to_record(quote, schemas.Quote)
    return {
        "quote_id": quote.id,
        "was_existing": was_existing,
        "quote": schemas.Quote.model_validate(quote),
    }


@router.get("/")
def list_quotes(
    client_id: Optional[int] = None,
    project_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    query = db.query(models.Quote)
    if client_id is not None:
        query = query.filter(models.Quote.client_id == client_id)
    if project_id is not None:
        query = query.filter(models.Quote.project_id == project_id)
    quotes = query.order_by(models.Quote.timestamp.desc()).offset(skip).limit(limit).all()
    return [quote_to_dict(q) for q in quotes]


@router.get("/{quote_id}")
def get_quote(quote_id: int, db: Session = Depends(get_db)):
    return quote_to_dict(_get_quote(quote_id, db))


@router.patch("/{quote_id}/status")
def update_quote_status(
    quote_id: int,
    update: schemas.QuoteStatusUpdate,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    quote = _get_quote(quote_id, db)
    check_transition(quote.status, update.status)
    with state.optimistic("quotes") as quotes:
        if quote_id in quotes:
            quotes[quote_id]["status"] = update.status.value
        quote.status = update.status
        commit(db, "update quote status")
        db.refresh(quote)
        quotes[quote_id] = to_record(quote, schemas.Quote)
    return quote_to_dict(quote)


@router.put("/{quote_id}/project")
def assign_quote_to_project(
    quote_id: int,
    assignment: schemas.QuoteProjectAssignment,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    quote = _get_quote(quote_id, db)
    project = db.query(models.Project).filter(models.Project.id == assignment.project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    if project.client_id != quote.client_id:
        raise HTTPException(status_code=400, detail="Project belongs to a different client")

    with state.optimistic("quotes") as quotes:
        quote.project_id = project.id
        # Keep the form snapshot consistent with the new assignment
        form_values = dict(quote.form_values or {})
        form_values["project_id"] = project.id
        quote.form_values = form_values
        flag_modified(quote, "form_values")

        commit(db, "assign quote to project")
        db.refresh(quote)
        quotes[quote_id] = to_record(quote, schemas.Quote)
    return quote_to_dict(quote)


@router.delete("/{quote_id}")
def delete_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    """Invoices raised from the quote are kept and unlinked."""
    quote = _get_quote(quote_id, db)
    with optimistic(state, "quotes", "invoices") as (quotes, invoices):
        quotes.pop(quote_id, None)
        unlink(invoices, "quote_id", quote_id)
        db.delete(quote)
        commit(db, "delete quote")
    if state.loaded_quote_id == quote_id:
        state.loaded_quote_id = None
    return {"ok": True}


@router.get("/{quote_id}/variance", response_model=schemas.QuoteVariance)
def get_quote_variance(quote_id: int, db: Session = Depends(get_db)):
    """How far the published price moved from the engine's suggestion."""
    quote = _get_quote(quote_id, db)
    return quote_variance(
        schemas.Calculations.model_validate(quote.suggested_calculations),
        schemas.Calculations.model_validate(quote.calculations),
    )


@router.get("/{quote_id}/allocation", response_model=schemas.ProfitAllocation)
def get_quote_allocation(quote_id: int, db: Session = Depends(get_db)):
    """Internal: splits the quote's profit by its allocation percentages."""
    quote = _get_quote(quote_id, db)
    calculations = schemas.Calculations.model_validate(quote.calculations)
    allocation = schemas.Allocation.model_validate(quote.allocations or {})
    return allocate_profit(calculations.profit_amount, allocation)
