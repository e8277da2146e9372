"""
Workspace API: the costing form being edited and the in-memory record views.

GET    /api/workspace/form               current form, allocations, calculations
PUT    /api/workspace/form               replace the form, returns fresh calculations
PUT    /api/workspace/allocations        replace the profit allocation
POST   /api/workspace/reset              discard the form in progress
POST   /api/workspace/load/{quote_id}    load a published quote back into the form
POST   /api/workspace/publish            publish the current form
POST   /api/workspace/sync               refresh the record collections from the database
GET    /api/workspace/{collection}       hydrated list
GET    /api/workspace/{collection}/{id}  one hydrated record
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
from typing import Optional

from .. import models, schemas
from ..allocation import allocate_profit
from ..database import get_db
from ..hydration import Hydrator
from ..publishing import apply_price_override, publish_quote
from ..records import get_state
from ..state import StudioState
from .quotes import _get_quote, quote_to_dict

router = APIRouter(prefix="/workspace", tags=["workspace"])

PENDING_KEY = "pending"

HYDRATED_LISTS = {
    "clients": "clients",
    "properties": "properties",
    "projects": "projects",
    "quotes": "quotes",
    "invoices": "invoices",
}
HYDRATED_RECORDS = {
    "clients": "client",
    "properties": "property",
    "projects": "project",
    "quotes": "quote",
    "invoices": "invoice",
}


class WorkspacePublishRequest(BaseModel):
    override_price: Optional[float] = Field(None, ge=0)


def get_hydrator(request: Request) -> Hydrator:
    return request.app.state.hydrator


def _form_view(state: StudioState) -> dict:
    return {
        "form_values": state.form_values,
        "allocations": state.allocations,
        "calculations": state.calculations,
        "loaded_quote_id": state.loaded_quote_id,
    }


@router.get("/form")
def get_form(state: StudioState = Depends(get_state)):
    return _form_view(state)


@router.put("/form", response_model=schemas.Calculations)
def update_form(form_values: schemas.FormValues, state: StudioState = Depends(get_state)):
    return state.set_form_values(form_values)


@router.put("/allocations", response_model=schemas.ProfitAllocation)
def update_allocations(allocations: schemas.Allocation, state: StudioState = Depends(get_state)):
    state.set_allocations(allocations)
    return allocate_profit(state.calculations.profit_amount, allocations)


@router.post("/reset")
def reset_form(state: StudioState = Depends(get_state)):
    state.reset()
    return _form_view(state)


@router.post("/load/{quote_id}")
def load_quote(quote_id: int, state: StudioState = Depends(get_state), db: Session = Depends(get_db)):
    state.load_quote(quote_to_dict(_get_quote(quote_id, db)))
    return _form_view(state)


@router.post("/publish", response_model=schemas.PublishResponse)
def publish_form(
    request: WorkspacePublishRequest,
    state: StudioState = Depends(get_state),
    db: Session = Depends(get_db),
):
    """
    Publish the current form. The quote shows up in the workspace collection
    straight away and is swapped for the stored row once the commit succeeds;
    a failed publish leaves the collection exactly as it was.
    """
    key = state.loaded_quote_id if state.loaded_quote_id is not None else PENDING_KEY
    final = apply_price_override(state.calculations, request.override_price)

    with state.optimistic("quotes") as quotes:
        quotes[key] = {
            **quotes.get(key, {}),
            "id": key,
            "client_id": state.form_values.client_id,
            "project_id": state.form_values.project_id,
            "status": models.QuoteStatus.DRAFT.value,
            "form_values": state.form_values.model_dump(mode="json"),
            "allocations": state.allocations.model_dump(mode="json"),
            "calculations": final.model_dump(mode="json"),
            "suggested_calculations": state.calculations.model_dump(mode="json"),
        }
        quote, was_existing = publish_quote(
            db,
            state.form_values,
            state.allocations,
            override_price=request.override_price,
            quote_id=state.loaded_quote_id,
        )
        stored = schemas.Quote.model_validate(quote)
        quotes.pop(key, None)
        quotes[quote.id] = stored.model_dump(mode="json")

    state.loaded_quote_id = quote.id
    return {"quote_id": quote.id, "was_existing": was_existing, "quote": stored}


@router.post("/sync")
def sync_collections(state: StudioState = Depends(get_state), db: Session = Depends(get_db)):
    def dump(model, schema):
        return [schema.model_validate(r).model_dump(mode="json") for r in db.query(model).all()]

    state.replace_collections(
        clients=dump(models.Client, schemas.Client),
        properties=dump(models.Property, schemas.Property),
        projects=dump(models.Project, schemas.Project),
        quotes=dump(models.Quote, schemas.Quote),
        invoices=dump(models.Invoice, schemas.Invoice),
    )
    return {name: len(state.collection(name)) for name in HYDRATED_RECORDS}


@router.get("/{collection}")
def list_hydrated(collection: str, hydrator: Hydrator = Depends(get_hydrator)):
    if collection not in HYDRATED_LISTS:
        raise HTTPException(status_code=404, detail=f"Unknown collection: {collection}")
    return getattr(hydrator, HYDRATED_LISTS[collection])()


@router.get("/{collection}/{record_id}")
def get_hydrated(collection: str, record_id: int, hydrator: Hydrator = Depends(get_hydrator)):
    if collection not in HYDRATED_RECORDS:
        raise HTTPException(status_code=404, detail=f"Unknown collection: {collection}")
    record = getattr(hydrator, HYDRATED_RECORDS[collection])(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Record not found")
    return record
