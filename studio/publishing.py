"""
Quote publishing: freezes the costing form into a Quote snapshot.

Both figures are kept on every publish:
  suggested_calculations  engine output, untouched
  calculations            same, with total_price replaced by a manual override

Re-publishing an existing quote overwrites its snapshot and drops it back to
Draft so it has to be approved again.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .config import settings
from .cost_engine import CostEngine
from .schemas import Allocation, Calculations, FormValues

logger = logging.getLogger(__name__)


def apply_price_override(suggested: Calculations, override_price: Optional[float] = None) -> Calculations:
    """Copy of `suggested`; only total_price changes, and only when overridden."""
    if override_price is None:
        return suggested.model_copy()
    return suggested.model_copy(update={"total_price": float(override_price)})


def generate_quote_number(db: Session) -> str:
    count = db.query(models.Quote).count()
    year = datetime.utcnow().year
    number = f"QT-{year}-{str(count + 1).zfill(4)}"
    # Deleted quotes leave gaps: step past any number already taken
    while db.query(models.Quote).filter(models.Quote.quote_number == number).first():
        count += 1
        number = f"QT-{year}-{str(count + 1).zfill(4)}"
    return number


def _validate_relations(db: Session, form_values: FormValues):
    if form_values.client_id is None:
        raise HTTPException(status_code=400, detail="Please select a client before publishing")
    client = db.query(models.Client).filter(models.Client.id == form_values.client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    if form_values.project_id is not None:
        project = db.query(models.Project).filter(models.Project.id == form_values.project_id).first()
        if not project:
            raise HTTPException(status_code=404, detail="Project not found")
        if project.client_id != client.id:
            raise HTTPException(status_code=400, detail="Project belongs to a different client")


def publish_quote(
    db: Session,
    form_values: FormValues,
    allocations: Allocation,
    override_price: Optional[float] = None,
    quote_id: Optional[int] = None,
) -> tuple[models.Quote, bool]:
    """
    Run the engine and persist the dual snapshot.

    Returns (quote, was_existing). Raises HTTPException on a bad client/project
    reference, a missing quote_id, or a database failure (after rollback).
    """
    _validate_relations(db, form_values)

    suggested = CostEngine(nssf_cap=settings.NSSF_PER_PERSON_CAP).calculate(form_values)
    final = apply_price_override(suggested, override_price)

    snapshot = {
        "client_id": form_values.client_id,
        "project_id": form_values.project_id,
        "form_values": form_values.model_dump(mode="json"),
        "allocations": allocations.model_dump(mode="json"),
        "calculations": final.model_dump(mode="json"),
        "suggested_calculations": suggested.model_dump(mode="json"),
        "timestamp": datetime.utcnow(),
        "status": models.QuoteStatus.DRAFT,
    }

    try:
        if quote_id is not None:
            quote = db.query(models.Quote).filter(models.Quote.id == quote_id).first()
            if not quote:
                raise HTTPException(status_code=404, detail="Quote not found")
            for field, value in snapshot.items():
                setattr(quote, field, value)
            was_existing = True
        else:
            quote = models.Quote(quote_number=generate_quote_number(db), **snapshot)
            db.add(quote)
            was_existing = False
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to publish quote for client %s", form_values.client_id)
        raise HTTPException(status_code=500, detail="Could not publish quote: nothing was saved")

    db.refresh(quote)
    logger.info(
        "Published quote %s (%s) total_price=%.2f override=%s",
        quote.quote_number, "re-publish" if was_existing else "new",
        final.total_price, override_price is not None,
    )
    return quote, was_existing
