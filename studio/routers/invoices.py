import time
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from .. import models, schemas
from ..database import get_db
from ..records import commit, get_state, to_record
from ..state import StudioState

router = APIRouter(prefix="/invoices", tags=["invoices"])

OUTSTANDING = (models.InvoiceStatus.DRAFT, models.InvoiceStatus.SENT)


def generate_invoice_number() -> str:
    return f"INV-{int(time.time() * 1000)}"


def _invoice_from_quote(db: Session, quote_id: int, client_id: int) -> models.Quote:
    """Only approved quotes for the same client can be invoiced."""
    quote = db.query(models.Quote).filter(models.Quote.id == quote_id).first()
    if not quote:
        raise HTTPException(status_code=404, detail="Quote not found")
    if quote.client_id != client_id:
        raise HTTPException(status_code=400, detail="Quote belongs to a different client")
    if quote.status != models.QuoteStatus.APPROVED:
        raise HTTPException(status_code=400, detail="Only approved quotes can be invoiced")
    return quote


def _check_unique_number(db: Session, invoice_number: str, exclude_id: Optional[int] = None):
    query = db.query(models.Invoice).filter(models.Invoice.invoice_number == invoice_number)
    if exclude_id is not None:
        query = query.filter(models.Invoice.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=400, detail=f"Invoice number {invoice_number} already exists")


@router.post("/", response_model=schemas.Invoice)
def create_invoice(
    invoice: schemas.InvoiceCreate,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    if not db.query(models.Client).filter(models.Client.id == invoice.client_id).first():
        raise HTTPException(status_code=404, detail="Client not found")

    data = invoice.model_dump()
    if invoice.quote_id is not None:
        quote = _invoice_from_quote(db, invoice.quote_id, invoice.client_id)
        if data["project_id"] is None:
            data["project_id"] = quote.project_id
        if data["amount"] is None:
            # Bill the published (final) price, not the engine suggestion
            data["amount"] = (quote.calculations or {}).get("total_price", 0.0)
    if data["amount"] is None:
        data["amount"] = 0.0
    if not data["invoice_number"]:
        data["invoice_number"] = generate_invoice_number()
    _check_unique_number(db, data["invoice_number"])

    db_invoice = models.Invoice(**data)
    with state.optimistic("invoices") as invoices:
        db.add(db_invoice)
        commit(db, "create invoice")
        db.refresh(db_invoice)
        invoices[db_invoice.id] = to_record(db_invoice, schemas.Invoice)
    return db_invoice


@router.get("/", response_model=List[schemas.Invoice])
def list_invoices(
    client_id: Optional[int] = None,
    status: Optional[models.InvoiceStatus] = None,
    db: Session = Depends(get_db),
):
    query = db.query(models.Invoice)
    if client_id is not None:
        query = query.filter(models.Invoice.client_id == client_id)
    if status is not None:
        query = query.filter(models.Invoice.status == status)
    return query.order_by(models.Invoice.due_date.asc()).all()


@router.get("/summary", response_model=schemas.InvoiceSummary)
def invoice_summary(db: Session = Depends(get_db)):
    """Outstanding (Draft + Sent), overdue and paid totals."""
    invoices = db.query(models.Invoice).all()
    return {
        "total_outstanding": sum(i.amount or 0.0 for i in invoices if i.status in OUTSTANDING),
        "total_overdue": sum(i.amount or 0.0 for i in invoices if i.status == models.InvoiceStatus.OVERDUE),
        "total_paid": sum(i.amount or 0.0 for i in invoices if i.status == models.InvoiceStatus.PAID),
    }


@router.get("/{invoice_id}", response_model=schemas.Invoice)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    invoice = db.query(models.Invoice).filter(models.Invoice.id == invoice_id).first()
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


@router.patch("/{invoice_id}", response_model=schemas.Invoice)
def update_invoice(
    invoice_id: int,
    update: schemas.InvoiceUpdate,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    invoice = db.query(models.Invoice).filter(models.Invoice.id == invoice_id).first()
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    data = update.model_dump(exclude_unset=True)
    if data.get("invoice_number"):
        _check_unique_number(db, data["invoice_number"], exclude_id=invoice.id)
    if data.get("quote_id") is not None:
        _invoice_from_quote(db, data["quote_id"], invoice.client_id)
    with state.optimistic("invoices") as invoices:
        if invoice_id in invoices:
            invoices[invoice_id].update(update.model_dump(mode="json", exclude_unset=True))
        for field, value in data.items():
            setattr(invoice, field, value)
        commit(db, "update invoice")
        db.refresh(invoice)
        invoices[invoice_id] = to_record(invoice, schemas.Invoice)
    return invoice


@router.patch("/{invoice_id}/status", response_model=schemas.Invoice)
def update_invoice_status(
    invoice_id: int,
    update: schemas.InvoiceStatusUpdate,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    invoice = db.query(models.Invoice).filter(models.Invoice.id == invoice_id).first()
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    with state.optimistic("invoices") as invoices:
        if invoice_id in invoices:
            invoices[invoice_id]["status"] = update.status.value
        invoice.status = update.status
        commit(db, "update invoice status")
        db.refresh(invoice)
        invoices[invoice_id] = to_record(invoice, schemas.Invoice)
    return invoice


@router.delete("/{invoice_id}")
def delete_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    invoice = db.query(models.Invoice).filter(models.Invoice.id == invoice_id).first()
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    with state.optimistic("invoices") as invoices:
        invoices.pop(invoice_id, None)
        db.delete(invoice)
        commit(db, "delete invoice")
    return {"ok": True}
