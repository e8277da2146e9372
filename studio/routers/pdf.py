"""
PDF download endpoint.

GET /api/quotes/{quote_id}/pdf client-facing quote document.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ..database import get_db
from ..pdf_generator import generate_quote_pdf
from .quotes import _get_quote, quote_to_dict

router = APIRouter(prefix="/quotes", tags=["pdf"])


@router.get("/{quote_id}/pdf")
def download_pdf(quote_id: int, db: Session = Depends(get_db)):
    """
    Generate and download a PDF quote document.
    Returns: application/pdf
    """
    quote = _get_quote(quote_id, db)
    data = quote_to_dict(quote)

    pdf_bytes = generate_quote_pdf(data, client=data["client"], project=data["project"])

    filename = f"Quote-{quote.quote_number}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )
