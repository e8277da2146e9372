from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas
from ..dashboard import compute_dashboard_metrics
from ..database import get_db

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _dump(rows, schema) -> list:
    return [schema.model_validate(r).model_dump(mode="json") for r in rows]


@router.get("/metrics", response_model=schemas.DashboardMetrics)
def dashboard_metrics(db: Session = Depends(get_db)):
    return compute_dashboard_metrics(
        clients=_dump(db.query(models.Client).all(), schemas.Client),
        projects=_dump(db.query(models.Project).all(), schemas.Project),
        quotes=_dump(db.query(models.Quote).all(), schemas.Quote),
        invoices=_dump(db.query(models.Invoice).all(), schemas.Invoice),
    )
