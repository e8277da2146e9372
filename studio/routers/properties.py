from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from .. import models, schemas
from ..database import get_db
from ..records import commit, get_state, optimistic, to_record, unlink
from ..state import StudioState

router = APIRouter(prefix="/properties", tags=["properties"])


def _require_client(client_id: int, db: Session):
    if not db.query(models.Client).filter(models.Client.id == client_id).first():
        raise HTTPException(status_code=404, detail="Client not found")


@router.post("/", response_model=schemas.Property)
def create_property(
    prop: schemas.PropertyCreate,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    _require_client(prop.client_id, db)
    db_property = models.Property(**prop.model_dump())
    with state.optimistic("properties") as properties:
        db.add(db_property)
        commit(db, "create property")
        db.refresh(db_property)
        properties[db_property.id] = to_record(db_property, schemas.Property)
    return db_property


@router.get("/", response_model=List[schemas.Property])
def list_properties(client_id: Optional[int] = None, db: Session = Depends(get_db)):
    query = db.query(models.Property)
    if client_id is not None:
        query = query.filter(models.Property.client_id == client_id)
    return query.order_by(models.Property.created_at.desc()).all()


@router.get("/{property_id}", response_model=schemas.Property)
def get_property(property_id: int, db: Session = Depends(get_db)):
    prop = db.query(models.Property).filter(models.Property.id == property_id).first()
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    return prop


@router.patch("/{property_id}", response_model=schemas.Property)
def update_property(
    property_id: int,
    update: schemas.PropertyUpdate,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    prop = db.query(models.Property).filter(models.Property.id == property_id).first()
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    data = update.model_dump(exclude_unset=True)
    if data.get("client_id") is not None:
        _require_client(data["client_id"], db)
    with state.optimistic("properties") as properties:
        if property_id in properties:
            properties[property_id].update(update.model_dump(mode="json", exclude_unset=True))
        for field, value in data.items():
            setattr(prop, field, value)
        commit(db, "update property")
        db.refresh(prop)
        properties[property_id] = to_record(prop, schemas.Property)
    return prop


@router.delete("/{property_id}")
def delete_property(
    property_id: int,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    """Projects on this property stay: they just lose the link."""
    prop = db.query(models.Property).filter(models.Property.id == property_id).first()
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    with optimistic(state, "properties", "projects") as (properties, projects):
        properties.pop(property_id, None)
        unlink(projects, "property_id", property_id)
        db.delete(prop)
        commit(db, "delete property")
    return {"ok": True}
