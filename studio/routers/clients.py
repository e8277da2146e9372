from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..database import get_db
from ..records import commit, drop_where, get_state, optimistic, to_record
from ..state import COLLECTIONS, StudioState

router = APIRouter(prefix="/clients", tags=["clients"])


def client_to_dict(client: models.Client) -> dict:
    """Client with its follow-up log, projects and quotes: the CRM card view."""
    return {
        **schemas.Client.model_validate(client).model_dump(mode="json"),
        "interactions": [
            schemas.Interaction.model_validate(i).model_dump(mode="json") for i in client.interactions
        ],
        "properties": [
            schemas.Property.model_validate(p).model_dump(mode="json") for p in client.properties
        ],
        "projects": [
            schemas.Project.model_validate(p).model_dump(mode="json") for p in client.projects
        ],
        "quotes": [
            {
                "id": q.id,
                "quote_number": q.quote_number,
                "status": q.status.value if q.status else "Draft",
                "total_price": (q.calculations or {}).get("total_price", 0.0),
            }
            for q in client.quotes
        ],
    }

@router.post("/", response_model=schemas.Client)
def create_client(
    client: schemas.ClientCreate,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    db_client = models.Client(**client.model_dump(), status="Lead", responsiveness="Warm")
    with state.optimistic("clients") as clients:
        db.add(db_client)
        commit(db, "create client")
        db.refresh(db_client)
        clients[db_client.id] = to_record(db_client, schemas.Client)
    return db_client


@router.get("/", response_model=List[schemas.Client])
def list_clients(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return db.query(models.Client).order_by(models.Client.created_at.desc()).offset(skip).limit(limit).all()


@router.get("/{client_id}")
def get_client(client_id: int, db: Session = Depends(get_db)):
    client = db.query(models.Client).filter(models.Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client_to_dict(client)


@router.patch("/{client_id}", response_model=schemas.Client)
def update_client(
    client_id: int,
    update: schemas.ClientUpdate,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    client = db.query(models.Client).filter(models.Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    with state.optimistic("clients") as clients:
        if client_id in clients:
            clients[client_id].update(update.model_dump(mode="json", exclude_unset=True))
        for field, value in update.model_dump(exclude_unset=True).items():
            setattr(client, field, value)
        commit(db, "update client")
        db.refresh(client)
        clients[client_id] = to_record(client, schemas.Client)
    return client


@router.delete("/{client_id}")
def delete_client(
    client_id: int,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    """Removes the client with its properties, projects, quotes, invoices and interactions."""
    client = db.query(models.Client).filter(models.Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    quote_ids = {q.id for q in client.quotes}
    with optimistic(state, *COLLECTIONS) as collections:
        clients = collections[0]
        clients.pop(client_id, None)
        for dependents in collections[1:]:
            drop_where(dependents, "client_id", client_id)
        db.delete(client)
        commit(db, "delete client")
    if state.loaded_quote_id in quote_ids:
        state.loaded_quote_id = None
    return {"ok": True}


@router.post("/{client_id}/interactions", response_model=schemas.Interaction)
def add_interaction(client_id: int, interaction: schemas.InteractionCreate, db: Session = Depends(get_db)):
    client = db.query(models.Client).filter(models.Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    db_interaction = models.Interaction(client_id=client_id, **interaction.model_dump())
    db.add(db_interaction)
    db.commit()
    db.refresh(db_interaction)
    return db_interaction


@router.get("/{client_id}/interactions", response_model=List[schemas.Interaction])
def list_interactions(client_id: int, db: Session = Depends(get_db)):
    client = db.query(models.Client).filter(models.Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client.interactions
