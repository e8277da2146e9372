from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from .. import models, schemas
from ..database import get_db
from ..records import commit, get_state, optimistic, to_record, unlink
from ..state import StudioState

router = APIRouter(prefix="/projects", tags=["projects"])


def _check_relations(db: Session, client_id: int, property_id: Optional[int]):
    if not db.query(models.Client).filter(models.Client.id == client_id).first():
        raise HTTPException(status_code=404, detail="Client not found")
    if property_id is not None:
        prop = db.query(models.Property).filter(models.Property.id == property_id).first()
        if not prop:
            raise HTTPException(status_code=404, detail="Property not found")
        if prop.client_id != client_id:
            raise HTTPException(status_code=400, detail="Property belongs to a different client")


@router.post("/", response_model=schemas.Project)
def create_project(
    project: schemas.ProjectCreate,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    _check_relations(db, project.client_id, project.property_id)
    db_project = models.Project(**project.model_dump())
    with state.optimistic("projects") as projects:
        db.add(db_project)
        commit(db, "create project")
        db.refresh(db_project)
        projects[db_project.id] = to_record(db_project, schemas.Project)
    return db_project


@router.get("/", response_model=List[schemas.Project])
def list_projects(client_id: Optional[int] = None, db: Session = Depends(get_db)):
    query = db.query(models.Project)
    if client_id is not None:
        query = query.filter(models.Project.client_id == client_id)
    return query.order_by(models.Project.created_at.desc()).all()


@router.get("/{project_id}", response_model=schemas.Project)
def get_project(project_id: int, db: Session = Depends(get_db)):
    project = db.query(models.Project).filter(models.Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.patch("/{project_id}", response_model=schemas.Project)
def update_project(
    project_id: int,
    update: schemas.ProjectUpdate,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    project = db.query(models.Project).filter(models.Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    data = update.model_dump(exclude_unset=True)
    if "client_id" in data or "property_id" in data:
        _check_relations(
            db,
            data.get("client_id") or project.client_id,
            data.get("property_id", project.property_id),
        )
    with state.optimistic("projects") as projects:
        if project_id in projects:
            projects[project_id].update(update.model_dump(mode="json", exclude_unset=True))
        for field, value in data.items():
            setattr(project, field, value)
        commit(db, "update project")
        db.refresh(project)
        projects[project_id] = to_record(project, schemas.Project)
    return project


@router.delete("/{project_id}")
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    state: StudioState = Depends(get_state),
):
    """Quotes and invoices for the project are kept and unassigned."""
    project = db.query(models.Project).filter(models.Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    with optimistic(state, "projects", "quotes", "invoices") as (projects, quotes, invoices):
        projects.pop(project_id, None)
        unlink(quotes, "project_id", project_id)
        unlink(invoices, "project_id", project_id)
        db.delete(project)
        commit(db, "delete project")
    return {"ok": True}
