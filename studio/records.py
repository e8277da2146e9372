"""
Keeps the workspace collections in step with database writes.

Routers change a record in two places: the database row and the matching
entry in StudioState. Both happen inside `state.optimistic(...)`, so when the
commit fails the collection goes back to exactly what it was and the caller
gets a 500.
"""

import logging
from contextlib import ExitStack, contextmanager

from fastapi import HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .state import StudioState

logger = logging.getLogger(__name__)


def get_state(request: Request) -> StudioState:
    return request.app.state.studio


def to_record(row, schema) -> dict:
    return schema.model_validate(row).model_dump(mode="json")


def commit(db: Session, action: str):
    """Commit, or roll back and raise HTTP 500."""
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise HTTPException(status_code=500, detail=f"Could not {action}: nothing was saved")


@contextmanager
def optimistic(state: StudioState, *names: str):
    """state.optimistic() over several collections at once, yielding them in order."""
    with ExitStack() as stack:
        yield tuple(stack.enter_context(state.optimistic(name)) for name in names)


def unlink(collection: dict, key: str, value):
    """Null out a foreign key on every record pointing at `value`."""
    for record in collection.values():
        if record.get(key) == value:
            record[key] = None


def drop_where(collection: dict, key: str, value):
    for record_id in [k for k, r in collection.items() if r.get(key) == value]:
        collection.pop(record_id)
