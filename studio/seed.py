"""
Demo data: two clients with a property each and three projects.

    python -m studio.seed

Skips seeding when the database already has clients.
"""

import logging

from sqlalchemy.orm import Session

from . import models
from .database import Base, SessionLocal, engine

logger = logging.getLogger(__name__)

DEMO_CLIENTS = [
    {
        "name": "Alice Johnson",
        "email": "alice@example.com",
        "phone": "123-456-7890",
        "property": {"name": "Main Street House", "address": "123 Main St, Anytown, USA"},
        "projects": [
            {
                "name": "Kitchen Renovation",
                "scope": "Full kitchen remodel",
                "timeline": "3 months",
                "status": "Planning",
                "project_type": "Renovation",
                "on_property": True,
            },
            {
                "name": "New Build Consultation",
                "scope": "Initial consultation for a new home build",
                "timeline": "1 week",
                "status": "On Hold",
                "project_type": "New Build",
                "on_property": False,
            },
        ],
    },
    {
        "name": "Bob Williams",
        "email": "bob@example.com",
        "phone": "098-765-4321",
        "property": {"name": "Lakeview Cottage", "address": "456 Lakeview Dr, Lakeside, USA"},
        "projects": [
            {
                "name": "Bathroom Update",
                "scope": "Minor updates to bathroom fixtures and paint",
                "timeline": "2 weeks",
                "status": "In Progress",
                "project_type": "Remodel",
                "on_property": True,
            },
        ],
    },
]


def seed_demo_data(db: Session) -> int:
    """Insert the demo records. Returns the number of clients created."""
    if db.query(models.Client).count() > 0:
        logger.info("Clients already present, skipping demo seed")
        return 0

    for entry in DEMO_CLIENTS:
        client = models.Client(
            name=entry["name"], email=entry["email"], phone=entry["phone"],
            status="Lead", responsiveness="Warm",
        )
        db.add(client)
        db.flush()

        prop = models.Property(client_id=client.id, **entry["property"])
        db.add(prop)
        db.flush()

        for project in entry["projects"]:
            data = {k: v for k, v in project.items() if k != "on_property"}
            db.add(models.Project(
                client_id=client.id,
                property_id=prop.id if project["on_property"] else None,
                **data,
            ))

    db.commit()
    logger.info(f"Seeded {len(DEMO_CLIENTS)} demo clients")
    return len(DEMO_CLIENTS)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed_demo_data(session)
    finally:
        session.close()
