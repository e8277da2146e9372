from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from .config import settings
from .database import engine, Base
from .hydration import Hydrator
from .routers import ai, clients, dashboard, invoices, pdf, projects, properties, quotes, workspace
from .state import StudioState

logger = logging.getLogger("studio")

# Create tables (handles new tables but won't add columns to existing ones)
Base.metadata.create_all(bind=engine)


def _run_migrations():
    """Run pending Alembic migrations on startup.

    Databases created by Base.metadata.create_all() before Alembic was set up
    have no alembic_version table; those are stamped at the initial revision
    before upgrading.
    """
    try:
        from alembic.config import Config
        from alembic import command
        from sqlalchemy import inspect

        alembic_ini = os.path.join(os.path.dirname(__file__), "..", "alembic.ini")
        if not os.path.exists(alembic_ini):
            logger.info("alembic.ini not found, skipping migrations")
            return

        alembic_cfg = Config(alembic_ini)
        alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

        insp = inspect(engine)
        has_alembic = "alembic_version" in insp.get_table_names()
        has_quotes = "quotes" in insp.get_table_names()

        if not has_alembic and has_quotes:
            logger.info("Stamping initial migration 3f1c2a7d9b10 (tables already exist)")
            command.stamp(alembic_cfg, "3f1c2a7d9b10")

        logger.info("Running pending Alembic migrations...")
        command.upgrade(alembic_cfg, "head")
        logger.info("Migrations complete")

    except Exception as e:
        # Migration problems are logged, the API still starts
        logger.warning(f"Alembic migration warning: {e}")


app = FastAPI(
    title="Interior Studio Quoting",
    description="Costing, quoting and client management for interior design studios",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Costing form and record views for this process
app.state.studio = StudioState(nssf_cap=settings.NSSF_PER_PERSON_CAP)
app.state.hydrator = Hydrator(app.state.studio)

# API routes
app.include_router(quotes.router, prefix="/api")
app.include_router(pdf.router, prefix="/api")
app.include_router(clients.router, prefix="/api")
app.include_router(properties.router, prefix="/api")
app.include_router(projects.router, prefix="/api")
app.include_router(invoices.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")
app.include_router(ai.router, prefix="/api")
app.include_router(workspace.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "interior-studio-quoting"}


@app.on_event("startup")
def auto_migrate():
    """Run pending Alembic migrations on startup."""
    _run_migrations()
