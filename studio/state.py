"""
Workspace state: the costing form being edited plus normalized copies of the
studio's records.

One StudioState is created by the app factory (main.py) and hung off
app.state; tests build their own. Nothing here is module-global.

Collections are plain dicts keyed by entity id. Every change to a collection
goes through `optimistic()`, which snapshots the collection, lets the caller
apply a tentative change and run the database call, and puts the exact
snapshot back if that call raises.
"""

import copy
import logging
from contextlib import contextmanager
from typing import Iterable, Optional

from .cost_engine import CostEngine
from .schemas import Allocation, Calculations, FormValues

logger = logging.getLogger(__name__)

COLLECTIONS = ("clients", "properties", "projects", "quotes", "invoices")


class StudioState:

    def __init__(self, nssf_cap: Optional[float] = None):
        self.engine = CostEngine(nssf_cap=nssf_cap)
        self.form_values = FormValues()
        self.allocations = Allocation()
        self.calculations: Calculations = self.engine.calculate(self.form_values)
        self.loaded_quote_id: Optional[int] = None

        self.clients: dict = {}
        self.properties: dict = {}
        self.projects: dict = {}
        self.quotes: dict = {}
        self.invoices: dict = {}
        # Bumped on every collection change: read-side caches key on it
        self.version = 0

    # --- Costing form ---

    def set_form_values(self, form_values: FormValues) -> Calculations:
        """Replace the form and recompute: called on every edit."""
        self.form_values = form_values
        self.calculations = self.engine.calculate(form_values)
        return self.calculations

    def set_allocations(self, allocations: Allocation):
        self.allocations = allocations

    def reset(self):
        """Discard the form-in-progress."""
        self.form_values = FormValues()
        self.allocations = Allocation()
        self.calculations = self.engine.calculate(self.form_values)
        self.loaded_quote_id = None

    def load_quote(self, quote: dict):
        """
        Load a published quote's snapshot back into the form for editing.
        Calculations are re-derived, not taken from the snapshot.
        """
        self.form_values = FormValues.model_validate(quote["form_values"])
        self.allocations = Allocation.model_validate(quote.get("allocations") or {})
        self.calculations = self.engine.calculate(self.form_values)
        self.loaded_quote_id = quote.get("id")

    # --- Collections ---

    def collection(self, name: str) -> dict:
        if name not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {name}")
        return getattr(self, name)

    def replace_collections(self, **records: Iterable[dict]):
        """Swap in fresh records, e.g. after reading them from the database."""
        for name, rows in records.items():
            self.collection(name)  # validates the name
            setattr(self, name, {row["id"]: row for row in rows})
        self.version += 1

    @contextmanager
    def optimistic(self, name: str):
        """
        Apply / confirm / rollback for one collection.

            with state.optimistic("quotes") as quotes:
                quotes[tmp_id] = draft        # tentative
                quote = persist(...)          # may raise
                quotes.pop(tmp_id)
                quotes[quote.id] = ...        # confirmed

        If the block raises, the collection is restored to its exact prior
        contents and the exception propagates.
        """
        snapshot = copy.deepcopy(self.collection(name))
        self.version += 1
        try:
            yield self.collection(name)
        except Exception:
            setattr(self, name, snapshot)
            self.version += 1
            logger.warning("Rolled back optimistic update to %s", name)
            raise
        self.version += 1
