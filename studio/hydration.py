"""
Hydrated views: records joined with their related records.

Joins run over the normalized maps held by StudioState (id -> dict) and are
cached per (kind, id). The whole cache is dropped as soon as the state's
version moves, so a view is never stale and never rebuilt for an unchanged
state.
"""

from typing import Optional

from .state import StudioState


def _children(collection: dict, key: str, value) -> list:
    return [dict(row) for row in collection.values() if row.get(key) == value]


class Hydrator:

    def __init__(self, state: StudioState):
        self.state = state
        self._cache: dict = {}
        self._version = state.version

    def _cached(self, kind: str, entity_id, build):
        if self._version != self.state.version:
            self._cache.clear()
            self._version = self.state.version
        key = (kind, entity_id)
        if key not in self._cache:
            self._cache[key] = build(entity_id)
        return self._cache[key]

    # --- Single records ---

    def client(self, client_id) -> Optional[dict]:
        return self._cached("client", client_id, self._build_client)

    def property(self, property_id) -> Optional[dict]:
        return self._cached("property", property_id, self._build_property)

    def project(self, project_id) -> Optional[dict]:
        return self._cached("project", project_id, self._build_project)

    def quote(self, quote_id) -> Optional[dict]:
        return self._cached("quote", quote_id, self._build_quote)

    def invoice(self, invoice_id) -> Optional[dict]:
        return self._cached("invoice", invoice_id, self._build_invoice)

    # --- Lists ---

    def clients(self) -> list:
        return [self.client(i) for i in self.state.clients]

    def properties(self) -> list:
        return [self.property(i) for i in self.state.properties]

    def projects(self) -> list:
        return [self.project(i) for i in self.state.projects]

    def quotes(self) -> list:
        return [self.quote(i) for i in self.state.quotes]

    def invoices(self) -> list:
        return [self.invoice(i) for i in self.state.invoices]

    # --- Builders ---

    def _build_client(self, client_id):
        client = self.state.clients.get(client_id)
        if client is None:
            return None
        s = self.state
        return {
            **client,
            "properties": _children(s.properties, "client_id", client_id),
            "projects": _children(s.projects, "client_id", client_id),
            "quotes": _children(s.quotes, "client_id", client_id),
            "invoices": _children(s.invoices, "client_id", client_id),
        }

    def _build_property(self, property_id):
        prop = self.state.properties.get(property_id)
        if prop is None:
            return None
        return {
            **prop,
            "client": self.state.clients.get(prop.get("client_id")),
            "projects": _children(self.state.projects, "property_id", property_id),
        }

    def _build_project(self, project_id):
        project = self.state.projects.get(project_id)
        if project is None:
            return None
        s = self.state
        return {
            **project,
            "client": s.clients.get(project.get("client_id")),
            "property": s.properties.get(project.get("property_id")),
            "quotes": _children(s.quotes, "project_id", project_id),
            "invoices": _children(s.invoices, "project_id", project_id),
        }

    def _build_quote(self, quote_id):
        quote = self.state.quotes.get(quote_id)
        if quote is None:
            return None
        return {
            **quote,
            "client": self.state.clients.get(quote.get("client_id")),
            "project": self.state.projects.get(quote.get("project_id")),
        }

    def _build_invoice(self, invoice_id):
        invoice = self.state.invoices.get(invoice_id)
        if invoice is None:
            return None
        s = self.state
        return {
            **invoice,
            "client": s.clients.get(invoice.get("client_id")),
            "project": s.projects.get(invoice.get("project_id")),
            "quote": s.quotes.get(invoice.get("quote_id")),
        }
