"""
Hydrated view tests: joins over the workspace collections and the view cache.

Tests:
1-4. Joins for client, project, invoice, property
5-6. Cache reuse and invalidation
"""

from studio.hydration import Hydrator
from studio.state import StudioState


def _state():
    state = StudioState()
    state.replace_collections(
        clients=[{"id": 1, "name": "Alice Johnson"}, {"id": 2, "name": "Bob Williams"}],
        properties=[{"id": 10, "client_id": 1, "name": "Main Street House"}],
        projects=[
            {"id": 20, "client_id": 1, "property_id": 10, "name": "Kitchen Renovation"},
            {"id": 21, "client_id": 1, "property_id": None, "name": "New Build Consultation"},
        ],
        quotes=[{"id": 30, "client_id": 1, "project_id": 20, "quote_number": "QT-2026-0001"}],
        invoices=[{"id": 40, "client_id": 1, "project_id": 20, "quote_id": 30, "amount": 500}],
    )
    return state


# ============================================================
# 1-4. Joins
# ============================================================

def test_client_view():
    view = Hydrator(_state()).client(1)
    assert [p["id"] for p in view["properties"]] == [10]
    assert [p["id"] for p in view["projects"]] == [20, 21]
    assert [q["id"] for q in view["quotes"]] == [30]
    assert [i["id"] for i in view["invoices"]] == [40]


def test_project_and_quote_views():
    hydrator = Hydrator(_state())
    project = hydrator.project(20)
    assert project["client"]["name"] == "Alice Johnson"
    assert project["property"]["name"] == "Main Street House"
    assert [q["id"] for q in project["quotes"]] == [30]
    assert hydrator.project(21)["property"] is None
    assert hydrator.quote(30)["project"]["name"] == "Kitchen Renovation"


def test_invoice_view_and_missing_ids():
    hydrator = Hydrator(_state())
    invoice = hydrator.invoice(40)
    assert invoice["quote"]["quote_number"] == "QT-2026-0001"
    assert invoice["client"]["id"] == 1
    assert hydrator.client(99) is None
    assert hydrator.property(10)["projects"][0]["id"] == 20
    assert Hydrator(_state()).client(2)["projects"] == []


def test_property_list():
    properties = Hydrator(_state()).properties()
    assert [p["id"] for p in properties] == [10]
    assert properties[0]["client"]["name"] == "Alice Johnson"
    assert [p["id"] for p in properties[0]["projects"]] == [20]


# ============================================================
# 5-6. Cache
# ============================================================

def test_view_cached_while_state_unchanged():
    hydrator = Hydrator(_state())
    assert hydrator.client(1) is hydrator.client(1)
    assert len(hydrator.clients()) == 2


def test_cache_dropped_after_mutation():
    state = _state()
    hydrator = Hydrator(state)
    before = hydrator.client(1)
    with state.optimistic("projects") as projects:
        projects[22] = {"id": 22, "client_id": 1, "name": "Bathroom Update"}
    after = hydrator.client(1)
    assert after is not before
    assert len(after["projects"]) == 3
