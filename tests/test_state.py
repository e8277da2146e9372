"""
Workspace state tests: form recompute, quote loading, optimistic updates.

Tests:
1-4. Form values, reset, load_quote, configured defaults
5-7. optimistic(): confirm, rollback, unknown collection
"""

from unittest.mock import patch

import pytest

from studio.config import settings
from studio.schemas import Allocation, FormValues
from studio.state import StudioState


def _form(**overrides):
    data = {
        "materials": [{"name": "Tiles", "quantity": 10, "unit_cost": 1000}],
        "business_type": "no_tax",
        "profit_margin": 10,
    }
    data.update(overrides)
    return FormValues(**data)


# ============================================================
# 1-4. Form
# ============================================================

def test_set_form_values_recomputes():
    state = StudioState()
    assert state.calculations.total_price == 0
    calc = state.set_form_values(_form())
    assert calc.total_price == pytest.approx(11000)
    assert state.calculations is calc


def test_reset_restores_defaults():
    state = StudioState()
    state.set_form_values(_form())
    state.set_allocations(Allocation(savings=100, future_dev=0, csr=0))
    state.loaded_quote_id = 3
    state.reset()
    assert state.form_values == FormValues()
    assert state.allocations == Allocation()
    assert state.calculations.total_price == 0
    assert state.loaded_quote_id is None


def test_load_quote_recomputes_from_form():
    state = StudioState()
    quote = {
        "id": 7,
        "form_values": _form().model_dump(mode="json"),
        "allocations": {"savings": 50, "future_dev": 25, "csr": 25},
        # Stale figures in the snapshot are ignored
        "calculations": {"total_price": 1.0},
    }
    state.load_quote(quote)
    assert state.loaded_quote_id == 7
    assert state.allocations.savings == 50
    assert state.calculations.total_price == pytest.approx(11000)


def test_nssf_cap_reaches_engine():
    state = StudioState(nssf_cap=1000)
    calc = state.set_form_values(_form(
        salaries=[{"role": "Designer", "gross_salary": 100000}], enable_nssf=True,
    ))
    assert calc.nssf_amount == pytest.approx(1000)


def test_form_defaults_come_from_settings():
    with patch.object(settings, "DEFAULT_TAX_RATE", 8.0), patch.object(settings, "DEFAULT_PROFIT_MARGIN", 40.0):
        form = FormValues()
    assert form.tax_rate == 8.0
    assert form.profit_margin == 40.0
    assert FormValues().tax_rate == settings.DEFAULT_TAX_RATE


# ============================================================
# 5-7. Optimistic updates
# ============================================================

def test_optimistic_confirm_keeps_change():
    state = StudioState()
    state.replace_collections(clients=[{"id": 1, "name": "Alice Johnson"}])
    version = state.version
    with state.optimistic("clients") as clients:
        clients[2] = {"id": 2, "name": "Bob Williams"}
    assert set(state.clients) == {1, 2}
    assert state.version > version


def test_optimistic_rollback_restores_exact_snapshot():
    state = StudioState()
    state.replace_collections(clients=[{"id": 1, "name": "Alice Johnson", "status": "Lead"}])
    before = {k: dict(v) for k, v in state.clients.items()}

    with pytest.raises(RuntimeError):
        with state.optimistic("clients") as clients:
            clients[1]["status"] = "Active"
            clients[2] = {"id": 2, "name": "Bob Williams"}
            raise RuntimeError("database unavailable")

    assert state.clients == before


def test_unknown_collection():
    state = StudioState()
    with pytest.raises(KeyError):
        state.collection("suppliers")
    with pytest.raises(KeyError):
        state.replace_collections(suppliers=[])
