"""
Quote API tests: calculate, publish / re-publish, status, project assignment,
variance, allocation, PDF.

Tests:
1-3.   /calculate
4-9.   /publish (override, re-publish, validation)
10-13. Status transitions, project assignment, delete
14-16. Variance and allocation
17-18. PDF download
"""

import pytest

from studio import models
from studio.publishing import apply_price_override, generate_quote_number
from studio.schemas import Calculations


def _publish(client, form, **extra):
    response = client.post("/api/quotes/publish", json={"form_values": form, **extra})
    assert response.status_code == 200, response.text
    return response.json()


# ============================================================
# 1-3. Calculate
# ============================================================

def test_calculate_returns_totals(client, sample_form):
    response = client.post("/api/quotes/calculate", json=sample_form)
    assert response.status_code == 200
    data = response.json()
    assert data["direct_cost_base"] == pytest.approx(16000)
    assert data["tax_amount"] == pytest.approx(2560)
    assert data["total_cost"] == pytest.approx(18560)
    assert data["profit_amount"] == pytest.approx(4640)
    assert data["total_price"] == pytest.approx(23200)


def test_calculate_saves_nothing(client, db, sample_form):
    client.post("/api/quotes/calculate", json=sample_form)
    assert db.query(models.Quote).count() == 0


def test_calculate_rejects_negative_cost(client):
    response = client.post("/api/quotes/calculate", json={
        "materials": [{"name": "Tiles", "quantity": 2, "unit_cost": -5}],
    })
    assert response.status_code == 422


# ============================================================
# 4-9. Publish
# ============================================================

def test_publish_without_override_final_equals_suggested(client, sample_form):
    data = _publish(client, sample_form)
    quote = data["quote"]
    assert data["was_existing"] is False
    assert quote["status"] == "Draft"
    assert quote["quote_number"].startswith("QT-")
    assert quote["calculations"] == quote["suggested_calculations"]


def test_publish_with_override_only_changes_total_price(client, sample_form):
    quote = _publish(client, sample_form, override_price=21000)["quote"]
    final, suggested = quote["calculations"], quote["suggested_calculations"]
    assert final["total_price"] == 21000
    assert suggested["total_price"] == pytest.approx(23200)
    for field, value in suggested.items():
        if field != "total_price":
            assert final[field] == value, field


def test_apply_price_override_leaves_input_untouched():
    suggested = Calculations(total_cost=100.0, profit_amount=25.0, total_price=125.0)
    final = apply_price_override(suggested, 150.0)
    assert final.total_price == 150.0
    assert suggested.total_price == 125.0
    assert apply_price_override(suggested) == suggested


def test_republish_keeps_id_and_resets_to_draft(client, sample_form):
    first = _publish(client, sample_form)["quote"]
    client.patch(f"/api/quotes/{first['id']}/status", json={"status": "Sent"})
    client.patch(f"/api/quotes/{first['id']}/status", json={"status": "Approved"})

    sample_form["profit_margin"] = 40
    data = _publish(client, sample_form, quote_id=first["id"])
    again = data["quote"]
    assert data["was_existing"] is True
    assert again["id"] == first["id"]
    assert again["quote_number"] == first["quote_number"]
    assert again["status"] == "Draft"
    assert again["calculations"]["profit_margin"] == 40


def test_publish_requires_client(client, sample_form):
    sample_form.pop("client_id")
    response = client.post("/api/quotes/publish", json={"form_values": sample_form})
    assert response.status_code == 400


def test_publish_unknown_client_or_quote(client, sample_form):
    bad_client = dict(sample_form, client_id=9999)
    assert client.post("/api/quotes/publish", json={"form_values": bad_client}).status_code == 404
    response = client.post("/api/quotes/publish", json={"form_values": sample_form, "quote_id": 9999})
    assert response.status_code == 404


def test_publish_project_of_other_client(client, sample_form):
    other = client.post("/api/clients/", json={"name": "Bob Williams"}).json()
    project = client.post("/api/projects/", json={"name": "Bathroom Update", "client_id": other["id"]}).json()
    sample_form["project_id"] = project["id"]
    response = client.post("/api/quotes/publish", json={"form_values": sample_form})
    assert response.status_code == 400


def test_quote_numbers_are_sequential(client, db, sample_form):
    first = _publish(client, sample_form)["quote"]
    second = _publish(client, sample_form)["quote"]
    assert first["quote_number"] != second["quote_number"]
    assert first["quote_number"].endswith("0001")
    assert second["quote_number"].endswith("0002")
    assert generate_quote_number(db).endswith("0003")


# ============================================================
# 10-13. Status, project, delete
# ============================================================

def test_status_update(client, sample_form):
    quote = _publish(client, sample_form)["quote"]
    response = client.patch(f"/api/quotes/{quote['id']}/status", json={"status": "Sent"})
    assert response.status_code == 200
    assert response.json()["status"] == "Sent"
    bad = client.patch(f"/api/quotes/{quote['id']}/status", json={"status": "Lost"})
    assert bad.status_code == 422


def test_status_transitions_enforced(client, sample_form):
    quote = _publish(client, sample_form)["quote"]
    url = f"/api/quotes/{quote['id']}/status"
    skipped = client.patch(url, json={"status": "Approved"})
    assert skipped.status_code == 400
    assert "Draft" in skipped.json()["detail"]

    assert client.patch(url, json={"status": "Draft"}).status_code == 200
    assert client.patch(url, json={"status": "Sent"}).status_code == 200
    assert client.patch(url, json={"status": "Approved"}).status_code == 200
    assert client.patch(url, json={"status": "Rejected"}).status_code == 400
    assert client.patch(url, json={"status": "Archived"}).status_code == 200
    assert client.get(f"/api/quotes/{quote['id']}").json()["status"] == "Archived"


def test_assign_quote_to_project(client, sample_form, studio_client):
    quote = _publish(client, sample_form)["quote"]
    project = client.post("/api/projects/", json={
        "name": "Kitchen Renovation", "client_id": studio_client["id"],
    }).json()
    response = client.put(f"/api/quotes/{quote['id']}/project", json={"project_id": project["id"]})
    assert response.status_code == 200
    data = response.json()
    assert data["project_id"] == project["id"]
    assert data["form_values"]["project_id"] == project["id"]
    assert data["project"]["name"] == "Kitchen Renovation"

    listed = client.get("/api/quotes/", params={"project_id": project["id"]}).json()
    assert [q["id"] for q in listed] == [quote["id"]]


def test_delete_quote(client, sample_form):
    quote = _publish(client, sample_form)["quote"]
    assert client.delete(f"/api/quotes/{quote['id']}").status_code == 200
    assert client.get(f"/api/quotes/{quote['id']}").status_code == 404


# ============================================================
# 14-16. Variance and allocation
# ============================================================

def test_variance_with_discount(client, sample_form):
    quote = _publish(client, sample_form, override_price=20880)["quote"]
    data = client.get(f"/api/quotes/{quote['id']}/variance").json()
    assert data["total"] == pytest.approx(-2320)
    assert data["total_percent"] == pytest.approx(-10)


def test_variance_without_override_is_zero(client, sample_form):
    quote = _publish(client, sample_form)["quote"]
    data = client.get(f"/api/quotes/{quote['id']}/variance").json()
    assert data == {"total": 0.0, "profit": 0.0, "total_percent": 0.0}


def test_allocation_split(client, sample_form):
    quote = _publish(client, sample_form, allocations={"savings": 50, "future_dev": 30, "csr": 10})["quote"]
    data = client.get(f"/api/quotes/{quote['id']}/allocation").json()
    assert data["profit_amount"] == pytest.approx(4640)
    assert data["savings"] == pytest.approx(2320)
    assert data["future_dev"] == pytest.approx(1392)
    assert data["csr"] == pytest.approx(464)
    assert data["unallocated"] == pytest.approx(464)
    assert data["is_balanced"] is False


# ============================================================
# 17-18. PDF
# ============================================================

def test_pdf_download(client, sample_form):
    quote = _publish(client, sample_form, override_price=25000)["quote"]
    response = client.get(f"/api/quotes/{quote['id']}/pdf")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    assert quote["quote_number"] in response.headers["content-disposition"]


def test_pdf_missing_quote(client):
    assert client.get("/api/quotes/9999/pdf").status_code == 404
