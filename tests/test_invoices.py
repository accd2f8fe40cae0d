from datetime import date, timedelta
from decimal import Decimal

import pytest


@pytest.fixture
def make_invoice(client, job):
    def _make_invoice(**overrides):
        payload = {"job_id": job["id"], "subtotal": "1170.00"}
        payload.update(overrides)
        response = client.post("/api/v1/invoices/", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _make_invoice


def amount(value):
    return Decimal(value)


def test_create_invoice_computes_tax_and_total(make_invoice, job, this_year):
    invoice = make_invoice()
    assert invoice["invoice_number"] == f"INV-{this_year}-001"
    assert invoice["status"] == "draft"
    assert amount(invoice["subtotal"]) == Decimal("1170.00")
    assert amount(invoice["tax_amount"]) == Decimal("93.60")
    assert amount(invoice["total_amount"]) == Decimal("1263.60")
    assert invoice["company_id"] == job["company_id"]
    assert invoice["job_number"] == job["job_number"]


def test_default_dates_and_terms(make_invoice):
    invoice = make_invoice(issue_date="2025-01-15")
    assert invoice["payment_terms"] == 30
    assert invoice["due_date"] == "2025-02-14"

    today_invoice = make_invoice()
    assert today_invoice["issue_date"] == date.today().isoformat()
    assert today_invoice["days_until_due"] == 30


def test_line_items_drive_subtotal(make_invoice):
    invoice = make_invoice(subtotal="999.99", line_items=[
        {"description": "Stator rewind labor", "quantity": "2", "rate": "150.00"},
        {"description": "Bearing 6205-2RS", "quantity": "3.5", "rate": "80.00"},
    ])
    assert amount(invoice["subtotal"]) == Decimal("580.00")
    assert amount(invoice["tax_amount"]) == Decimal("46.40")
    assert amount(invoice["total_amount"]) == Decimal("626.40")
    assert [amount(i["amount"]) for i in invoice["line_items"]] == [Decimal("300.00"), Decimal("280.00")]


def test_invoice_and_job_numbers_do_not_share_a_sequence(make_invoice, make_job, this_year):
    make_job()
    assert make_invoice()["invoice_number"] == f"INV-{this_year}-001"
    assert make_invoice()["invoice_number"] == f"INV-{this_year}-002"


def test_company_must_match_job(client, job, other_company):
    response = client.post("/api/v1/invoices/", json={
        "job_id": job["id"], "company_id": other_company["id"], "subtotal": "10"
    })
    assert response.status_code == 400


def test_unknown_job(client):
    response = client.post("/api/v1/invoices/", json={"job_id": 404, "subtotal": "10"})
    assert response.status_code == 400


def test_due_before_issue_is_rejected(client, job):
    response = client.post("/api/v1/invoices/", json={
        "job_id": job["id"], "issue_date": "2025-02-01", "due_date": "2025-01-01"
    })
    assert response.status_code == 422


def test_update_terms_moves_due_date(client, make_invoice):
    invoice = make_invoice(issue_date="2025-01-15")
    response = client.put(f"/api/v1/invoices/{invoice['id']}", json={"payment_terms": 15})
    assert response.status_code == 200
    assert response.json()["due_date"] == "2025-01-30"


def test_update_subtotal_recomputes_totals(client, make_invoice):
    invoice = make_invoice()
    response = client.put(f"/api/v1/invoices/{invoice['id']}", json={"subtotal": "100.00"})
    data = response.json()
    assert amount(data["tax_amount"]) == Decimal("8.00")
    assert amount(data["total_amount"]) == Decimal("108.00")


def test_lifecycle(client, make_invoice):
    invoice = make_invoice()
    base = f"/api/v1/invoices/{invoice['id']}"

    sent = client.post(f"{base}/send").json()
    assert sent["status"] == "sent"
    assert client.post(f"{base}/send").status_code == 400

    paid = client.post(f"{base}/pay", json={"paid_date": "2025-03-02"}).json()
    assert paid["status"] == "paid"
    assert paid["paid_date"] == "2025-03-02"

    assert client.put(base, json={"notes": "late edit"}).status_code == 400
    assert client.post(f"{base}/cancel").status_code == 400


def test_pay_defaults_to_today(client, make_invoice):
    invoice = make_invoice()
    paid = client.post(f"/api/v1/invoices/{invoice['id']}/pay").json()
    assert paid["paid_date"] == date.today().isoformat()


def test_overdue_flag_clears_once_paid(client, make_invoice):
    issued = (date.today() - timedelta(days=60)).isoformat()
    invoice = make_invoice(issue_date=issued)
    sent = client.post(f"/api/v1/invoices/{invoice['id']}/send").json()
    assert sent["is_overdue"] is True
    assert sent["days_until_due"] == -30

    paid = client.post(f"/api/v1/invoices/{invoice['id']}/pay").json()
    assert paid["is_overdue"] is False


def test_summary(client, make_invoice):
    late = make_invoice(issue_date=(date.today() - timedelta(days=45)).isoformat())
    client.post(f"/api/v1/invoices/{late['id']}/send")

    soon = make_invoice(subtotal="100.00", payment_terms=5)
    client.post(f"/api/v1/invoices/{soon['id']}/send")

    paid = make_invoice(subtotal="50.00")
    client.post(f"/api/v1/invoices/{paid['id']}/pay")

    make_invoice(subtotal="10.00")  # draft: not outstanding

    summary = client.get("/api/v1/invoices/stats/summary").json()
    assert amount(summary["total_outstanding"]) == Decimal("1371.60")
    assert amount(summary["overdue_amount"]) == Decimal("1263.60")
    assert summary["overdue_count"] == 1
    assert summary["due_soon_count"] == 1
    assert amount(summary["this_month_revenue"]) == Decimal("54.00")


def test_list_and_filter(client, make_invoice, job):
    first = make_invoice()
    second = make_invoice()
    client.post(f"/api/v1/invoices/{second['id']}/cancel")

    listed = client.get("/api/v1/invoices/").json()
    assert [i["id"] for i in listed["items"]] == [second["id"], first["id"]]

    cancelled = client.get("/api/v1/invoices/", params={"status": "cancelled"}).json()
    assert cancelled["total"] == 1

    by_job = client.get("/api/v1/invoices/", params={"search": job["job_number"]}).json()
    assert by_job["total"] == 2

    by_company = client.get("/api/v1/invoices/", params={"company_id": job["company_id"]}).json()
    assert by_company["total"] == 2


def test_deleted_job_leaves_invoice(client, make_invoice, job):
    invoice = make_invoice()
    client.delete(f"/api/v1/jobs/{job['id']}")

    reloaded = client.get(f"/api/v1/invoices/{invoice['id']}").json()
    assert reloaded["job_id"] is None
    assert reloaded["job_number"] is None
    assert reloaded["company_name"] == "Acme Pumps"


def test_delete_invoice(client, make_invoice):
    invoice = make_invoice()
    assert client.delete(f"/api/v1/invoices/{invoice['id']}").status_code == 200
    assert client.get(f"/api/v1/invoices/{invoice['id']}").status_code == 404
