from datetime import date, timedelta

import pytest

import main
from apps.invoices.models import Invoice, InvoiceStatus
from apps.warranties.models import Warranty, WarrantyStatus


@pytest.fixture(autouse=True)
def reconcile_with_test_sessions(monkeypatch, session_factory):
    monkeypatch.setattr(main, "SessionLocal", session_factory)


def test_reconcile_persists_derived_statuses(client, db_session, job):
    today = date.today()
    lapsed = client.post("/api/v1/warranties/", json={
        "job_id": job["id"], "warranty_start": (today - timedelta(days=400)).isoformat()
    }).json()
    current = client.post("/api/v1/warranties/", json={"job_id": job["id"]}).json()

    late = client.post("/api/v1/invoices/", json={
        "job_id": job["id"], "subtotal": "200", "issue_date": (today - timedelta(days=40)).isoformat()
    }).json()
    client.post(f"/api/v1/invoices/{late['id']}/send")
    late_draft = client.post("/api/v1/invoices/", json={
        "job_id": job["id"], "subtotal": "200", "issue_date": (today - timedelta(days=40)).isoformat()
    }).json()

    result = main.reconcile_statuses(today)
    assert result == {"warranties_expired": 1, "invoices_overdue": 1}

    statuses = dict(db_session.query(Warranty.id, Warranty.status).all())
    assert statuses[lapsed["id"]] == WarrantyStatus.EXPIRED
    assert statuses[current["id"]] == WarrantyStatus.ACTIVE

    invoices = dict(db_session.query(Invoice.id, Invoice.status).all())
    assert invoices[late["id"]] == InvoiceStatus.OVERDUE
    assert invoices[late_draft["id"]] == InvoiceStatus.DRAFT

    assert main.reconcile_statuses(today) == {"warranties_expired": 0, "invoices_overdue": 0}


def test_overdue_invoice_can_still_be_paid(client, job):
    invoice = client.post("/api/v1/invoices/", json={
        "job_id": job["id"], "subtotal": "200",
        "issue_date": (date.today() - timedelta(days=40)).isoformat()
    }).json()
    client.post(f"/api/v1/invoices/{invoice['id']}/send")
    main.reconcile_statuses()

    overdue = client.get(f"/api/v1/invoices/{invoice['id']}").json()
    assert overdue["status"] == "overdue"
    assert overdue["is_overdue"] is True

    paid = client.post(f"/api/v1/invoices/{invoice['id']}/pay").json()
    assert paid["status"] == "paid"
    assert paid["is_overdue"] is False


def test_root(client):
    assert client.get("/").json() == {"name": "Motor Repair Shop API", "version": "1.0.0"}
