from datetime import date, datetime

from apps.invoices.models import InvoiceStatus
from apps.jobs.models import JobStatus
from core.status_rules import (
    days_until, job_due_state, invoice_due_state, warranty_state, job_progress
)

TODAY = date(2025, 6, 10)


def test_days_until_ignores_time_of_day():
    assert days_until(datetime(2025, 6, 12, 23, 59), datetime(2025, 6, 10, 0, 1)) == 2
    assert days_until(date(2025, 6, 9), TODAY) == -1


def test_job_without_due_date():
    assert job_due_state(None, TODAY) == {
        "days_until_due": None, "is_overdue": False, "is_due_soon": False
    }


def test_job_due_soon_window_is_two_days():
    assert job_due_state(date(2025, 6, 10), TODAY)["is_due_soon"] is True
    assert job_due_state(date(2025, 6, 12), TODAY)["is_due_soon"] is True
    assert job_due_state(date(2025, 6, 13), TODAY)["is_due_soon"] is False


def test_job_overdue_after_due_date():
    state = job_due_state(date(2025, 6, 9), TODAY)
    assert state["is_overdue"] is True
    assert state["is_due_soon"] is False
    assert state["days_until_due"] == -1


def test_invoice_due_soon_window_is_seven_days():
    assert invoice_due_state(date(2025, 6, 17), InvoiceStatus.SENT, TODAY)["is_due_soon"] is True
    assert invoice_due_state(date(2025, 6, 18), InvoiceStatus.SENT, TODAY)["is_due_soon"] is False


def test_paid_invoice_is_never_overdue():
    past = date(2025, 5, 1)
    assert invoice_due_state(past, InvoiceStatus.SENT, TODAY)["is_overdue"] is True
    assert invoice_due_state(past, InvoiceStatus.PAID, TODAY)["is_overdue"] is False


def test_cancelled_invoice_counts_as_settled():
    assert invoice_due_state(date(2025, 5, 1), "cancelled", TODAY) == {
        "days_until_due": -40, "is_overdue": False, "is_due_soon": False
    }
    assert invoice_due_state(date(2025, 6, 12), InvoiceStatus.CANCELLED, TODAY)["is_due_soon"] is False


def test_warranty_expires_on_its_end_date():
    state = warranty_state(date(2025, 6, 10), TODAY)
    assert state == {"days_remaining": 0, "is_expired": True, "is_expiring_soon": False}


def test_warranty_expiring_within_thirty_days():
    assert warranty_state(date(2025, 7, 10), TODAY)["is_expiring_soon"] is True
    assert warranty_state(date(2025, 7, 11), TODAY)["is_expiring_soon"] is False
    assert warranty_state(date(2025, 6, 11), TODAY) == {
        "days_remaining": 1, "is_expired": False, "is_expiring_soon": True
    }


def test_job_progress_defaults_by_status():
    assert job_progress(JobStatus.PENDING) == 10
    assert job_progress(JobStatus.IN_PROGRESS) == 50
    assert job_progress(JobStatus.COMPLETED) == 85
    assert job_progress("delivered") == 100
    assert job_progress(JobStatus.IN_PROGRESS, 70) == 70
