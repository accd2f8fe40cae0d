"""Display-status rules for jobs, invoices and warranties.

These helpers only derive what the UI shows from stored dates and the
stored lifecycle status; they never write back. ``today`` defaults to the
local calendar date and is accepted as a parameter so callers (and tests)
can pin it.
"""
from datetime import date, datetime
from typing import Dict, Optional, Union

from core.dates import as_date

JOB_DUE_SOON_DAYS = 2
INVOICE_DUE_SOON_DAYS = 7
WARRANTY_EXPIRING_SOON_DAYS = 30

# Statuses after which an invoice no longer counts as owed; a cancelled
# invoice is settled like a paid one and is never overdue or due soon
INVOICE_SETTLED_STATUSES = ("paid", "cancelled")

JOB_PROGRESS_BY_STATUS = {
    "pending": 10,
    "in_progress": 50,
    "completed": 85,
    "delivered": 100,
    "under_warranty": 100,
}

DateLike = Union[date, datetime]


def _status_value(status) -> Optional[str]:
    # Accept both plain strings and the str-based Enum members stored on models
    return getattr(status, "value", status)


def days_until(target: DateLike, today: Optional[DateLike] = None) -> int:
    """Whole calendar days from today to target; negative once it has passed."""
    today = as_date(today) if today is not None else date.today()
    return (as_date(target) - today).days


def job_due_state(due_date: Optional[DateLike], today: Optional[DateLike] = None) -> Dict:
    if due_date is None:
        return {"days_until_due": None, "is_overdue": False, "is_due_soon": False}
    days = days_until(due_date, today)
    return {
        "days_until_due": days,
        "is_overdue": days < 0,
        "is_due_soon": 0 <= days <= JOB_DUE_SOON_DAYS,
    }


def invoice_due_state(
    due_date: Optional[DateLike], status, today: Optional[DateLike] = None
) -> Dict:
    if due_date is None:
        return {"days_until_due": None, "is_overdue": False, "is_due_soon": False}
    days = days_until(due_date, today)
    open_balance = _status_value(status) not in INVOICE_SETTLED_STATUSES
    return {
        "days_until_due": days,
        "is_overdue": open_balance and days < 0,
        "is_due_soon": open_balance and 0 <= days <= INVOICE_DUE_SOON_DAYS,
    }


def warranty_state(warranty_end: DateLike, today: Optional[DateLike] = None) -> Dict:
    """Expired/expiring flags from the end date alone, whatever the stored status says."""
    days = days_until(warranty_end, today)
    return {
        "days_remaining": days,
        "is_expired": days <= 0,
        "is_expiring_soon": 0 < days <= WARRANTY_EXPIRING_SOON_DAYS,
    }


def job_progress(status, override: Optional[int] = None) -> int:
    if override is not None:
        return override
    return JOB_PROGRESS_BY_STATUS.get(_status_value(status), 0)
