from datetime import date, datetime
from typing import Optional, Union

from dateutil.relativedelta import relativedelta


def as_date(value: Union[date, datetime]) -> date:
    """Truncate a datetime to its calendar date; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def add_months(start: Union[date, datetime], months: int) -> date:
    """Calendar month addition, clamping the day to the target month.

    2025-01-31 + 1 month is 2025-02-28; 2024-01-31 + 1 month is 2024-02-29.
    """
    return as_date(start) + relativedelta(months=months)


def warranty_end_for(start: Union[date, datetime], period_months: int) -> date:
    return add_months(start, period_months)


def due_date_for(issue_date: date, payment_terms: Optional[int]) -> date:
    """Invoice due date from net payment terms in days."""
    return as_date(issue_date) + relativedelta(days=payment_terms or 0)
