from datetime import date, datetime
from decimal import Decimal

from core.dates import add_months, warranty_end_for, due_date_for
from core.money import (
    calculate_invoice_totals, calculate_tax, estimate_job_cost, line_item_amount,
    sum_line_items, to_decimal
)


def test_twelve_month_warranty():
    assert warranty_end_for(date(2025, 1, 15), 12) == date(2026, 1, 15)


def test_month_end_clamps_to_shorter_month():
    assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 2, 29), 12) == date(2025, 2, 28)


def test_add_months_accepts_datetimes():
    assert add_months(datetime(2025, 3, 31, 17, 45), 6) == date(2025, 9, 30)


def test_due_date_from_payment_terms():
    assert due_date_for(date(2025, 1, 15), 30) == date(2025, 2, 14)
    assert due_date_for(date(2025, 1, 15), None) == date(2025, 1, 15)


def test_invoice_totals_at_eight_percent():
    subtotal, tax, total = calculate_invoice_totals(Decimal("1170.00"))
    assert (subtotal, tax, total) == (Decimal("1170.00"), Decimal("93.60"), Decimal("1263.60"))


def test_tax_rounds_half_up_to_cents():
    assert calculate_tax("0.0625", "0.08") == Decimal("0.01")
    assert calculate_tax("10.19", "0.08") == Decimal("0.82")


def test_floats_do_not_leak_binary_error():
    assert to_decimal(0.1) + to_decimal(0.2) == Decimal("0.3")
    assert calculate_invoice_totals(0.1 + 0.2)[0] == Decimal("0.30")


def test_line_items_sum_to_subtotal():
    assert line_item_amount("3.5", "80.00") == Decimal("280.00")
    assert sum_line_items([("2", "150.00"), ("3.5", "80.00")]) == Decimal("580.00")
    assert sum_line_items([]) == Decimal("0.00")


def test_job_estimate():
    assert estimate_job_cost("4.5", "85.00", "120.25") == Decimal("502.75")
    assert estimate_job_cost(None, "85.00", "40") == Decimal("40.00")
    assert estimate_job_cost() == Decimal("0.00")
