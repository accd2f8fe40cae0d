from datetime import date
from typing import Optional

from apps.companies.models import Company
from core.forms import FormModel, apply_changes


class RepairForm(FormModel):
    description: Optional[str] = None
    labor_hours: Optional[float] = None
    due_date: Optional[date] = None


def test_blank_strings_parse_as_null():
    form = RepairForm(description="  ", labor_hours="", due_date="")
    assert form.description is None
    assert form.labor_hours is None
    assert form.due_date is None


def test_filled_strings_parse_into_declared_types():
    form = RepairForm(description="Rewind", labor_hours="12.5", due_date="2025-01-15")
    assert form.description == "Rewind"
    assert form.labor_hours == 12.5
    assert form.due_date == date(2025, 1, 15)


def test_apply_changes_keeps_required_columns():
    company = Company(name="Acme Pumps", phone="555-0101")
    applied = apply_changes(company, {"name": None, "phone": None})
    assert company.name == "Acme Pumps"
    assert company.phone is None
    assert applied == {"phone": None}
