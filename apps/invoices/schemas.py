from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from apps.invoices.models import InvoiceStatus
from core.forms import FormModel

class LineItemInput(FormModel):
    description: str = Field(..., min_length=1, max_length=255)
    quantity: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    rate: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)

class LineItemResponse(BaseModel):
    id: int
    description: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal

    class Config:
        from_attributes = True

class InvoiceCreate(FormModel):
    job_id: int
    company_id: Optional[int] = Field(None, description="Defaults to the job's company")
    issue_date: Optional[date] = Field(None, description="Defaults to today")
    due_date: Optional[date] = Field(None, description="Defaults to issue date + payment terms")
    payment_terms: Optional[int] = Field(None, ge=0, le=365, description="Net days")
    subtotal: Optional[Decimal] = Field(
        None, ge=0, max_digits=12, decimal_places=2,
        description="Ignored when line items are given"
    )
    line_items: List[LineItemInput] = []
    notes: Optional[str] = None

    @model_validator(mode="after")
    def due_after_issue(self):
        if self.issue_date and self.due_date and self.due_date < self.issue_date:
            raise ValueError("due_date cannot be before issue_date")
        return self

class InvoiceUpdate(FormModel):
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_terms: Optional[int] = Field(None, ge=0, le=365)
    subtotal: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    line_items: Optional[List[LineItemInput]] = None
    notes: Optional[str] = None

class InvoicePayment(FormModel):
    paid_date: Optional[date] = Field(None, description="Defaults to today")

class InvoiceResponse(BaseModel):
    id: int
    invoice_number: str
    job_id: Optional[int]
    job_number: Optional[str]
    company_id: int
    company_name: Optional[str]
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    status: InvoiceStatus
    issue_date: date
    due_date: date
    paid_date: Optional[date]
    payment_terms: Optional[int]
    notes: Optional[str]
    line_items: List[LineItemResponse]
    days_until_due: Optional[int]
    is_overdue: bool
    is_due_soon: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class InvoiceListResponse(BaseModel):
    items: List[InvoiceResponse]
    total: int

class InvoiceSummaryResponse(BaseModel):
    total_outstanding: Decimal
    this_month_revenue: Decimal
    overdue_amount: Decimal
    overdue_count: int
    due_soon_count: int
