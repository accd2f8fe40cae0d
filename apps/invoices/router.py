from fastapi import APIRouter, Depends, status, Query
from typing import Optional

from apps.invoices.models import InvoiceStatus
from apps.invoices.schemas import (
    InvoiceCreate, InvoiceUpdate, InvoicePayment, InvoiceResponse,
    InvoiceListResponse, InvoiceSummaryResponse
)
from apps.invoices.services import InvoiceService, get_invoice_service

router = APIRouter()

# ============ STATIC ROUTES FIRST (before /{invoice_id}) ============

@router.get(
    "/stats/summary",
    response_model=InvoiceSummaryResponse,
    summary="Invoice summary",
    description="Outstanding balance, overdue amount and revenue paid this month"
)
def get_invoice_summary(service: InvoiceService = Depends(get_invoice_service)):
    return InvoiceSummaryResponse(**service.get_summary())

@router.get(
    "/",
    response_model=InvoiceListResponse,
    summary="Get all invoices"
)
def get_invoices(
    search: Optional[str] = Query(None, description="Search in invoice number, company name, job number"),
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status", description="Filter by status"),
    company_id: Optional[int] = Query(None, description="Only invoices for this company"),
    service: InvoiceService = Depends(get_invoice_service)
):
    invoices = service.get_invoices(search=search, status_filter=status_filter, company_id=company_id)
    return InvoiceListResponse(items=invoices, total=len(invoices))

@router.post(
    "/",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new invoice",
    description="Create a draft invoice for a job. Number, tax and total are computed by the server."
)
def create_invoice(
    invoice: InvoiceCreate,
    service: InvoiceService = Depends(get_invoice_service)
):
    return service.invoice_to_response(service.create_invoice(invoice))

# ============ DYNAMIC ROUTES ============

@router.get("/{invoice_id}", response_model=InvoiceResponse, summary="Get invoice by ID")
def get_invoice(
    invoice_id: int,
    service: InvoiceService = Depends(get_invoice_service)
):
    return service.invoice_to_response(service.get_invoice_or_404(invoice_id))

@router.put(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    summary="Update invoice",
    description="Edit an invoice that is not paid or cancelled. New amounts recompute tax and total."
)
def update_invoice(
    invoice_id: int,
    invoice_update: InvoiceUpdate,
    service: InvoiceService = Depends(get_invoice_service)
):
    return service.invoice_to_response(service.update_invoice(invoice_id, invoice_update))

@router.post("/{invoice_id}/send", response_model=InvoiceResponse, summary="Mark invoice as sent")
def send_invoice(
    invoice_id: int,
    service: InvoiceService = Depends(get_invoice_service)
):
    return service.invoice_to_response(service.send_invoice(invoice_id))

@router.post("/{invoice_id}/pay", response_model=InvoiceResponse, summary="Record payment")
def pay_invoice(
    invoice_id: int,
    payment: Optional[InvoicePayment] = None,
    service: InvoiceService = Depends(get_invoice_service)
):
    return service.invoice_to_response(service.mark_paid(invoice_id, payment or InvoicePayment()))

@router.post("/{invoice_id}/cancel", response_model=InvoiceResponse, summary="Cancel invoice")
def cancel_invoice(
    invoice_id: int,
    service: InvoiceService = Depends(get_invoice_service)
):
    return service.invoice_to_response(service.cancel_invoice(invoice_id))

@router.delete("/{invoice_id}", summary="Delete invoice")
def delete_invoice(
    invoice_id: int,
    service: InvoiceService = Depends(get_invoice_service)
):
    service.delete_invoice(invoice_id)
    return {"message": "Invoice deleted successfully"}
