from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional, Dict
from datetime import date
from decimal import Decimal
from fastapi import HTTPException, status, Depends
import logging

from apps.invoices.models import (
    Invoice, InvoiceLineItem, InvoiceStatus, OUTSTANDING_STATUSES, CLOSED_STATUSES
)
from apps.invoices.schemas import InvoiceCreate, InvoiceUpdate, InvoicePayment, LineItemInput
from apps.companies.models import Company
from apps.jobs.models import Job
from core.database import get_db, settings
from core.dates import due_date_for
from core.forms import apply_changes
from core.money import calculate_invoice_totals, line_item_amount, sum_line_items, ZERO
from core.sequences import DocumentNumberAllocator
from core.status_rules import invoice_due_state

logger = logging.getLogger(__name__)

class InvoiceService:
    def __init__(self, db: Session):
        self.db = db

    def generate_invoice_number(self, year: Optional[int] = None) -> str:
        """Reserve the next INV-YYYY-NNN number in the current transaction"""
        return DocumentNumberAllocator(self.db).allocate("invoice", Invoice.invoice_number, year)

    def _base_query(self):
        return self.db.query(Invoice).options(
            joinedload(Invoice.company),
            joinedload(Invoice.job),
            selectinload(Invoice.line_items)
        )

    def get_invoice(self, invoice_id: int) -> Optional[Invoice]:
        return self._base_query().filter(Invoice.id == invoice_id).first()

    def get_invoice_or_404(self, invoice_id: int) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        if not invoice:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Invoice not found"
            )
        return invoice

    def get_invoices(
        self,
        search: Optional[str] = None,
        status_filter: Optional[InvoiceStatus] = None,
        company_id: Optional[int] = None,
        today: Optional[date] = None
    ) -> List[Dict]:
        """List invoices, newest first"""
        query = self._base_query()

        if search:
            query = (
                query.outerjoin(Company, Invoice.company_id == Company.id)
                .outerjoin(Job, Invoice.job_id == Job.id)
                .filter(or_(
                    Invoice.invoice_number.ilike(f"%{search}%"),
                    Company.name.ilike(f"%{search}%"),
                    Job.job_number.ilike(f"%{search}%")
                ))
            )

        if status_filter:
            query = query.filter(Invoice.status == status_filter)

        if company_id is not None:
            query = query.filter(Invoice.company_id == company_id)

        invoices = query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()
        return [self.invoice_to_response(inv, today) for inv in invoices]

    def _build_line_items(self, items: List[LineItemInput]) -> List[InvoiceLineItem]:
        return [
            InvoiceLineItem(
                position=index,
                description=item.description,
                quantity=item.quantity,
                rate=item.rate,
                amount=line_item_amount(item.quantity, item.rate)
            )
            for index, item in enumerate(items)
        ]

    def _apply_amounts(self, invoice: Invoice, subtotal: Decimal) -> None:
        invoice.subtotal, invoice.tax_amount, invoice.total_amount = calculate_invoice_totals(subtotal)

    def create_invoice(self, invoice_data: InvoiceCreate) -> Invoice:
        """Create a draft invoice for a job with computed tax and total"""
        job = self.db.query(Job).filter(Job.id == invoice_data.job_id).first()
        if not job:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Job {invoice_data.job_id} does not exist"
            )
        if invoice_data.company_id is not None and invoice_data.company_id != job.company_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Job {job.job_number} does not belong to company {invoice_data.company_id}"
            )

        issue_date = invoice_data.issue_date or date.today()
        payment_terms = (
            invoice_data.payment_terms
            if invoice_data.payment_terms is not None
            else settings.DEFAULT_PAYMENT_TERMS
        )
        due_date = invoice_data.due_date or due_date_for(issue_date, payment_terms)

        if invoice_data.line_items:
            subtotal = sum_line_items((i.quantity, i.rate) for i in invoice_data.line_items)
        else:
            subtotal = invoice_data.subtotal or ZERO

        try:
            invoice_number = self.generate_invoice_number()
            db_invoice = Invoice(
                invoice_number=invoice_number,
                job_id=job.id,
                company_id=job.company_id,
                status=InvoiceStatus.DRAFT,
                issue_date=issue_date,
                due_date=due_date,
                payment_terms=payment_terms,
                notes=invoice_data.notes,
                line_items=self._build_line_items(invoice_data.line_items)
            )
            self._apply_amounts(db_invoice, subtotal)
            self.db.add(db_invoice)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to create invoice for job {job.job_number}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create invoice"
            )

        logger.info(f"Created invoice {invoice_number} for job {job.job_number}: total {db_invoice.total_amount}")
        return self.get_invoice(db_invoice.id)

    def _ensure_open(self, invoice: Invoice, action: str) -> None:
        if invoice.status in CLOSED_STATUSES:
            logger.warning(f"Rejected {action} on {invoice.status.value} invoice {invoice.invoice_number}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot {action} an invoice that is {invoice.status.value}"
            )

    def update_invoice(self, invoice_id: int, invoice_update: InvoiceUpdate) -> Invoice:
        """Edit dates, terms, notes or amounts of an invoice that is not paid or cancelled"""
        db_invoice = self.get_invoice_or_404(invoice_id)
        self._ensure_open(db_invoice, "update")

        update_data = invoice_update.model_dump(exclude_unset=True)
        line_items = update_data.pop("line_items", None)
        subtotal = update_data.pop("subtotal", None)

        applied = apply_changes(db_invoice, update_data)

        # New terms without an explicit due date move the due date with them
        if "payment_terms" in applied and "due_date" not in applied:
            db_invoice.due_date = due_date_for(db_invoice.issue_date, db_invoice.payment_terms)

        if db_invoice.due_date < db_invoice.issue_date:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="due_date cannot be before issue_date"
            )

        if invoice_update.line_items is not None:
            db_invoice.line_items = self._build_line_items(invoice_update.line_items)
            self._apply_amounts(
                db_invoice,
                sum_line_items((i.quantity, i.rate) for i in invoice_update.line_items)
            )
        elif subtotal is not None:
            db_invoice.line_items = []
            self._apply_amounts(db_invoice, subtotal)

        self.db.commit()
        logger.info(f"Updated invoice {db_invoice.invoice_number}")
        return self.get_invoice(invoice_id)

    def send_invoice(self, invoice_id: int) -> Invoice:
        db_invoice = self.get_invoice_or_404(invoice_id)
        if db_invoice.status != InvoiceStatus.DRAFT:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Only draft invoices can be sent (invoice is {db_invoice.status.value})"
            )

        db_invoice.status = InvoiceStatus.SENT
        self.db.commit()
        logger.info(f"Invoice {db_invoice.invoice_number} marked as sent")
        return self.get_invoice(invoice_id)

    def mark_paid(self, invoice_id: int, payment: InvoicePayment) -> Invoice:
        db_invoice = self.get_invoice_or_404(invoice_id)
        self._ensure_open(db_invoice, "pay")

        db_invoice.status = InvoiceStatus.PAID
        db_invoice.paid_date = payment.paid_date or date.today()
        self.db.commit()
        logger.info(f"Invoice {db_invoice.invoice_number} paid on {db_invoice.paid_date}")
        return self.get_invoice(invoice_id)

    def cancel_invoice(self, invoice_id: int) -> Invoice:
        db_invoice = self.get_invoice_or_404(invoice_id)
        self._ensure_open(db_invoice, "cancel")

        db_invoice.status = InvoiceStatus.CANCELLED
        self.db.commit()
        logger.info(f"Invoice {db_invoice.invoice_number} cancelled")
        return self.get_invoice(invoice_id)

    def delete_invoice(self, invoice_id: int) -> bool:
        db_invoice = self.get_invoice_or_404(invoice_id)

        self.db.delete(db_invoice)
        self.db.commit()
        logger.info(f"Deleted invoice {db_invoice.invoice_number}")
        return True

    def mark_overdue(self, today: Optional[date] = None) -> int:
        """Persist the overdue state of sent invoices whose due date has passed"""
        today = today or date.today()
        invoices = self.db.query(Invoice).filter(
            Invoice.status == InvoiceStatus.SENT,
            Invoice.due_date < today
        ).all()

        for invoice in invoices:
            invoice.status = InvoiceStatus.OVERDUE
        self.db.commit()

        if invoices:
            logger.info(f"Marked {len(invoices)} invoice(s) overdue")
        return len(invoices)

    def get_summary(self, today: Optional[date] = None) -> Dict:
        """Outstanding, overdue and this month's paid totals"""
        today = today or date.today()
        summary = {
            "total_outstanding": ZERO,
            "this_month_revenue": ZERO,
            "overdue_amount": ZERO,
            "overdue_count": 0,
            "due_soon_count": 0
        }

        for invoice in self.db.query(Invoice).all():
            total = invoice.total_amount or ZERO
            if invoice.status in OUTSTANDING_STATUSES:
                summary["total_outstanding"] += total
                state = invoice_due_state(invoice.due_date, invoice.status, today)
                if state["is_overdue"]:
                    summary["overdue_amount"] += total
                    summary["overdue_count"] += 1
                elif state["is_due_soon"]:
                    summary["due_soon_count"] += 1
            elif invoice.status == InvoiceStatus.PAID and invoice.paid_date:
                if (invoice.paid_date.year, invoice.paid_date.month) == (today.year, today.month):
                    summary["this_month_revenue"] += total

        return summary

    def invoice_to_response(self, invoice: Invoice, today: Optional[date] = None) -> Dict:
        """Convert Invoice model to response dictionary"""
        return {
            "id": invoice.id,
            "invoice_number": invoice.invoice_number,
            "job_id": invoice.job_id,
            "job_number": invoice.job.job_number if invoice.job else None,
            "company_id": invoice.company_id,
            "company_name": invoice.company.name if invoice.company else None,
            "subtotal": invoice.subtotal,
            "tax_amount": invoice.tax_amount,
            "total_amount": invoice.total_amount,
            "status": invoice.status,
            "issue_date": invoice.issue_date,
            "due_date": invoice.due_date,
            "paid_date": invoice.paid_date,
            "payment_terms": invoice.payment_terms,
            "notes": invoice.notes,
            "line_items": [
                {
                    "id": item.id,
                    "description": item.description,
                    "quantity": item.quantity,
                    "rate": item.rate,
                    "amount": item.amount
                }
                for item in invoice.line_items
            ],
            **invoice_due_state(invoice.due_date, invoice.status, today),
            "created_at": invoice.created_at,
            "updated_at": invoice.updated_at
        }

# Dependency injection
def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    return InvoiceService(db)
