from sqlalchemy.orm import Session
from sqlalchemy import or_, func
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional, Dict
from fastapi import HTTPException, status, Depends
import logging

from apps.companies.models import Company, CompanyStatus
from apps.companies.schemas import CompanyCreate, CompanyUpdate
from apps.invoices.models import Invoice
from apps.jobs.models import Job, ACTIVE_JOB_STATUSES
from apps.motors.models import Motor
from apps.warranties.models import Warranty
from core.database import get_db
from core.forms import apply_changes

logger = logging.getLogger(__name__)

class CompanyService:
    def __init__(self, db: Session):
        self.db = db

    def get_company(self, company_id: int) -> Optional[Company]:
        """Get company by ID"""
        return self.db.query(Company).filter(Company.id == company_id).first()

    def get_company_or_404(self, company_id: int) -> Company:
        company = self.get_company(company_id)
        if not company:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Company not found"
            )
        return company

    def get_companies(
        self,
        search: Optional[str] = None,
        status_filter: Optional[CompanyStatus] = None
    ) -> List[Dict]:
        """List companies ordered by name"""
        query = self.db.query(Company)

        if search:
            query = query.filter(or_(
                Company.name.ilike(f"%{search}%"),
                Company.contact_name.ilike(f"%{search}%"),
                Company.email.ilike(f"%{search}%")
            ))

        if status_filter:
            query = query.filter(Company.status == status_filter)

        companies = query.order_by(Company.name).all()
        motor_counts = self._motor_counts()
        active_jobs = self._active_job_counts()
        return [
            self.company_to_response(c, motor_counts.get(c.id, 0), active_jobs.get(c.id, 0))
            for c in companies
        ]

    def create_company(self, company_data: CompanyCreate) -> Company:
        db_company = Company(**company_data.model_dump())
        try:
            self.db.add(db_company)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to create company {company_data.name}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create company"
            )
        self.db.refresh(db_company)

        logger.info(f"Created company: {db_company.name} (ID: {db_company.id})")
        return db_company

    def update_company(self, company_id: int, company_update: CompanyUpdate) -> Company:
        db_company = self.get_company_or_404(company_id)

        apply_changes(db_company, company_update.model_dump(exclude_unset=True))
        self.db.commit()
        self.db.refresh(db_company)

        logger.info(f"Updated company: {db_company.name} (ID: {db_company.id})")
        return db_company

    def delete_company(self, company_id: int) -> bool:
        """Delete a company and its motors; refused while jobs, invoices or warranties reference it"""
        db_company = self.get_company_or_404(company_id)

        # Jobs, invoices and warranties all keep a NOT NULL company_id
        references = {
            "job(s)": self.db.query(Job).filter(Job.company_id == company_id).count(),
            "invoice(s)": self.db.query(Invoice).filter(Invoice.company_id == company_id).count(),
            "warranty(ies)": self.db.query(Warranty).filter(Warranty.company_id == company_id).count(),
        }
        on_file = ", ".join(f"{count} {label}" for label, count in references.items() if count)
        if on_file:
            logger.warning(f"Refused to delete company {db_company.name}: {on_file} on file")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot delete company '{db_company.name}' because it has {on_file}"
            )

        self.db.delete(db_company)
        self.db.commit()

        logger.info(f"Deleted company: {db_company.name} (ID: {company_id})")
        return True

    def _motor_counts(self, company_id: Optional[int] = None) -> Dict[int, int]:
        query = self.db.query(Motor.company_id, func.count(Motor.id))
        if company_id is not None:
            query = query.filter(Motor.company_id == company_id)
        return dict(query.group_by(Motor.company_id).all())

    def _active_job_counts(self, company_id: Optional[int] = None) -> Dict[int, int]:
        query = self.db.query(Job.company_id, func.count(Job.id)).filter(
            Job.status.in_(ACTIVE_JOB_STATUSES)
        )
        if company_id is not None:
            query = query.filter(Job.company_id == company_id)
        return dict(query.group_by(Job.company_id).all())

    def company_to_response(
        self,
        company: Company,
        motor_count: Optional[int] = None,
        active_jobs: Optional[int] = None
    ) -> Dict:
        """Convert Company model to response dictionary"""
        if motor_count is None:
            motor_count = self._motor_counts(company.id).get(company.id, 0)
        if active_jobs is None:
            active_jobs = self._active_job_counts(company.id).get(company.id, 0)
        return {
            "id": company.id,
            "name": company.name,
            "contact_name": company.contact_name,
            "email": company.email,
            "phone": company.phone,
            "address": company.address,
            "notes": company.notes,
            "status": company.status,
            "motor_count": motor_count,
            "active_jobs": active_jobs,
            "created_at": company.created_at,
            "updated_at": company.updated_at
        }

# Dependency injection
def get_company_service(db: Session = Depends(get_db)) -> CompanyService:
    return CompanyService(db)
