from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional, Dict
from datetime import date, timedelta
from fastapi import HTTPException, status, Depends
import logging

from apps.warranties.models import Warranty, WarrantyStatus, ClaimStatus, IN_FORCE_STATUSES
from apps.warranties.schemas import (
    WarrantyCreate, WarrantyUpdate, WarrantyExtension, WarrantyClaim, WarrantyClaimDecision
)
from apps.companies.models import Company
from apps.jobs.models import Job
from apps.motors.models import Motor
from core.database import get_db
from core.dates import add_months, warranty_end_for
from core.forms import apply_changes
from core.status_rules import warranty_state, WARRANTY_EXPIRING_SOON_DAYS

logger = logging.getLogger(__name__)

class WarrantyService:
    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return self.db.query(Warranty).options(
            joinedload(Warranty.company),
            joinedload(Warranty.motor),
            joinedload(Warranty.job)
        )

    def get_warranty(self, warranty_id: int) -> Optional[Warranty]:
        return self._base_query().filter(Warranty.id == warranty_id).first()

    def get_warranty_or_404(self, warranty_id: int) -> Warranty:
        warranty = self.get_warranty(warranty_id)
        if not warranty:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Warranty not found"
            )
        return warranty

    def get_warranties(
        self,
        search: Optional[str] = None,
        status_filter: Optional[WarrantyStatus] = None,
        company_id: Optional[int] = None,
        today: Optional[date] = None
    ) -> List[Dict]:
        """List warranties, newest first"""
        query = self._base_query()

        if search:
            query = (
                query.outerjoin(Company, Warranty.company_id == Company.id)
                .outerjoin(Motor, Warranty.motor_id == Motor.id)
                .outerjoin(Job, Warranty.job_id == Job.id)
                .filter(or_(
                    Warranty.work_description.ilike(f"%{search}%"),
                    Company.name.ilike(f"%{search}%"),
                    Motor.motor_id.ilike(f"%{search}%"),
                    Job.job_number.ilike(f"%{search}%")
                ))
            )

        if status_filter:
            query = query.filter(Warranty.status == status_filter)

        if company_id is not None:
            query = query.filter(Warranty.company_id == company_id)

        warranties = query.order_by(Warranty.created_at.desc(), Warranty.id.desc()).all()
        return [self.warranty_to_response(w, today) for w in warranties]

    def get_expiring(self, today: Optional[date] = None) -> List[Dict]:
        """Warranties in force that end within the next 30 days, soonest first"""
        today = today or date.today()
        warranties = self._base_query().filter(
            Warranty.status.in_(IN_FORCE_STATUSES),
            Warranty.warranty_end > today,
            Warranty.warranty_end <= today + timedelta(days=WARRANTY_EXPIRING_SOON_DAYS)
        ).order_by(Warranty.warranty_end).all()
        return [self.warranty_to_response(w, today) for w in warranties]

    def create_warranty(self, warranty_data: WarrantyCreate) -> Warranty:
        """Open a warranty for a job; motor and company come from the job"""
        job = self.db.query(Job).filter(Job.id == warranty_data.job_id).first()
        if not job:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Job {warranty_data.job_id} does not exist"
            )

        warranty_start = warranty_data.warranty_start or job.completed_date or date.today()
        db_warranty = Warranty(
            job_id=job.id,
            motor_id=job.motor_id,
            company_id=job.company_id,
            status=WarrantyStatus.ACTIVE,
            warranty_start=warranty_start,
            warranty_period=warranty_data.warranty_period,
            warranty_end=warranty_end_for(warranty_start, warranty_data.warranty_period),
            work_description=warranty_data.work_description,
            last_inspection=warranty_data.last_inspection,
            notes=warranty_data.notes,
            extension_months=0,
            claim_status=ClaimStatus.NONE
        )
        try:
            self.db.add(db_warranty)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to create warranty for job {job.job_number}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create warranty"
            )

        logger.info(
            f"Created warranty {db_warranty.id} for job {job.job_number}: "
            f"{db_warranty.warranty_start} to {db_warranty.warranty_end}"
        )
        return self.get_warranty(db_warranty.id)

    def _covered_until(self, base_end: date, extension_months: Optional[int]) -> date:
        """End date: the unextended end plus all recorded extension months in one step"""
        return add_months(base_end, extension_months or 0)

    def update_warranty(self, warranty_id: int, warranty_update: WarrantyUpdate) -> Warranty:
        db_warranty = self.get_warranty_or_404(warranty_id)

        update_data = warranty_update.model_dump(exclude_unset=True)
        coverage_changed = any(
            update_data.get(field) is not None and update_data[field] != getattr(db_warranty, field)
            for field in ("warranty_start", "warranty_period")
        )

        applied = apply_changes(db_warranty, update_data)

        if coverage_changed:
            base_end = warranty_end_for(db_warranty.warranty_start, db_warranty.warranty_period)
            if db_warranty.extension_months:
                db_warranty.original_end_date = base_end
            db_warranty.warranty_end = self._covered_until(base_end, db_warranty.extension_months)

        self.db.commit()
        logger.info(f"Updated warranty {db_warranty.id}: {', '.join(applied) or 'no changes'}")
        return self.get_warranty(warranty_id)

    def extend_warranty(self, warranty_id: int, extension: WarrantyExtension) -> Warranty:
        """Push the end date out by whole months and record the extension"""
        db_warranty = self.get_warranty_or_404(warranty_id)

        if db_warranty.status == WarrantyStatus.CLAIMED:
            logger.warning(f"Rejected extension of claimed warranty {db_warranty.id}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A claimed warranty cannot be extended"
            )

        previous_end = db_warranty.warranty_end
        if db_warranty.original_end_date is None:
            db_warranty.original_end_date = previous_end
        db_warranty.extension_months = (db_warranty.extension_months or 0) + extension.extension_months
        db_warranty.warranty_end = self._covered_until(
            db_warranty.original_end_date, db_warranty.extension_months
        )
        db_warranty.extension_reason = extension.extension_reason
        if extension.notes:
            db_warranty.notes = extension.notes
        db_warranty.status = WarrantyStatus.EXTENDED

        self.db.commit()
        logger.info(
            f"Extended warranty {db_warranty.id} by {extension.extension_months} month(s): "
            f"{previous_end} -> {db_warranty.warranty_end}"
        )
        return self.get_warranty(warranty_id)

    def file_claim(self, warranty_id: int, claim: WarrantyClaim, today: Optional[date] = None) -> Warranty:
        """Record a claim against a warranty that is still in force"""
        db_warranty = self.get_warranty_or_404(warranty_id)

        if db_warranty.status == WarrantyStatus.CLAIMED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A claim has already been filed for this warranty"
            )
        if warranty_state(db_warranty.warranty_end, today)["is_expired"]:
            logger.warning(f"Rejected claim on expired warranty {db_warranty.id}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Warranty expired on {db_warranty.warranty_end.isoformat()}"
            )

        db_warranty.status = WarrantyStatus.CLAIMED
        db_warranty.claim_status = ClaimStatus.PENDING
        if claim.notes:
            db_warranty.notes = claim.notes

        self.db.commit()
        logger.info(f"Claim filed on warranty {db_warranty.id}")
        return self.get_warranty(warranty_id)

    def decide_claim(self, warranty_id: int, decision: WarrantyClaimDecision) -> Warranty:
        db_warranty = self.get_warranty_or_404(warranty_id)

        if db_warranty.claim_status != ClaimStatus.PENDING:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="There is no pending claim on this warranty"
            )
        if decision.claim_status not in (ClaimStatus.APPROVED, ClaimStatus.DENIED):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A claim can only be approved or denied"
            )

        db_warranty.claim_status = decision.claim_status
        if decision.notes:
            db_warranty.notes = decision.notes

        self.db.commit()
        logger.info(f"Claim on warranty {db_warranty.id} {decision.claim_status.value}")
        return self.get_warranty(warranty_id)

    def delete_warranty(self, warranty_id: int) -> bool:
        db_warranty = self.get_warranty_or_404(warranty_id)

        self.db.delete(db_warranty)
        self.db.commit()
        logger.info(f"Deleted warranty {warranty_id}")
        return True

    def expire_lapsed(self, today: Optional[date] = None) -> int:
        """Persist the expired state of in-force warranties past their end date"""
        today = today or date.today()
        warranties = self.db.query(Warranty).filter(
            Warranty.status.in_(IN_FORCE_STATUSES),
            Warranty.warranty_end <= today
        ).all()

        for warranty in warranties:
            warranty.status = WarrantyStatus.EXPIRED
        self.db.commit()

        if warranties:
            logger.info(f"Marked {len(warranties)} warranty(ies) expired")
        return len(warranties)

    def get_summary(self, today: Optional[date] = None) -> Dict:
        today = today or date.today()
        warranties = self.db.query(Warranty).all()

        in_force = [
            w for w in warranties
            if w.status in IN_FORCE_STATUSES and not warranty_state(w.warranty_end, today)["is_expired"]
        ]
        periods = [w.warranty_period for w in warranties]

        return {
            "active_warranties": len(in_force),
            "expiring_soon": sum(
                1 for w in in_force if warranty_state(w.warranty_end, today)["is_expiring_soon"]
            ),
            "claims_this_year": sum(
                1 for w in warranties
                if w.status == WarrantyStatus.CLAIMED and w.warranty_start.year == today.year
            ),
            "avg_warranty_period": round(sum(periods) / len(periods)) if periods else 0
        }

    def warranty_to_response(self, warranty: Warranty, today: Optional[date] = None) -> Dict:
        """Convert Warranty model to response dictionary"""
        return {
            "id": warranty.id,
            "job_id": warranty.job_id,
            "job_number": warranty.job.job_number if warranty.job else None,
            "motor_id": warranty.motor_id,
            "motor_motor_id": warranty.motor.motor_id if warranty.motor else None,
            "company_id": warranty.company_id,
            "company_name": warranty.company.name if warranty.company else None,
            "status": warranty.status,
            "warranty_start": warranty.warranty_start,
            "warranty_period": warranty.warranty_period,
            "warranty_end": warranty.warranty_end,
            "work_description": warranty.work_description,
            "original_end_date": warranty.original_end_date,
            "extension_months": warranty.extension_months or 0,
            "extension_reason": warranty.extension_reason,
            "claim_status": warranty.claim_status,
            "last_inspection": warranty.last_inspection,
            "notes": warranty.notes,
            **warranty_state(warranty.warranty_end, today),
            "created_at": warranty.created_at,
            "updated_at": warranty.updated_at
        }

# Dependency injection
def get_warranty_service(db: Session = Depends(get_db)) -> WarrantyService:
    return WarrantyService(db)
