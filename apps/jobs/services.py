from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_, func
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional, Tuple, Dict
from datetime import date
from fastapi import HTTPException, status, Depends
import logging

from apps.jobs.models import Job, JobStatus, JobPriority, JOB_STATUS_TRANSITIONS
from apps.jobs.schemas import JobCreate, JobUpdate, JobStatusUpdate
from apps.companies.models import Company
from apps.motors.models import Motor
from apps.users.models import User, TECHNICIAN_ROLES
from core.database import get_db
from core.forms import apply_changes
from core.money import estimate_job_cost
from core.sequences import DocumentNumberAllocator
from core.status_rules import job_due_state, job_progress

logger = logging.getLogger(__name__)

COST_FIELDS = ("labor_hours", "labor_rate", "parts_cost")

class JobService:
    def __init__(self, db: Session):
        self.db = db

    def generate_job_number(self, year: Optional[int] = None) -> str:
        """Reserve the next JOB-YYYY-NNN number in the current transaction"""
        return DocumentNumberAllocator(self.db).allocate("job", Job.job_number, year)

    def _base_query(self):
        return self.db.query(Job).options(
            joinedload(Job.company),
            joinedload(Job.motor),
            joinedload(Job.technician)
        )

    def get_job(self, job_id: int) -> Optional[Job]:
        """Get job by ID with related data"""
        return self._base_query().filter(Job.id == job_id).first()

    def get_job_or_404(self, job_id: int) -> Job:
        job = self.get_job(job_id)
        if not job:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Job not found"
            )
        return job

    def get_job_by_number(self, job_number: str) -> Optional[Job]:
        """Get job by job number"""
        return self._base_query().filter(Job.job_number == job_number).first()

    def get_jobs(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[JobStatus] = None,
        priority: Optional[JobPriority] = None,
        search: Optional[str] = None,
        company_id: Optional[int] = None,
        today: Optional[date] = None
    ) -> Tuple[List[Dict], int]:
        """Get jobs with filtering, newest first"""
        query = self._base_query()

        # Apply filters
        if status:
            query = query.filter(Job.status == status)

        if priority:
            query = query.filter(Job.priority == priority)

        if company_id is not None:
            query = query.filter(Job.company_id == company_id)

        if search:
            query = query.outerjoin(Company, Job.company_id == Company.id).filter(or_(
                Job.job_number.ilike(f"%{search}%"),
                Job.description.ilike(f"%{search}%"),
                Company.name.ilike(f"%{search}%")
            ))

        # Order by creation date (newest first)
        query = query.order_by(Job.created_at.desc(), Job.id.desc())

        # Get total count
        total = query.count()

        # Apply pagination
        raw_jobs = query.offset(skip).limit(limit).all()
        jobs = [self.job_to_response(job, today) for job in raw_jobs]

        return jobs, total

    def _validate_links(
        self,
        company_id: int,
        motor_id: Optional[int],
        technician_id: Optional[int]
    ) -> None:
        """Check that referenced rows exist and that the motor belongs to the company"""
        if not self.db.query(Company.id).filter(Company.id == company_id).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Company {company_id} does not exist"
            )

        if motor_id is not None:
            motor = self.db.query(Motor).filter(Motor.id == motor_id).first()
            if not motor:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Motor {motor_id} does not exist"
                )
            if motor.company_id != company_id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Motor {motor.motor_id} does not belong to company {company_id}"
                )

        if technician_id is not None:
            technician = self.db.query(User).filter(
                User.id == technician_id,
                User.role.in_(TECHNICIAN_ROLES),
                User.is_active.is_(True)
            ).first()
            if not technician:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Assigned user is not an active technician"
                )

    def create_job(self, job_data: JobCreate) -> Job:
        """Create a new job with the next job number and a computed estimate"""
        self._validate_links(job_data.company_id, job_data.motor_id, job_data.technician_id)

        try:
            job_number = self.generate_job_number()
            db_job = Job(
                **job_data.model_dump(),
                job_number=job_number,
                status=JobStatus.PENDING,
                estimated_cost=estimate_job_cost(
                    job_data.labor_hours, job_data.labor_rate, job_data.parts_cost
                )
            )
            self.db.add(db_job)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to create job")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create job"
            )

        logger.info(f"Created job: {job_number} for company {job_data.company_id}")
        return self.get_job(db_job.id)

    def update_job(self, job_id: int, job_update: JobUpdate) -> Job:
        """Update job details; the job number and status are not editable here"""
        db_job = self.get_job_or_404(job_id)

        update_data = job_update.model_dump(exclude_unset=True)

        if {"company_id", "motor_id", "technician_id"} & update_data.keys():
            self._validate_links(
                update_data.get("company_id") or db_job.company_id,
                update_data.get("motor_id", db_job.motor_id),
                update_data.get("technician_id", db_job.technician_id)
            )

        applied = apply_changes(db_job, update_data)

        # Recalculate the estimate whenever one of its inputs changes
        if set(COST_FIELDS) & applied.keys():
            db_job.estimated_cost = estimate_job_cost(
                db_job.labor_hours, db_job.labor_rate, db_job.parts_cost
            )

        if db_job.start_date and db_job.due_date and db_job.due_date < db_job.start_date:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="due_date cannot be before start_date"
            )

        self.db.commit()
        logger.info(f"Updated job {db_job.job_number}: {', '.join(applied) or 'no changes'}")
        return self.get_job(job_id)

    def update_job_status(self, job_id: int, status_update: JobStatusUpdate) -> Job:
        """Move a job along its lifecycle"""
        db_job = self.get_job_or_404(job_id)
        new_status = status_update.status

        if new_status != db_job.status:
            allowed = JOB_STATUS_TRANSITIONS.get(db_job.status, set())
            if new_status not in allowed:
                logger.warning(
                    f"Rejected status change for {db_job.job_number}: "
                    f"{db_job.status.value} -> {new_status.value}"
                )
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Cannot change job status from '{db_job.status.value}' to '{new_status.value}'"
                )

        db_job.status = new_status
        if status_update.notes:
            db_job.notes = status_update.notes

        # Set completed date if job is marked as completed
        if new_status == JobStatus.COMPLETED and db_job.completed_date is None:
            db_job.completed_date = date.today()

        self.db.commit()

        logger.info(f"Updated job {db_job.job_number} status to {new_status.value}")
        return self.get_job(job_id)

    def delete_job(self, job_id: int) -> bool:
        """Delete a job; its invoices and warranties keep existing without the link"""
        db_job = self.get_job_or_404(job_id)

        self.db.delete(db_job)
        self.db.commit()

        logger.info(f"Deleted job {db_job.job_number}")
        return True

    def get_job_stats(self, today: Optional[date] = None) -> Dict:
        """Get job counts per status plus due-date alerts"""
        stats = self.db.query(Job.status, func.count(Job.id)).group_by(Job.status).all()

        stats_dict = {
            'total_jobs': sum(count for _, count in stats),
            'pending': 0,
            'in_progress': 0,
            'completed': 0,
            'delivered': 0,
            'under_warranty': 0,
            'overdue': 0,
            'due_soon': 0
        }

        for job_status, count in stats:
            stats_dict[job_status.value] = count

        for (due_date,) in self.db.query(Job.due_date).filter(Job.due_date.isnot(None)).all():
            state = job_due_state(due_date, today)
            stats_dict['overdue'] += state['is_overdue']
            stats_dict['due_soon'] += state['is_due_soon']

        return stats_dict

    def job_to_response(self, job: Job, today: Optional[date] = None) -> Dict:
        """Convert Job model to response dictionary"""
        return {
            "id": job.id,
            "job_number": job.job_number,
            "company_id": job.company_id,
            "company_name": job.company.name if job.company else None,
            "motor_id": job.motor_id,
            "motor_motor_id": job.motor.motor_id if job.motor else None,
            "technician_id": job.technician_id,
            "technician_name": job.technician.name if job.technician else None,
            "description": job.description,
            "notes": job.notes,
            "status": job.status,
            "priority": job.priority,
            "start_date": job.start_date,
            "due_date": job.due_date,
            "completed_date": job.completed_date,
            "labor_hours": job.labor_hours,
            "labor_rate": job.labor_rate,
            "parts_cost": job.parts_cost,
            "estimated_cost": job.estimated_cost,
            "actual_cost": job.actual_cost,
            "progress_percentage": job_progress(job.status, job.progress_percentage),
            **job_due_state(job.due_date, today),
            "created_at": job.created_at,
            "updated_at": job.updated_at
        }

# Dependency injection
def get_job_service(db: Session = Depends(get_db)) -> JobService:
    return JobService(db)
