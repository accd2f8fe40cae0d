from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from apps.jobs.models import JobStatus, JobPriority
from core.forms import FormModel

class JobBase(FormModel):
    company_id: int
    motor_id: int
    technician_id: Optional[int] = None
    description: str = Field(..., min_length=1)
    priority: JobPriority = JobPriority.NORMAL
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    labor_hours: Optional[Decimal] = Field(None, ge=0, max_digits=8, decimal_places=2)
    labor_rate: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    parts_cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def due_after_start(self):
        if self.start_date and self.due_date and self.due_date < self.start_date:
            raise ValueError("due_date cannot be before start_date")
        return self

class JobCreate(JobBase):
    pass

class JobUpdate(FormModel):
    company_id: Optional[int] = None
    motor_id: Optional[int] = None
    technician_id: Optional[int] = None
    description: Optional[str] = Field(None, min_length=1)
    priority: Optional[JobPriority] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    completed_date: Optional[date] = None
    labor_hours: Optional[Decimal] = Field(None, ge=0, max_digits=8, decimal_places=2)
    labor_rate: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    parts_cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    actual_cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    progress_percentage: Optional[int] = Field(None, ge=0, le=100)
    notes: Optional[str] = None

class JobStatusUpdate(FormModel):
    status: JobStatus
    notes: Optional[str] = None

class JobResponse(BaseModel):
    id: int
    job_number: str
    company_id: int
    company_name: Optional[str]
    motor_id: Optional[int]
    motor_motor_id: Optional[str]
    technician_id: Optional[int]
    technician_name: Optional[str]
    description: str
    notes: Optional[str]
    status: JobStatus
    priority: JobPriority
    start_date: Optional[date]
    due_date: Optional[date]
    completed_date: Optional[date]
    labor_hours: Optional[Decimal]
    labor_rate: Optional[Decimal]
    parts_cost: Optional[Decimal]
    estimated_cost: Decimal
    actual_cost: Optional[Decimal]
    progress_percentage: int
    days_until_due: Optional[int]
    is_overdue: bool
    is_due_soon: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class JobListResponse(BaseModel):
    items: List[JobResponse]
    total: int
    page: int
    size: int
    total_pages: int

class JobStatsResponse(BaseModel):
    total_jobs: int
    pending: int
    in_progress: int
    completed: int
    delivered: int
    under_warranty: int
    overdue: int
    due_soon: int
