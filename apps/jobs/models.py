from core.database import Base
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

class JobStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    UNDER_WARRANTY = "under_warranty"

class JobPriority(str, enum.Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

# Jobs still occupying the shop floor
ACTIVE_JOB_STATUSES = (JobStatus.PENDING, JobStatus.IN_PROGRESS)

# Status changes a user may make through the status endpoint
JOB_STATUS_TRANSITIONS = {
    JobStatus.PENDING: {JobStatus.IN_PROGRESS},
    JobStatus.IN_PROGRESS: {JobStatus.PENDING, JobStatus.COMPLETED},
    JobStatus.COMPLETED: {JobStatus.IN_PROGRESS, JobStatus.DELIVERED, JobStatus.UNDER_WARRANTY},
    JobStatus.DELIVERED: {JobStatus.UNDER_WARRANTY},
    JobStatus.UNDER_WARRANTY: {JobStatus.IN_PROGRESS, JobStatus.DELIVERED},
}

class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    job_number = Column(String(50), unique=True, index=True, nullable=False)

    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    motor_id = Column(Integer, ForeignKey("motors.id", ondelete="SET NULL"), nullable=True, index=True)
    technician_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Job details
    description = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)

    # Status and tracking
    status = Column(SQLEnum(JobStatus), default=JobStatus.PENDING, nullable=False, index=True)
    priority = Column(SQLEnum(JobPriority), default=JobPriority.NORMAL, nullable=False)
    progress_percentage = Column(Integer, nullable=True)  # Overrides the status-based default

    # Schedule
    start_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    completed_date = Column(Date, nullable=True)

    # Financial information
    labor_hours = Column(Numeric(8, 2), nullable=True)
    labor_rate = Column(Numeric(12, 2), nullable=True)
    parts_cost = Column(Numeric(12, 2), nullable=True)
    estimated_cost = Column(Numeric(12, 2), default=0)
    actual_cost = Column(Numeric(12, 2), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    company = relationship("Company", back_populates="jobs")
    motor = relationship("Motor", back_populates="jobs")
    technician = relationship("User", back_populates="assigned_jobs")
    invoices = relationship("Invoice", back_populates="job")
    warranties = relationship("Warranty", back_populates="job")
