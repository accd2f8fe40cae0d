from core.database import Base
from sqlalchemy import Column, Integer, Date, DateTime, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

class WarrantyStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CLAIMED = "claimed"
    EXTENDED = "extended"

class ClaimStatus(str, enum.Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"

class ExtensionReason(str, enum.Enum):
    ADDITIONAL_WORK = "additional_work"
    CUSTOMER_REQUEST = "customer_request"
    QUALITY_ASSURANCE = "quality_assurance"
    PREMIUM_SERVICE = "premium_service"

# Warranties whose coverage is still running
IN_FORCE_STATUSES = (WarrantyStatus.ACTIVE, WarrantyStatus.EXTENDED)

class Warranty(Base):
    __tablename__ = "warranties"

    id = Column(Integer, primary_key=True, index=True)

    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True, index=True)
    motor_id = Column(Integer, ForeignKey("motors.id", ondelete="SET NULL"), nullable=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)

    status = Column(SQLEnum(WarrantyStatus), default=WarrantyStatus.ACTIVE, nullable=False, index=True)

    # Coverage
    warranty_start = Column(Date, nullable=False)
    warranty_period = Column(Integer, nullable=False)  # months
    warranty_end = Column(Date, nullable=False, index=True)
    work_description = Column(Text, nullable=True)

    # Extension history
    original_end_date = Column(Date, nullable=True)  # set on first extension only
    extension_months = Column(Integer, default=0, nullable=False)
    extension_reason = Column(SQLEnum(ExtensionReason), nullable=True)

    # Claims and inspection
    claim_status = Column(SQLEnum(ClaimStatus), default=ClaimStatus.NONE, nullable=False)
    last_inspection = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    job = relationship("Job", back_populates="warranties")
    motor = relationship("Motor", back_populates="warranties")
    company = relationship("Company")
