from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime

from apps.warranties.models import WarrantyStatus, ClaimStatus, ExtensionReason
from core.forms import FormModel

class WarrantyCreate(FormModel):
    job_id: int
    warranty_start: Optional[date] = Field(None, description="Defaults to the job's completed date, else today")
    warranty_period: int = Field(12, ge=1, le=240, description="Coverage in months")
    work_description: Optional[str] = None
    last_inspection: Optional[date] = None
    notes: Optional[str] = None

class WarrantyUpdate(FormModel):
    warranty_start: Optional[date] = None
    warranty_period: Optional[int] = Field(None, ge=1, le=240)
    work_description: Optional[str] = None
    last_inspection: Optional[date] = None
    notes: Optional[str] = None

class WarrantyExtension(FormModel):
    extension_months: int = Field(..., gt=0, le=120)
    extension_reason: ExtensionReason
    notes: Optional[str] = None

class WarrantyClaim(FormModel):
    notes: Optional[str] = None

class WarrantyClaimDecision(FormModel):
    claim_status: ClaimStatus
    notes: Optional[str] = None

class WarrantyResponse(BaseModel):
    id: int
    job_id: Optional[int]
    job_number: Optional[str]
    motor_id: Optional[int]
    motor_motor_id: Optional[str]
    company_id: int
    company_name: Optional[str]
    status: WarrantyStatus
    warranty_start: date
    warranty_period: int
    warranty_end: date
    work_description: Optional[str]
    original_end_date: Optional[date]
    extension_months: int
    extension_reason: Optional[ExtensionReason]
    claim_status: ClaimStatus
    last_inspection: Optional[date]
    notes: Optional[str]
    days_remaining: int
    is_expired: bool
    is_expiring_soon: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class WarrantyListResponse(BaseModel):
    items: List[WarrantyResponse]
    total: int

class WarrantySummaryResponse(BaseModel):
    active_warranties: int
    expiring_soon: int
    claims_this_year: int
    avg_warranty_period: int
