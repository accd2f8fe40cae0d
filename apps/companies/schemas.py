from pydantic import BaseModel, Field, EmailStr
from typing import Optional, List
from datetime import datetime

from apps.companies.models import CompanyStatus
from core.forms import FormModel

class CompanyBase(FormModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_name: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    notes: Optional[str] = None
    status: CompanyStatus = CompanyStatus.ACTIVE

class CompanyCreate(CompanyBase):
    pass

class CompanyUpdate(FormModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_name: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[CompanyStatus] = None

class CompanyResponse(BaseModel):
    id: int
    name: str
    contact_name: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    notes: Optional[str]
    status: CompanyStatus
    motor_count: int = 0
    active_jobs: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class CompanyListResponse(BaseModel):
    items: List[CompanyResponse]
    total: int
