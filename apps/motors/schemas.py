from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from core.forms import FormModel

class MotorBase(FormModel):
    motor_id: str = Field(..., min_length=1, max_length=50, description="Shop tag")
    company_id: int
    manufacturer: Optional[str] = Field(None, max_length=255)
    model: Optional[str] = Field(None, max_length=255)
    serial_number: Optional[str] = Field(None, max_length=255)
    type: Optional[str] = Field(None, max_length=100)
    horsepower: Optional[float] = Field(None, gt=0)
    voltage: Optional[int] = Field(None, gt=0)
    rpm: Optional[int] = Field(None, gt=0)
    notes: Optional[str] = None

class MotorCreate(MotorBase):
    pass

class MotorUpdate(FormModel):
    motor_id: Optional[str] = Field(None, min_length=1, max_length=50)
    company_id: Optional[int] = None
    manufacturer: Optional[str] = Field(None, max_length=255)
    model: Optional[str] = Field(None, max_length=255)
    serial_number: Optional[str] = Field(None, max_length=255)
    type: Optional[str] = Field(None, max_length=100)
    horsepower: Optional[float] = Field(None, gt=0)
    voltage: Optional[int] = Field(None, gt=0)
    rpm: Optional[int] = Field(None, gt=0)
    notes: Optional[str] = None

class MotorResponse(BaseModel):
    id: int
    motor_id: str
    company_id: int
    company_name: Optional[str]
    manufacturer: Optional[str]
    model: Optional[str]
    serial_number: Optional[str]
    type: Optional[str]
    horsepower: Optional[float]
    voltage: Optional[int]
    rpm: Optional[int]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class MotorListResponse(BaseModel):
    items: List[MotorResponse]
    total: int
