from pydantic import BaseModel, Field, EmailStr
from typing import Optional
from datetime import datetime

from apps.users.models import UserRole
from core.forms import FormModel


class UserCreate(FormModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    role: UserRole = UserRole.TECHNICIAN
    is_active: bool = True


class UserUpdate(FormModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str]
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
