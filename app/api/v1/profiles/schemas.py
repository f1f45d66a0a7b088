from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.enums import UserRole


class ProfileResponse(BaseModel):
    id: UUID
    user_id: UUID
    email: str
    full_name: str
    role: str
    is_approved: bool
    is_blocked: bool
    phone: Optional[str] = None
    student_id: Optional[str] = None
    staff_id: Optional[str] = None
    department_id: Optional[UUID] = None
    room_id: Optional[UUID] = None
    year_of_study: Optional[int] = None
    permanent_address: Optional[str] = None
    local_address: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    completion: int = Field(100, description="Percentage of required fields filled (students)")
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProfileSelfUpdate(BaseModel):
    """Fields a user may edit on their own profile."""

    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    student_id: Optional[str] = Field(None, max_length=50)
    year_of_study: Optional[int] = Field(None, ge=1, le=6)
    department_id: Optional[UUID] = None
    room_id: Optional[UUID] = None
    permanent_address: Optional[str] = Field(None, max_length=1000)
    local_address: Optional[str] = Field(None, max_length=1000)
    guardian_name: Optional[str] = Field(None, max_length=255)
    guardian_phone: Optional[str] = Field(None, max_length=50)


class ProfileAdminUpdate(ProfileSelfUpdate):
    """Admin edit: everything a user can change plus role, staff id and flags."""

    role: Optional[UserRole] = None
    staff_id: Optional[str] = Field(None, max_length=50)
    is_approved: Optional[bool] = None
    is_blocked: Optional[bool] = None
