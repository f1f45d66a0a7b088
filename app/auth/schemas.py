from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.core.enums import UserRole


class RegisterRequest(BaseModel):
    """Self-registration for students and staff. Admin accounts come from bootstrap-admin only."""

    full_name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8)
    confirm_password: str = Field(..., min_length=8)
    role: UserRole = UserRole.STUDENT
    phone: Optional[str] = Field(None, max_length=50)
    student_id: Optional[str] = Field(None, max_length=50, description="Registration number (students)")
    year_of_study: Optional[int] = Field(None, ge=1, le=6)
    staff_id: Optional[str] = Field(None, max_length=50, description="Staff id or designation (staff)")
    department_id: Optional[UUID] = None

    @field_validator("role")
    @classmethod
    def no_admin_self_registration(cls, v: UserRole) -> UserRole:
        if v == UserRole.ADMIN:
            raise ValueError("admin accounts cannot be self-registered")
        return v

    @model_validator(mode="after")
    def validate_passwords(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("password and confirm_password do not match")
        return self


class RegisterResponse(BaseModel):
    success: bool
    message: str
    user_id: UUID
    role: str
    is_approved: bool


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserInfo(BaseModel):
    id: UUID
    name: str
    email: EmailStr
    role: str
    is_approved: bool


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserInfo
    issued_at: datetime


class RefreshRequest(BaseModel):
    refresh_token: str


class RefreshResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class BootstrapAdminRequest(BaseModel):
    """Both fields fall back to BOOTSTRAP_ADMIN_EMAIL / BOOTSTRAP_ADMIN_PASSWORD."""

    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8)


class BootstrapAdminResponse(BaseModel):
    outcome: str  # created | promoted | password_reset
    message: str
    user_id: UUID


class CurrentUser(BaseModel):
    """Authenticated actor, passed explicitly into services."""

    id: UUID
    email: str
    role: UserRole
    department_id: Optional[UUID] = None
    is_approved: bool = False
    is_blocked: bool = False
