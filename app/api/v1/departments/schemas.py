from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class DepartmentCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=20, description="Short code, stored uppercased")
    name: str = Field(..., min_length=1, max_length=100)


class DepartmentResponse(BaseModel):
    id: UUID
    code: str
    name: str
    created_at: datetime

    class Config:
        from_attributes = True


class DepartmentDetail(DepartmentResponse):
    """Department with the people HOD and advisor views are scoped to."""

    student_count: int = 0
    hod_name: Optional[str] = None
