from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.enums import Decision


# ----- Submit -----
class OutingRequestCreate(BaseModel):
    """Submitted by a student. Fields are loosely typed here; intake validation reports every problem at once."""

    outing_type: Optional[str] = Field(None, description="local | hometown")
    destination: Optional[str] = Field(None, max_length=255)
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    from_time: Optional[time] = Field(None, description="Local outings only")
    to_time: Optional[time] = Field(None, description="Local outings only")
    reason: Optional[str] = Field(None, max_length=2000)
    contact_person: Optional[str] = Field(None, max_length=255, description="Hometown visits only")
    contact_phone: Optional[str] = Field(None, max_length=50, description="Hometown visits only")


# ----- Response -----
class OutingRequestResponse(BaseModel):
    id: UUID
    student_id: UUID
    outing_type: str
    destination: str
    from_date: date
    to_date: date
    from_time: Optional[time] = None
    to_time: Optional[time] = None
    reason: str
    contact_person: Optional[str] = None
    contact_phone: Optional[str] = None
    current_stage: str
    final_status: str
    advisor_approved_by: Optional[UUID] = None
    advisor_approved_at: Optional[datetime] = None
    hod_approved_by: Optional[UUID] = None
    hod_approved_at: Optional[datetime] = None
    warden_approved_by: Optional[UUID] = None
    warden_approved_at: Optional[datetime] = None
    rejected_by: Optional[UUID] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ----- Approve / Reject -----
class DecisionRemarks(BaseModel):
    comment: Optional[str] = Field(None, max_length=2000)


class DecisionRequest(DecisionRemarks):
    decision: Decision


# ----- Stats -----
class OutingStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    local: int = 0
    hometown: int = 0
