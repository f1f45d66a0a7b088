"""Student outing requests. Stage and final status only change through the approval workflow."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text, Time, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class OutingRequest(Base):
    __tablename__ = "outing_requests"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    outing_type = Column(String(20), nullable=False)  # local | hometown
    destination = Column(String(255), nullable=False)
    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=False)
    # Local outings only (same-day out/in)
    from_time = Column(Time, nullable=True)
    to_time = Column(Time, nullable=True)
    reason = Column(Text, nullable=False)
    # Hometown visits only
    contact_person = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)

    current_stage = Column(String(20), nullable=False, index=True)  # advisor | hod | warden | completed
    final_status = Column(String(20), nullable=False, default="pending", index=True)  # pending | approved | rejected

    advisor_approved_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    advisor_approved_at = Column(DateTime(timezone=True), nullable=True)
    hod_approved_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    hod_approved_at = Column(DateTime(timezone=True), nullable=True)
    warden_approved_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    warden_approved_at = Column(DateTime(timezone=True), nullable=True)

    rejected_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("User", foreign_keys=[student_id])
