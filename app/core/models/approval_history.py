"""Append-only audit trail: one row per approval or rejection."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class ApprovalHistory(Base):
    __tablename__ = "approval_history"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    request_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("outing_requests.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    approver_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    stage = Column(String(20), nullable=False, index=True)  # stage the decision was taken at
    action = Column(String(20), nullable=False)  # approved | rejected
    comments = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False, index=True)

    request = relationship("OutingRequest", backref="approval_history", foreign_keys=[request_id])
