import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class User(Base):
    """Login identity. Role and everything else about the person lives on Profile."""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    profile = relationship(
        "Profile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    refresh_tokens = relationship(
        "RefreshToken", back_populates="user", cascade="all, delete-orphan"
    )


class RefreshToken(Base):
    """Stored refresh tokens for users."""

    __tablename__ = "refresh_tokens"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    token = Column(String(512), nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="refresh_tokens")


class Profile(Base):
    """
    One per user. role is one of admin, warden, advisor, hod, student, principal.
    Students are identified by student_id (registration number), staff by staff_id.
    """

    __tablename__ = "profiles"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    email = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="student")
    is_approved = Column(Boolean, nullable=False, default=False)
    is_blocked = Column(Boolean, nullable=False, default=False)

    phone = Column(String(50), nullable=True)
    student_id = Column(String(50), nullable=True)
    staff_id = Column(String(50), nullable=True)
    department_id = Column(Uuid(as_uuid=True), ForeignKey("departments.id", ondelete="SET NULL"), nullable=True)
    room_id = Column(Uuid(as_uuid=True), ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True)
    year_of_study = Column(Integer, nullable=True)
    permanent_address = Column(Text, nullable=True)
    local_address = Column(Text, nullable=True)
    guardian_name = Column(String(255), nullable=True)
    guardian_phone = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="profile")
    department = relationship("Department", foreign_keys=[department_id])
    room = relationship("Room", foreign_keys=[room_id])


# Fields a student must fill before outing requests are accepted
STUDENT_REQUIRED_FIELDS = (
    "full_name",
    "phone",
    "student_id",
    "year_of_study",
    "department_id",
    "room_id",
    "permanent_address",
    "local_address",
    "guardian_name",
    "guardian_phone",
)


def profile_completion(profile: Profile) -> int:
    """Percentage (0-100) of STUDENT_REQUIRED_FIELDS that are filled."""
    filled = 0
    for field in STUDENT_REQUIRED_FIELDS:
        value = getattr(profile, field, None)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        filled += 1
    return round(filled / len(STUDENT_REQUIRED_FIELDS) * 100)
