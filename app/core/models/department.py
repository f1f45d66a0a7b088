import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Uuid

from app.db.session import Base


class Department(Base):
    """Academic department. HOD and advisor read views are scoped by it."""

    __tablename__ = "departments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String(20), nullable=False, unique=True)  # Uppercased on create
    name = Column(String(100), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
