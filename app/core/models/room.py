import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Uuid

from app.db.session import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    room_number = Column(String(20), nullable=False, unique=True)
    floor = Column(Integer, nullable=False)
    capacity = Column(Integer, nullable=False, default=1)
    occupied = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
