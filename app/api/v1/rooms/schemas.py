from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class RoomCreate(BaseModel):
    room_number: str = Field(..., min_length=1, max_length=20)
    floor: int = Field(..., ge=0)
    capacity: int = Field(1, ge=1)
    occupied: int = Field(0, ge=0)

    @model_validator(mode="after")
    def occupied_within_capacity(self) -> "RoomCreate":
        if self.occupied > self.capacity:
            raise ValueError("occupied cannot exceed capacity")
        return self


class RoomResponse(BaseModel):
    id: UUID
    room_number: str
    floor: int
    capacity: int
    occupied: int
    created_at: datetime

    class Config:
        from_attributes = True
