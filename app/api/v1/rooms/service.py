from typing import List

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.core.models import Room

from .schemas import RoomCreate, RoomResponse


async def create_room(db: AsyncSession, payload: RoomCreate) -> RoomResponse:
    try:
        room = Room(
            room_number=payload.room_number.strip().upper(),
            floor=payload.floor,
            capacity=payload.capacity,
            occupied=payload.occupied,
        )
        db.add(room)
        await db.commit()
        await db.refresh(room)
        return RoomResponse.model_validate(room)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Room number already exists", status.HTTP_409_CONFLICT)


async def list_rooms(db: AsyncSession, available_only: bool = False) -> List[RoomResponse]:
    stmt = select(Room)
    if available_only:
        stmt = stmt.where(Room.occupied < Room.capacity)
    stmt = stmt.order_by(Room.room_number)
    result = await db.execute(stmt)
    return [RoomResponse.model_validate(r) for r in result.scalars().all()]
