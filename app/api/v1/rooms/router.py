from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_admin
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import RoomCreate, RoomResponse
from . import service

router = APIRouter(prefix="/api/v1/rooms", tags=["rooms"])


@router.post(
    "",
    response_model=RoomResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_room(
    payload: RoomCreate,
    db: AsyncSession = Depends(get_db),
) -> RoomResponse:
    try:
        return await service.create_room(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=List[RoomResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_rooms(
    available_only: bool = Query(False, description="Only rooms with free beds"),
    db: AsyncSession = Depends(get_db),
) -> List[RoomResponse]:
    return await service.list_rooms(db, available_only=available_only)
