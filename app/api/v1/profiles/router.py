from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_admin
from app.auth.schemas import CurrentUser
from app.core.enums import UserRole
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import ProfileAdminUpdate, ProfileResponse, ProfileSelfUpdate
from . import service

router = APIRouter(prefix="/api/v1/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileResponse)
async def my_profile(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ProfileResponse:
    """Own profile with completion percentage. Students need 100% before requesting outings."""
    try:
        return await service.get_my_profile(db, current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    payload: ProfileSelfUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ProfileResponse:
    try:
        return await service.update_my_profile(db, current_user.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get(
    "",
    response_model=List[ProfileResponse],
    dependencies=[Depends(require_admin)],
)
async def list_profiles(
    role: Optional[UserRole] = None,
    is_approved: Optional[bool] = None,
    department_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
) -> List[ProfileResponse]:
    return await service.list_profiles(db, role=role, is_approved=is_approved, department_id=department_id)


@router.post(
    "/{profile_id}/approve",
    response_model=ProfileResponse,
    dependencies=[Depends(require_admin)],
)
async def approve_profile(
    profile_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    try:
        return await service.approve_profile(db, profile_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post(
    "/{profile_id}/block",
    response_model=ProfileResponse,
    dependencies=[Depends(require_admin)],
)
async def block_profile(
    profile_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    try:
        return await service.set_blocked(db, profile_id, True)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post(
    "/{profile_id}/unblock",
    response_model=ProfileResponse,
    dependencies=[Depends(require_admin)],
)
async def unblock_profile(
    profile_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    try:
        return await service.set_blocked(db, profile_id, False)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.put(
    "/{profile_id}",
    response_model=ProfileResponse,
    dependencies=[Depends(require_admin)],
)
async def update_profile(
    profile_id: UUID,
    payload: ProfileAdminUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    """Admin edit of any profile (role, department, room, flags)."""
    try:
        return await service.admin_update_profile(db, profile_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
