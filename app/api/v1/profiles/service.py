import logging
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import Profile, profile_completion
from app.core.enums import UserRole
from app.core.exceptions import BackendUnavailable, ServiceError
from app.core.models import Department, Room
from app.db.session import BACKEND_ERRORS

from .schemas import ProfileAdminUpdate, ProfileResponse, ProfileSelfUpdate

logger = logging.getLogger(__name__)


def _profile_to_response(p: Profile) -> ProfileResponse:
    response = ProfileResponse.model_validate(p)
    if p.role == UserRole.STUDENT.value:
        response.completion = profile_completion(p)
    return response


async def _get_profile(db: AsyncSession, profile_id: UUID) -> Profile:
    profile = await db.get(Profile, profile_id)
    if not profile:
        raise ServiceError("Profile not found", status.HTTP_404_NOT_FOUND)
    return profile


async def _get_profile_for_user(db: AsyncSession, user_id: UUID) -> Profile:
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if not profile:
        raise ServiceError("Profile not found", status.HTTP_404_NOT_FOUND)
    return profile


# Columns that cannot be cleared
REQUIRED_FIELDS = ("full_name", "role", "is_approved", "is_blocked")


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


async def _apply_updates(db: AsyncSession, profile: Profile, updates: dict) -> ProfileResponse:
    for field in REQUIRED_FIELDS:
        if field in updates and _is_blank(updates[field]):
            raise ServiceError(f"{field} cannot be empty", status.HTTP_422_UNPROCESSABLE_ENTITY)
    if updates.get("department_id") is not None and not await db.get(Department, updates["department_id"]):
        raise ServiceError("Department not found", status.HTTP_400_BAD_REQUEST)
    if updates.get("room_id") is not None and not await db.get(Room, updates["room_id"]):
        raise ServiceError("Room not found", status.HTTP_400_BAD_REQUEST)
    for field, value in updates.items():
        if isinstance(value, str):
            value = value.strip() or None
        if field == "role" and value is not None:
            value = UserRole(value).value
        setattr(profile, field, value)
    try:
        await db.commit()
        await db.refresh(profile)
    except IntegrityError as e:
        await db.rollback()
        raise ServiceError("Profile update conflicts with existing data", status.HTTP_409_CONFLICT) from e
    except BACKEND_ERRORS as e:
        await db.rollback()
        logger.exception("Database unavailable while updating profile %s", profile.id)
        raise BackendUnavailable() from e
    return _profile_to_response(profile)


async def get_my_profile(db: AsyncSession, user_id: UUID) -> ProfileResponse:
    return _profile_to_response(await _get_profile_for_user(db, user_id))


async def update_my_profile(db: AsyncSession, user_id: UUID, payload: ProfileSelfUpdate) -> ProfileResponse:
    profile = await _get_profile_for_user(db, user_id)
    updates = payload.model_dump(exclude_unset=True)
    if profile.role != UserRole.STUDENT.value:
        # Registration number and year only apply to students
        updates.pop("student_id", None)
        updates.pop("year_of_study", None)
    return await _apply_updates(db, profile, updates)


async def list_profiles(
    db: AsyncSession,
    role: Optional[UserRole] = None,
    is_approved: Optional[bool] = None,
    department_id: Optional[UUID] = None,
) -> List[ProfileResponse]:
    stmt = select(Profile)
    if role is not None:
        stmt = stmt.where(Profile.role == UserRole(role).value)
    if is_approved is not None:
        stmt = stmt.where(Profile.is_approved.is_(is_approved))
    if department_id is not None:
        stmt = stmt.where(Profile.department_id == department_id)
    stmt = stmt.order_by(Profile.created_at.desc())
    result = await db.execute(stmt)
    return [_profile_to_response(p) for p in result.scalars().all()]


async def approve_profile(db: AsyncSession, profile_id: UUID) -> ProfileResponse:
    profile = await _get_profile(db, profile_id)
    response = await _apply_updates(db, profile, {"is_approved": True})
    logger.info("Profile %s (%s) approved", profile.id, profile.email)
    return response


async def set_blocked(db: AsyncSession, profile_id: UUID, blocked: bool) -> ProfileResponse:
    profile = await _get_profile(db, profile_id)
    if blocked and profile.role == UserRole.ADMIN.value:
        raise ServiceError("The administrator account cannot be blocked", status.HTTP_400_BAD_REQUEST)
    response = await _apply_updates(db, profile, {"is_blocked": blocked})
    logger.info("Profile %s (%s) %s", profile.id, profile.email, "blocked" if blocked else "unblocked")
    return response


async def admin_update_profile(db: AsyncSession, profile_id: UUID, payload: ProfileAdminUpdate) -> ProfileResponse:
    profile = await _get_profile(db, profile_id)
    updates = payload.model_dump(exclude_unset=True)
    if updates.get("role") == UserRole.ADMIN and profile.role != UserRole.ADMIN.value:
        raise ServiceError("Use bootstrap-admin to create the administrator", status.HTTP_400_BAD_REQUEST)
    return await _apply_updates(db, profile, updates)
