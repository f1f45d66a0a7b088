import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import Profile, RefreshToken, User
from app.auth.schemas import (
    LoginRequest,
    LoginResponse,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    UserInfo,
)
from app.auth.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
)
from app.core.enums import UserRole
from app.core.exceptions import BackendUnavailable, ServiceError
from app.core.models import Department
from app.db.session import BACKEND_ERRORS

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(func.lower(User.email) == email.strip().lower()))
    return result.scalar_one_or_none()


async def get_profile_by_user_id(db: AsyncSession, user_id) -> Optional[Profile]:
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, payload: RegisterRequest) -> RegisterResponse:
    """Create a user and an unapproved profile. An admin approves the profile later."""
    if await get_user_by_email(db, payload.email):
        raise ServiceError("Email is already in use", status.HTTP_409_CONFLICT)

    if payload.department_id is not None:
        if not await db.get(Department, payload.department_id):
            raise ServiceError("Department not found", status.HTTP_400_BAD_REQUEST)

    is_student = payload.role == UserRole.STUDENT
    try:
        user = User(
            email=payload.email.strip().lower(),
            password_hash=hash_password(payload.password),
        )
        db.add(user)
        await db.flush()  # to populate user.id

        profile = Profile(
            user_id=user.id,
            email=user.email,
            full_name=payload.full_name.strip(),
            role=payload.role.value,
            is_approved=False,
            is_blocked=False,
            phone=payload.phone,
            student_id=payload.student_id if is_student else None,
            year_of_study=payload.year_of_study if is_student else None,
            staff_id=None if is_student else payload.staff_id,
            department_id=payload.department_id,
        )
        db.add(profile)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ServiceError("Conflict while creating user", status.HTTP_409_CONFLICT) from e
    except BACKEND_ERRORS as e:
        await db.rollback()
        logger.exception("Database unavailable while registering %s", payload.email)
        raise BackendUnavailable() from e

    logger.info("Registered %s as %s (pending approval)", user.email, profile.role)
    return RegisterResponse(
        success=True,
        message="Account created. An administrator must approve it.",
        user_id=user.id,
        role=profile.role,
        is_approved=profile.is_approved,
    )


def _issue_access_token(user: User, profile: Profile, issued_at: datetime) -> str:
    return create_access_token(user.id, profile.role, issued_at=issued_at)


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    user = await get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

    profile = await get_profile_by_user_id(db, user.id)
    if not profile:
        raise ServiceError("Profile not found for this account", status.HTTP_403_FORBIDDEN)
    if profile.is_blocked:
        raise ServiceError("Account is blocked. Contact the administrator.", status.HTTP_403_FORBIDDEN)

    issued_at = datetime.now(timezone.utc)
    access_token = _issue_access_token(user, profile, issued_at)

    refresh_token_str, refresh_expires_at = create_refresh_token()
    db.add(
        RefreshToken(
            user_id=user.id,
            token=refresh_token_str,
            expires_at=refresh_expires_at,
        )
    )
    try:
        await db.commit()
    except BACKEND_ERRORS as e:
        await db.rollback()
        logger.exception("Database unavailable while storing refresh token")
        raise BackendUnavailable() from e

    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token_str,
        user=UserInfo(
            id=user.id,
            name=profile.full_name,
            email=user.email,
            role=profile.role,
            is_approved=profile.is_approved,
        ),
        issued_at=issued_at,
    )


async def refresh_access_token(db: AsyncSession, refresh_token: str) -> RefreshResponse:
    result = await db.execute(select(RefreshToken).where(RefreshToken.token == refresh_token))
    stored = result.scalar_one_or_none()
    if not stored:
        raise ServiceError("Invalid refresh token", status.HTTP_401_UNAUTHORIZED)

    now = datetime.now(timezone.utc)
    expires_at = stored.expires_at
    if expires_at.tzinfo is None:
        # SQLite hands back naive timestamps
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at <= now:
        raise ServiceError("Refresh token expired", status.HTTP_401_UNAUTHORIZED)

    user = await db.get(User, stored.user_id)
    profile = await get_profile_by_user_id(db, stored.user_id)
    if not user or not profile or profile.is_blocked:
        raise ServiceError("Account is not active", status.HTTP_403_FORBIDDEN)

    return RefreshResponse(access_token=_issue_access_token(user, profile, now))
