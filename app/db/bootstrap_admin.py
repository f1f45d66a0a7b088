"""
Create or promote the single administrator account.

Run once with env set:
  BOOTSTRAP_ADMIN_EMAIL=admin@hostel.example
  BOOTSTRAP_ADMIN_PASSWORD=YourSecurePassword

  python -m app.db.bootstrap_admin

Also served as POST /api/v1/auth/bootstrap-admin. Safe to repeat:
- admin with the same email exists  -> password reset
- admin with another email exists   -> refused (409)
- profile with that email exists    -> promoted to admin and approved
- otherwise                         -> new user + approved admin profile
"""
import asyncio
import logging
from typing import Optional

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import Profile, User
from app.auth.schemas import BootstrapAdminResponse
from app.auth.security import hash_password
from app.core.config import settings
from app.core.enums import UserRole
from app.core.exceptions import BackendUnavailable, ServiceError
from app.db.session import BACKEND_ERRORS, AsyncSessionLocal

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_FULL_NAME = "Admin"


async def bootstrap_admin(
    db: AsyncSession,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> BootstrapAdminResponse:
    email = (email or settings.bootstrap_admin_email or "").strip().lower()
    password = password or settings.bootstrap_admin_password
    if not email or not password:
        raise ServiceError("email and password are required", status.HTTP_400_BAD_REQUEST)

    try:
        # 1. An admin already exists
        result = await db.execute(select(Profile).where(Profile.role == UserRole.ADMIN.value).limit(1))
        admin_profile = result.scalar_one_or_none()
        if admin_profile:
            if admin_profile.email.lower() != email:
                raise ServiceError(
                    "Admin already exists with a different email",
                    status.HTTP_409_CONFLICT,
                )
            user = await db.get(User, admin_profile.user_id)
            user.password_hash = hash_password(password)
            await db.commit()
            logger.info("Admin %s already existed; password reset", email)
            return BootstrapAdminResponse(
                outcome="password_reset",
                message="Admin already existed. Password updated successfully.",
                user_id=user.id,
            )

        # 2. Promote an existing account with this email
        result = await db.execute(select(Profile).where(func.lower(Profile.email) == email))
        profile = result.scalar_one_or_none()
        if profile:
            user = await db.get(User, profile.user_id)
            profile.role = UserRole.ADMIN.value
            profile.is_approved = True
            profile.is_blocked = False
            user.password_hash = hash_password(password)
            await db.commit()
            logger.info("Promoted existing user %s to admin", email)
            return BootstrapAdminResponse(
                outcome="promoted",
                message="Existing user promoted to admin and password set.",
                user_id=user.id,
            )

        # 3. Create a new admin
        user = User(email=email, password_hash=hash_password(password))
        db.add(user)
        await db.flush()
        db.add(
            Profile(
                user_id=user.id,
                email=email,
                full_name=DEFAULT_ADMIN_FULL_NAME,
                role=UserRole.ADMIN.value,
                is_approved=True,
                is_blocked=False,
            )
        )
        await db.commit()
        logger.info("Created admin user %s", email)
        return BootstrapAdminResponse(
            outcome="created",
            message="Admin user created successfully.",
            user_id=user.id,
        )
    except IntegrityError as e:
        await db.rollback()
        raise ServiceError("Conflict while creating admin", status.HTTP_409_CONFLICT) from e
    except BACKEND_ERRORS as e:
        await db.rollback()
        logger.exception("Database unavailable during admin bootstrap")
        raise BackendUnavailable() from e


async def main() -> None:
    from app.core.logging import configure_logging

    configure_logging()
    async with AsyncSessionLocal() as db:
        try:
            result = await bootstrap_admin(db)
        except ServiceError as e:
            logger.error("Admin bootstrap failed: %s", e.message)
            raise
        logger.info("%s (%s)", result.message, result.outcome)


if __name__ == "__main__":
    asyncio.run(main())
