from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import Profile, User
from app.auth.schemas import CurrentUser
from app.auth.security import decode_access_token
from app.db.session import get_db


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login-oauth")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Resolve the authenticated user and their profile from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception

    user_id_str = payload.get("user_id") or payload.get("sub")
    if not user_id_str:
        raise credentials_exception
    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise credentials_exception

    # Role is read from the profile, not the token, so admin edits apply immediately
    stmt = (
        select(User, Profile)
        .join(Profile, Profile.user_id == User.id)
        .where(User.id == user_id)
    )
    row = (await db.execute(stmt)).first()
    if not row:
        raise credentials_exception
    user, profile = row
    if profile.is_blocked:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is blocked")

    return CurrentUser(
        id=user.id,
        email=user.email,
        role=profile.role,
        department_id=profile.department_id,
        is_approved=profile.is_approved,
        is_blocked=profile.is_blocked,
    )
