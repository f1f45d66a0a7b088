from datetime import datetime, timedelta, timezone
import secrets
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

import bcrypt
from jose import jwt

from app.core.config import settings


def hash_password(plain_password: str) -> str:
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is invalid/corrupted
        return False


def create_access_token(
    user_id: UUID,
    role: str,
    *,
    issued_at: Optional[datetime] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """
    Signed JWT for an account. The role claim is informational only:
    get_current_user always re-reads the role from the profile.
    """
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes
    issued_at = issued_at or datetime.now(timezone.utc)

    claims = {
        "sub": str(user_id),
        "user_id": str(user_id),
        "role": role,
        "iat": int(issued_at.timestamp()),
        "exp": issued_at + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verified claims of token. Raises jose.JWTError when invalid or expired."""
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def create_refresh_token(*, expires_days: Optional[int] = None) -> Tuple[str, datetime]:
    if expires_days is None:
        expires_days = settings.refresh_token_expire_days
    expire = datetime.now(timezone.utc) + timedelta(days=expires_days)
    token = secrets.token_urlsafe(48)
    return token, expire
