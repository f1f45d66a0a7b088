from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.schemas import (
    BootstrapAdminRequest,
    BootstrapAdminResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
)
from app.auth.services import login_user, refresh_access_token, register_user
from app.core.config import settings
from app.core.exceptions import ServiceError
from app.db.bootstrap_admin import bootstrap_admin
from app.db.session import get_db

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _to_http(e: ServiceError) -> HTTPException:
    if e.status_code == http_status.HTTP_500_INTERNAL_SERVER_ERROR:
        return HTTPException(status_code=e.status_code, detail="Internal server error")
    return HTTPException(status_code=e.status_code, detail=e.detail)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=http_status.HTTP_201_CREATED,
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> RegisterResponse:
    """Student or staff sign-up. The account stays unapproved until an admin approves it."""
    try:
        return await register_user(db, payload)
    except ServiceError as e:
        raise _to_http(e)


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=http_status.HTTP_200_OK,
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    try:
        return await login_user(db, payload)
    except ServiceError as e:
        raise _to_http(e)


@router.post("/login-oauth")
async def login_oauth(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    payload = LoginRequest(
        email=form_data.username.strip(),
        password=form_data.password,
    )
    try:
        result = await login_user(db, payload)
    except ServiceError as e:
        raise _to_http(e)
    return {
        "access_token": result.access_token,
        "token_type": "bearer",
    }


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    payload: RefreshRequest,
    db: AsyncSession = Depends(get_db),
) -> RefreshResponse:
    try:
        return await refresh_access_token(db, payload.refresh_token)
    except ServiceError as e:
        raise _to_http(e)


@router.post("/bootstrap-admin", response_model=BootstrapAdminResponse)
async def bootstrap_admin_account(
    payload: BootstrapAdminRequest,
    db: AsyncSession = Depends(get_db),
) -> BootstrapAdminResponse:
    """Create or promote the administrator. Refused once an admin with another email exists."""
    if not settings.bootstrap_endpoint_enabled:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Not Found")
    try:
        return await bootstrap_admin(db, email=payload.email, password=payload.password)
    except ServiceError as e:
        raise _to_http(e)
