import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import Profile
from app.core.config import settings
from app.core.exceptions import ServiceError
from app.db.bootstrap_admin import bootstrap_admin


@pytest.mark.asyncio
async def test_creates_admin_then_resets_password(db_session: AsyncSession, client: AsyncClient) -> None:
    created = await bootstrap_admin(db_session, email="Admin@Hostel.example", password="FirstPass123")
    assert created.outcome == "created"

    profile = (
        await db_session.execute(select(Profile).where(Profile.user_id == created.user_id))
    ).scalar_one()
    assert (profile.role, profile.is_approved, profile.email) == ("admin", True, "admin@hostel.example")

    again = await bootstrap_admin(db_session, email="admin@hostel.example", password="SecondPass123")
    assert again.outcome == "password_reset"
    assert again.user_id == created.user_id

    login = await client.post(
        "/api/v1/auth/login",
        json={"email": "admin@hostel.example", "password": "SecondPass123"},
    )
    assert login.status_code == 200
    assert login.json()["user"]["role"] == "admin"


@pytest.mark.asyncio
async def test_second_admin_email_is_refused(db_session: AsyncSession) -> None:
    await bootstrap_admin(db_session, email="admin@hostel.example", password="FirstPass123")
    with pytest.raises(ServiceError) as exc:
        await bootstrap_admin(db_session, email="other@hostel.example", password="FirstPass123")
    assert exc.value.status_code == 409


@pytest.mark.asyncio
async def test_promotes_existing_account(db_session: AsyncSession, make_user) -> None:
    existing = await make_user("warden", approved=False, blocked=True, email="warden@hostel.example")

    result = await bootstrap_admin(db_session, email="warden@hostel.example", password="NewPass1234")
    assert result.outcome == "promoted"
    assert result.user_id == existing.id

    profile = (
        await db_session.execute(
            select(Profile).where(Profile.user_id == existing.id).execution_options(populate_existing=True)
        )
    ).scalar_one()
    assert profile.role == "admin"
    assert profile.is_approved is True
    assert profile.is_blocked is False


@pytest.mark.asyncio
async def test_requires_credentials(db_session: AsyncSession, monkeypatch) -> None:
    monkeypatch.setattr(settings, "bootstrap_admin_email", None)
    monkeypatch.setattr(settings, "bootstrap_admin_password", None)
    with pytest.raises(ServiceError) as exc:
        await bootstrap_admin(db_session)
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_endpoint_can_be_disabled(client: AsyncClient, monkeypatch) -> None:
    payload = {"email": "admin@hostel.example", "password": "FirstPass123"}

    monkeypatch.setattr(settings, "bootstrap_endpoint_enabled", False)
    assert (await client.post("/api/v1/auth/bootstrap-admin", json=payload)).status_code == 404

    monkeypatch.setattr(settings, "bootstrap_endpoint_enabled", True)
    response = await client.post("/api/v1/auth/bootstrap-admin", json=payload)
    assert response.status_code == 200
    assert response.json()["outcome"] == "created"
