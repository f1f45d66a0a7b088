import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import AsyncGenerator, Dict, Optional
from uuid import UUID, uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.main import app
from app.auth.models import Profile, User
from app.auth.schemas import CurrentUser
from app.auth.security import create_access_token, hash_password
from app.core.models import Department, Room
from app.db.session import Base, get_db


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "StrongPass123"
# bcrypt is slow; hash once for every test user
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test; also overrides the FastAPI get_db dependency."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def department(db_session: AsyncSession) -> Department:
    dept = Department(code="CSE", name="Computer Science")
    db_session.add(dept)
    await db_session.commit()
    return dept


@pytest.fixture()
async def other_department(db_session: AsyncSession) -> Department:
    dept = Department(code="ECE", name="Electronics")
    db_session.add(dept)
    await db_session.commit()
    return dept


@pytest.fixture()
async def room(db_session: AsyncSession) -> Room:
    r = Room(room_number="A-101", floor=1, capacity=2, occupied=1)
    db_session.add(r)
    await db_session.commit()
    return r


@pytest.fixture()
def make_user(db_session: AsyncSession, room: Room):
    """Factory creating a user + profile and returning the CurrentUser the API would resolve."""

    async def _make(
        role: str = "student",
        *,
        department_id: Optional[UUID] = None,
        approved: bool = True,
        blocked: bool = False,
        complete: bool = True,
        email: Optional[str] = None,
    ) -> CurrentUser:
        email = email or f"{role}-{uuid4().hex[:8]}@example.com"
        user = User(email=email, password_hash=TEST_PASSWORD_HASH)
        db_session.add(user)
        await db_session.flush()
        profile = Profile(
            user_id=user.id,
            email=email,
            full_name=f"Test {role.title()}",
            role=role,
            is_approved=approved,
            is_blocked=blocked,
            department_id=department_id,
        )
        if role == "student" and complete:
            profile.phone = "+919876543210"
            profile.student_id = f"REG{uuid4().hex[:6].upper()}"
            profile.year_of_study = 2
            profile.room_id = room.id
            profile.permanent_address = "12 Temple Street, Madurai"
            profile.local_address = "Hostel Block A"
            profile.guardian_name = "Parent Name"
            profile.guardian_phone = "+919800000000"
            if profile.department_id is None:
                dept = Department(code=f"D{uuid4().hex[:6].upper()}", name=f"Dept {uuid4().hex[:6]}")
                db_session.add(dept)
                await db_session.flush()
                profile.department_id = dept.id
        db_session.add(profile)
        await db_session.commit()
        return CurrentUser(
            id=user.id,
            email=email,
            role=role,
            department_id=profile.department_id,
            is_approved=approved,
            is_blocked=blocked,
        )

    return _make


def auth_headers_for(user: CurrentUser) -> Dict[str, str]:
    token = create_access_token(user.id, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_headers():
    return auth_headers_for


@pytest.fixture()
def hometown_payload() -> Dict:
    return {
        "outing_type": "hometown",
        "destination": "Madurai",
        "from_date": "2024-03-01",
        "to_date": "2024-03-05",
        "reason": "Family function",
        "contact_person": "Parent Name",
        "contact_phone": "+919800000000",
    }


@pytest.fixture()
def local_payload() -> Dict:
    return {
        "outing_type": "local",
        "destination": "City market",
        "from_date": "2024-03-01",
        "to_date": "2024-03-01",
        "from_time": "09:00",
        "to_time": "18:00",
        "reason": "Shopping",
    }
