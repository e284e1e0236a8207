from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.core.auth.jwt import create_access_token
from src.core.auth.models import User, UserRole
from src.core.auth.service import AuthService
from src.core.database.base import Base
from src.core.database import get_db
from src.main import app
from src.modules.schools.models import School
from src.modules.schools.schemas import SchoolAdminAssign, SchoolCreate
from src.modules.schools.service import SchoolService
from src.modules.students.models import Student
from src.modules.students.schemas import StudentCreate
from src.modules.students.service import StudentService

# Test database URL (in-memory SQLite for speed, or use test PostgreSQL)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "Password123"


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with all tables, bound to the test's event loop."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Get test database session."""
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Get test HTTP client with overridden database dependency."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header for a user, without going through /auth/login."""
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
async def super_admin(db_session: AsyncSession) -> User:
    user = await AuthService(db_session).create_user(
        email="root@platform.com",
        password=TEST_PASSWORD,
        full_name="Platform Owner",
        role=UserRole.SUPER_ADMIN,
    )
    await db_session.commit()
    return user


@pytest.fixture
async def school(db_session: AsyncSession, super_admin: User) -> School:
    return await SchoolService(db_session).create_school(
        SchoolCreate(name="Accra Academy", email="office@accra-academy.com"),
        created_by_id=super_admin.id,
    )


@pytest.fixture
async def other_school(db_session: AsyncSession, super_admin: User) -> School:
    return await SchoolService(db_session).create_school(
        SchoolCreate(name="Kumasi High", email="office@kumasi-high.com", currency="USD"),
        created_by_id=super_admin.id,
    )


@pytest.fixture
async def school_admin(db_session: AsyncSession, school: School, super_admin: User) -> User:
    link = await SchoolService(db_session).assign_admin(
        school.id,
        SchoolAdminAssign(
            email="bursar@accra-academy.com",
            password=TEST_PASSWORD,
            full_name="Ama Mensah",
        ),
        assigned_by_id=super_admin.id,
    )
    return link.user


@pytest.fixture
async def other_school_admin(
    db_session: AsyncSession, other_school: School, super_admin: User
) -> User:
    link = await SchoolService(db_session).assign_admin(
        other_school.id,
        SchoolAdminAssign(
            email="bursar@kumasi-high.com",
            password=TEST_PASSWORD,
            full_name="Kofi Boateng",
        ),
        assigned_by_id=super_admin.id,
    )
    return link.user


@pytest.fixture
def admin_headers(school_admin: User) -> dict[str, str]:
    return auth_headers(school_admin)


@pytest.fixture
async def student(db_session: AsyncSession, school: School, school_admin: User) -> Student:
    return await StudentService(db_session, school.id).create_student(
        StudentCreate(student_number="S1", first_name="Kwame", last_name="Asante"),
        created_by_id=school_admin.id,
    )


@pytest.fixture
async def other_student(
    db_session: AsyncSession, other_school: School, other_school_admin: User
) -> Student:
    return await StudentService(db_session, other_school.id).create_student(
        StudentCreate(student_number="K1", first_name="Yaw", last_name="Owusu"),
        created_by_id=other_school_admin.id,
    )
