import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.models import UserRole
from src.core.auth.service import AuthService
from src.core.exceptions import AuthenticationError, DuplicateError
from tests.conftest import auth_headers


class TestAuthService:
    """Tests for AuthService."""

    async def test_create_user(self, db_session: AsyncSession):
        """Test creating a new user."""
        auth_service = AuthService(db_session)

        user = await auth_service.create_user(
            email="test@school.com",
            password="Password123",
            full_name="Test User",
            role=UserRole.SCHOOL_ADMIN,
        )

        assert user.id is not None
        assert user.email == "test@school.com"
        assert user.full_name == "Test User"
        assert user.role == "SchoolAdmin"
        assert user.is_active is True
        assert user.password_hash != "Password123"  # Password should be hashed

    async def test_create_user_duplicate_email(self, db_session: AsyncSession):
        """Test that duplicate email raises error."""
        auth_service = AuthService(db_session)

        await auth_service.create_user(
            email="test@school.com",
            password="Password123",
            full_name="Test User",
            role=UserRole.SCHOOL_ADMIN,
        )

        with pytest.raises(DuplicateError) as exc_info:
            await auth_service.create_user(
                email="test@school.com",
                password="AnotherPass123",
                full_name="Another User",
                role=UserRole.SUPER_ADMIN,
            )

        assert "already exists" in str(exc_info.value)

    async def test_authenticate_success(self, db_session: AsyncSession):
        """Test successful authentication."""
        auth_service = AuthService(db_session)

        await auth_service.create_user(
            email="test@school.com",
            password="Password123",
            full_name="Test User",
            role=UserRole.SCHOOL_ADMIN,
        )

        user, access_token, refresh_token = await auth_service.authenticate(
            email="test@school.com",
            password="Password123",
        )

        assert user.email == "test@school.com"
        assert access_token is not None
        assert refresh_token is not None

    async def test_authenticate_wrong_password(self, db_session: AsyncSession):
        """Test authentication with wrong password."""
        auth_service = AuthService(db_session)

        await auth_service.create_user(
            email="test@school.com",
            password="Password123",
            full_name="Test User",
            role=UserRole.SCHOOL_ADMIN,
        )

        with pytest.raises(AuthenticationError):
            await auth_service.authenticate(
                email="test@school.com",
                password="WrongPassword",
            )

    async def test_authenticate_inactive_user(self, db_session: AsyncSession):
        """Test authentication with inactive user."""
        auth_service = AuthService(db_session)

        user = await auth_service.create_user(
            email="test@school.com",
            password="Password123",
            full_name="Test User",
            role=UserRole.SCHOOL_ADMIN,
        )
        user.is_active = False
        await db_session.flush()

        with pytest.raises(AuthenticationError) as exc_info:
            await auth_service.authenticate(
                email="test@school.com",
                password="Password123",
            )

        assert "deactivated" in str(exc_info.value)


class TestAuthEndpoints:
    """Tests for auth API endpoints."""

    async def test_login_success(self, client: AsyncClient, db_session: AsyncSession):
        """Test login endpoint."""
        # Create user first
        auth_service = AuthService(db_session)
        await auth_service.create_user(
            email="test@school.com",
            password="Password123",
            full_name="Test User",
            role=UserRole.SCHOOL_ADMIN,
        )
        await db_session.commit()

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "test@school.com", "password": "Password123"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert "accessToken" in data["data"]
        assert "refreshToken" in data["data"]
        assert data["data"]["user"]["email"] == "test@school.com"

    async def test_login_wrong_credentials(self, client: AsyncClient):
        """Test login with wrong credentials."""
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "wrong@school.com", "password": "WrongPass"},
        )

        assert response.status_code == 401

    async def test_get_me_unauthorized(self, client: AsyncClient):
        """Test /me endpoint without token."""
        response = await client.get("/api/v1/auth/me")
        assert response.status_code == 401

    async def test_get_me_authorized(self, client: AsyncClient, db_session: AsyncSession):
        """Test /me endpoint with valid token."""
        # Create user and login
        auth_service = AuthService(db_session)
        await auth_service.create_user(
            email="test@school.com",
            password="Password123",
            full_name="Test User",
            role=UserRole.SCHOOL_ADMIN,
        )
        await db_session.commit()

        login_response = await client.post(
            "/api/v1/auth/login",
            json={"email": "test@school.com", "password": "Password123"},
        )
        access_token = login_response.json()["data"]["accessToken"]

        # Get user info
        response = await client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {access_token}"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["data"]["email"] == "test@school.com"

    async def test_refresh_returns_new_tokens(self, client: AsyncClient, school_admin):
        """Test refreshing tokens with a refresh token."""
        login_response = await client.post(
            "/api/v1/auth/login",
            json={"email": "bursar@accra-academy.com", "password": "Password123"},
        )
        refresh_token = login_response.json()["data"]["refreshToken"]

        response = await client.post(
            "/api/v1/auth/refresh",
            json={"refreshToken": refresh_token},
        )

        assert response.status_code == 200
        assert response.json()["data"]["accessToken"]

    async def test_access_token_cannot_refresh(self, client: AsyncClient, school_admin):
        """Test that an access token is rejected by the refresh endpoint."""
        login_response = await client.post(
            "/api/v1/auth/login",
            json={"email": "bursar@accra-academy.com", "password": "Password123"},
        )
        access_token = login_response.json()["data"]["accessToken"]

        response = await client.post(
            "/api/v1/auth/refresh",
            json={"refreshToken": access_token},
        )

        assert response.status_code == 401

    async def test_malformed_authorization_header(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/auth/me", headers={"Authorization": "Token abc"}
        )
        assert response.status_code == 401
        assert response.json()["success"] is False

    async def test_login_ignores_email_case(self, client: AsyncClient, school_admin):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "Bursar@Accra-Academy.com", "password": "Password123"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "bursar@accra-academy.com"

    async def test_me_lists_school_of_school_admin(
        self, client: AsyncClient, school, school_admin, admin_headers
    ):
        response = await client.get("/api/v1/auth/me", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["schoolIds"] == [school.id]
        assert data["fullName"] == "Ama Mensah"

    async def test_me_super_admin_has_no_schools(self, client: AsyncClient, super_admin):
        response = await client.get("/api/v1/auth/me", headers=auth_headers(super_admin))

        assert response.status_code == 200
        assert response.json()["data"]["schoolIds"] == []
