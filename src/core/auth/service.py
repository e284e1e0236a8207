from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.jwt import create_access_token, create_refresh_token, decode_token
from src.core.auth.models import User, UserRole
from src.core.auth.password import hash_password, verify_and_update
from src.core.audit import AuditAction, create_audit_log
from src.core.exceptions import AuthenticationError, DuplicateError
from src.core.logging import get_logger

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Accounts of super admins and school admins, and token issuing."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email, ignoring case."""
        stmt = select(User).where(func.lower(User.email) == normalize_email(email))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: int) -> User | None:
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_user(
        self,
        email: str,
        password: str,
        full_name: str,
        role: UserRole,
        phone: str | None = None,
        created_by_id: int | None = None,
    ) -> User:
        """Create an account; emails are unique regardless of case."""
        email = normalize_email(email)
        if await self.get_user_by_email(email):
            raise DuplicateError("User", "email", email)

        user = User(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name.strip(),
            phone=phone,
            role=role.value,
            is_active=True,
        )
        self.session.add(user)
        await self.session.flush()

        await create_audit_log(
            session=self.session,
            action=AuditAction.CREATE,
            entity_type="User",
            entity_id=user.id,
            user_id=created_by_id,
            entity_identifier=user.email,
            new_values={"email": user.email, "role": user.role, "full_name": user.full_name},
        )
        logger.info("user_created", user_id=user.id, role=user.role)

        return user

    async def authenticate(
        self, email: str, password: str, ip_address: str | None = None
    ) -> tuple[User, str, str]:
        """
        Authenticate user and return tokens.

        A password stored under an outdated hash scheme is re-hashed on the
        way through.

        Returns:
            Tuple of (user, access_token, refresh_token)

        Raises:
            AuthenticationError: If credentials are invalid or the account is deactivated
        """
        user = await self.get_user_by_email(email)
        valid, new_hash = (False, None)
        if user:
            valid, new_hash = verify_and_update(password, user.password_hash)

        if not user or not valid:
            logger.info("login_failed", email=normalize_email(email), ip_address=ip_address)
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            logger.info("login_rejected_inactive", user_id=user.id)
            raise AuthenticationError("User account is deactivated")

        if new_hash:
            user.password_hash = new_hash
        user.last_login_at = datetime.now(timezone.utc)
        await self.session.flush()

        await create_audit_log(
            session=self.session,
            action=AuditAction.LOGIN,
            entity_type="User",
            entity_id=user.id,
            user_id=user.id,
            entity_identifier=user.email,
            ip_address=ip_address,
        )

        return user, create_access_token(user.id, user.role), create_refresh_token(user.id)

    async def refresh_tokens(self, refresh_token: str) -> tuple[str, str]:
        """
        Exchange a refresh token for a new token pair.

        Raises:
            AuthenticationError: If the token is invalid or the account is gone or deactivated
        """
        payload = decode_token(refresh_token, token_type="refresh")
        user = await self.get_user_by_id(int(payload["sub"]))

        if not user:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("User account is deactivated")

        return create_access_token(user.id, user.role), create_refresh_token(user.id)
