from enum import StrEnum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.models import AuditLog


class AuditAction(StrEnum):
    """Standard audit actions."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"

    # Domain-specific actions
    ASSIGN_SCHOOL_ADMIN = "ASSIGN_SCHOOL_ADMIN"
    CREATE_INVOICE = "CREATE_INVOICE"


class AuditService:
    """Service for creating audit logs bound to one school."""

    def __init__(self, db: AsyncSession, school_id: int | None = None):
        self.db = db
        self.school_id = school_id

    async def log(
        self,
        action: str | AuditAction,
        entity_type: str,
        entity_id: int,
        user_id: int | None = None,
        entity_identifier: str | None = None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Create an audit log entry."""
        return await create_audit_log(
            session=self.db,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            school_id=self.school_id,
            user_id=user_id,
            entity_identifier=entity_identifier,
            old_values=old_values,
            new_values=new_values,
        )


async def create_audit_log(
    session: AsyncSession,
    action: str | AuditAction,
    entity_type: str,
    entity_id: int,
    school_id: int | None = None,
    user_id: int | None = None,
    entity_identifier: str | None = None,
    old_values: dict[str, Any] | None = None,
    new_values: dict[str, Any] | None = None,
    ip_address: str | None = None,
) -> AuditLog:
    """
    Create an audit log entry.

    Args:
        session: Database session
        action: Action performed (e.g., CREATE, UPDATE, CREATE_INVOICE)
        entity_type: Type of entity (e.g., Student, Invoice, FeeStructure)
        entity_id: ID of the entity
        school_id: School the change belongs to (None for platform-level changes)
        user_id: ID of the user who performed the action
        entity_identifier: Human-readable identifier (e.g., invoice number)
        old_values: State before change
        new_values: State after change
        ip_address: Client IP address

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        school_id=school_id,
        user_id=user_id,
        action=str(action),
        entity_type=entity_type,
        entity_id=entity_id,
        entity_identifier=entity_identifier,
        old_values=old_values,
        new_values=new_values,
        ip_address=ip_address,
    )

    session.add(audit_log)
    await session.flush()

    return audit_log
