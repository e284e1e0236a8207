"""Service for Fee Structures module."""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.service import AuditAction, AuditService
from src.core.exceptions import DuplicateError, NotFoundError, ValidationError
from src.modules.fee_structures.models import FeeStructure, TermPeriod
from src.modules.fee_structures.schemas import FeeStructureCreate, FeeStructureUpdate
from src.modules.invoices.models import InvoiceLineItem


def _snapshot(fee: FeeStructure) -> dict:
    return {
        "name": fee.name,
        "amount": str(fee.amount),
        "academic_year": fee.academic_year,
        "term": fee.term,
        "frequency": fee.frequency,
    }


class FeeStructureService:
    """Service for managing the fee catalogue of one school."""

    def __init__(self, db: AsyncSession, school_id: int):
        self.db = db
        self.school_id = school_id
        self.audit = AuditService(db, school_id=school_id)

    async def _ensure_unique(
        self,
        name: str,
        academic_year: str,
        term: str | None,
        exclude_id: int | None = None,
    ) -> None:
        # NULL terms never collide in a unique index, so compare them explicitly
        term_clause = FeeStructure.term.is_(None) if term is None else FeeStructure.term == term
        query = select(FeeStructure.id).where(
            FeeStructure.school_id == self.school_id,
            FeeStructure.name == name,
            FeeStructure.academic_year == academic_year,
            term_clause,
        )
        if exclude_id is not None:
            query = query.where(FeeStructure.id != exclude_id)
        result = await self.db.execute(query)
        if result.scalar_one_or_none():
            raise DuplicateError("Fee structure", "name", name)

    async def create_fee_structure(
        self, data: FeeStructureCreate, created_by_id: int
    ) -> FeeStructure:
        """Create a fee structure."""
        term = data.term.value if data.term else None
        await self._ensure_unique(data.name, data.academic_year, term)

        fee = FeeStructure(
            school_id=self.school_id,
            name=data.name,
            description=data.description,
            amount=data.amount,
            academic_year=data.academic_year,
            term=term,
            frequency=data.frequency,
        )
        self.db.add(fee)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="FeeStructure",
            entity_id=fee.id,
            user_id=created_by_id,
            entity_identifier=fee.name,
            new_values=_snapshot(fee),
        )

        await self.db.commit()
        await self.db.refresh(fee)
        return fee

    async def get_fee_structure_by_id(self, fee_structure_id: int) -> FeeStructure:
        """Get a fee structure of this school."""
        result = await self.db.execute(
            select(FeeStructure).where(
                FeeStructure.id == fee_structure_id,
                FeeStructure.school_id == self.school_id,
            )
        )
        fee = result.scalar_one_or_none()
        if not fee:
            raise NotFoundError("Fee structure", fee_structure_id)
        return fee

    async def list_fee_structures(
        self,
        academic_year: str | None = None,
        term: TermPeriod | None = None,
    ) -> list[FeeStructure]:
        """List fee structures, newest academic year first."""
        query = (
            select(FeeStructure)
            .where(FeeStructure.school_id == self.school_id)
            .order_by(
                FeeStructure.academic_year.desc(),
                FeeStructure.term,
                FeeStructure.name,
                FeeStructure.id,
            )
        )
        if academic_year:
            query = query.where(FeeStructure.academic_year == academic_year)
        if term is not None:
            query = query.where(FeeStructure.term == term.value)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update_fee_structure(
        self, fee_structure_id: int, data: FeeStructureUpdate, updated_by_id: int
    ) -> FeeStructure:
        """Apply only the fields present in the payload."""
        changes = data.changes()
        if not changes:
            raise ValidationError("No fields to update")

        fee = await self.get_fee_structure_by_id(fee_structure_id)
        old_values = _snapshot(fee)

        if "term" in changes and changes["term"] is not None:
            changes["term"] = TermPeriod(changes["term"]).value

        name = changes.get("name", fee.name)
        academic_year = changes.get("academic_year", fee.academic_year)
        term = changes["term"] if "term" in changes else fee.term
        if (name, academic_year, term) != (fee.name, fee.academic_year, fee.term):
            await self._ensure_unique(name, academic_year, term, exclude_id=fee.id)

        for field, value in changes.items():
            setattr(fee, field, value)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.UPDATE,
            entity_type="FeeStructure",
            entity_id=fee.id,
            user_id=updated_by_id,
            entity_identifier=fee.name,
            old_values=old_values,
            new_values=_snapshot(fee),
        )

        await self.db.commit()
        await self.db.refresh(fee)
        return fee

    async def delete_fee_structure(self, fee_structure_id: int, deleted_by_id: int) -> None:
        """
        Delete a fee structure.

        Invoice lines that referenced it keep their description and amounts
        and lose only the link.
        """
        fee = await self.get_fee_structure_by_id(fee_structure_id)
        old_values = _snapshot(fee)

        await self.db.execute(
            update(InvoiceLineItem)
            .where(InvoiceLineItem.fee_structure_id == fee.id)
            .values(fee_structure_id=None)
        )
        await self.db.delete(fee)

        await self.audit.log(
            action=AuditAction.DELETE,
            entity_type="FeeStructure",
            entity_id=fee_structure_id,
            user_id=deleted_by_id,
            entity_identifier=old_values["name"],
            old_values=old_values,
        )

        await self.db.commit()
