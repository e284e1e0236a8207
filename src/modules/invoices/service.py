"""Service for Invoices module."""

from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.audit.service import AuditAction, AuditService
from src.core.config import settings
from src.core.documents.number_generator import (
    DocumentNumberGenerator,
    format_period,
    parse_sequence,
)
from src.core.exceptions import ConflictError, ConstraintViolationError, NotFoundError
from src.core.exceptions.handlers import friendly_db_error
from src.core.logging import get_logger
from src.modules.invoices.models import Invoice, InvoiceLineItem, InvoiceStatus
from src.modules.invoices.references import ReferenceChecker
from src.modules.invoices.schemas import InvoiceCreate, InvoiceFilters
from src.modules.invoices.totals import compute_totals
from src.modules.schools.models import School
from src.shared.utils.money import ZERO

logger = get_logger(__name__)


class InvoiceService:
    """Service for generating and reading the invoices of one school."""

    def __init__(self, db: AsyncSession, school_id: int):
        self.db = db
        self.school_id = school_id
        self.audit = AuditService(db, school_id=school_id)
        self.references = ReferenceChecker(db)

    async def _highest_issued_sequence(self, prefix: str, period: str) -> int:
        """Largest sequence already used by this school's invoices in the period."""
        result = await self.db.execute(
            select(Invoice.invoice_number)
            .where(
                Invoice.school_id == self.school_id,
                Invoice.invoice_number.like(f"{prefix}-{period}-%"),
            )
            .order_by(Invoice.invoice_number.desc())
            .limit(1)
        )
        latest = result.scalar_one_or_none()
        if latest is None:
            return 0
        return parse_sequence(latest, prefix, period) or 0

    async def _next_invoice_number(self, period: str) -> str:
        prefix = settings.invoice_number_prefix
        floor = await self._highest_issued_sequence(prefix, period)
        generator = DocumentNumberGenerator(self.db)
        return await generator.generate(prefix, self.school_id, period=period, floor=floor)

    async def _write_invoice(
        self, data: InvoiceCreate, created_by_id: int | None, period: str
    ) -> Invoice:
        """One attempt: check references, number, write header, lines and audit."""
        student = await self.references.check(
            self.school_id,
            data.student_id,
            [line.fee_structure_id for line in data.line_items],
        )

        line_amounts, total_amount = compute_totals(
            (line.quantity, line.unit_price) for line in data.line_items
        )
        invoice_number = await self._next_invoice_number(period)

        invoice = Invoice(
            school_id=self.school_id,
            student_id=student.id,
            invoice_number=invoice_number,
            issue_date=data.issue_date,
            due_date=data.due_date,
            total_amount=total_amount,
            paid_amount=ZERO,
            status=InvoiceStatus.PENDING.value,
            notes=data.notes,
            academic_year=data.academic_year,
            term=data.term.value,
            created_by_id=created_by_id,
        )
        invoice.line_items = [
            InvoiceLineItem(
                fee_structure_id=line.fee_structure_id,
                description=line.description,
                quantity=line.quantity,
                unit_price=line.unit_price,
                amount=amount,
            )
            for line, amount in zip(data.line_items, line_amounts)
        ]
        self.db.add(invoice)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE_INVOICE,
            entity_type="Invoice",
            entity_id=invoice.id,
            user_id=created_by_id,
            entity_identifier=invoice_number,
            new_values={
                "invoice_number": invoice_number,
                "student_id": student.id,
                "total_amount": str(total_amount),
                "line_count": len(line_amounts),
            },
        )
        return invoice

    async def create_invoice(
        self,
        data: InvoiceCreate,
        created_by_id: int | None,
        as_of: date | None = None,
    ) -> Invoice:
        """
        Generate an invoice with its line items in a single transaction.

        The invoice number period comes from ``as_of`` (today by default).
        A number collision rolls back the whole attempt and retries with a
        fresh number, up to ``settings.invoice_number_max_attempts`` times.

        Raises:
            ReferenceNotFoundError: Student or fee structure not in this school
            ConflictError: Invoice number still colliding after all attempts
            ConstraintViolationError: A referenced row vanished mid-write
        """
        period = format_period(as_of or date.today())
        attempts = settings.invoice_number_max_attempts

        for attempt in range(1, attempts + 1):
            try:
                invoice = await self._write_invoice(data, created_by_id, period)
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                message, field, status_code = friendly_db_error(e)
                if status_code != 409:
                    logger.warning("invoice_write_rejected", school_id=self.school_id, error=str(e.orig))
                    raise ConstraintViolationError(message, field=field) from e
                logger.warning(
                    "invoice_number_conflict",
                    school_id=self.school_id,
                    period=period,
                    attempt=attempt,
                )
                continue

            logger.info(
                "invoice_created",
                school_id=self.school_id,
                invoice_id=invoice.id,
                invoice_number=invoice.invoice_number,
                total_amount=str(invoice.total_amount),
            )
            return await self.get_invoice(invoice.id)

        raise ConflictError(
            "Could not allocate a unique invoice number, please try again.",
            field="invoiceNumber",
        )

    async def get_invoice(self, invoice_id: int) -> Invoice:
        """Get an invoice of this school with lines and student loaded."""
        result = await self.db.execute(
            select(Invoice)
            .where(Invoice.id == invoice_id, Invoice.school_id == self.school_id)
            .options(selectinload(Invoice.line_items), selectinload(Invoice.student))
            .execution_options(populate_existing=True)
        )
        invoice = result.scalar_one_or_none()
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    async def list_invoices(self, filters: InvoiceFilters | None = None) -> list[Invoice]:
        """List invoices of this school, newest issue date first."""
        filters = filters or InvoiceFilters()
        query = (
            select(Invoice)
            .where(Invoice.school_id == self.school_id)
            .options(selectinload(Invoice.line_items), selectinload(Invoice.student))
            .order_by(Invoice.issue_date.desc(), Invoice.id.desc())
            .execution_options(populate_existing=True)
        )

        if filters.student_id is not None:
            query = query.where(Invoice.student_id == filters.student_id)
        if filters.status is not None:
            query = query.where(Invoice.status == filters.status.value)
        if filters.academic_year:
            query = query.where(Invoice.academic_year == filters.academic_year)
        if filters.term is not None:
            query = query.where(Invoice.term == filters.term.value)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_currency(self) -> str:
        """Currency code amounts of this school are displayed in."""
        result = await self.db.execute(select(School.currency).where(School.id == self.school_id))
        return result.scalar_one_or_none() or settings.default_currency
