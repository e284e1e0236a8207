"""Invoice and InvoiceLineItem models."""

from datetime import date
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel, SchoolScopedMixin


class InvoiceStatus(StrEnum):
    """Invoice status enumeration."""

    PENDING = "PENDING"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class Invoice(SchoolScopedMixin, BaseModel):
    """Invoice issued by a school to one of its students."""

    __tablename__ = "invoices"

    student_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("students.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    # Dates
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Amounts (Decimal with 2 decimal places)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0.00")
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InvoiceStatus.PENDING.value, index=True
    )

    # Metadata
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    term: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_by_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    student: Mapped["Student"] = relationship("Student")
    line_items: Mapped[list["InvoiceLineItem"]] = relationship(
        "InvoiceLineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.id",
    )

    __table_args__ = (
        UniqueConstraint("school_id", "invoice_number", name="uq_invoice_school_number"),
        CheckConstraint("due_date >= issue_date", name="ck_invoice_due_after_issue"),
    )

    @property
    def amount_due(self) -> Decimal:
        return self.total_amount - self.paid_amount


class InvoiceLineItem(BaseModel):
    """Single charge on an invoice; keeps its own description and price."""

    __tablename__ = "invoice_line_items"

    invoice_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    fee_structure_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("fee_structures.id", ondelete="SET NULL"), nullable=True, index=True
    )

    description: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)  # quantity * unit_price

    invoice: Mapped["Invoice"] = relationship("Invoice", back_populates="line_items")


# Resolve forward references used in relationships
from src.modules.students.models import Student  # noqa: E402, F401
