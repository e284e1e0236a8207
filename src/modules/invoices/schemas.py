"""Schemas for Invoices module."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from src.modules.fee_structures.models import TermPeriod
from src.modules.invoices.models import InvoiceStatus
from src.modules.invoices.totals import compute_totals, line_amount
from src.shared.schemas import CamelSchema, TimestampMixin
from src.shared.utils.academic_year import validate_academic_year
from src.shared.utils.money import MONEY_MAX, round_money, to_decimal

MAX_QUANTITY = 100_000


def _blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


# --- Invoice Line Item Schemas ---


class InvoiceLineItemCreate(CamelSchema):
    """Schema for one line of a new invoice."""

    fee_structure_id: int | None = None
    description: str = Field(..., max_length=500)
    quantity: int = 1
    unit_price: Decimal

    @field_validator("fee_structure_id", mode="before")
    @classmethod
    def blank_reference(cls, v):
        return None if _blank(v) else v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Description is required.")
        return v

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, v):
        if _blank(v):
            return 1
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("quantity")
    @classmethod
    def positive_quantity(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be a positive whole number.")
        if v > MAX_QUANTITY:
            raise ValueError(f"Quantity cannot exceed {MAX_QUANTITY:,}.")
        return v

    @field_validator("unit_price", mode="before")
    @classmethod
    def coerce_unit_price(cls, v):
        if _blank(v):
            raise ValueError("Unit price is required.")
        try:
            return to_decimal(v)
        except ValueError:
            raise ValueError("Unit price must be a number.")

    @field_validator("unit_price")
    @classmethod
    def positive_unit_price(cls, v: Decimal, info: ValidationInfo) -> Decimal:
        if v <= 0:
            raise ValueError("Unit price must be positive.")
        if v > MONEY_MAX:
            raise ValueError(f"Unit price cannot exceed {MONEY_MAX:,}.")
        if v != round_money(v):
            raise ValueError("Unit price cannot have more than 2 decimal places.")
        quantity = info.data.get("quantity")
        if quantity is not None and line_amount(quantity, v) > MONEY_MAX:
            raise ValueError(f"Line amount (quantity x unit price) cannot exceed {MONEY_MAX:,}.")
        return v


class InvoiceLineItemResponse(CamelSchema):
    """Schema for invoice line item response."""

    id: int
    fee_structure_id: int | None
    description: str
    quantity: int
    unit_price: Decimal
    amount: Decimal


# --- Invoice Schemas ---


class InvoiceCreate(CamelSchema):
    """Schema for generating an invoice.

    Every violation is reported at once; ``dueDate`` before ``issueDate`` is
    reported on ``dueDate``.
    """

    student_id: int
    academic_year: str
    term: TermPeriod
    issue_date: date
    due_date: date
    notes: str | None = None
    line_items: list[InvoiceLineItemCreate]

    @field_validator("academic_year")
    @classmethod
    def check_academic_year(cls, v: str) -> str:
        return validate_academic_year(v)

    @field_validator("issue_date", "due_date", mode="before")
    @classmethod
    def timestamp_to_date(cls, v):
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and ("T" in v or " " in v.strip()):
            try:
                return datetime.fromisoformat(v.strip()).date()
            except ValueError:
                return v
        return v

    @field_validator("due_date")
    @classmethod
    def due_after_issue(cls, v: date, info: ValidationInfo) -> date:
        issue_date = info.data.get("issue_date")
        if issue_date is not None and v < issue_date:
            raise ValueError("Due date must be on or after the issue date.")
        return v

    @field_validator("notes", mode="before")
    @classmethod
    def blank_notes(cls, v):
        if _blank(v):
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("line_items")
    @classmethod
    def check_line_items(cls, v: list[InvoiceLineItemCreate]) -> list[InvoiceLineItemCreate]:
        if not v:
            raise ValueError("At least one line item is required.")
        _, total = compute_totals((line.quantity, line.unit_price) for line in v)
        if total > MONEY_MAX:
            raise ValueError(f"Invoice total cannot exceed {MONEY_MAX:,}.")
        return v


class InvoiceStudent(CamelSchema):
    """Minimal projection of the billed student."""

    id: int
    student_number: str
    first_name: str
    last_name: str
    full_name: str


class StatusBadge(CamelSchema):
    label: str
    style: str


class InvoiceLineItemDisplay(CamelSchema):
    description: str
    unit_price: str
    amount: str


class InvoiceDisplay(CamelSchema):
    """Display-ready values for list and detail views."""

    total_amount: str
    paid_amount: str
    amount_due: str
    issue_date: str
    due_date: str
    status: StatusBadge
    line_items: list[InvoiceLineItemDisplay] = Field(default_factory=list)


class InvoiceResponse(TimestampMixin):
    """Schema for invoice response."""

    id: int
    school_id: int
    invoice_number: str
    student_id: int
    student: InvoiceStudent | None = None
    academic_year: str
    term: str | None
    issue_date: date
    due_date: date
    total_amount: Decimal
    paid_amount: Decimal
    amount_due: Decimal
    status: str
    notes: str | None
    created_by_id: int | None
    line_items: list[InvoiceLineItemResponse] = Field(default_factory=list)
    display: InvoiceDisplay | None = None


# --- Filters ---


class InvoiceFilters(BaseModel):
    """Filters for listing invoices."""

    student_id: int | None = None
    status: InvoiceStatus | None = None
    academic_year: str | None = None
    term: TermPeriod | None = None
