"""API endpoints for Invoices module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import SchoolAdminUser
from src.core.database.session import get_db
from src.modules.fee_structures.models import TermPeriod
from src.modules.invoices.models import Invoice, InvoiceStatus
from src.modules.invoices.presenters import present_invoice
from src.modules.invoices.schemas import (
    InvoiceCreate,
    InvoiceFilters,
    InvoiceResponse,
)
from src.modules.invoices.service import InvoiceService
from src.modules.schools.tenancy import CurrentSchoolId
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def _invoice_to_response(invoice: Invoice, currency: str) -> InvoiceResponse:
    """Convert Invoice model to response schema with its display block."""
    response = InvoiceResponse.model_validate(invoice)
    response.display = present_invoice(invoice, currency)
    return response


@router.post(
    "",
    response_model=ApiResponse[InvoiceResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    data: InvoiceCreate,
    school_id: CurrentSchoolId,
    current_user: SchoolAdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Generate an invoice for a student of the admin's school."""
    created_by_id = current_user.id
    service = InvoiceService(db, school_id)
    invoice = await service.create_invoice(data, created_by_id)
    currency = await service.get_currency()
    return ApiResponse(
        success=True,
        message="Invoice created successfully",
        data=_invoice_to_response(invoice, currency),
    )


@router.get(
    "",
    response_model=ApiResponse[list[InvoiceResponse]],
)
async def list_invoices(
    school_id: CurrentSchoolId,
    student_id: int | None = Query(None, alias="studentId"),
    invoice_status: InvoiceStatus | None = Query(None, alias="status"),
    academic_year: str | None = Query(None, alias="academicYear"),
    term: TermPeriod | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List invoices of the admin's school, newest issue date first."""
    service = InvoiceService(db, school_id)
    filters = InvoiceFilters(
        student_id=student_id,
        status=invoice_status,
        academic_year=academic_year,
        term=term,
    )
    invoices = await service.list_invoices(filters)
    currency = await service.get_currency()
    return ApiResponse(
        success=True,
        data=[_invoice_to_response(invoice, currency) for invoice in invoices],
    )


@router.get(
    "/{invoice_id}",
    response_model=ApiResponse[InvoiceResponse],
)
async def get_invoice(
    invoice_id: int,
    school_id: CurrentSchoolId,
    db: AsyncSession = Depends(get_db),
):
    """Get invoice by ID."""
    service = InvoiceService(db, school_id)
    invoice = await service.get_invoice(invoice_id)
    currency = await service.get_currency()
    return ApiResponse(success=True, data=_invoice_to_response(invoice, currency))
