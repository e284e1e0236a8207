from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import DuplicateError, NotFoundError, ValidationError
from src.modules.fee_structures.models import TermPeriod
from src.modules.fee_structures.schemas import FeeStructureCreate, FeeStructureUpdate
from src.modules.fee_structures.service import FeeStructureService
from src.modules.invoices.models import InvoiceLineItem
from src.modules.invoices.schemas import InvoiceCreate
from src.modules.invoices.service import InvoiceService


def _tuition(**overrides) -> FeeStructureCreate:
    payload = {
        "name": "Tuition",
        "amount": "500.00",
        "academicYear": "2024-2025",
        "term": "FIRST_TERM",
        "frequency": "Termly",
    }
    payload.update(overrides)
    return FeeStructureCreate.model_validate(payload)


class TestFeeStructureSchemas:
    def test_amount_from_float_is_exact(self):
        assert _tuition(amount=33.33).amount == Decimal("33.33")

    def test_blank_term_means_not_term_specific(self):
        assert _tuition(term="").term is None

    @pytest.mark.parametrize("amount", [0, -5, "abc", "1e30", "100000000.00"])
    def test_amount_must_be_positive_number(self, amount):
        with pytest.raises(PydanticValidationError):
            _tuition(amount=amount)

    def test_academic_year_must_be_consecutive(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            _tuition(academicYear="2024-2026")
        assert exc_info.value.errors()[0]["loc"] == ("academicYear",)

    def test_update_tracks_only_sent_fields(self):
        update = FeeStructureUpdate.model_validate({"amount": "650.00"})
        assert update.changes() == {"amount": Decimal("650.00")}

    def test_update_can_clear_term(self):
        update = FeeStructureUpdate.model_validate({"term": None})
        assert update.changes() == {"term": None}

    def test_update_cannot_clear_required_field(self):
        with pytest.raises(PydanticValidationError):
            FeeStructureUpdate.model_validate({"name": None})


class TestFeeStructureService:
    async def test_create(self, db_session: AsyncSession, school, school_admin):
        fee = await FeeStructureService(db_session, school.id).create_fee_structure(
            _tuition(), school_admin.id
        )

        assert fee.id is not None
        assert fee.school_id == school.id
        assert fee.amount == Decimal("500.00")
        assert fee.term == TermPeriod.FIRST_TERM.value

    async def test_duplicate_name_year_term(self, db_session: AsyncSession, school, school_admin):
        service = FeeStructureService(db_session, school.id)
        await service.create_fee_structure(_tuition(), school_admin.id)

        with pytest.raises(DuplicateError):
            await service.create_fee_structure(_tuition(amount="600"), school_admin.id)

    async def test_duplicate_without_term(self, db_session: AsyncSession, school, school_admin):
        service = FeeStructureService(db_session, school.id)
        await service.create_fee_structure(_tuition(term=None, name="Uniform"), school_admin.id)

        with pytest.raises(DuplicateError):
            await service.create_fee_structure(_tuition(term=None, name="Uniform"), school_admin.id)

    async def test_same_name_in_other_term_is_allowed(
        self, db_session: AsyncSession, school, school_admin
    ):
        service = FeeStructureService(db_session, school.id)
        await service.create_fee_structure(_tuition(), school_admin.id)
        second = await service.create_fee_structure(_tuition(term="SECOND_TERM"), school_admin.id)

        assert second.term == "SECOND_TERM"

    async def test_list_order_and_filters(self, db_session: AsyncSession, school, school_admin):
        service = FeeStructureService(db_session, school.id)
        await service.create_fee_structure(_tuition(academicYear="2023-2024"), school_admin.id)
        await service.create_fee_structure(_tuition(term="SECOND_TERM"), school_admin.id)
        await service.create_fee_structure(_tuition(name="Books"), school_admin.id)

        everything = await service.list_fee_structures()
        this_year = await service.list_fee_structures(academic_year="2024-2025")
        first_term = await service.list_fee_structures(term=TermPeriod.FIRST_TERM)

        assert [(f.academic_year, f.term, f.name) for f in everything] == [
            ("2024-2025", "FIRST_TERM", "Books"),
            ("2024-2025", "FIRST_TERM", "Tuition"),
            ("2024-2025", "SECOND_TERM", "Tuition"),
            ("2023-2024", "FIRST_TERM", "Tuition"),
        ]
        assert len(this_year) == 3
        assert {f.academic_year for f in first_term} == {"2024-2025", "2023-2024"}

    async def test_partial_update(self, db_session: AsyncSession, school, school_admin):
        service = FeeStructureService(db_session, school.id)
        fee = await service.create_fee_structure(
            _tuition(description="Core tuition"), school_admin.id
        )

        updated = await service.update_fee_structure(
            fee.id,
            FeeStructureUpdate.model_validate({"amount": "650.00"}),
            school_admin.id,
        )

        assert updated.amount == Decimal("650.00")
        assert updated.name == "Tuition"
        assert updated.description == "Core tuition"

    async def test_empty_update_rejected(self, db_session: AsyncSession, school, school_admin):
        service = FeeStructureService(db_session, school.id)
        fee = await service.create_fee_structure(_tuition(), school_admin.id)

        with pytest.raises(ValidationError):
            await service.update_fee_structure(fee.id, FeeStructureUpdate(), school_admin.id)

    async def test_update_into_existing_combination(
        self, db_session: AsyncSession, school, school_admin
    ):
        service = FeeStructureService(db_session, school.id)
        await service.create_fee_structure(_tuition(), school_admin.id)
        books = await service.create_fee_structure(_tuition(name="Books"), school_admin.id)

        with pytest.raises(DuplicateError):
            await service.update_fee_structure(
                books.id, FeeStructureUpdate(name="Tuition"), school_admin.id
            )

    async def test_other_school_cannot_see(
        self, db_session: AsyncSession, school, school_admin, other_school
    ):
        fee = await FeeStructureService(db_session, school.id).create_fee_structure(
            _tuition(), school_admin.id
        )

        with pytest.raises(NotFoundError):
            await FeeStructureService(db_session, other_school.id).get_fee_structure_by_id(fee.id)

    async def test_delete_keeps_invoice_lines(
        self, db_session: AsyncSession, school, school_admin, student
    ):
        fees = FeeStructureService(db_session, school.id)
        fee = await fees.create_fee_structure(_tuition(), school_admin.id)
        invoice = await InvoiceService(db_session, school.id).create_invoice(
            InvoiceCreate.model_validate(
                {
                    "studentId": student.id,
                    "academicYear": "2024-2025",
                    "term": "FIRST_TERM",
                    "issueDate": "2024-09-01",
                    "dueDate": "2024-09-30",
                    "lineItems": [
                        {"feeStructureId": fee.id, "description": "Tuition", "unitPrice": "500.00"}
                    ],
                }
            ),
            school_admin.id,
            as_of=date(2024, 9, 1),
        )

        await fees.delete_fee_structure(fee.id, school_admin.id)

        result = await db_session.execute(
            select(InvoiceLineItem).where(InvoiceLineItem.invoice_id == invoice.id)
        )
        line = result.scalar_one()
        await db_session.refresh(line)
        assert line.fee_structure_id is None
        assert line.description == "Tuition"
        assert line.amount == Decimal("500.00")

        with pytest.raises(NotFoundError):
            await fees.get_fee_structure_by_id(fee.id)


class TestFeeStructureEndpoints:
    async def test_create_and_get(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/v1/fee-structures",
            json={
                "name": "Tuition",
                "amount": 500,
                "academicYear": "2024-2025",
                "term": "FIRST_TERM",
                "frequency": "Termly",
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        created = response.json()["data"]
        assert created["academicYear"] == "2024-2025"
        assert Decimal(created["amount"]) == Decimal("500.00")

        response = await client.get(
            f"/api/v1/fee-structures/{created['id']}", headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Tuition"

    async def test_validation_errors_are_grouped(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/v1/fee-structures",
            json={"name": "Tu", "amount": -1, "academicYear": "2024-2026", "frequency": "Termly"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        field_errors = response.json()["field_errors"]
        assert set(field_errors) == {"name", "amount", "academicYear"}

    async def test_patch_and_delete(self, client: AsyncClient, admin_headers):
        created = (
            await client.post(
                "/api/v1/fee-structures",
                json={
                    "name": "Bus",
                    "amount": "120.00",
                    "academicYear": "2024-2025",
                    "frequency": "Termly",
                },
                headers=admin_headers,
            )
        ).json()["data"]

        response = await client.patch(
            f"/api/v1/fee-structures/{created['id']}",
            json={"frequency": "Monthly"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["frequency"] == "Monthly"
        assert response.json()["data"]["amount"] == "120.00"

        response = await client.patch(
            f"/api/v1/fee-structures/{created['id']}", json={}, headers=admin_headers
        )
        assert response.status_code == 400

        response = await client.delete(
            f"/api/v1/fee-structures/{created['id']}", headers=admin_headers
        )
        assert response.status_code == 200

        response = await client.get(
            f"/api/v1/fee-structures/{created['id']}", headers=admin_headers
        )
        assert response.status_code == 404

    async def test_list_filter_by_academic_year(self, client: AsyncClient, admin_headers):
        for year in ("2023-2024", "2024-2025"):
            await client.post(
                "/api/v1/fee-structures",
                json={"name": "Tuition", "amount": 500, "academicYear": year, "frequency": "Termly"},
                headers=admin_headers,
            )

        response = await client.get(
            "/api/v1/fee-structures",
            params={"academicYear": "2024-2025"},
            headers=admin_headers,
        )

        assert [f["academicYear"] for f in response.json()["data"]] == ["2024-2025"]
