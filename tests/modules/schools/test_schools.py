import pytest
from httpx import AsyncClient
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.models import UserRole
from src.core.auth.service import AuthService
from src.core.exceptions import DuplicateError, NotAssociatedError, ValidationError
from src.modules.schools.schemas import SchoolCreate, SchoolSettingsUpdate, SchoolUpdate
from src.modules.schools.service import SchoolService
from src.modules.schools.tenancy import TenantResolver
from tests.conftest import TEST_PASSWORD, auth_headers


class TestSchoolService:
    async def test_create_school(self, db_session: AsyncSession, super_admin):
        school = await SchoolService(db_session).create_school(
            SchoolCreate(name="Tema International", email="info@tema.com", currency="ghs"),
            created_by_id=super_admin.id,
        )

        assert school.id is not None
        assert school.currency == "GHS"
        assert school.is_active is True

    async def test_duplicate_email(self, db_session: AsyncSession, school, super_admin):
        with pytest.raises(DuplicateError):
            await SchoolService(db_session).create_school(
                SchoolCreate(name="Copy", email="office@accra-academy.com"),
                created_by_id=super_admin.id,
            )

    async def test_assign_admin_creates_school_admin_user(self, school_admin, school):
        assert school_admin.role == UserRole.SCHOOL_ADMIN.value
        assert school_admin.email == "bursar@accra-academy.com"


    async def test_update_applies_only_sent_fields(
        self, db_session: AsyncSession, school, super_admin
    ):
        updated = await SchoolService(db_session).update_school(
            school.id,
            SchoolUpdate.model_validate({"currency": "usd", "currentAcademicYear": "2024-2025"}),
            updated_by_id=super_admin.id,
        )

        assert updated.currency == "USD"
        assert updated.current_academic_year == "2024-2025"
        assert updated.name == "Accra Academy"
        assert updated.is_active is True

    async def test_update_to_taken_email(
        self, db_session: AsyncSession, school, other_school, super_admin
    ):
        with pytest.raises(DuplicateError):
            await SchoolService(db_session).update_school(
                school.id,
                SchoolUpdate(email="office@kumasi-high.com"),
                updated_by_id=super_admin.id,
            )

    async def test_empty_update_rejected(self, db_session: AsyncSession, school, super_admin):
        with pytest.raises(ValidationError):
            await SchoolService(db_session).update_school(
                school.id, SchoolUpdate(), updated_by_id=super_admin.id
            )


class TestSchoolUpdateSchemas:
    def test_blank_optional_fields_are_cleared(self):
        update = SchoolSettingsUpdate.model_validate(
            {"address": "", "currentAcademicYear": "", "currentTerm": ""}
        )
        assert update.changes() == {
            "address": None,
            "current_academic_year": None,
            "current_term": None,
        }

    def test_academic_year_must_be_consecutive(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            SchoolSettingsUpdate.model_validate({"currentAcademicYear": "2024-2026"})
        assert exc_info.value.errors()[0]["loc"] == ("currentAcademicYear",)

    @pytest.mark.parametrize("currency", ["GH", "1234", "G$S", None])
    def test_invalid_currency(self, currency):
        with pytest.raises(PydanticValidationError):
            SchoolSettingsUpdate.model_validate({"currency": currency})

    def test_required_fields_cannot_be_cleared(self):
        with pytest.raises(PydanticValidationError):
            SchoolUpdate.model_validate({"name": None, "isActive": None})

    def test_settings_ignore_status(self):
        assert SchoolSettingsUpdate.model_validate({"isActive": False}).changes() == {}


class TestTenantResolver:
    async def test_resolves_linked_school(self, db_session: AsyncSession, school, school_admin):
        school_id = await TenantResolver(db_session).resolve_school_id(school_admin)
        assert school_id == school.id

    async def test_unlinked_admin_is_not_associated(self, db_session: AsyncSession):
        user = await AuthService(db_session).create_user(
            email="floating@admin.com",
            password=TEST_PASSWORD,
            full_name="No School",
            role=UserRole.SCHOOL_ADMIN,
        )

        with pytest.raises(NotAssociatedError):
            await TenantResolver(db_session).resolve_school_id(user)


class TestSchoolEndpoints:
    async def test_super_admin_creates_school(self, client: AsyncClient, super_admin):
        response = await client.post(
            "/api/v1/schools",
            json={"name": "Cape Coast Prep", "email": "hello@ccprep.com"},
            headers=auth_headers(super_admin),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Cape Coast Prep"
        assert data["isActive"] is True

    async def test_school_admin_cannot_create_school(
        self, client: AsyncClient, admin_headers
    ):
        response = await client.post(
            "/api/v1/schools",
            json={"name": "Rogue School", "email": "rogue@school.com"},
            headers=admin_headers,
        )
        assert response.status_code == 403

    async def test_assign_admin_endpoint(self, client: AsyncClient, super_admin, school):
        response = await client.post(
            f"/api/v1/schools/{school.id}/admins",
            json={
                "email": "head@accra-academy.com",
                "password": TEST_PASSWORD,
                "fullName": "Esi Owusu",
                "jobTitle": "Bursar",
            },
            headers=auth_headers(super_admin),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["schoolId"] == school.id
        assert data["jobTitle"] == "Bursar"

    async def test_list_schools(self, client: AsyncClient, super_admin, school, other_school):
        response = await client.get("/api/v1/schools", headers=auth_headers(super_admin))

        assert response.status_code == 200
        names = [s["name"] for s in response.json()["data"]]
        assert names == ["Accra Academy", "Kumasi High"]

    async def test_unlinked_admin_gets_403_on_tenant_routes(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        user = await AuthService(db_session).create_user(
            email="floating@admin.com",
            password=TEST_PASSWORD,
            full_name="No School",
            role=UserRole.SCHOOL_ADMIN,
        )
        await db_session.commit()

        response = await client.get("/api/v1/invoices", headers=auth_headers(user))

        assert response.status_code == 403
        assert response.json()["message"] == "Admin not associated with any school"

    async def test_super_admin_deactivates_school(
        self, client: AsyncClient, super_admin, school, other_school
    ):
        headers = auth_headers(super_admin)
        response = await client.patch(
            f"/api/v1/schools/{other_school.id}", json={"isActive": False}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["isActive"] is False

        listed = await client.get("/api/v1/schools", headers=headers)
        assert [s["name"] for s in listed.json()["data"]] == ["Accra Academy"]

        everything = await client.get(
            "/api/v1/schools", params={"includeInactive": "true"}, headers=headers
        )
        assert len(everything.json()["data"]) == 2

    async def test_update_unknown_school(self, client: AsyncClient, super_admin):
        response = await client.patch(
            "/api/v1/schools/999", json={"name": "Ghost"}, headers=auth_headers(super_admin)
        )
        assert response.status_code == 404

    async def test_school_admin_cannot_update_school(
        self, client: AsyncClient, admin_headers, school
    ):
        response = await client.patch(
            f"/api/v1/schools/{school.id}", json={"isActive": False}, headers=admin_headers
        )
        assert response.status_code == 403


class TestSchoolSettingsEndpoints:
    async def test_get_own_school(self, client: AsyncClient, admin_headers, school):
        response = await client.get("/api/v1/school-settings", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == school.id
        assert data["currency"] == "GHS"
        assert data["currentAcademicYear"] is None

    async def test_update_settings(self, client: AsyncClient, admin_headers, school):
        response = await client.patch(
            "/api/v1/school-settings",
            json={"currency": "usd", "currentAcademicYear": "2025-2026", "currentTerm": "SECOND_TERM"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["currency"] == "USD"
        assert data["currentAcademicYear"] == "2025-2026"
        assert data["currentTerm"] == "SECOND_TERM"
        assert data["isActive"] is True

    async def test_currency_change_reaches_invoice_display(
        self, client: AsyncClient, admin_headers, student
    ):
        await client.patch(
            "/api/v1/school-settings", json={"currency": "USD"}, headers=admin_headers
        )
        response = await client.post(
            "/api/v1/invoices",
            json={
                "studentId": student.id,
                "academicYear": "2024-2025",
                "term": "FIRST_TERM",
                "issueDate": "2024-09-01",
                "dueDate": "2024-09-30",
                "lineItems": [{"description": "Tuition", "unitPrice": "1200.00"}],
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["display"]["totalAmount"] == "$1,200.00"

    async def test_invalid_settings(self, client: AsyncClient, admin_headers, school):
        response = await client.patch(
            "/api/v1/school-settings",
            json={"currentAcademicYear": "2025/26", "currency": "DOLLARS"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert set(response.json()["field_errors"]) == {"currentAcademicYear", "currency"}

    async def test_empty_settings_update(self, client: AsyncClient, admin_headers, school):
        response = await client.patch("/api/v1/school-settings", json={}, headers=admin_headers)
        assert response.status_code == 400

    async def test_super_admin_has_no_school_settings(self, client: AsyncClient, super_admin):
        response = await client.get("/api/v1/school-settings", headers=auth_headers(super_admin))
        assert response.status_code == 403
