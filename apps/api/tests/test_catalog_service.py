"""Service tests for company profiles and the emission source catalog."""

import uuid
from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from karbon.core.errors import Conflict, InvalidValue, NotFound, SourceInUse
from karbon.models.certificate import Certificate
from karbon.models.company import Company
from karbon.models.emissions import EmissionInput, EmissionSource
from karbon.modules.companies import service as company_service
from karbon.modules.companies.schemas import CompanyCreate, CompanyUpdate
from karbon.modules.emission_sources import service as source_service
from karbon.modules.emission_sources.schemas import EmissionSourceCreate, EmissionSourceUpdate
from karbon.modules.emissions import service as emission_service
from karbon.modules.emissions.schemas import InputSubmit

pytestmark = pytest.mark.anyio


class TestCompanies:
    async def test_create_with_legacy_field_names(self, db: AsyncSession) -> None:
        body = CompanyCreate.model_validate({
            "name": "PT Pabrik Baja",
            "jenis_perusahaan": "Manufaktur",
            "jumlah_karyawan": 120,
            "pendapatan_perbulan": 850.5,
        })
        company = await company_service.create_company(db, body)
        assert company.sector == "Manufaktur"
        assert company.employee_count == 120
        assert company.monthly_revenue == pytest.approx(850.5)

    async def test_partial_update(self, db: AsyncSession, sample_company: Company) -> None:
        updated = await company_service.update_company(
            db, sample_company.id, CompanyUpdate(employee_count=25)
        )
        assert updated.employee_count == 25
        assert updated.sector == "Kantor / IT"

    async def test_get_missing(self, db: AsyncSession) -> None:
        with pytest.raises(NotFound):
            await company_service.get_company_or_raise(db, uuid.uuid4())

    async def test_delete_cascades(
        self, db: AsyncSession, sample_company: Company, sample_sources, local_generator
    ) -> None:
        await emission_service.submit_monthly_input(
            db,
            sample_company.id,
            InputSubmit(month=1, year=2025, details=[{"source_name": "Solar", "value": 10}]),
            local_generator,
        )
        db.add(Certificate(
            company_id=sample_company.id,
            sequence=1,
            certificate_number=f"CERT-{sample_company.id}-1",
            issue_date=date(2025, 1, 1),
        ))
        await db.commit()

        await company_service.delete_company(db, sample_company.id)
        for model in (EmissionSource, EmissionInput, Certificate):
            count = (await db.execute(select(func.count()).select_from(model))).scalar_one()
            assert count == 0


class TestEmissionSources:
    async def test_create_parses_factor(self, db: AsyncSession, sample_company: Company) -> None:
        source = await source_service.create_source(
            db,
            sample_company.id,
            EmissionSourceCreate(name="Bensin", unit="liter", emission_factor="2.31", category="Transport"),
        )
        assert source.emission_factor == pytest.approx(2.31)
        assert source.category == "transportasi"

    @pytest.mark.parametrize("factor", [-1, "abc", None, True])
    async def test_rejects_bad_factor(self, db: AsyncSession, sample_company: Company, factor) -> None:
        with pytest.raises(InvalidValue):
            await source_service.create_source(
                db,
                sample_company.id,
                EmissionSourceCreate(name="X", unit="kg", emission_factor=factor),
            )

    async def test_duplicate_name_is_case_insensitive(
        self, db: AsyncSession, sample_company: Company, sample_sources
    ) -> None:
        with pytest.raises(Conflict):
            await source_service.create_source(
                db,
                sample_company.id,
                EmissionSourceCreate(name="listrik pln", unit="kWh", emission_factor=0.9),
            )

    async def test_update_keeps_factor(
        self, db: AsyncSession, sample_company: Company, sample_sources
    ) -> None:
        source = await source_service.update_source(
            db,
            sample_company.id,
            sample_sources["solar"].id,
            EmissionSourceUpdate(name="Solar B30", category="energy"),
        )
        assert source.name == "Solar B30"
        assert source.category == "energi"
        assert source.emission_factor == pytest.approx(2.68)

    async def test_delete_unused_source(
        self, db: AsyncSession, sample_company: Company, sample_sources
    ) -> None:
        await source_service.delete_source(db, sample_company.id, sample_sources["limbah"].id)
        remaining = await source_service.list_sources(db, sample_company.id)
        assert [s.name for s in remaining] == ["Listrik PLN", "Solar"]

    async def test_delete_source_in_use(
        self, db: AsyncSession, sample_company: Company, sample_sources, local_generator
    ) -> None:
        await emission_service.submit_monthly_input(
            db,
            sample_company.id,
            InputSubmit(month=1, year=2025, details=[{"source_name": "Solar", "value": 10}]),
            local_generator,
        )
        with pytest.raises(SourceInUse):
            await source_service.delete_source(db, sample_company.id, sample_sources["solar"].id)

    async def test_source_of_another_company_is_not_found(
        self, db: AsyncSession, sample_sources
    ) -> None:
        with pytest.raises(NotFound):
            await source_service.get_source_or_raise(db, sample_sources["solar"].id, uuid.uuid4())
