"""Shared test fixtures for the Karbon API test suite."""

import uuid
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

import karbon.models  # noqa: F401
from karbon.core.database import Base, enable_sqlite_foreign_keys, get_db
from karbon.main import app
from karbon.models.company import Company
from karbon.models.emissions import EmissionSource
from karbon.modules.analysis.narrative import LocalNarrativeGenerator, get_narrative_generator


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory SQLite database per test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    session = AsyncSession(engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def local_generator() -> LocalNarrativeGenerator:
    return LocalNarrativeGenerator()


@pytest.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient]:
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_narrative_generator] = LocalNarrativeGenerator
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_narrative_generator, None)


# ── Sample data fixtures ──────────────────────────────────────────────────

SAMPLE_COMPANY_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
SAMPLE_LISTRIK_ID = uuid.UUID("00000000-0000-0000-0000-000000000011")
SAMPLE_SOLAR_ID = uuid.UUID("00000000-0000-0000-0000-000000000012")
SAMPLE_LIMBAH_ID = uuid.UUID("00000000-0000-0000-0000-000000000013")


@pytest.fixture
async def sample_company(db: AsyncSession) -> Company:
    """An office-sector company with 10 employees."""
    company = Company(
        id=SAMPLE_COMPANY_ID,
        name="PT Hijau Digital",
        address="Jl. Sudirman 1, Jakarta",
        sector="Kantor / IT",
        employee_count=10,
        monthly_revenue=500.0,
    )
    db.add(company)
    await db.commit()
    return company


@pytest.fixture
async def sample_sources(db: AsyncSession, sample_company: Company) -> dict[str, EmissionSource]:
    """Electricity, diesel and waste sources for the sample company."""
    sources = {
        "listrik": EmissionSource(
            id=SAMPLE_LISTRIK_ID,
            company_id=sample_company.id,
            name="Listrik PLN",
            unit="kWh",
            emission_factor=0.85,
            category="energi",
        ),
        "solar": EmissionSource(
            id=SAMPLE_SOLAR_ID,
            company_id=sample_company.id,
            name="Solar",
            unit="liter",
            emission_factor=2.68,
            category="transportasi",
        ),
        "limbah": EmissionSource(
            id=SAMPLE_LIMBAH_ID,
            company_id=sample_company.id,
            name="Limbah Padat",
            unit="kg",
            emission_factor=0.5,
            category="limbah",
        ),
    }
    db.add_all(sources.values())
    await db.commit()
    return sources
