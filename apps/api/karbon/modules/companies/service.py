"""Company profile service layer."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from karbon.core.errors import NotFound
from karbon.models.company import Company
from karbon.modules.companies.schemas import CompanyCreate, CompanyUpdate

logger = structlog.get_logger()


async def get_company_or_raise(
    db: AsyncSession,
    company_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> Company:
    stmt = select(Company).where(Company.id == company_id)
    if for_update:
        stmt = stmt.with_for_update()
    company = (await db.execute(stmt)).scalar_one_or_none()
    if company is None:
        raise NotFound(f"Company {company_id} not found")
    return company


async def list_companies(db: AsyncSession) -> list[Company]:
    stmt = select(Company).order_by(Company.name)
    return list((await db.execute(stmt)).scalars().all())


async def create_company(db: AsyncSession, body: CompanyCreate) -> Company:
    company = Company(**body.model_dump())
    db.add(company)
    await db.flush()
    await db.commit()
    logger.info("company_created", company_id=str(company.id), sector=company.sector)
    return company


async def update_company(
    db: AsyncSession,
    company_id: uuid.UUID,
    body: CompanyUpdate,
) -> Company:
    """Partial profile update; only fields present in the request are written."""
    company = await get_company_or_raise(db, company_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(company, field, value)
    await db.flush()
    await db.commit()
    return company


async def delete_company(db: AsyncSession, company_id: uuid.UUID) -> None:
    """Delete a company; sources, inputs, results and certificates cascade."""
    company = await get_company_or_raise(db, company_id)
    await db.delete(company)
    await db.commit()
    logger.info("company_deleted", company_id=str(company_id))
