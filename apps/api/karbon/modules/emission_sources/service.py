"""Emission source catalog service layer."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from karbon.core.errors import Conflict, NotFound, SourceInUse
from karbon.models.emissions import EmissionInputDetail, EmissionSource
from karbon.modules.companies.service import get_company_or_raise
from karbon.modules.emission_sources.schemas import EmissionSourceCreate, EmissionSourceUpdate
from karbon.modules.emissions.aggregator import normalize_category
from karbon.modules.emissions.conversion import parse_consumption

logger = structlog.get_logger()


async def list_sources(db: AsyncSession, company_id: uuid.UUID) -> list[EmissionSource]:
    await get_company_or_raise(db, company_id)
    stmt = (
        select(EmissionSource)
        .where(EmissionSource.company_id == company_id)
        .order_by(EmissionSource.name)
    )
    return list((await db.execute(stmt)).scalars().all())


async def get_source_or_raise(
    db: AsyncSession,
    source_id: uuid.UUID,
    company_id: uuid.UUID | None = None,
) -> EmissionSource:
    """Fetch a source; when company_id is given the source must belong to it."""
    stmt = select(EmissionSource).where(EmissionSource.id == source_id)
    if company_id is not None:
        stmt = stmt.where(EmissionSource.company_id == company_id)
    source = (await db.execute(stmt)).scalar_one_or_none()
    if source is None:
        raise NotFound(f"Emission source {source_id} not found")
    return source


async def find_source_by_name(
    db: AsyncSession,
    company_id: uuid.UUID,
    name: str,
) -> EmissionSource:
    """Case-insensitive lookup by name within a company's catalog."""
    stmt = select(EmissionSource).where(
        EmissionSource.company_id == company_id,
        func.lower(EmissionSource.name) == name.strip().lower(),
    )
    source = (await db.execute(stmt)).scalars().first()
    if source is None:
        raise NotFound(f"Emission source '{name}' not found")
    return source


async def _name_taken(
    db: AsyncSession,
    company_id: uuid.UUID,
    name: str,
    exclude_id: uuid.UUID | None = None,
) -> bool:
    stmt = select(EmissionSource.id).where(
        EmissionSource.company_id == company_id,
        func.lower(EmissionSource.name) == name.strip().lower(),
    )
    if exclude_id is not None:
        stmt = stmt.where(EmissionSource.id != exclude_id)
    return (await db.execute(stmt)).first() is not None


async def create_source(
    db: AsyncSession,
    company_id: uuid.UUID,
    body: EmissionSourceCreate,
) -> EmissionSource:
    await get_company_or_raise(db, company_id)
    factor = parse_consumption(body.emission_factor, field="emission_factor")
    name = body.name.strip()
    if await _name_taken(db, company_id, name):
        raise Conflict(f"Emission source '{name}' already exists")

    source = EmissionSource(
        company_id=company_id,
        name=name,
        unit=body.unit.strip(),
        emission_factor=factor,
        category=normalize_category(body.category).value if body.category else None,
    )
    db.add(source)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise Conflict(f"Emission source '{name}' already exists") from None
    await db.commit()
    logger.info(
        "emission_source_created",
        company_id=str(company_id),
        source_id=str(source.id),
        emission_factor=factor,
    )
    return source


async def update_source(
    db: AsyncSession,
    company_id: uuid.UUID,
    source_id: uuid.UUID,
    body: EmissionSourceUpdate,
) -> EmissionSource:
    source = await get_source_or_raise(db, source_id, company_id)
    updates = body.model_dump(exclude_unset=True)

    if updates.get("name"):
        name = updates["name"].strip()
        if await _name_taken(db, company_id, name, exclude_id=source.id):
            raise Conflict(f"Emission source '{name}' already exists")
        source.name = name
    if updates.get("unit"):
        source.unit = updates["unit"].strip()
    if "category" in updates:
        category = updates["category"]
        source.category = normalize_category(category).value if category else None

    await db.flush()
    await db.commit()
    return source


async def delete_source(
    db: AsyncSession,
    company_id: uuid.UUID,
    source_id: uuid.UUID,
) -> None:
    """Delete an unused source. Sources referenced by any detail are kept."""
    source = await get_source_or_raise(db, source_id, company_id)
    in_use = (
        await db.execute(
            select(func.count())
            .select_from(EmissionInputDetail)
            .where(EmissionInputDetail.source_id == source_id)
        )
    ).scalar_one()
    if in_use:
        raise SourceInUse(
            f"Emission source '{source.name}' is used by {in_use} input detail(s)"
        )
    await db.delete(source)
    await db.commit()
    logger.info("emission_source_deleted", company_id=str(company_id), source_id=str(source_id))
