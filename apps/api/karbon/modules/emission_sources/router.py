"""Emission source catalog API router."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from karbon.core.database import get_db
from karbon.core.errors import to_http_exception
from karbon.modules.emission_sources import service
from karbon.modules.emission_sources.schemas import (
    EmissionSourceCreate,
    EmissionSourceResponse,
    EmissionSourceUpdate,
)

router = APIRouter(prefix="/companies/{company_id}/sources", tags=["emission_sources"])


@router.get("", response_model=list[EmissionSourceResponse])
async def list_sources(company_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    try:
        return await service.list_sources(db, company_id)
    except LookupError as exc:
        raise to_http_exception(exc)


@router.post("", response_model=EmissionSourceResponse, status_code=status.HTTP_201_CREATED)
async def create_source(
    company_id: uuid.UUID,
    body: EmissionSourceCreate,
    db: AsyncSession = Depends(get_db),
):
    """Register a source with its emission factor (kg CO2e per unit)."""
    try:
        return await service.create_source(db, company_id, body)
    except (LookupError, ValueError) as exc:
        raise to_http_exception(exc)


@router.get("/{source_id}", response_model=EmissionSourceResponse)
async def get_source(
    company_id: uuid.UUID,
    source_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.get_source_or_raise(db, source_id, company_id)
    except LookupError as exc:
        raise to_http_exception(exc)


@router.patch("/{source_id}", response_model=EmissionSourceResponse)
async def update_source(
    company_id: uuid.UUID,
    source_id: uuid.UUID,
    body: EmissionSourceUpdate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.update_source(db, company_id, source_id, body)
    except (LookupError, ValueError) as exc:
        raise to_http_exception(exc)


@router.delete("/{source_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_source(
    company_id: uuid.UUID,
    source_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    try:
        await service.delete_source(db, company_id, source_id)
    except (LookupError, ValueError) as exc:
        raise to_http_exception(exc)
