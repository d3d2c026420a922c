"""Company profile API router."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from karbon.core.database import get_db
from karbon.core.errors import NotFound, to_http_exception
from karbon.modules.companies import service
from karbon.modules.companies.schemas import CompanyCreate, CompanyResponse, CompanyUpdate

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("", response_model=list[CompanyResponse])
async def list_companies(db: AsyncSession = Depends(get_db)):
    return await service.list_companies(db)


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(body: CompanyCreate, db: AsyncSession = Depends(get_db)):
    return await service.create_company(db, body)


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    try:
        return await service.get_company_or_raise(db, company_id)
    except NotFound as exc:
        raise to_http_exception(exc)


@router.patch("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: uuid.UUID,
    body: CompanyUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Edit the profile fields used for sector classification."""
    try:
        return await service.update_company(db, company_id, body)
    except NotFound as exc:
        raise to_http_exception(exc)


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(company_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    try:
        await service.delete_company(db, company_id)
    except NotFound as exc:
        raise to_http_exception(exc)
