"""Certification API router: eligibility and certificates."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from karbon.core.database import get_db
from karbon.core.errors import to_http_exception
from karbon.modules.certification import service
from karbon.modules.certification.schemas import (
    CertificateIssueRequest,
    CertificateIssueResponse,
    CertificateResponse,
    CertificateUpdate,
    EligibilityVerdict,
)

router = APIRouter(tags=["certification"])


@router.get(
    "/companies/{company_id}/certification/eligibility",
    response_model=EligibilityVerdict,
)
async def get_eligibility(company_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Whether the company has 12 consecutive months rated Baik."""
    try:
        return await service.get_eligibility(db, company_id)
    except LookupError as exc:
        raise to_http_exception(exc)


@router.get("/companies/{company_id}/certificates", response_model=list[CertificateResponse])
async def list_company_certificates(company_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    try:
        return await service.list_company_certificates(db, company_id)
    except LookupError as exc:
        raise to_http_exception(exc)


@router.post(
    "/companies/{company_id}/certificates",
    response_model=CertificateIssueResponse,
    status_code=status.HTTP_201_CREATED,
)
async def issue_certificate(
    company_id: uuid.UUID,
    body: CertificateIssueRequest,
    db: AsyncSession = Depends(get_db),
):
    """Issue the next certificate; 409 with the verdict when not eligible."""
    try:
        cert, window = await service.issue_certificate(
            db, company_id, body.issue_date, body.expiry_date
        )
    except (LookupError, ValueError) as exc:
        raise to_http_exception(exc)
    return CertificateIssueResponse(
        certificate=CertificateResponse.model_validate(cert),
        matched_sequence=window,
    )


@router.get("/certificates", response_model=list[CertificateResponse])
async def list_certificates(db: AsyncSession = Depends(get_db)):
    return await service.list_certificates(db)


@router.get("/certificates/active", response_model=list[CertificateResponse])
async def list_active_certificates(db: AsyncSession = Depends(get_db)):
    """Certificates with no expiry date or one that has not passed yet."""
    return await service.list_active_certificates(db)


@router.get("/certificates/{certificate_id}", response_model=CertificateResponse)
async def get_certificate(certificate_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    try:
        return await service.get_certificate_or_raise(db, certificate_id)
    except LookupError as exc:
        raise to_http_exception(exc)


@router.patch("/certificates/{certificate_id}", response_model=CertificateResponse)
async def update_certificate(
    certificate_id: uuid.UUID,
    body: CertificateUpdate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.update_certificate(db, certificate_id, body)
    except (LookupError, ValueError) as exc:
        raise to_http_exception(exc)


@router.delete("/certificates/{certificate_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_certificate(certificate_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    try:
        await service.delete_certificate(db, certificate_id)
    except LookupError as exc:
        raise to_http_exception(exc)
