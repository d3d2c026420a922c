"""Certification service layer: eligibility lookups and certificate issuance."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from karbon.core.errors import InvalidDateRange, InvalidValue, NotEligible, NotFound
from karbon.models.certificate import Certificate
from karbon.models.emissions import EmissionInput, EmissionResult
from karbon.models.enums import BEST_LEVEL
from karbon.modules.certification.eligibility import MonthlyRecord, evaluate_eligibility
from karbon.modules.certification.schemas import CertificateUpdate, EligibilityVerdict
from karbon.modules.companies.service import get_company_or_raise

logger = structlog.get_logger()

# Unique-constraint collisions on (company, sequence) are retried this many times
MAX_ISSUE_ATTEMPTS = 3


def certificate_number(company_id: uuid.UUID, sequence: int) -> str:
    return f"CERT-{company_id}-{sequence}"


def parse_date(raw: Any, field: str) -> date:
    """Accept a date, a datetime or an ISO-8601 string."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            raise InvalidValue(f"{field} is not a valid date: {raw!r}") from None
    raise InvalidValue(f"{field} is not a valid date: {raw!r}")


def _check_range(issue_date: date, expiry_date: date | None) -> None:
    if expiry_date is not None and expiry_date <= issue_date:
        raise InvalidDateRange(
            f"expiry_date {expiry_date.isoformat()} must be after issue_date {issue_date.isoformat()}"
        )


# ── Eligibility ──────────────────────────────────────────────────────────────


async def load_monthly_records(db: AsyncSession, company_id: uuid.UUID) -> list[MonthlyRecord]:
    stmt = (
        select(EmissionInput.year, EmissionInput.month, EmissionResult.id, EmissionResult.level)
        .outerjoin(EmissionResult, EmissionResult.input_id == EmissionInput.id)
        .where(EmissionInput.company_id == company_id)
        .order_by(EmissionInput.year, EmissionInput.month)
    )
    rows = (await db.execute(stmt)).all()
    return [
        MonthlyRecord(year=year, month=month, has_result=result_id is not None, level=level)
        for year, month, result_id, level in rows
    ]


async def get_eligibility(db: AsyncSession, company_id: uuid.UUID) -> EligibilityVerdict:
    """Evaluate whether the company currently qualifies. Raises only NotFound."""
    await get_company_or_raise(db, company_id)
    return evaluate_eligibility(await load_monthly_records(db, company_id))


# ── Issuance ─────────────────────────────────────────────────────────────────


async def _next_sequence(db: AsyncSession, company_id: uuid.UUID) -> int:
    stmt = select(func.max(Certificate.sequence)).where(Certificate.company_id == company_id)
    highest = (await db.execute(stmt)).scalar_one_or_none()
    return (highest or 0) + 1


async def issue_certificate(
    db: AsyncSession,
    company_id: uuid.UUID,
    issue_date: Any,
    expiry_date: Any = None,
) -> tuple[Certificate, list[str]]:
    """Issue the company's next certificate when it is eligible.

    The company row is locked while eligibility is evaluated and the sequence
    is read, and the certificate is inserted in that same transaction. A
    concurrent issuer that still collides on the unique sequence is rolled
    back and retried. Returns the certificate and the matched 12-month window.
    """
    issued_on = parse_date(issue_date, "issue_date")
    expires_on = parse_date(expiry_date, "expiry_date") if expiry_date is not None else None
    _check_range(issued_on, expires_on)

    for attempt in range(1, MAX_ISSUE_ATTEMPTS + 1):
        await get_company_or_raise(db, company_id, for_update=True)

        verdict = evaluate_eligibility(await load_monthly_records(db, company_id))
        if not verdict.eligible:
            await db.rollback()
            raise NotEligible(verdict.message, verdict)

        sequence = await _next_sequence(db, company_id)
        cert = Certificate(
            company_id=company_id,
            sequence=sequence,
            certificate_number=certificate_number(company_id, sequence),
            issue_date=issued_on,
            expiry_date=expires_on,
            level=BEST_LEVEL.value,
        )
        db.add(cert)
        try:
            await db.flush()
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning(
                "certificate_sequence_collision",
                company_id=str(company_id),
                sequence=sequence,
                attempt=attempt,
            )
            continue

        logger.info(
            "certificate_issued",
            company_id=str(company_id),
            certificate_number=cert.certificate_number,
            sequence=sequence,
            window_start=verdict.matched_sequence[0],
            window_end=verdict.matched_sequence[-1],
        )
        return cert, verdict.matched_sequence

    raise RuntimeError(
        f"Could not allocate a certificate sequence for company {company_id} "
        f"after {MAX_ISSUE_ATTEMPTS} attempts"
    )


# ── Certificate records ──────────────────────────────────────────────────────


async def get_certificate_or_raise(db: AsyncSession, certificate_id: uuid.UUID) -> Certificate:
    cert = await db.get(Certificate, certificate_id)
    if cert is None:
        raise NotFound(f"Certificate {certificate_id} not found")
    return cert


async def list_company_certificates(db: AsyncSession, company_id: uuid.UUID) -> list[Certificate]:
    await get_company_or_raise(db, company_id)
    stmt = (
        select(Certificate)
        .where(Certificate.company_id == company_id)
        .order_by(Certificate.issue_date.desc(), Certificate.sequence.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_certificates(db: AsyncSession) -> list[Certificate]:
    stmt = select(Certificate).order_by(Certificate.issue_date.desc(), Certificate.sequence.desc())
    return list((await db.execute(stmt)).scalars().all())


async def list_active_certificates(
    db: AsyncSession,
    today: date | None = None,
) -> list[Certificate]:
    """Certificates without an expiry date or expiring after today."""
    today = today or date.today()
    stmt = (
        select(Certificate)
        .where(or_(Certificate.expiry_date.is_(None), Certificate.expiry_date > today))
        .order_by(Certificate.issue_date.desc(), Certificate.sequence.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def update_certificate(
    db: AsyncSession,
    certificate_id: uuid.UUID,
    body: CertificateUpdate,
) -> Certificate:
    """Edit dates or level. An explicit null expiry clears it."""
    cert = await get_certificate_or_raise(db, certificate_id)
    fields = body.model_fields_set

    issued_on = cert.issue_date
    if "issue_date" in fields:
        if body.issue_date is None:
            raise InvalidValue("issue_date cannot be cleared")
        issued_on = body.issue_date
    expires_on = body.expiry_date if "expiry_date" in fields else cert.expiry_date
    _check_range(issued_on, expires_on)

    cert.issue_date = issued_on
    cert.expiry_date = expires_on
    if "level" in fields:
        cert.level = body.level.value if body.level is not None else None

    await db.flush()
    await db.commit()
    logger.info("certificate_updated", certificate_id=str(certificate_id), fields=sorted(fields))
    return cert


async def delete_certificate(db: AsyncSession, certificate_id: uuid.UUID) -> None:
    cert = await get_certificate_or_raise(db, certificate_id)
    await db.delete(cert)
    await db.commit()
    logger.info("certificate_deleted", certificate_id=str(certificate_id))
