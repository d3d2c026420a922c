"""Pydantic schemas for eligibility verdicts and certificates."""

import uuid
from datetime import date, datetime
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from karbon.models.enums import EmissionLevel


# ── Eligibility ──────────────────────────────────────────────────────────────


class NonBestPeriod(BaseModel):
    period: str
    level: str | None  # None when the month has no computed tier yet


class IneligibilityDetails(BaseModel):
    months_present: int
    months_required: int
    months_short: int = 0
    first_period: str | None = None
    last_period: str | None = None
    missing_periods: list[str] = Field(default_factory=list)
    periods_without_result: list[str] = Field(default_factory=list)
    non_best_periods: list[NonBestPeriod] = Field(default_factory=list)
    sequence_breaks: list[str] = Field(default_factory=list)


class EligibleVerdict(BaseModel):
    eligible: Literal[True] = True
    matched_sequence: list[str]


class IneligibleVerdict(BaseModel):
    eligible: Literal[False] = False
    reason: Literal["insufficient_data", "no_qualifying_window"]
    message: str
    details: IneligibilityDetails


EligibilityVerdict = Union[EligibleVerdict, IneligibleVerdict]


# ── Certificates ─────────────────────────────────────────────────────────────


class CertificateIssueRequest(BaseModel):
    issue_date: date
    expiry_date: date | None = None


class CertificateUpdate(BaseModel):
    issue_date: date | None = None
    # Explicit null clears the expiry date; omit the field to keep it
    expiry_date: date | None = None
    level: EmissionLevel | None = None


class CertificateResponse(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    certificate_number: str
    sequence: int
    issue_date: date
    expiry_date: date | None
    level: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CertificateIssueResponse(BaseModel):
    certificate: CertificateResponse
    matched_sequence: list[str]
