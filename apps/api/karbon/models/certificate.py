"""Emission certificate model."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from karbon.models.base import BaseModel

if TYPE_CHECKING:
    from karbon.models.company import Company


class Certificate(BaseModel):
    __tablename__ = "certificates"
    __table_args__ = (
        UniqueConstraint("company_id", "sequence", name="uq_certificate_company_sequence"),
        UniqueConstraint("company_id", "certificate_number", name="uq_certificate_company_number"),
        CheckConstraint(
            "expiry_date IS NULL OR expiry_date > issue_date",
            name="ck_certificate_expiry_after_issue",
        ),
        Index("ix_certificates_company_issue", "company_id", "issue_date"),
    )

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    certificate_number: Mapped[str] = mapped_column(String(80), nullable=False)
    issue_date: Mapped[date] = mapped_column(nullable=False)
    expiry_date: Mapped[date | None] = mapped_column(nullable=True)
    level: Mapped[str | None] = mapped_column(String(10), nullable=True)

    company: Mapped[Company] = relationship(back_populates="certificates")
