"""Emission source catalog, monthly inputs, their details and computed results."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from karbon.models.base import BaseModel

if TYPE_CHECKING:
    from karbon.models.company import Company

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class EmissionSource(BaseModel):
    __tablename__ = "emission_sources"
    __table_args__ = (
        UniqueConstraint("company_id", "name", name="uq_emission_source_company_name"),
        CheckConstraint("emission_factor >= 0", name="ck_emission_source_factor"),
    )

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[str] = mapped_column(String(50), nullable=False)
    emission_factor: Mapped[float] = mapped_column(Float, nullable=False)  # kg CO2e per unit
    # energi | transportasi | produksi | limbah
    category: Mapped[str | None] = mapped_column(String(20), nullable=True)

    company: Mapped[Company] = relationship(back_populates="sources")


class EmissionInput(BaseModel):
    __tablename__ = "emission_inputs"
    __table_args__ = (
        UniqueConstraint("company_id", "year", "month", name="uq_emission_input_period"),
        CheckConstraint("month >= 1 AND month <= 12", name="ck_emission_input_month"),
        Index("ix_emission_inputs_company_period", "company_id", "year", "month"),
    )

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    company: Mapped[Company] = relationship(back_populates="inputs")
    details: Mapped[list[EmissionInputDetail]] = relationship(
        back_populates="input",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="EmissionInputDetail.created_at",
    )
    result: Mapped[EmissionResult | None] = relationship(
        back_populates="input",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
        lazy="selectin",
    )

    @property
    def period(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class EmissionInputDetail(BaseModel):
    __tablename__ = "emission_input_details"
    __table_args__ = (
        UniqueConstraint("input_id", "source_id", name="uq_emission_detail_input_source"),
        CheckConstraint("value >= 0", name="ck_emission_detail_value"),
    )

    input_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("emission_inputs.id", ondelete="CASCADE"),
        nullable=False, index=True
    )
    source_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("emission_sources.id"),
        nullable=False, index=True
    )
    value: Mapped[float] = mapped_column(Float, nullable=False)

    input: Mapped[EmissionInput] = relationship(back_populates="details")
    source: Mapped[EmissionSource] = relationship(lazy="selectin")

    @property
    def emission_value(self) -> float:
        """CO2e contribution, always derived from the source's factor."""
        from karbon.modules.emissions.conversion import convert

        return convert(self.value, self.source.emission_factor)


class EmissionResult(BaseModel):
    __tablename__ = "emission_results"

    input_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("emission_inputs.id", ondelete="CASCADE"),
        nullable=False, unique=True
    )
    total_emission: Mapped[float] = mapped_column(Float, nullable=False)  # kg CO2e
    # Baik | Sedang | Buruk; null until the company profile allows classification
    level: Mapped[str | None] = mapped_column(String(10), nullable=True)
    analysis: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Category breakdowns: [{"percentage": float, "analysis": str}], null until aggregated
    energi: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    transportasi: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    produksi: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    limbah: Mapped[list | None] = mapped_column(JSONType, nullable=True)

    input: Mapped[EmissionInput] = relationship(back_populates="result")
