"""Company profile model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from karbon.models.base import BaseModel

if TYPE_CHECKING:
    from karbon.models.certificate import Certificate
    from karbon.models.emissions import EmissionInput, EmissionSource


class Company(BaseModel):
    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Free-text sector tag, matched by keyword to pick intensity thresholds
    sector: Mapped[str | None] = mapped_column(String(255), nullable=True)
    employee_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    monthly_revenue: Mapped[float | None] = mapped_column(Float, nullable=True)
    monthly_product_units: Mapped[float | None] = mapped_column(Float, nullable=True)
    monthly_freight_tons: Mapped[float | None] = mapped_column(Float, nullable=True)

    sources: Mapped[list[EmissionSource]] = relationship(
        back_populates="company", cascade="all, delete-orphan", passive_deletes=True
    )
    inputs: Mapped[list[EmissionInput]] = relationship(
        back_populates="company", cascade="all, delete-orphan", passive_deletes=True
    )
    certificates: Mapped[list[Certificate]] = relationship(
        back_populates="company", cascade="all, delete-orphan", passive_deletes=True
    )
