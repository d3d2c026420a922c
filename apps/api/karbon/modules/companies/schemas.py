"""Pydantic schemas for company profiles."""

import uuid
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CompanyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address: str | None = None
    # Legacy field names from earlier clients are accepted as aliases
    sector: str | None = Field(
        default=None, validation_alias=AliasChoices("sector", "jenis_perusahaan", "industry")
    )
    employee_count: int | None = Field(
        default=None, ge=0, validation_alias=AliasChoices("employee_count", "jumlah_karyawan")
    )
    monthly_revenue: float | None = Field(
        default=None, ge=0, validation_alias=AliasChoices("monthly_revenue", "pendapatan_perbulan")
    )
    monthly_product_units: float | None = Field(default=None, ge=0)
    monthly_freight_tons: float | None = Field(default=None, ge=0)


class CompanyUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    address: str | None = None
    sector: str | None = Field(
        default=None, validation_alias=AliasChoices("sector", "jenis_perusahaan", "industry")
    )
    employee_count: int | None = Field(
        default=None, ge=0, validation_alias=AliasChoices("employee_count", "jumlah_karyawan")
    )
    monthly_revenue: float | None = Field(
        default=None, ge=0, validation_alias=AliasChoices("monthly_revenue", "pendapatan_perbulan")
    )
    monthly_product_units: float | None = Field(default=None, ge=0)
    monthly_freight_tons: float | None = Field(default=None, ge=0)


class CompanyResponse(BaseModel):
    id: uuid.UUID
    name: str
    address: str | None
    sector: str | None
    employee_count: int | None
    monthly_revenue: float | None
    monthly_product_units: float | None
    monthly_freight_tons: float | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
