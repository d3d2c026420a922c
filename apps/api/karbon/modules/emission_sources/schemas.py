"""Pydantic schemas for the per-company emission source catalog."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EmissionSourceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    unit: str = Field(min_length=1, max_length=50)
    # Parsed by the service so strings like "0.85" get the same validation as numbers
    emission_factor: Any
    category: str | None = None


class EmissionSourceUpdate(BaseModel):
    """Name, unit and category are editable; the emission factor is not."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    unit: str | None = Field(default=None, min_length=1, max_length=50)
    category: str | None = None


class EmissionSourceResponse(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    name: str
    unit: str
    emission_factor: float
    category: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
