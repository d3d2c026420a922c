"""Pydantic schemas for monthly inputs, their details and computed results."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, model_validator


# ── Requests ─────────────────────────────────────────────────────────────────


class DetailItem(BaseModel):
    """One consumption line; the source is named by id or by catalog name."""

    source_id: uuid.UUID | None = None
    source_name: str | None = Field(
        default=None, validation_alias=AliasChoices("source_name", "nama_sumber")
    )
    # Validated by parse_consumption so numeric strings and numbers are treated alike
    value: Any

    @model_validator(mode="after")
    def _require_source(self) -> "DetailItem":
        if self.source_id is None and not (self.source_name or "").strip():
            raise ValueError("Either source_id or source_name is required")
        return self


class InputSubmit(BaseModel):
    # Both default to the current month when omitted
    month: int | None = Field(default=None, ge=1, le=12)
    year: int | None = Field(default=None, ge=1900, le=9999)
    details: list[DetailItem] = Field(min_length=1)
    use_ai: bool = True


class DetailCreate(BaseModel):
    source_id: uuid.UUID
    value: Any


# ── Responses ────────────────────────────────────────────────────────────────


class SourceBrief(BaseModel):
    id: uuid.UUID
    name: str
    unit: str
    emission_factor: float
    category: str | None

    model_config = ConfigDict(from_attributes=True)


class DetailResponse(BaseModel):
    id: uuid.UUID
    input_id: uuid.UUID
    source_id: uuid.UUID
    value: float
    emission_value: float
    source: SourceBrief

    model_config = ConfigDict(from_attributes=True)


class CategoryShareResponse(BaseModel):
    percentage: float
    analysis: str


class ResultResponse(BaseModel):
    id: uuid.UUID
    input_id: uuid.UUID
    total_emission: float
    level: str | None
    analysis: str | None = Field(
        default=None, validation_alias=AliasChoices("analysis", "rekomendasi")
    )
    energi: list[CategoryShareResponse] | None = None
    transportasi: list[CategoryShareResponse] | None = None
    produksi: list[CategoryShareResponse] | None = None
    limbah: list[CategoryShareResponse] | None = None
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def rekomendasi(self) -> str | None:
        """Legacy name of the narrative field, still read by older dashboards."""
        return self.analysis


class InputResponse(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    month: int
    year: int
    period: str
    details: list[DetailResponse]
    result: ResultResponse | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InputSummary(BaseModel):
    id: uuid.UUID
    month: int
    year: int
    period: str
    total_emission: float | None
    level: str | None


class PriorityActionResponse(BaseModel):
    source: str
    priority: str
    action: str
    impact: str
    suggestion: str


class ResultAnalysisResponse(BaseModel):
    input_id: uuid.UUID
    period: str
    total_emission: float
    level: str | None
    emission_band: str
    sector_group: str
    intensity: float | None
    basis: str | None
    level_progress: float | None
    unclassifiable_reason: str | None
    largest_category: str | None
    priority_actions: list[PriorityActionResponse]
