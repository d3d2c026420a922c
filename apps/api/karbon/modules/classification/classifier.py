"""Sector level classifier: deterministic tiering of a period's emission intensity.

Intensity is tons CO2e per employee for office-like sectors and tons CO2e per
unit of monthly revenue for every other recognised sector. A missing profile
field or an unrecognised sector yields an unclassifiable outcome, which is a
valid answer and not an error.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Protocol

from karbon.models.enums import EmissionLevel


class SectorGroup(str, enum.Enum):
    OFFICE = "office"
    MANUFACTURING = "manufacturing"
    TRANSPORT = "transport"
    RETAIL = "retail"
    ENERGY = "energy"
    GOVERNMENT = "government"
    UNCLASSIFIED = "unclassified"


# Checked in order; the first group with a matching keyword wins
SECTOR_KEYWORDS: list[tuple[SectorGroup, tuple[str, ...]]] = [
    (SectorGroup.OFFICE, ("kantor", "startup", "it", "finansial", "office", "financial")),
    (SectorGroup.MANUFACTURING, ("manufaktur", "produksi", "manufacturing")),
    (SectorGroup.TRANSPORT, ("transport", "logistik", "logistics")),
    (SectorGroup.RETAIL, ("retail", "perdagangan", "trade")),
    (SectorGroup.ENERGY, ("energi", "tambang", "pertambangan", "energy", "mining")),
    (SectorGroup.GOVERNMENT, ("pemerintahan", "gedung", "perkantoran umum", "government")),
]


@dataclass(frozen=True)
class Thresholds:
    baik: float    # exclusive upper bound for Baik
    sedang: float  # inclusive upper bound for Sedang


SECTOR_THRESHOLDS: dict[SectorGroup, Thresholds] = {
    SectorGroup.OFFICE: Thresholds(3, 6),
    SectorGroup.MANUFACTURING: Thresholds(80, 150),
    SectorGroup.TRANSPORT: Thresholds(1000, 3000),
    SectorGroup.RETAIL: Thresholds(150, 300),
    SectorGroup.ENERGY: Thresholds(10000, 20000),
    SectorGroup.GOVERNMENT: Thresholds(100, 250),
}


class CompanyProfile(Protocol):
    sector: str | None
    employee_count: int | None
    monthly_revenue: float | None


@dataclass(frozen=True)
class LevelOutcome:
    level: EmissionLevel | None
    sector_group: SectorGroup
    intensity: float | None = None
    basis: str | None = None  # "employee" | "revenue"
    unclassifiable_reason: str | None = None

    @property
    def classified(self) -> bool:
        return self.level is not None

    @property
    def thresholds(self) -> Thresholds | None:
        return SECTOR_THRESHOLDS.get(self.sector_group)


def classify_sector(tag: str | None) -> SectorGroup:
    """Case-insensitive keyword match of a free-text sector tag."""
    sector = (tag or "").lower()
    for group, keywords in SECTOR_KEYWORDS:
        if any(keyword in sector for keyword in keywords):
            return group
    return SectorGroup.UNCLASSIFIED


def level_for_intensity(intensity: float, thresholds: Thresholds) -> EmissionLevel:
    if intensity < thresholds.baik:
        return EmissionLevel.BAIK
    if intensity <= thresholds.sedang:
        return EmissionLevel.SEDANG
    return EmissionLevel.BURUK


def compute_level(profile: CompanyProfile, total_emission_kg: float) -> LevelOutcome:
    """Tier a company's period total (kg CO2e) against its sector thresholds."""
    group = classify_sector(profile.sector)
    if group is SectorGroup.UNCLASSIFIED:
        return LevelOutcome(
            level=None,
            sector_group=group,
            unclassifiable_reason="Sector tag is not recognised",
        )

    total_tons = total_emission_kg / 1000
    thresholds = SECTOR_THRESHOLDS[group]

    if group is SectorGroup.OFFICE:
        employees = profile.employee_count
        if not employees or employees <= 0:
            return LevelOutcome(
                level=None,
                sector_group=group,
                basis="employee",
                unclassifiable_reason="Employee count is required for office sectors",
            )
        intensity = total_tons / employees
        basis = "employee"
    else:
        revenue = profile.monthly_revenue
        if not revenue or revenue <= 0:
            return LevelOutcome(
                level=None,
                sector_group=group,
                basis="revenue",
                unclassifiable_reason="Monthly revenue is required for this sector",
            )
        intensity = total_tons / revenue
        basis = "revenue"

    return LevelOutcome(
        level=level_for_intensity(intensity, thresholds),
        sector_group=group,
        intensity=intensity,
        basis=basis,
    )


def level_progress(intensity: float, thresholds: Thresholds) -> float:
    """Map intensity onto a 0–100 display scale.

    0–20 spans [0, baik), 21–45 spans [baik, sedang], 46–100 spans
    (sedang, 2 x sedang]. Anything beyond saturates at 100.
    """
    if intensity <= 0:
        return 0.0

    if intensity < thresholds.baik:
        progress = intensity / thresholds.baik * 20
    elif intensity <= thresholds.sedang:
        span = thresholds.sedang - thresholds.baik
        fraction = (intensity - thresholds.baik) / span if span > 0 else 1.0
        progress = 21 + fraction * 24
    else:
        capped = min(intensity, thresholds.sedang * 2)
        fraction = (capped - thresholds.sedang) / thresholds.sedang
        progress = 46 + fraction * 54

    return round(min(max(progress, 0.0), 100.0), 2)


def categorize_emission_band(total_emission_kg: float) -> str:
    """Absolute size band of a period total, independent of sector."""
    if total_emission_kg > 1000:
        return "High"
    if total_emission_kg > 500:
        return "Moderate"
    if total_emission_kg > 100:
        return "Low"
    return "Very Low"
