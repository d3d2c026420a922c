"""Tests for the sector level classifier and its display helpers."""

from dataclasses import dataclass

import pytest

from karbon.models.enums import EmissionLevel
from karbon.modules.classification.classifier import (
    SECTOR_THRESHOLDS,
    SectorGroup,
    Thresholds,
    categorize_emission_band,
    classify_sector,
    compute_level,
    level_for_intensity,
    level_progress,
)


@dataclass
class Profile:
    sector: str | None
    employee_count: int | None = None
    monthly_revenue: float | None = None


class TestClassifySector:
    @pytest.mark.parametrize(
        "tag,group",
        [
            ("Kantor", SectorGroup.OFFICE),
            ("startup fintech", SectorGroup.OFFICE),
            ("Manufaktur Tekstil", SectorGroup.MANUFACTURING),
            ("Logistik", SectorGroup.TRANSPORT),
            ("Perdagangan Eceran", SectorGroup.RETAIL),
            ("Pertambangan Batubara", SectorGroup.ENERGY),
            ("Gedung Pemerintahan", SectorGroup.GOVERNMENT),
            ("Pertanian", SectorGroup.UNCLASSIFIED),
            (None, SectorGroup.UNCLASSIFIED),
        ],
    )
    def test_keyword_match(self, tag, group) -> None:
        assert classify_sector(tag) is group


class TestComputeLevel:
    def test_office_baik(self) -> None:
        outcome = compute_level(Profile("Kantor", employee_count=10), 20_000)
        assert outcome.level is EmissionLevel.BAIK
        assert outcome.intensity == pytest.approx(2.0)
        assert outcome.basis == "employee"

    def test_office_buruk(self) -> None:
        outcome = compute_level(Profile("Kantor", employee_count=10), 70_000)
        assert outcome.level is EmissionLevel.BURUK

    def test_office_sedang_at_upper_bound(self) -> None:
        # 6 t/employee is the inclusive Sedang bound
        outcome = compute_level(Profile("office", employee_count=10), 60_000)
        assert outcome.level is EmissionLevel.SEDANG

    def test_office_baik_bound_is_exclusive(self) -> None:
        outcome = compute_level(Profile("office", employee_count=10), 30_000)
        assert outcome.level is EmissionLevel.SEDANG

    def test_revenue_basis_for_manufacturing(self) -> None:
        outcome = compute_level(Profile("Manufaktur", monthly_revenue=10), 500_000)
        assert outcome.basis == "revenue"
        assert outcome.intensity == pytest.approx(50.0)
        assert outcome.level is EmissionLevel.BAIK

    def test_missing_employee_count_is_unclassifiable(self) -> None:
        outcome = compute_level(Profile("Kantor", employee_count=None), 1_000)
        assert outcome.level is None
        assert not outcome.classified
        assert "Employee count" in outcome.unclassifiable_reason

    def test_zero_revenue_is_unclassifiable(self) -> None:
        outcome = compute_level(Profile("Retail", monthly_revenue=0), 1_000)
        assert outcome.level is None
        assert outcome.sector_group is SectorGroup.RETAIL

    def test_unknown_sector_is_unclassifiable(self) -> None:
        outcome = compute_level(Profile("Pertanian", employee_count=5, monthly_revenue=5), 1_000)
        assert outcome.level is None
        assert outcome.sector_group is SectorGroup.UNCLASSIFIED
        assert outcome.thresholds is None

    def test_level_for_intensity(self) -> None:
        thresholds = SECTOR_THRESHOLDS[SectorGroup.GOVERNMENT]
        assert level_for_intensity(99.9, thresholds) is EmissionLevel.BAIK
        assert level_for_intensity(100, thresholds) is EmissionLevel.SEDANG
        assert level_for_intensity(250, thresholds) is EmissionLevel.SEDANG
        assert level_for_intensity(250.1, thresholds) is EmissionLevel.BURUK


class TestLevelProgress:
    thresholds = Thresholds(3, 6)

    def test_zero(self) -> None:
        assert level_progress(0, self.thresholds) == 0.0

    def test_baik_band(self) -> None:
        assert level_progress(1.5, self.thresholds) == pytest.approx(10.0)

    def test_sedang_band(self) -> None:
        assert level_progress(3, self.thresholds) == pytest.approx(21.0)
        assert level_progress(6, self.thresholds) == pytest.approx(45.0)

    def test_buruk_band(self) -> None:
        assert level_progress(9, self.thresholds) == pytest.approx(73.0)

    def test_saturates_at_100(self) -> None:
        assert level_progress(12, self.thresholds) == 100.0
        assert level_progress(1_000, self.thresholds) == 100.0

    def test_never_negative(self) -> None:
        assert level_progress(-5, self.thresholds) == 0.0


class TestEmissionBand:
    @pytest.mark.parametrize(
        "total,band",
        [(1500, "High"), (1000, "Moderate"), (600, "Moderate"), (500, "Low"), (101, "Low"), (100, "Very Low"), (0, "Very Low")],
    )
    def test_bands(self, total, band) -> None:
        assert categorize_emission_band(total) == band
