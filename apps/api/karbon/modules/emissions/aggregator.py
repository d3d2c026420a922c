"""Category aggregator: groups source contributions into the four fixed categories.

Deterministic, no I/O. The output shape matches the category columns of
EmissionResult: each category maps to a list of at most one entry.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, TypedDict

from karbon.core.errors import InvalidValue
from karbon.models.enums import EmissionCategory

CATEGORY_ORDER: tuple[EmissionCategory, ...] = (
    EmissionCategory.ENERGI,
    EmissionCategory.TRANSPORTASI,
    EmissionCategory.PRODUKSI,
    EmissionCategory.LIMBAH,
)

# Older revisions stored English category names
_CATEGORY_ALIASES: dict[str, EmissionCategory] = {
    "energy": EmissionCategory.ENERGI,
    "transport": EmissionCategory.TRANSPORTASI,
    "transportation": EmissionCategory.TRANSPORTASI,
    "production": EmissionCategory.PRODUKSI,
    "waste": EmissionCategory.LIMBAH,
}

_CATEGORY_LABELS: dict[EmissionCategory, str] = {
    EmissionCategory.ENERGI: "energi",
    EmissionCategory.TRANSPORTASI: "transportasi",
    EmissionCategory.PRODUKSI: "produksi",
    EmissionCategory.LIMBAH: "limbah",
}


class CategoryShare(TypedDict):
    percentage: float
    analysis: str


@dataclass(frozen=True)
class Contribution:
    """One source's CO2e contribution within a monthly input."""

    source_name: str
    category: str | None
    emission_value: float


def normalize_category(tag: str | None) -> EmissionCategory:
    """Map a free-form category tag to a fixed category; unknown or missing means energi."""
    if not tag:
        return EmissionCategory.ENERGI
    cleaned = tag.strip().lower()
    try:
        return EmissionCategory(cleaned)
    except ValueError:
        return _CATEGORY_ALIASES.get(cleaned, EmissionCategory.ENERGI)


def _join_names(names: list[str]) -> str:
    if len(names) == 1:
        return names[0]
    return f"{', '.join(names[:-1])} dan {names[-1]}"


def _category_analysis(category: EmissionCategory, percentage: float, amount: float, names: list[str]) -> str:
    label = _CATEGORY_LABELS[category]
    return (
        f"Kategori {label} menyumbang {percentage:.2f}% dari total emisi "
        f"({amount:.2f} kg CO2e), berasal dari {_join_names(names)}."
    )


def aggregate_categories(contributions: Iterable[Contribution]) -> dict[str, list[CategoryShare]]:
    """Percentage share and narrative per category.

    A category with no emission gets an empty list. When the grand total is
    zero every list is empty, so no percentage is ever computed from a zero
    denominator. A total too large to represent raises InvalidValue.
    """
    totals: dict[EmissionCategory, float] = {c: 0.0 for c in CATEGORY_ORDER}
    names: dict[EmissionCategory, list[str]] = {c: [] for c in CATEGORY_ORDER}

    for item in contributions:
        category = normalize_category(item.category)
        totals[category] += item.emission_value
        if item.emission_value > 0 and item.source_name not in names[category]:
            names[category].append(item.source_name)

    grand_total = sum(totals.values())
    if not math.isfinite(grand_total):
        raise InvalidValue("total emission overflows")
    result: dict[str, list[CategoryShare]] = {c.value: [] for c in CATEGORY_ORDER}
    if grand_total <= 0:
        return result

    for category in CATEGORY_ORDER:
        amount = totals[category]
        if amount <= 0:
            continue
        percentage = amount / grand_total * 100
        result[category.value].append(
            CategoryShare(
                percentage=round(percentage, 4),
                analysis=_category_analysis(category, percentage, amount, names[category]),
            )
        )
    return result


def largest_category(breakdown: dict[str, list[CategoryShare]]) -> str | None:
    """Category with the highest share, or None when nothing was emitted."""
    best: tuple[float, str] | None = None
    for category, entries in breakdown.items():
        for entry in entries:
            if best is None or entry["percentage"] > best[0]:
                best = (entry["percentage"], category)
    return best[1] if best else None
