"""Priority reduction actions per emission source, from keyword rules."""

from __future__ import annotations

from typing import TypedDict

from karbon.models.enums import EmissionCategory
from karbon.modules.analysis.narrative import DetailLine
from karbon.modules.emissions.aggregator import normalize_category

PRIORITY_ORDER = {"High": 1, "Medium": 2, "Low": 3}


class PriorityAction(TypedDict):
    source: str
    priority: str
    action: str
    impact: str
    suggestion: str


# (name keywords, priority, action, suggestion); first match wins
_SOURCE_RULES: list[tuple[tuple[str, ...], str, str, str]] = [
    (
        ("listrik", "genset", "electricity"),
        "High",
        "Optimalkan konsumsi listrik",
        "Audit energi, LED, optimasi HVAC, perbaiki faktor daya",
    ),
    (
        ("solar", "diesel", "bensin", "bbm", "gasolin", "pertalite", "pertamax"),
        "High",
        "Kurangi konsumsi BBM",
        "Peremajaan kendaraan, eco-driving, optimasi rute/logistik",
    ),
    (
        ("lpg", "gas"),
        "Medium",
        "Efisiensi penggunaan gas/LPG",
        "Pemeliharaan burner, deteksi kebocoran, optimasi setting temperatur",
    ),
    (
        ("air",),
        "Medium",
        "Optimalkan konsumsi air",
        "Perbaiki kebocoran, instal aerator, reuse/recycle air proses",
    ),
]

_CATEGORY_RULES: dict[EmissionCategory, tuple[str, str, str]] = {
    EmissionCategory.ENERGI: (
        "High",
        "Efisiensi energi operasional",
        "Monitoring real-time, pengaturan beban puncak, VSD untuk motor",
    ),
    EmissionCategory.TRANSPORTASI: (
        "High",
        "Efisiensi transportasi dan logistik",
        "Konsolidasi pengiriman, optimasi rute, pelatihan eco-driving",
    ),
    EmissionCategory.PRODUKSI: (
        "Medium",
        "Efisiensi proses produksi",
        "Kurangi scrap, optimasi jadwal mesin, pemeliharaan preventif",
    ),
    EmissionCategory.LIMBAH: (
        "Medium",
        "Pengelolaan limbah yang lebih baik",
        "Reduce-reuse-recycle, pemilahan di sumber, optimasi kompaksi",
    ),
}


def _rule_for(detail: DetailLine) -> tuple[str, str, str]:
    name = detail.source_name.lower()
    for keywords, priority, action, suggestion in _SOURCE_RULES:
        if any(keyword in name for keyword in keywords):
            return priority, action, suggestion
    return _CATEGORY_RULES[normalize_category(detail.category)]


def priority_actions(details: list[DetailLine]) -> list[PriorityAction]:
    """One action per contributing source, High priority first, larger impact first."""
    actions: list[tuple[float, PriorityAction]] = []
    for detail in details:
        if detail.emission_value <= 0:
            continue
        priority, action, suggestion = _rule_for(detail)
        actions.append((
            detail.emission_value,
            PriorityAction(
                source=detail.source_name,
                priority=priority,
                action=action,
                impact=f"Potensi pengurangan {detail.emission_value:.2f} kg CO2e",
                suggestion=suggestion,
            ),
        ))
    actions.sort(key=lambda item: (PRIORITY_ORDER[item[1]["priority"]], -item[0]))
    return [action for _, action in actions]
