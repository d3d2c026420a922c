"""Enums shared by the emission models and services."""

import enum


class EmissionLevel(str, enum.Enum):
    """Sector-based emission tier, ordered best to worst."""

    BAIK = "Baik"
    SEDANG = "Sedang"
    BURUK = "Buruk"


class EmissionCategory(str, enum.Enum):
    ENERGI = "energi"
    TRANSPORTASI = "transportasi"
    PRODUKSI = "produksi"
    LIMBAH = "limbah"


BEST_LEVEL = EmissionLevel.BAIK
