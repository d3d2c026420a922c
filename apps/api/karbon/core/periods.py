"""Calendar-month periods: keys, successors and Indonesian labels."""

from __future__ import annotations

from datetime import date

MONTH_NAMES_ID = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def period_key(year: int, month: int) -> str:
    """Sortable "YYYY-MM" key."""
    return f"{year:04d}-{month:02d}"


def parse_period_key(key: str) -> tuple[int, int]:
    year, month = key.split("-")
    return int(year), int(month)


def next_period(year: int, month: int) -> tuple[int, int]:
    """The calendar month after (year, month), rolling the year after December."""
    if month == 12:
        return year + 1, 1
    return year, month + 1


def periods_between(start: tuple[int, int], end: tuple[int, int]) -> list[tuple[int, int]]:
    """Every (year, month) from start to end inclusive."""
    out: list[tuple[int, int]] = []
    current = start
    while current <= end:
        out.append(current)
        current = next_period(*current)
    return out


def format_month_year(month: int, year: int) -> str:
    """e.g. (3, 2025) -> "Maret 2025"."""
    if month < 1 or month > 12:
        raise ValueError(f"Invalid month: {month}")
    return f"{MONTH_NAMES_ID[month - 1]} {year}"


def current_month_year(today: date | None = None) -> tuple[int, int]:
    today = today or date.today()
    return today.month, today.year
