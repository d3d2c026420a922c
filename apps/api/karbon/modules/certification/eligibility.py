"""Certification eligibility engine.

A company qualifies once it has 12 strictly consecutive calendar months that
each have a submitted input, a computed result, and the best tier. The scan is
pure and read-only: it walks candidate windows in chronological order and
returns the first one that passes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from karbon.core.periods import next_period, parse_period_key, period_key, periods_between
from karbon.models.enums import BEST_LEVEL
from karbon.modules.certification.schemas import (
    EligibilityVerdict,
    EligibleVerdict,
    IneligibilityDetails,
    IneligibleVerdict,
    NonBestPeriod,
)

WINDOW_MONTHS = 12


@dataclass(frozen=True)
class MonthlyRecord:
    year: int
    month: int
    has_result: bool
    level: str | None = None

    @property
    def key(self) -> str:
        return period_key(self.year, self.month)


def _is_best(record: MonthlyRecord) -> bool:
    return record.has_result and record.level == BEST_LEVEL.value


def _scan_window(
    keys: list[str],
    lookup: dict[str, MonthlyRecord],
    start: int,
) -> tuple[bool, str | None]:
    """Walk keys[start:start+12]; return (passed, period where it broke)."""
    window = keys[start:start + WINDOW_MONTHS]
    for offset, key in enumerate(window):
        record = lookup[key]
        if not record.has_result or record.level != BEST_LEVEL.value:
            return False, key
        if offset < WINDOW_MONTHS - 1:
            successor = period_key(*next_period(record.year, record.month))
            if successor not in lookup:
                return False, key
    return True, None


def _gap_details(keys: list[str], lookup: dict[str, MonthlyRecord]) -> dict:
    if not keys:
        return {}
    first = parse_period_key(keys[0])
    last = parse_period_key(keys[-1])
    missing = [
        period_key(y, m) for y, m in periods_between(first, last)
        if period_key(y, m) not in lookup
    ]
    without_result = [k for k in keys if not lookup[k].has_result]
    non_best = [
        NonBestPeriod(period=k, level=lookup[k].level)
        for k in keys
        if lookup[k].has_result and not _is_best(lookup[k])
    ]
    return {
        "first_period": keys[0],
        "last_period": keys[-1],
        "missing_periods": missing,
        "periods_without_result": without_result,
        "non_best_periods": non_best,
    }


def evaluate_eligibility(records: Iterable[MonthlyRecord]) -> EligibilityVerdict:
    """Find the earliest run of 12 consecutive best-tier months."""
    ordered = sorted(records, key=lambda r: (r.year, r.month))

    if len(ordered) < WINDOW_MONTHS:
        return _insufficient(ordered)

    lookup: dict[str, MonthlyRecord] = {}
    for record in ordered:
        lookup[record.key] = record
    keys = sorted(lookup)

    if len(keys) < WINDOW_MONTHS:
        return _insufficient(list(lookup.values()))

    breaks: list[str] = []
    for start in range(len(keys) - WINDOW_MONTHS + 1):
        passed, broke_at = _scan_window(keys, lookup, start)
        if passed:
            return EligibleVerdict(matched_sequence=keys[start:start + WINDOW_MONTHS])
        if broke_at is not None and broke_at not in breaks:
            breaks.append(broke_at)

    details = IneligibilityDetails(
        months_present=len(keys),
        months_required=WINDOW_MONTHS,
        sequence_breaks=breaks,
        **_gap_details(keys, lookup),
    )
    return IneligibleVerdict(
        reason="no_qualifying_window",
        message=_window_message(details),
        details=details,
    )


def _insufficient(records: list[MonthlyRecord]) -> IneligibleVerdict:
    lookup = {r.key: r for r in records}
    keys = sorted(lookup)
    short = WINDOW_MONTHS - len(keys)
    details = IneligibilityDetails(
        months_present=len(keys),
        months_required=WINDOW_MONTHS,
        months_short=short,
        **_gap_details(keys, lookup),
    )
    return IneligibleVerdict(
        reason="insufficient_data",
        message=(
            f"Insufficient data: {len(keys)} of {WINDOW_MONTHS} required months on file "
            f"({short} short)."
        ),
        details=details,
    )


def _window_message(details: IneligibilityDetails) -> str:
    parts = [
        f"No run of {WINDOW_MONTHS} consecutive months rated {BEST_LEVEL.value} "
        f"among {details.months_present} months on file."
    ]
    if details.missing_periods:
        parts.append(f"Missing months: {', '.join(details.missing_periods)}.")
    if details.periods_without_result:
        parts.append(f"Months without a result: {', '.join(details.periods_without_result)}.")
    if details.non_best_periods:
        rated = ", ".join(f"{p.period} ({p.level})" for p in details.non_best_periods)
        parts.append(f"Months not rated {BEST_LEVEL.value}: {rated}.")
    return " ".join(parts)
