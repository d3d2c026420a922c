"""Emission factor conversion: raw consumption x factor -> kg CO2e."""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any

from karbon.core.errors import InvalidValue


def parse_consumption(raw: Any, *, field: str = "value") -> float:
    """Parse a raw consumption value into a finite, non-negative float.

    Never coerces: booleans, blank or non-numeric strings, NaN, infinities and
    negative numbers all raise InvalidValue.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidValue(f"{field} must be a number, got {raw!r}")

    if isinstance(raw, (int, float)):
        try:
            number = float(raw)
        except OverflowError:
            raise InvalidValue(f"{field} is too large to represent") from None
    elif isinstance(raw, Decimal):
        if not raw.is_finite():
            raise InvalidValue(f"{field} must be finite, got {raw!r}")
        number = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise InvalidValue(f"{field} must be a number, got an empty string")
        try:
            number = float(Decimal(text))
        except InvalidOperation:
            raise InvalidValue(f"{field} must be a number, got {raw!r}") from None
    else:
        raise InvalidValue(f"{field} must be a number, got {type(raw).__name__}")

    if not math.isfinite(number):
        raise InvalidValue(f"{field} must be finite, got {raw!r}")
    if number < 0:
        raise InvalidValue(f"{field} must not be negative, got {raw!r}")
    return number


def convert(value: Any, factor: Any) -> float:
    """CO2e contribution of one detail: value x emission factor."""
    product = parse_consumption(value) * parse_consumption(factor, field="emission_factor")
    if not math.isfinite(product):
        raise InvalidValue(f"emission contribution overflows: {value!r} x {factor!r}")
    return product
