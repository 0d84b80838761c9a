"""Utility helpers for calculator modules."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")
_RATE_QUANTUM = Decimal("0.0001")


def percentage_of(amount: Decimal, rate: Decimal) -> Decimal:
    """Apply ``rate`` to ``amount`` without rounding."""

    return amount * rate


def round_currency(value: Decimal) -> float:
    """Round monetary amounts to two decimals for serialisation."""

    return float(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def round_rate(value: Decimal) -> float:
    """Round rate values to four decimals for serialisation."""

    return float(value.quantize(_RATE_QUANTUM, rounding=ROUND_HALF_UP))
