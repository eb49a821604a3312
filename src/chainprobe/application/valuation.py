# src/chainprobe/application/valuation.py
"""
Valuation - Base Units to Display and USD Amounts

Balances travel through the system as integers in the smallest unit of each
asset. Conversion happens here, at the boundary, and nowhere else.
"""
from __future__ import annotations

from decimal import Decimal


def to_units(amount: int, decimals: int) -> Decimal:
    """
    Scale a base-unit integer to whole units without going through float.
    
    Example: to_units(150_000_000, 8) == Decimal("1.5")
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    return Decimal(amount).scaleb(-decimals)


def usd_value(amount: int, decimals: int, rate: float) -> float:
    """USD value of a base-unit amount at `rate` USD per whole unit."""
    return float(to_units(amount, decimals) * Decimal(str(rate)))
