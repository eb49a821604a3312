# src/chainprobe/adapters/formatting/formatter.py
"""
Result Formatter - Text Presentation of Balances and Rates

This module turns valued balance results and the rate cache snapshot into
plain text lines for the command line.

Files that USE this module:
- chainprobe.app (prints check/rates/health output)
- tests.test_formatter (unit tests)

Files that this module USES:
- chainprobe.application.batch (ValuedBalance)
- chainprobe.application.valuation (to_units for display amounts)
- chainprobe.config (network decimals)
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Mapping, Optional

from chainprobe.application.batch import ValuedBalance
from chainprobe.application.health import HealthStatus
from chainprobe.application.valuation import to_units
from chainprobe.config import get_network
from chainprobe.domain.errors import UnsupportedCurrencyError


def format_amount(amount: int, decimals: int) -> str:
    """
    Format a base-unit amount in whole units, trimming trailing zeros.
    
    Examples:
        format_amount(150_000_000, 8) -> "1.5"
        format_amount(0, 18) -> "0"
    """
    value = to_units(amount, decimals)
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def _decimals(currency: str, token: Optional[str] = None) -> int:
    try:
        network = get_network(currency)
    except UnsupportedCurrencyError:
        return 0
    if token is None:
        return network.decimals
    cfg = network.tokens.get(token)
    return cfg.decimals if cfg else 18


def balance_lines(valued: ValuedBalance) -> str:
    """
    Format one currency's result.
    
    Args:
        valued: ValuedBalance from the batch driver
        
    Returns:
        Multi-line text: native balance, each token, and a timeout note if any
    """
    cur = valued.currency
    lines = [f"{cur} {valued.address}"]
    if valued.timed_out:
        lines.append("— lookup timed out, balance unknown")
        return "\n".join(lines)

    native = valued.balance.native
    lines.append(
        f"— native: {format_amount(native, _decimals(cur))} "
        f"({native} base units, ${valued.native_usd:,.2f})"
    )
    for symbol, amount in sorted(valued.balance.tokens.items()):
        usd = valued.tokens_usd.get(symbol, 0.0)
        lines.append(
            f"— {symbol}: {format_amount(amount, _decimals(cur, symbol))} "
            f"({amount} base units, ${usd:,.2f})"
        )
    return "\n".join(lines)


def rates_lines(rates: Mapping[str, float]) -> str:
    """Format the exchange rate cache snapshot, one currency per line."""
    if not rates:
        return "No exchange rates cached"
    width = max(len(k) for k in rates)
    return "\n".join(
        f"{name.ljust(width)}  ${Decimal(str(price)):,}" for name, price in sorted(rates.items())
    )


def health_lines(report: Iterable[HealthStatus]) -> str:
    lines = []
    for status in report:
        mark = "OK " if status.is_healthy else "BAD"
        lines.append(f"[{mark}] {status.currency}/{status.provider}: {status.message}")
    return "\n".join(lines) if lines else "No provider activity yet"
