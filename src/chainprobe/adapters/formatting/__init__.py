# src/chainprobe/adapters/formatting/__init__.py
"""
Formatting Adapters - Text Output

This package contains text formatting for command line output.
"""

from chainprobe.adapters.formatting.formatter import (
    balance_lines,
    format_amount,
    health_lines,
    rates_lines,
)

__all__ = [
    "balance_lines",
    "format_amount",
    "health_lines",
    "rates_lines",
]
