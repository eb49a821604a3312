# tests/test_formatter.py
"""
Formatter Tests - Unit Tests for Text Output Functions

This module contains unit tests for the command line formatting functions:
amount scaling, balance lines with USD values, the rate table and the
provider health listing.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- chainprobe.adapters.formatting.formatter (all formatter functions for testing)
- chainprobe.application.batch (ValuedBalance for test data)
- pytest (testing framework)
"""
import pytest  # Testing framework for writing and running tests

from datetime import datetime, timezone  # Date/time utilities for test data

from chainprobe.adapters.formatting.formatter import (
    balance_lines,  # Format one currency's valued balance
    format_amount,  # Scale base units for display
    health_lines,  # Format provider health report
    rates_lines,  # Format exchange rate snapshot
)
from chainprobe.application.batch import ValuedBalance  # Batch result for test data
from chainprobe.application.health import HealthStatus  # Health entry for test data
from chainprobe.domain.models import BalanceResult  # Domain model for test data


class TestFormatAmount:
    @pytest.mark.parametrize("amount,decimals,expected", [
        (150_000_000, 8, "1.5"),
        (0, 18, "0"),
        (10**18, 18, "1"),
        (1, 18, "0.000000000000000001"),
        (1_000_000_000, 0, "1000000000"),
        (2_500_000, 6, "2.5"),
    ])
    def test_format_amount(self, amount, decimals, expected):
        assert format_amount(amount, decimals) == expected


class TestBalanceLines:
    def test_native_only(self):
        valued = ValuedBalance(
            currency="bitcoin",
            address="1abc",
            balance=BalanceResult(native=150_000_000),
            native_usd=90000.0,
        )

        expected_lines = [
            "bitcoin 1abc",
            "— native: 1.5 (150000000 base units, $90,000.00)",
        ]
        assert balance_lines(valued) == "\n".join(expected_lines)

    def test_with_tokens(self):
        valued = ValuedBalance(
            currency="ethereum",
            address="0xabc",
            balance=BalanceResult(native=10**17, tokens={"usdt": 2_500_000}),
            native_usd=300.0,
            tokens_usd={"usdt": 2.5},
        )

        lines = balance_lines(valued).split("\n")
        assert lines[1] == "— native: 0.1 (100000000000000000 base units, $300.00)"
        assert lines[2] == "— usdt: 2.5 (2500000 base units, $2.50)"

    def test_timed_out(self):
        valued = ValuedBalance(currency="ton", address="EQabc", balance=BalanceResult(), timed_out=True)
        assert balance_lines(valued) == "ton EQabc\n— lookup timed out, balance unknown"


class TestRatesLines:
    def test_empty(self):
        assert rates_lines({}) == "No exchange rates cached"

    def test_sorted_and_aligned(self):
        result = rates_lines({"tron": 0.12, "bitcoin": 60000.0})
        assert result == "bitcoin  $60,000.0\ntron     $0.12"


class TestHealthLines:
    def test_empty(self):
        assert health_lines([]) == "No provider activity yet"

    def test_statuses(self):
        now = datetime.now(timezone.utc)
        report = [
            HealthStatus("bitcoin", "mempool_space", True, "Healthy", now),
            HealthStatus("ethereum", "etherscan", False, "Cooling down (last error: HTTP 503)", now),
        ]
        assert health_lines(report) == (
            "[OK ] bitcoin/mempool_space: Healthy\n"
            "[BAD] ethereum/etherscan: Cooling down (last error: HTTP 503)"
        )
