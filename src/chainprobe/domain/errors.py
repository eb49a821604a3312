# src/chainprobe/domain/errors.py
"""
Domain Errors - Balance Lookup Exceptions

This module defines the exception taxonomy used across the balance
resolution subsystem. Provider errors are recoverable and consumed by the
retry loop; the rest signal configuration or programming mistakes.
"""
from __future__ import annotations

from typing import Optional


class ChainProbeError(Exception):
    """Base exception for chainprobe errors."""
    pass


class ProviderError(ChainProbeError):
    """A single provider attempt failed; recoverable by retry or rotation."""
    pass


class NetworkError(ProviderError):
    """Connection failure, timeout or non-2xx HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(NetworkError):
    """Provider answered with HTTP 429."""

    def __init__(self, message: str = "rate limited (HTTP 429)"):
        super().__init__(message, status_code=429)


class MalformedResponseError(ProviderError):
    """Body could not be parsed, or a present value is not a valid balance."""
    pass


class UnsupportedCurrencyError(ChainProbeError):
    """Raised when a currency has no derivation strategy or network config."""

    def __init__(self, currency: str):
        super().__init__(f"Unsupported currency: {currency}")
        self.currency = currency


class KeyMaterialError(ChainProbeError):
    """Raised when a derivation strategy is missing the key material it needs."""
    pass


class ExhaustedError(ChainProbeError):
    """Every provider and retry failed for a lookup."""
    pass


class PriceFeedError(ChainProbeError):
    """Price feed request failed or returned an explicit error indicator."""
    pass
