# src/chainprobe/domain/__init__.py
"""
Domain Layer - Pure Business Objects

This package contains domain models and the error taxonomy.
No dependencies on infrastructure or external systems.
"""

from chainprobe.domain.models import (
    AccessMethod,
    BalanceResult,
    CooldownEntry,
    Currency,
    CurrencyNetworkConfig,
    KeyMaterial,
    ProviderDescriptor,
    TokenConfig,
)
from chainprobe.domain.errors import (
    ChainProbeError,
    ExhaustedError,
    KeyMaterialError,
    MalformedResponseError,
    NetworkError,
    PriceFeedError,
    ProviderError,
    RateLimitedError,
    UnsupportedCurrencyError,
)

__all__ = [
    "AccessMethod",
    "BalanceResult",
    "CooldownEntry",
    "Currency",
    "CurrencyNetworkConfig",
    "KeyMaterial",
    "ProviderDescriptor",
    "TokenConfig",
    "ChainProbeError",
    "ExhaustedError",
    "KeyMaterialError",
    "MalformedResponseError",
    "NetworkError",
    "PriceFeedError",
    "ProviderError",
    "RateLimitedError",
    "UnsupportedCurrencyError",
]
