# src/chainprobe/application/__init__.py
"""
Application Layer - Use Cases and Services

This package contains application services that orchestrate domain logic:
provider rotation, balance resolution, exchange rates, derivation and
batch lookups.
"""

from chainprobe.application.registry import ProviderRegistry
from chainprobe.application.balance_service import BalanceService, ResolutionState, extract_balance
from chainprobe.application.health import HealthStatus, ProviderHealthTracker
from chainprobe.application.rates_service import ExchangeRateCache, RateRefresher
from chainprobe.application.derivation import derive_address, key_material_from_mnemonic
from chainprobe.application.batch import BalanceBatch, ValuedBalance

__all__ = [
    "ProviderRegistry",
    "BalanceService",
    "ResolutionState",
    "extract_balance",
    "HealthStatus",
    "ProviderHealthTracker",
    "ExchangeRateCache",
    "RateRefresher",
    "derive_address",
    "key_material_from_mnemonic",
    "BalanceBatch",
    "ValuedBalance",
]
