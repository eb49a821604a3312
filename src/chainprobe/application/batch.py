# src/chainprobe/application/batch.py
"""
Batch Lookups - Concurrent Per-currency Balance Resolution

Runs one lookup task per currency concurrently. Within a task the provider
loop is sequential (backoff sleeps are deliberate rate limiting); across
tasks nothing blocks. Each task is bounded by a caller-level timeout, since a
single resolve_balance call can take minutes when every provider is failing.
Lookups run on daemon threads, so one that is still stuck past the deadline
does not keep the interpreter alive at exit.

The cooldown policy lives beside this driver: the composition root passes a
ProviderHealthTracker to the BalanceService as its listener.

Files that USE this module:
- chainprobe.app (check command)
- tests.test_batch (unit tests)

Files that this module USES:
- chainprobe.application.balance_service (resolve_balance)
- chainprobe.application.rates_service (USD rates)
- chainprobe.application.valuation (base units -> USD)
- chainprobe.config (network decimals, lookup timeout)
"""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from chainprobe.application.balance_service import BalanceService
from chainprobe.application.rates_service import ExchangeRateCache
from chainprobe.application.valuation import usd_value
from chainprobe.config import NETWORKS, settings
from chainprobe.domain.models import BalanceResult, Currency, CurrencyNetworkConfig

log = logging.getLogger(__name__)


@dataclass
class ValuedBalance:
    """A resolved balance together with its USD valuation."""
    currency: str
    address: str
    balance: BalanceResult
    native_usd: float = 0.0
    tokens_usd: Dict[str, float] = field(default_factory=dict)
    timed_out: bool = False

    @property
    def total_usd(self) -> float:
        return self.native_usd + sum(self.tokens_usd.values())


class BalanceBatch:
    def __init__(
        self,
        service: BalanceService,
        rates: ExchangeRateCache,
        networks: Optional[Mapping[Currency, CurrencyNetworkConfig]] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.service = service
        self.rates = rates
        self.networks = networks if networks is not None else NETWORKS
        self.timeout = timeout_seconds or settings.lookup_timeout_seconds

    def value(self, currency: str, address: str, balance: BalanceResult) -> ValuedBalance:
        """Price a BalanceResult in USD with the cached rates."""
        valued = ValuedBalance(currency=currency, address=address, balance=balance)
        try:
            network = self.networks[Currency(currency)]
        except (ValueError, KeyError):
            log.warning("No network config for %s; cannot value balance", currency)
            return valued

        if balance.native:
            valued.native_usd = usd_value(balance.native, network.decimals, self.rates.get_rate(currency))
        for symbol, amount in balance.tokens.items():
            token = network.tokens.get(symbol)
            decimals = token.decimals if token else 18
            valued.tokens_usd[symbol] = usd_value(amount, decimals, self.rates.get_rate(symbol))
        return valued

    def check(self, addresses: Mapping[str, str]) -> Dict[str, ValuedBalance]:
        """
        Resolve and value one address per currency concurrently.
    
        All tasks share one deadline of `timeout_seconds` from submission.
        
        Args:
            addresses: Currency name -> address
            
        Returns:
            Currency name -> ValuedBalance; a task that exceeds the timeout
            yields a zero balance flagged `timed_out`
        """
        results: Dict[str, ValuedBalance] = {}
        if not addresses:
            return results

        deadline = time.monotonic() + self.timeout
        futures = {
            currency: self._start_lookup(currency, address)
            for currency, address in addresses.items()
        }
        for currency, future in futures.items():
            address = addresses[currency]
            try:
                balance = future.result(timeout=max(0.0, deadline - time.monotonic()))
            except FutureTimeoutError:
                log.error("Lookup for %s %s exceeded %ss; reporting zero balance",
                          currency, address, self.timeout)
                results[currency] = ValuedBalance(
                    currency=currency, address=address, balance=BalanceResult(), timed_out=True
                )
                continue
            results[currency] = self.value(currency, address, balance)
            if not balance.is_zero:
                log.info("Found balance on %s %s: %s (~$%.2f)",
                         currency, address, balance, results[currency].total_usd)
        return results

    def _start_lookup(self, currency: str, address: str) -> "Future[BalanceResult]":
        """Run resolve_balance on a daemon thread and hand back its Future."""
        future: "Future[BalanceResult]" = Future()

        def _run():
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self.service.resolve_balance(currency, address))
            except Exception as e:
                future.set_exception(e)

        t = threading.Thread(target=_run, name=f"lookup-{currency}", daemon=True)
        t.start()
        return future
