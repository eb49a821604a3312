# src/chainprobe/application/balance_service.py
"""
Balance Service - Balance Resolution Pipeline

This module contains the core business logic for resolving an address's
balance on one chain. It walks the providers handed out by the registry,
retries each one with exponential backoff, extracts the balance from the
provider-specific response, and then looks up secondary tokens.

resolve_balance never raises: exhaustion, missing providers and unexpected
failures all surface as a zero BalanceResult plus log records, so a single
failed lookup cannot abort a larger batch.

Provider handling is a small state machine:

    SELECTING -> REQUESTING -> SUCCEEDED
                     |  ^
                     v  |
                  RETRYING            (backoff sleep, same provider)
                     |
                     v
                 EXHAUSTED -> SELECTING (next provider)
    SELECTING -> ALL_EXHAUSTED        (no eligible provider left)

Files that USE this module:
- chainprobe.application.batch (one resolve_balance per currency task)
- chainprobe.app (composition root)
- tests.test_balance_service (unit tests)

Files that this module USES:
- chainprobe.application.registry (ProviderRegistry for rotation)
- chainprobe.adapters.providers (accessors and token readers)
- chainprobe.shared.extractor (response path extraction)
- chainprobe.config (retry settings and network table)
"""
from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Set

from chainprobe.adapters.providers.base import BalanceAccessor, HttpClient
from chainprobe.adapters.providers.jsonrpc import JsonRpcAccessor
from chainprobe.adapters.providers.rest import RestAccessor
from chainprobe.adapters.providers.tokens import TokenReader
from chainprobe.application.registry import ProviderRegistry
from chainprobe.config import NETWORKS, settings
from chainprobe.domain.errors import ExhaustedError, MalformedResponseError, ProviderError, RateLimitedError
from chainprobe.domain.models import (
    AccessMethod,
    BalanceResult,
    CurrencyNetworkConfig,
    ProviderDescriptor,
)
from chainprobe.shared.extractor import ABSENT, extract, to_base_units

log = logging.getLogger(__name__)


class ResolutionState(Enum):
    SELECTING = "selecting"
    REQUESTING = "requesting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    ALL_EXHAUSTED = "all_exhausted"


class ResolutionListener(Protocol):
    """Receives per-provider outcomes; ProviderHealthTracker implements the cooldown policy on it."""

    def on_success(self, currency: str, provider_name: str) -> None:
        ...

    def on_provider_exhausted(self, currency: str, provider_name: str, error: Optional[Exception]) -> None:
        ...


def _currency_key(currency: Any) -> str:
    return str(getattr(currency, "value", currency))


def extract_balance(provider: ProviderDescriptor, body: Any) -> int:
    """
    Turn a decoded provider response into a native balance.
    
    Args:
        provider: Descriptor with response_path, access method and status flag
        body: Decoded JSON (or text) body
        
    Returns:
        Balance in base units; 0 when the response path is absent
        
    Raises:
        MalformedResponseError: On a failed status flag or a value that is not
            a non-negative integer
    """
    if provider.status_path:
        status = extract(body, provider.status_path)
        if status is ABSENT or str(status) != provider.status_ok:
            message = extract(body, "message")
            raise MalformedResponseError(
                f"{provider.name} returned status {status!r}: {message if message is not ABSENT else 'no message'}"
            )

    value = extract(body, provider.response_path)
    if value is ABSENT:
        return 0

    if provider.access_method == AccessMethod.UTXO_STATS:
        if not isinstance(value, dict):
            raise MalformedResponseError(f"{provider.name} stats is not an object: {value!r}")
        funded = to_base_units(value.get("funded_txo_sum", 0))
        spent = to_base_units(value.get("spent_txo_sum", 0))
        if spent > funded:
            raise MalformedResponseError(f"{provider.name} reports spent {spent} > funded {funded}")
        return funded - spent

    return to_base_units(value)


class BalanceService:
    """
    Resolves native and secondary-token balances for (currency, address).
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        accessors: Optional[Mapping[AccessMethod, BalanceAccessor]] = None,
        token_readers: Optional[Mapping[str, TokenReader]] = None,
        networks: Optional[Mapping[Any, CurrencyNetworkConfig]] = None,
        sleep: Optional[Callable[[float], None]] = None,
        max_attempts: Optional[int] = None,
        backoff_initial_ms: Optional[int] = None,
        backoff_multiplier: Optional[float] = None,
        listener: Optional[ResolutionListener] = None,
    ):
        """
        Initialize the balance service.
        
        Args:
            registry: Shared provider registry (rotation + cooldowns)
            accessors: Access method -> accessor; REST/JSON-RPC defaults share one HttpClient
            token_readers: Currency name -> reader for that chain's secondary tokens
            networks: Currency -> network config (defaults to the static table)
            sleep: Called with seconds between retries (defaults to time.sleep)
            max_attempts: Attempts per provider (defaults to settings.max_attempts)
            backoff_initial_ms: First backoff delay (defaults to settings.backoff_initial_ms)
            backoff_multiplier: Backoff growth factor (defaults to settings.backoff_multiplier)
            listener: Optional receiver of per-provider outcomes
        """
        self.registry = registry
        if accessors is None:
            http = HttpClient()
            rest = RestAccessor(http)
            accessors = {
                AccessMethod.REST: rest,
                AccessMethod.UTXO_STATS: rest,
                AccessMethod.JSON_RPC: JsonRpcAccessor(http),
            }
        self.accessors = dict(accessors)
        self.token_readers = {_currency_key(k): v for k, v in (token_readers or {}).items()}
        self.networks = {_currency_key(k): v for k, v in (networks if networks is not None else NETWORKS).items()}
        self._sleep = sleep or time.sleep
        self.max_attempts = max_attempts or settings.max_attempts
        self.backoff_initial_ms = settings.backoff_initial_ms if backoff_initial_ms is None else backoff_initial_ms
        self.backoff_multiplier = backoff_multiplier or settings.backoff_multiplier
        self.listener = listener

    def backoff_ms(self, failed_attempt: int) -> float:
        """Delay after the given failed attempt (1-based): 4000, 8000, 16000, ..."""
        return self.backoff_initial_ms * self.backoff_multiplier ** (failed_attempt - 1)

    def resolve_balance(self, currency: str, address: str) -> BalanceResult:
        """
        Resolve the balance of `address` on `currency`.
        
        Returns:
            BalanceResult with the native balance and strictly positive token
            balances; a zero result when nothing could be resolved
        """
        currency = _currency_key(currency)
        try:
            return self._resolve(currency, address)
        except Exception:
            log.exception("Unexpected error resolving %s balance for %s; reporting zero", currency, address)
            return BalanceResult()

    def _resolve(self, currency: str, address: str) -> BalanceResult:
        budget = len(self.registry.providers(currency))
        if budget == 0:
            log.debug("No providers configured for %s; skipping %s", currency, address)
            return BalanceResult()

        try:
            native = self._resolve_native(currency, address, budget)
        except ExhaustedError as e:
            log.error("%s; reporting zero balance", e)
            return BalanceResult()

        result = BalanceResult(native=native)
        if native > 0:
            result.tokens = self._resolve_tokens(currency, address)
        return result

    def _resolve_native(self, currency: str, address: str, budget: int) -> int:
        """
        Run the provider state machine.
        
        At most `budget` distinct providers are tried, so a rotation that wraps
        around (or a fully cooled-down list) ends the lookup.
        
        Raises:
            ExhaustedError: When no provider produced a balance
        """
        state = ResolutionState.SELECTING
        provider: Optional[ProviderDescriptor] = None
        tried: Set[str] = set()
        attempt = 0
        native = 0
        last_error: Optional[Exception] = None

        while True:
            if state is ResolutionState.SELECTING:
                provider = self.registry.get_next_provider(currency)
                if provider is None or provider.name in tried or len(tried) >= budget:
                    state = ResolutionState.ALL_EXHAUSTED
                    continue
                tried.add(provider.name)
                attempt = 0
                last_error = None
                state = ResolutionState.REQUESTING

            elif state is ResolutionState.REQUESTING:
                attempt += 1
                try:
                    native = self._attempt(provider, address)
                except ProviderError as e:
                    last_error = e
                    remaining = self.max_attempts - attempt
                    self._log_failure(currency, provider, address, e, attempt, remaining)
                    state = ResolutionState.RETRYING if remaining > 0 else ResolutionState.EXHAUSTED
                else:
                    state = ResolutionState.SUCCEEDED

            elif state is ResolutionState.RETRYING:
                self._sleep(self.backoff_ms(attempt) / 1000.0)
                state = ResolutionState.REQUESTING

            elif state is ResolutionState.EXHAUSTED:
                log.warning("All %d attempts failed for %s/%s. Moving to next provider.",
                            self.max_attempts, currency, provider.name)
                if self.listener is not None:
                    self.listener.on_provider_exhausted(currency, provider.name, last_error)
                state = ResolutionState.SELECTING

            elif state is ResolutionState.SUCCEEDED:
                log.debug("%s balance for %s from %s: %d", currency, address, provider.name, native)
                if self.listener is not None:
                    self.listener.on_success(currency, provider.name)
                return native

            else:  # ALL_EXHAUSTED
                raise ExhaustedError(
                    f"All providers failed for {currency} address {address} ({len(tried)} tried)"
                )

    def _attempt(self, provider: ProviderDescriptor, address: str) -> int:
        accessor = self.accessors.get(provider.access_method)
        if accessor is None:
            raise MalformedResponseError(f"No accessor for access method {provider.access_method}")
        body = accessor.fetch(provider, address)
        return extract_balance(provider, body)

    def _log_failure(self, currency: str, provider: ProviderDescriptor, address: str,
                     error: ProviderError, attempt: int, remaining: int) -> None:
        wait = f", retrying in {self.backoff_ms(attempt) / 1000.0:g}s" if remaining > 0 else ""
        if isinstance(error, RateLimitedError):
            log.warning("Rate limited by %s/%s checking %s (retries left: %d%s)",
                        currency, provider.name, address, remaining, wait)
        else:
            log.warning("Error with %s/%s checking %s (retries left: %d%s): %s",
                        currency, provider.name, address, remaining, wait, error)

    def _resolve_tokens(self, currency: str, address: str) -> Dict[str, int]:
        """Single-shot lookup of each configured token; keeps only positive balances."""
        tokens: Dict[str, int] = {}
        network = self.networks.get(currency)
        if network is None or not network.tokens:
            return tokens

        reader = self.token_readers.get(currency)
        if reader is None:
            log.debug("No token reader wired for %s; skipping %s", currency, ", ".join(network.tokens))
            return tokens

        for symbol, token in network.tokens.items():
            try:
                amount = reader.balance_of(address, token)
            except ProviderError as e:
                log.warning("Token lookup %s/%s failed for %s: %s", currency, symbol, address, e)
                continue
            except Exception:
                # only this token is lost; the native balance stands
                log.exception("Token reader crashed on %s/%s for %s", currency, symbol, address)
                continue
            if amount > 0:
                tokens[symbol] = amount
                log.info("Found %s %s balance for %s: %d", currency, symbol, address, amount)
        return tokens
