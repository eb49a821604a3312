# src/chainprobe/application/registry.py
"""
Provider Registry - Rotation and Cooldown State

This module owns the shared mutable state of provider selection: the ordered
provider list per currency, the round-robin position per currency and the
cooldown clock per (currency, provider). One ProviderRegistry is built at
startup and handed to every service that resolves balances; tests build
their own so no state leaks between cases.

Files that USE this module:
- chainprobe.application.balance_service (asks for the next eligible provider)
- chainprobe.application.health (sets cooldowns after repeated failures)
- chainprobe.app (registers default providers)
- tests.test_registry (unit tests)

Files that this module USES:
- chainprobe.domain.models (ProviderDescriptor, CooldownEntry)
- chainprobe.shared.validators (descriptor sanity checks)
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from chainprobe.domain.models import AccessMethod, CooldownEntry, ProviderDescriptor
from chainprobe.shared.validators import validate_url_template

log = logging.getLogger(__name__)

Clock = Callable[[], float]


class ProviderRegistry:
    """
    Round-robin provider selection with per-provider cooldowns.
    
    Every public method takes the registry lock, so concurrent lookup tasks
    never observe a half-updated rotation index. The clock returns seconds;
    cooldown durations are given in milliseconds.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock: Clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._providers: Dict[str, Tuple[ProviderDescriptor, ...]] = {}
        self._last_index: Dict[str, int] = {}
        self._cooldowns: Dict[Tuple[str, str], float] = {}

    def register_providers(self, currency: str, providers: Iterable[ProviderDescriptor]) -> None:
        """
        Store the ordered provider list for a currency, replacing any prior list.
        
        Raises:
            ValueError: On duplicate provider names or an unusable URL template
        """
        providers = tuple(providers)
        names = [p.name for p in providers]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate provider names for {currency}: {names}")
        for p in providers:
            needs_address = p.access_method != AccessMethod.JSON_RPC
            if not validate_url_template(p.url_template, requires_address=needs_address):
                raise ValueError(f"Invalid URL template for provider {p.name}: {p.url_template!r}")

        with self._lock:
            self._providers[currency] = providers
            self._last_index.pop(currency, None)
        log.info("Registered %d provider(s) for %s: %s", len(providers), currency, ", ".join(names) or "-")

    def providers(self, currency: str) -> List[ProviderDescriptor]:
        with self._lock:
            return list(self._providers.get(currency, ()))

    def get_next_provider(self, currency: str) -> Optional[ProviderDescriptor]:
        """
        Return the next provider after the last one returned that is not cooling down.
        
        Visits each provider at most once per call, so it terminates even when
        every provider is in cooldown.
        
        Returns:
            The selected provider, or None if the list is empty or all are cooling down
        """
        with self._lock:
            providers = self._providers.get(currency, ())
            if not providers:
                return None

            now = self._clock()
            index = self._last_index.get(currency, -1)
            for _ in range(len(providers)):
                index = (index + 1) % len(providers)
                provider = providers[index]
                if now >= self._cooldowns.get((currency, provider.name), 0.0):
                    self._last_index[currency] = index
                    return provider
            return None

    def set_cooldown(self, currency: str, provider_name: str, duration_ms: float) -> CooldownEntry:
        """Exclude a provider from rotation until now + duration_ms."""
        with self._lock:
            until = self._clock() + duration_ms / 1000.0
            self._cooldowns[(currency, provider_name)] = until
        log.warning("Provider %s/%s cooling down for %.1fs", currency, provider_name, duration_ms / 1000.0)
        return CooldownEntry(currency=currency, provider=provider_name, until=until)

    def is_cooling_down(self, currency: str, provider_name: str) -> bool:
        with self._lock:
            return self._clock() < self._cooldowns.get((currency, provider_name), 0.0)

    def cooldowns(self) -> List[CooldownEntry]:
        """Snapshot of cooldowns that have not expired yet."""
        with self._lock:
            now = self._clock()
            return [
                CooldownEntry(currency=cur, provider=name, until=until)
                for (cur, name), until in self._cooldowns.items()
                if until > now
            ]
