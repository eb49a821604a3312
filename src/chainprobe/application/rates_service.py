# src/chainprobe/application/rates_service.py
"""
Rates Service - Exchange Rate Cache

Keeps a process-wide mapping currency -> USD price, refreshed from a single
price feed on a fixed interval by one background thread. Readers never block
on the network: they read whatever the last refresh stored.

Refresh semantics:
- success: symbols present in the response overwrite their cached value,
  others keep their previous value
- total failure (network error or explicit error indicator): the whole cache
  is replaced by the hardcoded fallback prices

Files that USE this module:
- chainprobe.application.batch (USD valuation of resolved balances)
- chainprobe.app (starts the refresher)
- tests.test_rates_service (unit tests)

Files that this module USES:
- chainprobe.adapters.pricing.cryptocompare (CryptoComparePriceFeed)
- chainprobe.config (refresh interval)
"""
from __future__ import annotations

import logging
import threading
from typing import Dict, Mapping, Optional, Protocol

from chainprobe.config import settings
from chainprobe.domain.errors import PriceFeedError

log = logging.getLogger(__name__)

# Cache key -> ticker symbol requested from the feed
TRACKED_SYMBOLS: Mapping[str, str] = {
    "bitcoin": "BTC",
    "ethereum": "ETH",
    "solana": "SOL",
    "ton": "TON",
    "tron": "TRX",
    "usdt": "USDT",
}

FALLBACK_RATES: Mapping[str, float] = {
    "bitcoin": 60000.0,
    "ethereum": 3000.0,
    "solana": 150.0,
    "ton": 6.0,
    "tron": 0.12,
    "usdt": 1.0,
}


class PriceFeed(Protocol):
    """Protocol for price feeds: ticker symbols in, symbol -> USD price out."""
    def fetch(self, symbols) -> Dict[str, float]:
        ...


class ExchangeRateCache:
    """
    Single-writer, many-reader USD price cache.
    
    refresh_rates() builds a complete new mapping and swaps it in with one
    assignment, so readers see either the old or the new rates, never a mix
    produced by a half-finished parse.
    """
    def __init__(
        self,
        feed: PriceFeed,
        tracked: Optional[Mapping[str, str]] = None,
        fallback: Optional[Mapping[str, float]] = None,
    ):
        self.feed = feed
        self.tracked = dict(tracked or TRACKED_SYMBOLS)
        self.fallback = dict(fallback or FALLBACK_RATES)
        self._rates: Dict[str, float] = {}

    def refresh_rates(self) -> bool:
        """
        Refresh from the feed.
        
        Returns:
            True if live prices were applied, False if fallback prices were used
        """
        log.info("Updating exchange rates for %s", ", ".join(self.tracked.values()))
        try:
            prices = self.feed.fetch(self.tracked.values())
        except PriceFeedError as e:
            log.error("Could not update exchange rates, using hardcoded fallback: %s", e)
            self._rates = dict(self.fallback)
            return False
        except Exception:
            log.exception("Price feed crashed, using hardcoded fallback")
            self._rates = dict(self.fallback)
            return False

        by_symbol = {symbol: key for key, symbol in self.tracked.items()}
        updated = dict(self._rates)
        for symbol, price in prices.items():
            key = by_symbol.get(symbol)
            if key is not None:
                updated[key] = price
        self._rates = updated
        log.info("Exchange rates updated: %s", updated)
        return True

    def get_rate(self, currency: str) -> float:
        """Last cached USD price, or 0.0 if the currency was never priced."""
        return self._rates.get(str(getattr(currency, "value", currency)), 0.0)

    def snapshot(self) -> Dict[str, float]:
        return dict(self._rates)


class RateRefresher:
    """Runs refresh_rates once synchronously, then on a fixed interval in a daemon thread."""

    def __init__(self, cache: ExchangeRateCache, interval_seconds: Optional[float] = None):
        self.cache = cache
        self.interval = interval_seconds or settings.rates_refresh_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self.cache.refresh_rates()
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="rate-refresher", daemon=True)
        self._thread.start()
        log.info("Exchange rate refresher started (every %ss)", self.interval)

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.cache.refresh_rates()
            except Exception:
                # keep the refresher alive; the next tick retries
                log.exception("Exchange rate refresh crashed")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
