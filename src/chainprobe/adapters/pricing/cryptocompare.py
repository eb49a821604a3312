# src/chainprobe/adapters/pricing/cryptocompare.py
"""
CryptoCompare Price Feed for USD Exchange Rates

This module implements the CryptoCompare `pricemulti` client used to refresh
the exchange rate cache. One GET returns USD prices for every tracked symbol:
    {"BTC": {"USD": 64000.1}, "ETH": {"USD": 3100.5}}
On failure CryptoCompare still answers 200 but with
    {"Response": "Error", "Message": "..."}
which is treated as a feed failure.

Files that USE this module:
- chainprobe.application.rates_service (ExchangeRateCache uses the feed)
- tests.test_rates_service (unit tests)

Files that this module USES:
- chainprobe.config (settings for feed URL and timeout)
- chainprobe.domain.errors (PriceFeedError)
"""
import logging
from typing import Dict, Iterable, Optional

import requests

from chainprobe.config import settings
from chainprobe.domain.errors import PriceFeedError

log = logging.getLogger(__name__)


class CryptoComparePriceFeed:
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize CryptoCompare price feed.
        
        Args:
            base_url: Optional custom API URL (defaults to settings.price_feed_url)
            timeout: Optional HTTP timeout in seconds (defaults to settings.http_timeout_seconds)
            session: Optional requests session (a fresh one is created otherwise)
        """
        self.url = base_url or settings.price_feed_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.session = session or requests.Session()

    def fetch(self, symbols: Iterable[str]) -> Dict[str, float]:
        """
        Fetch USD prices for the given ticker symbols.
        
        Args:
            symbols: Ticker symbols such as "BTC", "ETH", "USDT"
            
        Returns:
            Mapping symbol -> USD price for the symbols present in the response
            
        Raises:
            PriceFeedError: On network failure, non-2xx status, invalid JSON,
                or an explicit error indicator in the body
        """
        params = {"fsyms": ",".join(symbols), "tsyms": "USD"}
        try:
            resp = self.session.get(self.url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.exceptions.Timeout as e:
            raise PriceFeedError(f"CryptoCompare timeout after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise PriceFeedError(f"CryptoCompare request failed: {e}") from e
        except ValueError as e:
            raise PriceFeedError(f"CryptoCompare returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise PriceFeedError(f"CryptoCompare returned non-dict JSON: {type(data).__name__}")
        if data.get("Response") == "Error":
            raise PriceFeedError(f"CryptoCompare API error: {data.get('Message', 'Unknown error')}")

        prices: Dict[str, float] = {}
        for symbol, quote in data.items():
            if not isinstance(quote, dict):
                continue
            usd = quote.get("USD")
            if isinstance(usd, (int, float)) and not isinstance(usd, bool) and usd > 0:
                prices[symbol] = float(usd)
            else:
                log.warning("CryptoCompare quote for %s has no usable USD price: %r", symbol, quote)
        return prices
