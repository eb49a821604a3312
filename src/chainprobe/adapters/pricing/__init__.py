# src/chainprobe/adapters/pricing/__init__.py
"""
Pricing Adapters - External Price Feeds
"""

from chainprobe.adapters.pricing.cryptocompare import CryptoComparePriceFeed

__all__ = ["CryptoComparePriceFeed"]
