# src/chainprobe/__init__.py
"""
ChainProbe - Multi-chain Balance Resolution

Read-only balance lookups for addresses on several blockchains through
third-party explorer and RPC endpoints, with provider rotation, cooldowns,
retry with backoff, and USD valuation from a background-refreshed rate cache.
"""

__version__ = "0.1.0"
