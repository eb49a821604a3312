# src/chainprobe/adapters/providers/__init__.py
"""
Provider Adapters - External Balance API Clients

This package contains the access methods used to query balance providers
(REST, JSON-RPC) and the secondary token readers.
"""

from chainprobe.adapters.providers.base import BalanceAccessor, HttpClient
from chainprobe.adapters.providers.jsonrpc import JsonRpcAccessor
from chainprobe.adapters.providers.rest import RestAccessor
from chainprobe.adapters.providers.tokens import Erc20TokenReader, TokenReader, Trc20TokenReader

__all__ = [
    "BalanceAccessor",
    "HttpClient",
    "JsonRpcAccessor",
    "RestAccessor",
    "TokenReader",
    "Erc20TokenReader",
    "Trc20TokenReader",
]
