# src/chainprobe/adapters/providers/jsonrpc.py
"""
JSON-RPC Accessor - Providers Spoken to over JSON-RPC 2.0

Chains such as Solana (getBalance), TON via toncenter (getAddressBalance) and
Ethereum nodes (eth_getBalance) are queried by POSTing a JSON-RPC envelope
rather than by a flat REST GET. The method and params come from the
provider descriptor; "{address}" placeholders inside params are substituted.

Files that USE this module:
- chainprobe.application.balance_service (JSON_RPC access method)
- tests.test_accessors (unit tests)

Files that this module USES:
- chainprobe.adapters.providers.base (BalanceAccessor, HttpClient)
- chainprobe.domain.errors (MalformedResponseError for RPC-level errors)
"""
from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, Mapping

from chainprobe.adapters.providers.base import BalanceAccessor
from chainprobe.domain.errors import MalformedResponseError
from chainprobe.domain.models import ProviderDescriptor

log = logging.getLogger(__name__)

_request_ids = itertools.count(1)


def substitute_address(params: Any, address: str) -> Any:
    """Recursively replace "{address}" inside strings, lists, tuples and dicts."""
    if isinstance(params, str):
        return params.replace("{address}", address)
    if isinstance(params, Mapping):
        return {k: substitute_address(v, address) for k, v in params.items()}
    if isinstance(params, (list, tuple)):
        return [substitute_address(v, address) for v in params]
    return params


def build_payload(provider: ProviderDescriptor, address: str) -> Dict[str, Any]:
    if not provider.rpc_method:
        raise ValueError(f"Provider {provider.name} has no rpc_method configured")
    params = provider.rpc_params if provider.rpc_params is not None else ("{address}",)
    return {
        "jsonrpc": "2.0",
        "id": next(_request_ids),
        "method": provider.rpc_method,
        "params": substitute_address(params, address),
    }


class JsonRpcAccessor(BalanceAccessor):
    def fetch(self, provider: ProviderDescriptor, address: str) -> Any:
        """
        POST the JSON-RPC call and return the whole envelope.
        
        The envelope is returned (not just "result") so response paths stay
        uniform: "result", "result.value".
        
        Raises:
            MalformedResponseError: If the envelope carries an "error" member or is not an object
        """
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if provider.api_key and provider.api_key_header:
            headers[provider.api_key_header] = provider.api_key

        payload = build_payload(provider, address)
        log.debug("POST %s %s (provider=%s)", provider.url_template, provider.rpc_method, provider.name)
        resp = self.http.send("POST", provider.url_template, json=payload, headers=headers)
        data = self.http.decode(resp)

        if not isinstance(data, dict):
            raise MalformedResponseError(f"JSON-RPC response is not an object: {type(data).__name__}")
        if data.get("error"):
            err = data["error"]
            message = err.get("message", err) if isinstance(err, dict) else err
            raise MalformedResponseError(f"JSON-RPC error from {provider.name}: {message}")
        # toncenter wraps results as {"ok": false, "error": "..."} on failure
        if data.get("ok") is False:
            raise MalformedResponseError(f"{provider.name} reported failure: {data.get('error', 'unknown')}")
        return data
