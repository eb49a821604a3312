# src/chainprobe/adapters/providers/rest.py
"""
REST Accessor - Generic URL-template Provider Client

Handles every provider that answers a plain GET: the address is substituted
into the URL template and the API key is appended as a query parameter (or
sent as a header when the descriptor asks for it).

Files that USE this module:
- chainprobe.application.balance_service (REST and UTXO_STATS access methods)
- tests.test_accessors (unit tests)

Files that this module USES:
- chainprobe.adapters.providers.base (BalanceAccessor, HttpClient)
"""
from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict

from chainprobe.adapters.providers.base import BalanceAccessor
from chainprobe.domain.models import ProviderDescriptor

log = logging.getLogger(__name__)


def build_url(provider: ProviderDescriptor, address: str) -> str:
    """
    Substitute the address into the template and append the API key.
    
    Args:
        provider: Descriptor with url_template and optional api_key
        address: Address to query (URL-quoted before substitution)
        
    Returns:
        Request URL, e.g. ".../balance&address=0xabc&tag=latest&apikey=KEY"
    """
    url = provider.url_template.replace("{address}", urllib.parse.quote(address, safe=""))
    if provider.api_key and not provider.api_key_header:
        sep = "&" if urllib.parse.urlparse(url).query else "?"
        url += f"{sep}{urllib.parse.urlencode({provider.api_key_param: provider.api_key})}"
    return url


class RestAccessor(BalanceAccessor):
    def fetch(self, provider: ProviderDescriptor, address: str) -> Any:
        headers: Dict[str, str] = {}
        if provider.api_key and provider.api_key_header:
            headers[provider.api_key_header] = provider.api_key
        if not provider.is_text:
            headers["Accept"] = "application/json"

        url = build_url(provider, address)
        log.debug("GET %s (provider=%s)", provider.url_template, provider.name)
        resp = self.http.send("GET", url, headers=headers)
        return self.http.decode(resp, is_text=provider.is_text)
