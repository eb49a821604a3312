# src/chainprobe/adapters/providers/base.py
"""
Base Accessor Interface for Balance Providers

This module defines the contract every provider access method implements and
the shared HTTP plumbing that maps `requests` failures onto the domain error
taxonomy (NetworkError, RateLimitedError, MalformedResponseError).

Files that USE this module:
- chainprobe.adapters.providers.rest (RestAccessor implements BalanceAccessor)
- chainprobe.adapters.providers.jsonrpc (JsonRpcAccessor implements BalanceAccessor)
- chainprobe.adapters.providers.tokens (token readers reuse HttpClient)
- chainprobe.application.balance_service (dispatches to accessors)

Files that this module USES:
- chainprobe.config (HTTP timeout)
- chainprobe.domain (descriptor type and errors)
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests

from chainprobe.config import settings
from chainprobe.domain.errors import MalformedResponseError, NetworkError, RateLimitedError
from chainprobe.domain.models import ProviderDescriptor

log = logging.getLogger(__name__)

USER_AGENT = "chainprobe/0.1"


class HttpClient:
    """Thin wrapper around a requests session with domain error mapping."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[int] = None):
        self.session = session or requests.Session()
        self.timeout = timeout or settings.http_timeout_seconds

    def send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Issue a request and raise a domain error for anything but 2xx.
        
        Raises:
            RateLimitedError: HTTP 429
            NetworkError: Timeout, connection failure or other non-2xx status
        """
        headers = {"User-Agent": USER_AGENT, **kwargs.pop("headers", {})}
        try:
            resp = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise NetworkError(f"timeout after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"request failed: {e}") from e

        if resp.status_code == 429:
            raise RateLimitedError()
        if not 200 <= resp.status_code < 300:
            raise NetworkError(f"HTTP {resp.status_code}", status_code=resp.status_code)
        return resp

    @staticmethod
    def decode(resp: requests.Response, is_text: bool = False) -> Any:
        """
        Decode a response body as text or JSON.
        
        Raises:
            MalformedResponseError: If a JSON body cannot be parsed
        """
        if is_text:
            return resp.text
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponseError(f"invalid JSON: {e}") from e


class BalanceAccessor(ABC):
    """Queries one provider for one address and returns the decoded body."""

    def __init__(self, http: Optional[HttpClient] = None):
        self.http = http or HttpClient()

    @abstractmethod
    def fetch(self, provider: ProviderDescriptor, address: str) -> Any:
        """Return the decoded response body; raise ProviderError on failure."""
        raise NotImplementedError
