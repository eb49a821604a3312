# src/chainprobe/adapters/providers/tokens.py
"""
Token Readers - Secondary Token Balance Lookups

Secondary tokens (USDT on Ethereum and Tron) need their own single-shot
lookup once the native balance is known to be positive:
- ERC-20: `balanceOf(address)` contract call through web3
- TRC-20: TronGrid account endpoint, which lists TRC-20 holdings per contract

Files that USE this module:
- chainprobe.application.balance_service (token stage of the pipeline)
- chainprobe.app (builds the per-chain reader table)
- tests.test_tokens (unit tests)

Files that this module USES:
- chainprobe.adapters.providers.base (HttpClient)
- chainprobe.shared.extractor (path extraction and integer conversion)
- web3 (ERC-20 contract reads)
"""
from __future__ import annotations

import logging
import urllib.parse
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import requests
from web3 import Web3
from web3.exceptions import Web3Exception

from chainprobe.adapters.providers.base import HttpClient
from chainprobe.config import settings
from chainprobe.domain.errors import NetworkError
from chainprobe.domain.models import TokenConfig
from chainprobe.shared.extractor import ABSENT, extract, to_base_units

log = logging.getLogger(__name__)

ERC20_BALANCE_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    }
]


class TokenReader(ABC):
    @abstractmethod
    def balance_of(self, address: str, token: TokenConfig) -> int:
        """Return the token balance in base units; raise ProviderError on failure."""
        raise NotImplementedError


class Erc20TokenReader(TokenReader):
    """Reads ERC-20 balances with a `balanceOf` eth_call."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        web3_factory: Optional[Callable[[str], Web3]] = None,
    ):
        self.rpc_url = rpc_url or settings.ethereum_rpc_url
        self._web3_factory = web3_factory or self._default_web3
        self._w3: Optional[Web3] = None

    @staticmethod
    def _default_web3(rpc_url: str) -> Web3:
        return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": settings.http_timeout_seconds}))

    @property
    def w3(self) -> Web3:
        if self._w3 is None:
            self._w3 = self._web3_factory(self.rpc_url)
        return self._w3

    def balance_of(self, address: str, token: TokenConfig) -> int:
        try:
            contract = self.w3.eth.contract(
                address=Web3.to_checksum_address(token.contract),
                abi=ERC20_BALANCE_ABI,
            )
            raw = contract.functions.balanceOf(Web3.to_checksum_address(address)).call()
        except (Web3Exception, requests.exceptions.RequestException, ValueError) as e:
            raise NetworkError(f"ERC-20 balanceOf failed for {token.contract}: {e}") from e
        return to_base_units(raw)


class Trc20TokenReader(TokenReader):
    """
    Reads TRC-20 balances from TronGrid's account endpoint.
    
    The account payload carries `data[0].trc20`, a list of single-entry
    objects mapping contract address to a decimal string amount:
        {"data": [{"trc20": [{"TR7NHq...": "1500000"}]}]}
    An account that was never activated returns an empty `data` list.
    """

    def __init__(self, base_url: Optional[str] = None, http: Optional[HttpClient] = None):
        self.base_url = (base_url or settings.trongrid_url).rstrip("/")
        self.http = http or HttpClient()

    def balance_of(self, address: str, token: TokenConfig) -> int:
        url = f"{self.base_url}/v1/accounts/{urllib.parse.quote(address, safe='')}"
        resp = self.http.send("GET", url, headers={"Accept": "application/json"})
        data: Any = self.http.decode(resp)

        holdings = extract(data, "data[0].trc20")
        if holdings is ABSENT or not isinstance(holdings, list):
            return 0

        for entry in holdings:
            if isinstance(entry, dict) and token.contract in entry:
                return to_base_units(entry[token.contract])
        return 0
