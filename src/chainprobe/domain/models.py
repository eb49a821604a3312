# src/chainprobe/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core business concepts:
- Supported currencies and provider access methods
- Provider descriptors and cooldown entries
- Static network configuration (derivation path, decimals, tokens)
- Balance results and derivation key material

Files that USE this module:
- chainprobe.application.* (all services use domain models)
- chainprobe.adapters.* (adapters consume provider descriptors)
- chainprobe.config.networks (builds the static network table)
- tests.* (tests use domain models for test data)

Files that this module USES:
- None (pure domain layer, no external dependencies)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union


class Currency(str, Enum):
    """Chains with a derivation strategy and network configuration."""
    BITCOIN = "bitcoin"
    ETHEREUM = "ethereum"
    SOLANA = "solana"
    TON = "ton"
    TRON = "tron"


class AccessMethod(str, Enum):
    """How a provider is queried and how its payload becomes a balance."""
    REST = "rest"  # GET on the URL template, numeric value at response_path
    JSON_RPC = "json_rpc"  # POST a JSON-RPC 2.0 body, numeric value at response_path
    UTXO_STATS = "utxo_stats"  # GET, funded_txo_sum - spent_txo_sum of the object at response_path


@dataclass(frozen=True)
class ProviderDescriptor:
    """
    A named external endpoint able to answer balance queries for one currency.
    
    Attributes:
        name: Unique name within the currency's provider list
        url_template: Endpoint URL; "{address}" is replaced with the queried address
        api_key: Optional API key appended to the request
        response_path: Dotted path of the balance inside the response (e.g. "data[0].balance")
        access_method: How the endpoint is called (REST, JSON-RPC, UTXO stats)
        is_text: Response body is plain text rather than JSON
        api_key_param: Query parameter carrying the API key
        api_key_header: When set, the API key is sent in this header instead
        rpc_method: JSON-RPC method name
        rpc_params: JSON-RPC params; "{address}" strings are substituted
        status_path: Path of an API-level status flag in the response
        status_ok: Value of status_path that means success
    """
    name: str
    url_template: str
    api_key: Optional[str] = None
    response_path: Optional[str] = None
    access_method: AccessMethod = AccessMethod.REST
    is_text: bool = False
    api_key_param: str = "apikey"
    api_key_header: Optional[str] = None
    rpc_method: Optional[str] = None
    rpc_params: Union[Tuple[Any, ...], Mapping[str, Any], None] = None
    status_path: Optional[str] = None
    status_ok: Optional[str] = None


@dataclass(frozen=True)
class CooldownEntry:
    """Provider excluded from rotation until the `until` clock reading (seconds)."""
    currency: str
    provider: str
    until: float


@dataclass(frozen=True)
class TokenConfig:
    """Secondary token hosted on a base chain."""
    contract: str
    decimals: int


@dataclass(frozen=True)
class CurrencyNetworkConfig:
    """
    Static per-chain configuration.
    
    Attributes:
        derivation_path: Standard HD derivation path for the chain
        decimals: Decimal exponent of the native unit (8 for BTC, 18 for ETH, ...)
        tokens: Secondary token symbol -> TokenConfig
    """
    derivation_path: str
    decimals: int
    tokens: Mapping[str, TokenConfig] = field(default_factory=dict)


@dataclass
class BalanceResult:
    """
    Balances in the smallest indivisible unit of each asset.
    
    Attributes:
        native: Native balance (satoshis, wei, lamports, nanotons, sun)
        tokens: Token symbol -> strictly positive token balance
    """
    native: int = 0
    tokens: Dict[str, int] = field(default_factory=dict)

    @property
    def is_zero(self) -> bool:
        return self.native == 0 and not self.tokens


@dataclass(frozen=True)
class KeyMaterial:
    """
    Root key material shared by all derivation strategies.
    
    Attributes:
        seed: BIP39 seed bytes
        mnemonic: Mnemonic phrase (needed by strategies that derive from words)
        root: Optional pre-built hierarchical root key (bip_utils Bip32 object)
        passphrase: BIP39 passphrase the seed was generated with
    """
    seed: bytes = b""
    mnemonic: Optional[str] = None
    root: Optional[Any] = None
    passphrase: str = ""
