# src/chainprobe/config/networks.py
"""
Network Table - Static Chain Configuration and Default Providers

Holds the read-only CurrencyNetworkConfig per chain and builds the default
provider lists registered at startup. Adding a REST provider is a matter of
adding a descriptor here: URL template plus response path.

Files that USE this module:
- chainprobe.app (registers default providers)
- chainprobe.application.balance_service (token configuration)
- chainprobe.application.batch (decimals for USD valuation)
- chainprobe.application.derivation (derivation paths)

Files that this module USES:
- chainprobe.config.settings (API keys and endpoints)
- chainprobe.domain.models (descriptor and network types)
"""
from __future__ import annotations

from typing import Dict, List, Mapping

from chainprobe.config.settings import Settings
from chainprobe.domain.errors import UnsupportedCurrencyError
from chainprobe.domain.models import (
    AccessMethod,
    Currency,
    CurrencyNetworkConfig,
    ProviderDescriptor,
    TokenConfig,
)

NETWORKS: Mapping[Currency, CurrencyNetworkConfig] = {
    Currency.BITCOIN: CurrencyNetworkConfig(
        derivation_path="m/44'/0'/0'/0/0",
        decimals=8,
    ),
    Currency.ETHEREUM: CurrencyNetworkConfig(
        derivation_path="m/44'/60'/0'/0/0",
        decimals=18,
        tokens={
            "usdt": TokenConfig(contract="0xdac17f958d2ee523a2206206994597c13d831ec7", decimals=6),
        },
    ),
    Currency.SOLANA: CurrencyNetworkConfig(
        derivation_path="m/44'/501'/0'/0'",
        decimals=9,
    ),
    Currency.TON: CurrencyNetworkConfig(
        derivation_path="m/44'/607'/0'/0'",
        decimals=9,
    ),
    Currency.TRON: CurrencyNetworkConfig(
        derivation_path="m/44'/195'/0'/0/0",
        decimals=6,
        tokens={
            "usdt": TokenConfig(contract="TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t", decimals=6),
        },
    ),
}


def get_network(currency: str) -> CurrencyNetworkConfig:
    """
    Look up the network config for a currency name.
    
    Raises:
        UnsupportedCurrencyError: If the currency is not in the table
    """
    try:
        return NETWORKS[Currency(currency)]
    except ValueError as e:
        raise UnsupportedCurrencyError(currency) from e


def default_providers(settings: Settings) -> Dict[str, List[ProviderDescriptor]]:
    """
    Build the provider lists registered at startup, keyed by currency name.
    
    Providers that need a key are only included when the key is configured,
    except Etherscan which answers keyless requests at a reduced rate.
    """
    bitcoin: List[ProviderDescriptor] = [
        ProviderDescriptor(
            name="mempool_space",
            url_template="https://mempool.space/api/address/{address}",
            response_path="chain_stats",
            access_method=AccessMethod.UTXO_STATS,
        ),
        ProviderDescriptor(
            name="blockstream",
            url_template="https://blockstream.info/api/address/{address}",
            response_path="chain_stats",
            access_method=AccessMethod.UTXO_STATS,
        ),
        ProviderDescriptor(
            name="blockchain_info",
            url_template="https://blockchain.info/q/addressbalance/{address}",
            is_text=True,
        ),
    ]
    if settings.blockcypher_token:
        bitcoin.append(
            ProviderDescriptor(
                name="blockcypher",
                url_template="https://api.blockcypher.com/v1/btc/main/addrs/{address}/balance",
                api_key=settings.blockcypher_token,
                api_key_param="token",
                response_path="final_balance",
            )
        )

    ethereum = [
        ProviderDescriptor(
            name="etherscan",
            url_template=(
                "https://api.etherscan.io/v2/api?chainid=1&module=account"
                "&action=balance&address={address}&tag=latest"
            ),
            api_key=settings.etherscan_key or None,
            response_path="result",
            status_path="status",
            status_ok="1",
        ),
        ProviderDescriptor(
            name="ethereum_rpc",
            url_template=settings.ethereum_rpc_url,
            access_method=AccessMethod.JSON_RPC,
            rpc_method="eth_getBalance",
            rpc_params=("{address}", "latest"),
            response_path="result",
        ),
    ]

    solana = [
        ProviderDescriptor(
            name="solana",
            url_template=settings.solana_rpc_url,
            access_method=AccessMethod.JSON_RPC,
            rpc_method="getBalance",
            rpc_params=("{address}",),
            response_path="result.value",
        ),
    ]

    tron = [
        ProviderDescriptor(
            name="trongrid",
            url_template=settings.trongrid_url.rstrip("/") + "/v1/accounts/{address}",
            response_path="data[0].balance",
        ),
    ]

    ton: List[ProviderDescriptor] = []
    if settings.toncenter_key:
        ton.append(
            ProviderDescriptor(
                name="toncenter",
                url_template=settings.toncenter_url,
                api_key=settings.toncenter_key,
                api_key_header="X-API-Key",
                access_method=AccessMethod.JSON_RPC,
                rpc_method="getAddressBalance",
                rpc_params={"address": "{address}"},
                response_path="result",
            )
        )

    return {
        Currency.BITCOIN.value: bitcoin,
        Currency.ETHEREUM.value: ethereum,
        Currency.SOLANA.value: solana,
        Currency.TON.value: ton,
        Currency.TRON.value: tron,
    }
