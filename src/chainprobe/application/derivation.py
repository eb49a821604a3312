# src/chainprobe/application/derivation.py
"""
Address Derivation - Per-chain Strategy Table

Each supported chain has one strategy that turns the caller's root key
material into that chain's address:
- bitcoin: BIP44 secp256k1 key at the network path, legacy P2PKH address
- ethereum: HD wallet account from the mnemonic (eth_account), EIP-55 checksum
- solana: SLIP-10 ed25519 key at m/44'/501'/0'/0', base58 public key
- tron: BIP44 secp256k1 key at the network path, base58check "T..." address
- ton: TON mnemonic key pair, wallet v4r2 contract address on workchain 0

Anything not in the table raises UnsupportedCurrencyError: a chain the
operator believes is supported must never be skipped silently.

Files that USE this module:
- chainprobe.app (derive command)
- tests.test_derivation (unit tests)

Files that this module USES:
- chainprobe.config.networks (derivation paths)
- bip_utils (BIP32/SLIP-10 derivation and address encoders)
- eth_account (Ethereum HD wallet)
- tonsdk (TON wallet contracts, optional "ton" extra, imported on first use)
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from bip_utils import (
    Bip32Slip10Ed25519,
    Bip32Slip10Secp256k1,
    Bip39MnemonicValidator,
    Bip39SeedGenerator,
    EthAddrEncoder,
    P2PKHAddrEncoder,
    SolAddrEncoder,
    TrxAddrEncoder,
)
from eth_account import Account

from chainprobe.config.networks import NETWORKS
from chainprobe.domain.errors import ChainProbeError, KeyMaterialError, UnsupportedCurrencyError
from chainprobe.domain.models import Currency, CurrencyNetworkConfig, KeyMaterial

log = logging.getLogger(__name__)

Account.enable_unaudited_hdwallet_features()

BITCOIN_P2PKH_NET_VER = b"\x00"


def key_material_from_mnemonic(mnemonic: str, passphrase: str = "") -> KeyMaterial:
    """
    Build KeyMaterial from a BIP39 mnemonic phrase.
    
    Args:
        mnemonic: Space separated BIP39 words
        passphrase: Optional BIP39 passphrase
        
    Raises:
        KeyMaterialError: If the phrase fails BIP39 word list or checksum validation
    """
    words = " ".join(mnemonic.split())
    if not words or not Bip39MnemonicValidator().IsValid(words):
        raise KeyMaterialError("invalid BIP39 mnemonic")
    seed = Bip39SeedGenerator(words).Generate(passphrase)
    return KeyMaterial(seed=bytes(seed), mnemonic=words, passphrase=passphrase)


class DerivationStrategy(ABC):
    @abstractmethod
    def derive(self, key_material: KeyMaterial, network: CurrencyNetworkConfig) -> str:
        """Return the chain address for the key material."""
        raise NotImplementedError


def _secp256k1_key(key_material: KeyMaterial, path: str) -> Any:
    """Public key at `path` from the supplied root, or from the seed when no root is given."""
    root = key_material.root
    if root is None:
        if not key_material.seed:
            raise KeyMaterialError("secp256k1 derivation needs a seed or a root key")
        root = Bip32Slip10Secp256k1.FromSeed(key_material.seed)
    return root.DerivePath(path).PublicKey().KeyObject()


class BitcoinStrategy(DerivationStrategy):
    def derive(self, key_material: KeyMaterial, network: CurrencyNetworkConfig) -> str:
        pub_key = _secp256k1_key(key_material, network.derivation_path)
        return P2PKHAddrEncoder.EncodeKey(pub_key, net_ver=BITCOIN_P2PKH_NET_VER)


class EthereumStrategy(DerivationStrategy):
    def derive(self, key_material: KeyMaterial, network: CurrencyNetworkConfig) -> str:
        if key_material.mnemonic:
            account = Account.from_mnemonic(
                key_material.mnemonic,
                passphrase=key_material.passphrase,
                account_path=network.derivation_path,
            )
            return account.address
        # Same key, reached from the seed/root instead of the words
        pub_key = _secp256k1_key(key_material, network.derivation_path)
        return EthAddrEncoder.EncodeKey(pub_key)


class SolanaStrategy(DerivationStrategy):
    def derive(self, key_material: KeyMaterial, network: CurrencyNetworkConfig) -> str:
        if not key_material.seed:
            raise KeyMaterialError("solana derivation needs the seed bytes")
        node = Bip32Slip10Ed25519.FromSeed(key_material.seed).DerivePath(network.derivation_path)
        return SolAddrEncoder.EncodeKey(node.PublicKey().KeyObject())


class TronStrategy(DerivationStrategy):
    def derive(self, key_material: KeyMaterial, network: CurrencyNetworkConfig) -> str:
        pub_key = _secp256k1_key(key_material, network.derivation_path)
        return TrxAddrEncoder.EncodeKey(pub_key)


class TonStrategy(DerivationStrategy):
    """TON derives from the words themselves, not from the BIP39 seed."""

    def derive(self, key_material: KeyMaterial, network: CurrencyNetworkConfig) -> str:
        if not key_material.mnemonic:
            raise KeyMaterialError("ton derivation needs the mnemonic phrase")
        try:
            from tonsdk.contract.wallet import Wallets, WalletVersionEnum
            from tonsdk.crypto import mnemonic_to_wallet_key
        except ImportError as e:
            raise ChainProbeError("ton derivation needs tonsdk: pip install chainprobe[ton]") from e
        public_key, private_key = mnemonic_to_wallet_key(key_material.mnemonic.split())
        wallet = Wallets.ALL[WalletVersionEnum.v4r2](public_key=public_key, private_key=private_key, wc=0)
        return wallet.address.to_string(True, True, True)


DERIVATION_STRATEGIES: Dict[Currency, DerivationStrategy] = {
    Currency.BITCOIN: BitcoinStrategy(),
    Currency.ETHEREUM: EthereumStrategy(),
    Currency.SOLANA: SolanaStrategy(),
    Currency.TON: TonStrategy(),
    Currency.TRON: TronStrategy(),
}


def derive_address(currency: str, key_material: KeyMaterial) -> str:
    """
    Derive the address for `currency` from the caller's key material.
    
    Raises:
        UnsupportedCurrencyError: If the currency has no strategy
        KeyMaterialError: If the strategy lacks the key material it needs
    """
    try:
        chain = Currency(getattr(currency, "value", currency))
    except ValueError as e:
        raise UnsupportedCurrencyError(str(currency)) from e

    strategy = DERIVATION_STRATEGIES.get(chain)
    network = NETWORKS.get(chain)
    if strategy is None or network is None:
        raise UnsupportedCurrencyError(chain.value)
    address = strategy.derive(key_material, network)
    log.debug("Derived %s address %s at %s", chain.value, address, network.derivation_path)
    return address
