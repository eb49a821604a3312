# src/chainprobe/app.py
"""
Application Entry Point - Service Wiring and Command Line

This module serves as the composition root for chainprobe. It wires the
registry, cooldown policy, balance pipeline, rate cache and batch driver,
and exposes a small command line:

    chainprobe check <currency> <address> [<currency> <address> ...]
    chainprobe rates
    chainprobe derive [<currency> ...] [--check]

Files that USE this module:
- pyproject.toml console script (chainprobe = chainprobe.app:main)

Files that this module USES:
- chainprobe.shared.logging_conf (setup_logging for logging configuration)
- chainprobe.config (settings, default providers)
- chainprobe.application.* (all services)
- chainprobe.adapters.* (accessors, token readers, price feed, formatting)
"""

from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import requests

from chainprobe.shared.logging_conf import setup_logging
from chainprobe.config import Settings, default_providers
from chainprobe.domain.errors import ChainProbeError
from chainprobe.domain.models import AccessMethod, Currency, KeyMaterial
from chainprobe.adapters.providers import (
    Erc20TokenReader,
    HttpClient,
    JsonRpcAccessor,
    RestAccessor,
    Trc20TokenReader,
)
from chainprobe.adapters.pricing import CryptoComparePriceFeed
from chainprobe.adapters.formatting import balance_lines, health_lines, rates_lines
from chainprobe.application import (
    BalanceBatch,
    BalanceService,
    ExchangeRateCache,
    ProviderHealthTracker,
    ProviderRegistry,
    RateRefresher,
    derive_address,
    key_material_from_mnemonic,
)

log = logging.getLogger(__name__)


@dataclass
class Container:
    """Every long-lived service, constructed once per process."""
    settings: Settings
    registry: ProviderRegistry
    health: ProviderHealthTracker
    service: BalanceService
    rates: ExchangeRateCache
    refresher: RateRefresher
    batch: BalanceBatch


def build_container(settings: Settings, session: Optional[requests.Session] = None) -> Container:
    """
    Wire all services from settings.
    
    Args:
        settings: Loaded application settings
        session: Optional shared requests session (tests pass a mock)
    """
    session = session or requests.Session()
    http = HttpClient(session=session, timeout=settings.http_timeout_seconds)

    registry = ProviderRegistry()
    for currency, providers in default_providers(settings).items():
        registry.register_providers(currency, providers)

    health = ProviderHealthTracker(
        registry,
        failure_threshold=settings.cooldown_after_failures,
        cooldown_ms=settings.provider_cooldown_ms,
    )

    rest = RestAccessor(http)
    service = BalanceService(
        registry,
        accessors={
            AccessMethod.REST: rest,
            AccessMethod.UTXO_STATS: rest,
            AccessMethod.JSON_RPC: JsonRpcAccessor(http),
        },
        token_readers={
            Currency.ETHEREUM.value: Erc20TokenReader(settings.ethereum_rpc_url),
            Currency.TRON.value: Trc20TokenReader(settings.trongrid_url, http=http),
        },
        max_attempts=settings.max_attempts,
        backoff_initial_ms=settings.backoff_initial_ms,
        backoff_multiplier=settings.backoff_multiplier,
        listener=health,
    )

    rates = ExchangeRateCache(
        CryptoComparePriceFeed(settings.price_feed_url, settings.http_timeout_seconds, session=session)
    )
    refresher = RateRefresher(rates, settings.rates_refresh_seconds)
    batch = BalanceBatch(service, rates, timeout_seconds=settings.lookup_timeout_seconds)

    return Container(
        settings=settings,
        registry=registry,
        health=health,
        service=service,
        rates=rates,
        refresher=refresher,
        batch=batch,
    )


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="chainprobe", description="Read-only multi-chain balance lookups")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Resolve balances for currency/address pairs")
    check.add_argument("pairs", nargs="+", metavar="CURRENCY ADDRESS",
                       help="one or more currency/address pairs, e.g. bitcoin 1A1zP1...")

    sub.add_parser("rates", help="Refresh and print USD exchange rates")

    derive = sub.add_parser(
        "derive",
        help="Derive addresses from a BIP39 mnemonic (read from $CHAINPROBE_MNEMONIC or prompted)",
    )
    derive.add_argument("currencies", nargs="*", metavar="CURRENCY",
                        help="chains to derive (default: all supported)")
    derive.add_argument("--check", action="store_true", help="also resolve balances of the derived addresses")
    return parser.parse_args(argv)


def _supported(values: Sequence[str]) -> List[str]:
    """Normalize currency names, raising ValueError for anything unsupported."""
    currencies = []
    for value in values:
        try:
            currencies.append(Currency(value.lower()).value)
        except ValueError:
            supported = ", ".join(c.value for c in Currency)
            raise ValueError(f"Unsupported currency: {value} (supported: {supported})") from None
    return currencies


def _pairs(values: List[str]) -> Dict[str, str]:
    if len(values) % 2:
        raise ValueError("expected CURRENCY ADDRESS pairs")
    currencies = _supported(values[::2])
    return dict(zip(currencies, values[1::2]))


def _read_key_material() -> KeyMaterial:
    mnemonic = os.environ.get("CHAINPROBE_MNEMONIC") or getpass.getpass("Mnemonic: ")
    passphrase = os.environ.get("CHAINPROBE_PASSPHRASE", "")
    return key_material_from_mnemonic(mnemonic, passphrase)


def derive_addresses(currencies: Sequence[str], key_material: KeyMaterial) -> Dict[str, str]:
    """
    Derive one address per currency, skipping chains whose strategy cannot run.
    
    Returns:
        Currency name -> address for every chain that derived successfully
    """
    addresses: Dict[str, str] = {}
    for currency in currencies:
        try:
            addresses[currency] = derive_address(currency, key_material)
        except ChainProbeError as e:
            log.warning("Skipping %s: %s", currency, e)
    return addresses


def _run_check(container: Container, pairs: Dict[str, str]) -> None:
    container.refresher.start()
    try:
        results = container.batch.check(pairs)
    finally:
        container.refresher.stop()

    for valued in results.values():
        print(balance_lines(valued))
    log.debug("Provider health:\n%s", health_lines(container.health.health_report()))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Command line entry point.
    
    Returns:
        Process exit code (0 success, 2 usage error)
    """
    args = _parse_args(argv)

    settings = Settings()
    setup_logging(
        level=settings.log_level,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
        log_stdout=settings.log_stdout,
    )

    container = build_container(settings)

    if args.command == "rates":
        container.rates.refresh_rates()
        print(rates_lines(container.rates.snapshot()))
        return 0

    if args.command == "derive":
        try:
            currencies = _supported(args.currencies) or [c.value for c in Currency]
            key_material = _read_key_material()
        except (ValueError, ChainProbeError) as e:
            print(f"error: {e}", file=sys.stderr)
            return 2
        addresses = derive_addresses(currencies, key_material)
        for currency, address in addresses.items():
            print(f"{currency} {address}")
        if args.check:
            _run_check(container, addresses)
        return 0

    try:
        pairs = _pairs(args.pairs)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    _run_check(container, pairs)
    return 0


if __name__ == "__main__":
    sys.exit(main())
