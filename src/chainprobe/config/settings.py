# src/chainprobe/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Values come from environment variables or a local .env file.

Files that USE this module:
- chainprobe.app (loads settings and wires services)
- chainprobe.config.networks (API keys and endpoints for default providers)
- chainprobe.adapters.* (HTTP timeout, price feed URL, RPC endpoints)
- chainprobe.application.* (retry, cooldown and refresh settings)

Files that this module USES:
- chainprobe.shared.validators (validation functions for settings)
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chainprobe.shared.validators import (
    validate_api_key,
    validate_log_level,
)

DEFAULT_PRICE_FEED_URL = "https://min-api.cryptocompare.com/data/pricemulti"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )
    
    # --- Provider API keys (all optional; keyless providers still work) ---
    etherscan_key: str = Field(default="", alias="ETHERSCAN_API_KEY")
    toncenter_key: str = Field(default="", alias="TONCENTER_API_KEY")
    blockcypher_token: str = Field(default="", alias="BLOCKCYPHER_TOKEN")
    
    # --- Endpoints ---
    ethereum_rpc_url: str = Field(default="https://ethereum-rpc.publicnode.com", alias="ETHEREUM_RPC_URL")
    solana_rpc_url: str = Field(default="https://api.mainnet-beta.solana.com", alias="SOLANA_RPC_URL")
    trongrid_url: str = Field(default="https://api.trongrid.io", alias="TRONGRID_URL")
    toncenter_url: str = Field(default="https://toncenter.com/api/v2/jsonRPC", alias="TONCENTER_URL")
    
    # --- HTTP Settings ---
    http_timeout_seconds: int = Field(default=10, alias="HTTP_TIMEOUT_SECONDS", ge=1, le=60)
    
    # --- Retry / backoff per provider ---
    max_attempts: int = Field(default=3, alias="BALANCE_MAX_ATTEMPTS", ge=1, le=10)
    backoff_initial_ms: int = Field(default=4000, alias="BALANCE_BACKOFF_INITIAL_MS", ge=0)
    backoff_multiplier: float = Field(default=2.0, alias="BALANCE_BACKOFF_MULTIPLIER", ge=1.0)
    
    # --- Cooldown policy (applied by ProviderHealthTracker, 0 disables) ---
    cooldown_after_failures: int = Field(default=3, alias="PROVIDER_COOLDOWN_AFTER_FAILURES", ge=0)
    provider_cooldown_ms: int = Field(default=60_000, alias="PROVIDER_COOLDOWN_MS", ge=0)
    
    # --- Batch lookups ---
    lookup_timeout_seconds: float = Field(default=300.0, alias="LOOKUP_TIMEOUT_SECONDS", gt=0)
    
    # --- Exchange rates ---
    price_feed_url: str = Field(default=DEFAULT_PRICE_FEED_URL, alias="PRICE_FEED_URL")
    rates_refresh_seconds: int = Field(default=120, alias="RATES_REFRESH_SECONDS", ge=10, le=86400)
    
    # --- Logging ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_stdout: bool = Field(default=True, alias="CHAINPROBE_LOG_STDOUT")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")
    
    @field_validator("etherscan_key", "toncenter_key", "blockcypher_token")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate API key format."""
        if not validate_api_key(v):
            raise ValueError("Invalid API key format")
        return v
    
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level name."""
        if not validate_log_level(v):
            raise ValueError("LOG_LEVEL must be DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return v.upper()


# Global settings instance
settings = Settings()
