# src/chainprobe/config/__init__.py
"""
Configuration Module

Provides centralized configuration management using Pydantic Settings,
plus the static per-chain network table and default provider lists.
"""

from chainprobe.config.settings import Settings, settings
from chainprobe.config.networks import NETWORKS, default_providers, get_network

__all__ = ["Settings", "settings", "NETWORKS", "default_providers", "get_network"]
