# src/chainprobe/adapters/__init__.py
"""
Adapters Layer - External Integrations

This package contains adapters for external systems:
- Balance providers (REST, JSON-RPC) and token readers
- Price feeds
- Text formatting
"""
