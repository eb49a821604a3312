# src/chainprobe/shared/validators.py
"""
Input Validation Utilities - Configuration Validation

This module validates configuration values before they reach providers:
API keys, provider URL templates and log levels.

Files that USE this module:
- chainprobe.config.settings (uses validation functions in Settings field validators)
- chainprobe.application.registry (checks descriptors on registration)

Files that this module USES:
- None (pure utility functions)
"""
import logging
import re
from urllib.parse import urlparse


def validate_api_key(api_key: str) -> bool:
    """
    Validate API key format.
    
    An empty key is valid (the provider is used without one).
    
    Args:
        api_key: API key to validate
        
    Returns:
        True if valid, False otherwise
    """
    if not api_key:
        return True

    if len(api_key) < 8 or len(api_key) > 256:
        return False

    # No whitespace or control characters; keys end up in URLs and headers
    return re.match(r'^[A-Za-z0-9_\-.:]+$', api_key) is not None


def validate_url_template(template: str, requires_address: bool = True) -> bool:
    """
    Validate a provider URL template.
    
    Args:
        template: URL, optionally containing the "{address}" placeholder
        requires_address: Whether the placeholder must be present (REST providers)
        
    Returns:
        True if the template is an http(s) URL (with placeholder when required)
    """
    if not template:
        return False

    parsed = urlparse(template.replace("{address}", "placeholder"))
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False

    if requires_address and "{address}" not in template:
        return False

    return True


def validate_log_level(level: str) -> bool:
    """Check that `level` names a standard logging level."""
    return isinstance(logging.getLevelName(str(level).upper()), int)
