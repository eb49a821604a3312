# src/chainprobe/shared/__init__.py
"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Response path extraction
- Validation
- Logging configuration
"""

from chainprobe.shared.extractor import ABSENT, extract, parse_path, to_base_units
from chainprobe.shared.validators import (
    validate_api_key,
    validate_log_level,
    validate_url_template,
)

__all__ = [
    "ABSENT",
    "extract",
    "parse_path",
    "to_base_units",
    "validate_api_key",
    "validate_log_level",
    "validate_url_template",
]
