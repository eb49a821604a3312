# src/chainprobe/shared/extractor.py
"""
Response Extractor - Path-based Access into Provider Responses

Providers are onboarded by configuration: a URL template plus a response path
such as "result", "data[0].balance" or "chain_stats". This module resolves
such a path against the decoded JSON body.

A missing segment is not an error: extraction returns ABSENT and the caller
decides what absence means (the balance pipeline treats it as zero funds).

Files that USE this module:
- chainprobe.application.balance_service (extracts native balances and status flags)
- chainprobe.adapters.providers.tokens (extracts TRC-20 holdings)
- tests.test_extractor (unit tests)

Files that this module USES:
- None (pure utility functions)
"""
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Union

from chainprobe.domain.errors import MalformedResponseError

# "name", "name[0]", "name[0][1]" or a bare "[2]"
_SEGMENT_RE = re.compile(r"^(?P<key>[^\[\]]*)(?P<indices>(?:\[\d+\])*)$")
_INDEX_RE = re.compile(r"\[(\d+)\]")


class _Absent:
    """Sentinel for a path that does not resolve."""

    _instance: Optional["_Absent"] = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()

PathStep = Union[str, int]


def parse_path(path: str) -> List[PathStep]:
    """
    Split a dotted path with bracketed indices into steps.
    
    Args:
        path: Expression like "data[0].balance"
        
    Returns:
        List of dict keys (str) and list indices (int), e.g. ["data", 0, "balance"]
        
    Raises:
        ValueError: If a segment is syntactically invalid (e.g. "data[x]")
    """
    steps: List[PathStep] = []
    if not path:
        return steps
    for segment in path.split("."):
        match = _SEGMENT_RE.match(segment)
        if match is None:
            raise ValueError(f"Invalid response path segment {segment!r} in {path!r}")
        key = match.group("key")
        if key:
            steps.append(key)
        steps.extend(int(i) for i in _INDEX_RE.findall(match.group("indices")))
    return steps


def extract(data: Any, path: Optional[str]) -> Any:
    """
    Return the value addressed by `path`, or ABSENT when any step is missing.
    
    An empty or None path addresses the whole body. Never raises for missing
    keys, out-of-range indices, or stepping into a scalar.
    """
    if path is None:
        return data
    current = data
    for step in parse_path(path):
        if isinstance(step, int):
            if isinstance(current, (list, tuple)) and 0 <= step < len(current):
                current = current[step]
                continue
            return ABSENT
        if isinstance(current, dict) and step in current:
            current = current[step]
            continue
        return ABSENT
    if current is None:
        return ABSENT
    return current


def to_base_units(value: Any) -> int:
    """
    Convert an extracted scalar to a non-negative integer balance.
    
    Accepts ints, integral floats and numeric strings ("500", " 500 ",
    "1.2e3"). Strings are parsed with Decimal so large wei amounts never pass
    through a float.
    
    Raises:
        MalformedResponseError: If the value is not a non-negative integral number
    """
    if isinstance(value, bool):
        raise MalformedResponseError(f"Boolean is not a balance: {value!r}")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise MalformedResponseError(f"Fractional balance in base units: {value!r}")
        amount = int(value)
    elif isinstance(value, str) and value.strip().lower().startswith("0x"):
        # JSON-RPC quantities (eth_getBalance) are hex encoded
        try:
            amount = int(value.strip(), 16)
        except ValueError as e:
            raise MalformedResponseError(f"Invalid hex balance: {value!r}") from e
    elif isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation as e:
            raise MalformedResponseError(f"Non-numeric balance: {value!r}") from e
        if not parsed.is_finite() or parsed != parsed.to_integral_value():
            raise MalformedResponseError(f"Non-integral balance: {value!r}")
        amount = int(parsed)
    else:
        raise MalformedResponseError(f"Unexpected balance type {type(value).__name__}: {value!r}")

    if amount < 0:
        raise MalformedResponseError(f"Negative balance: {value!r}")
    return amount
