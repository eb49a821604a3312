# src/chainprobe/application/health.py
"""
Provider Health - Cooldown Policy and Provider Status

The balance pipeline never cools a provider down on its own; it reports each
provider's outcome to a listener. ProviderHealthTracker is that listener: it
counts consecutive exhaustions per (currency, provider) and, once the
configured threshold is reached, puts the provider in cooldown through the
registry. A success resets the count.

Files that USE this module:
- chainprobe.app (composition root wires the tracker as the pipeline listener, health report)
- chainprobe.adapters.formatting.formatter (HealthStatus lines)
- tests.test_health (unit tests)

Files that this module USES:
- chainprobe.application.registry (set_cooldown, cooldown snapshot)
- chainprobe.config (threshold and cooldown duration)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from chainprobe.application.registry import ProviderRegistry
from chainprobe.config import settings

logger = logging.getLogger(__name__)


@dataclass
class HealthStatus:
    """Represents the health status of one provider."""
    currency: str
    provider: str
    is_healthy: bool
    message: str
    last_check: datetime
    details: Optional[Dict[str, Any]] = None


class ProviderHealthTracker:
    """Applies cooldowns after repeated provider exhaustion."""
    
    def __init__(
        self,
        registry: ProviderRegistry,
        failure_threshold: Optional[int] = None,
        cooldown_ms: Optional[int] = None,
    ):
        self.registry = registry
        self.failure_threshold = settings.cooldown_after_failures if failure_threshold is None else failure_threshold
        self.cooldown_ms = settings.provider_cooldown_ms if cooldown_ms is None else cooldown_ms
        self._lock = threading.Lock()
        self._consecutive: Dict[Tuple[str, str], int] = {}
        self._last_error: Dict[Tuple[str, str], str] = {}
        self._last_seen: Dict[Tuple[str, str], datetime] = {}
    
    def on_success(self, currency: str, provider_name: str) -> None:
        key = (currency, provider_name)
        with self._lock:
            self._consecutive[key] = 0
            self._last_seen[key] = datetime.now(timezone.utc)
    
    def on_provider_exhausted(self, currency: str, provider_name: str, error: Optional[Exception]) -> None:
        key = (currency, provider_name)
        with self._lock:
            count = self._consecutive.get(key, 0) + 1
            self._consecutive[key] = count
            self._last_error[key] = str(error) if error else "unknown error"
            self._last_seen[key] = datetime.now(timezone.utc)
            trip = self.failure_threshold > 0 and count >= self.failure_threshold
            if trip:
                self._consecutive[key] = 0
        
        if trip:
            logger.warning(
                "Provider %s/%s exhausted %d lookups in a row; cooling down for %dms",
                currency, provider_name, count, self.cooldown_ms,
            )
            self.registry.set_cooldown(currency, provider_name, self.cooldown_ms)
    
    def consecutive_failures(self, currency: str, provider_name: str) -> int:
        with self._lock:
            return self._consecutive.get((currency, provider_name), 0)
    
    def health_report(self) -> List[HealthStatus]:
        """Status of every provider that has reported at least one outcome."""
        now = datetime.now(timezone.utc)
        cooling = {(c.currency, c.provider) for c in self.registry.cooldowns()}
        with self._lock:
            keys = sorted(self._last_seen)
            snapshot = {
                key: (self._consecutive.get(key, 0), self._last_error.get(key), self._last_seen[key])
                for key in keys
            }
        
        report: List[HealthStatus] = []
        for (currency, provider), (failures, last_error, last_seen) in snapshot.items():
            in_cooldown = (currency, provider) in cooling
            healthy = failures == 0 and not in_cooldown
            if in_cooldown:
                message = f"Cooling down (last error: {last_error})"
            elif failures:
                message = f"{failures} consecutive failed lookup(s), last error: {last_error}"
            else:
                message = "Healthy"
            report.append(HealthStatus(
                currency=currency,
                provider=provider,
                is_healthy=healthy,
                message=message,
                last_check=now,
                details={
                    "consecutive_failures": failures,
                    "cooling_down": in_cooldown,
                    "last_seen": last_seen.isoformat(),
                },
            ))
        return report
