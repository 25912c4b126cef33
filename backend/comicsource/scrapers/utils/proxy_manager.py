"""Rotating pool of HTML proxy endpoints with health tracking."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ProxyEntry:
    """Proxy endpoint with failure tracking."""

    url: str  # e.g. "https://proxy.example.com/api/proxy/html"
    healthy: bool = True
    fail_count: int = 0
    last_failed: Optional[datetime] = None

    def mark_failed(self) -> None:
        """Record a failed request; three in a row marks the endpoint unhealthy."""
        self.fail_count += 1
        self.last_failed = _utcnow()
        if self.fail_count >= 3:
            self.healthy = False

    def mark_success(self) -> None:
        """Reset consecutive failures after a successful request."""
        self.fail_count = 0
        self.healthy = True

    def should_retry(self, cooldown_minutes: int = 10) -> bool:
        """Check if an unhealthy endpoint has cooled down enough to be retried."""
        if self.healthy or not self.last_failed:
            return True
        return _utcnow() - self.last_failed > timedelta(minutes=cooldown_minutes)


class ProxyPool:
    """Round-robin pool of proxy endpoints with automatic failover.

    Endpoints that fail three times in a row are skipped until their
    cooldown expires. When every endpoint is cooling down the pool resets
    them all rather than refusing to route.
    """

    def __init__(self, endpoints: List[str], cooldown_minutes: int = 10):
        self.proxies = [ProxyEntry(url=url) for url in endpoints]
        self.cooldown_minutes = cooldown_minutes
        self._index = 0

    def __bool__(self) -> bool:
        return bool(self.proxies)

    def get_endpoint(self) -> Optional[str]:
        """Get the next endpoint to route through, or None if the pool is empty."""
        if not self.proxies:
            return None

        available = [p for p in self.proxies if p.should_retry(self.cooldown_minutes)]
        if not available:
            for p in self.proxies:
                p.healthy = True
                p.fail_count = 0
            available = self.proxies

        proxy = available[self._index % len(available)]
        self._index = (self._index + 1) % len(available)
        return proxy.url

    def mark_failed(self, endpoint: str) -> None:
        for p in self.proxies:
            if p.url == endpoint:
                p.mark_failed()
                break

    def mark_success(self, endpoint: str) -> None:
        for p in self.proxies:
            if p.url == endpoint:
                p.mark_success()
                break
