"""Source health probing with a TTL-cached snapshot.

HealthProber exercises every registered adapter concurrently, each probe
bounded by its own timeout, and classifies the outcome as healthy,
cloudflare (bot wall), timeout or error. Results are kept as one immutable
snapshot in a HealthCache; readers inside the TTL window get the cached
snapshot and its age, readers past it (or a forced refresh) trigger a new
probe cycle that replaces the snapshot wholesale.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional

import structlog

from comicsource.config import settings
from comicsource.core.exceptions import BotWallDetected, SourceError, TimeoutExceeded
from comicsource.scrapers.base import BaseAdapter
from comicsource.scrapers.registry import AdapterRegistry, get_adapter_registry
from comicsource.scrapers.utils.bot_wall import detect_bot_wall

logger = structlog.get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    CLOUDFLARE = "cloudflare"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass(frozen=True)
class HealthResult:
    """Outcome of probing one adapter."""

    status: HealthStatus
    message: str
    response_time: Optional[int]  # Milliseconds; None for timeouts
    last_checked: datetime


@dataclass(frozen=True)
class HealthSnapshot:
    """Read-only mapping of source_id to HealthResult, plus capture time."""

    results: Mapping[str, HealthResult]
    timestamp: float


@dataclass(frozen=True)
class HealthReport:
    sources: Mapping[str, HealthResult]
    cached: bool
    cache_age: Optional[int] = None  # Whole seconds, only when cached


class HealthCache:
    """Holds the latest health snapshot for a fixed time-to-live.

    The snapshot is replaced, never mutated, so a reader always sees a
    complete probe cycle.
    """

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.time):
        """Initialize the cache.

        Args:
            ttl_seconds: Snapshot lifetime (defaults to HEALTH_CACHE_TTL_SECONDS)
            clock: Time source in seconds; injectable for tests
        """
        self.ttl_seconds = settings.HEALTH_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self.clock = clock
        self._snapshot: Optional[HealthSnapshot] = None

    def get(self) -> Optional[HealthSnapshot]:
        return self._snapshot

    def set(self, snapshot: HealthSnapshot) -> None:
        self._snapshot = snapshot

    def invalidate(self) -> None:
        self._snapshot = None

    def is_stale(self, now: Optional[float] = None) -> bool:
        """True when there is no snapshot or it is at least ttl_seconds old."""
        if self._snapshot is None:
            return True
        now = self.clock() if now is None else now
        return now - self._snapshot.timestamp >= self.ttl_seconds

    def age(self, now: Optional[float] = None) -> Optional[int]:
        if self._snapshot is None:
            return None
        now = self.clock() if now is None else now
        return max(0, int(now - self._snapshot.timestamp))


class HealthProber:
    """Concurrent health checks over every registered adapter."""

    def __init__(
        self,
        registry: AdapterRegistry,
        cache: Optional[HealthCache] = None,
        probe_timeout: Optional[float] = None,
        single_flight: Optional[bool] = None,
    ):
        """Initialize the prober.

        Args:
            registry: Adapters to probe
            cache: Snapshot cache (a fresh one with the default TTL if omitted)
            probe_timeout: Seconds allowed per probe
            single_flight: Serialize refreshes so concurrent stale readers
                share one probe cycle
        """
        self.registry = registry
        self.cache = cache if cache is not None else HealthCache()
        self.probe_timeout = probe_timeout or settings.HEALTH_PROBE_TIMEOUT_SECONDS
        self.single_flight = settings.HEALTH_SINGLE_FLIGHT if single_flight is None else single_flight
        self._refresh_lock = asyncio.Lock()
        self.logger = logger.bind(service="health_prober")

    async def check_source(self, adapter: BaseAdapter) -> HealthResult:
        """Probe one adapter and classify the outcome.

        Never raises: every failure is itself the observation.
        """
        started = time.perf_counter()

        def elapsed() -> int:
            return int((time.perf_counter() - started) * 1000)

        def result(status: HealthStatus, message: str, response_time: Optional[int]) -> HealthResult:
            return HealthResult(status, message, response_time, datetime.now(timezone.utc))

        try:
            body = await asyncio.wait_for(adapter.probe(), timeout=self.probe_timeout)
        except (asyncio.TimeoutError, TimeoutExceeded):
            return result(
                HealthStatus.TIMEOUT,
                f"Request timed out after {self.probe_timeout:g}s",
                None,
            )
        except BotWallDetected:
            return result(HealthStatus.CLOUDFLARE, "Cloudflare protection detected", elapsed())
        except SourceError as e:
            return result(HealthStatus.ERROR, e.reason, elapsed())
        except Exception as e:
            self.logger.warning(
                "probe_crashed",
                source_id=adapter.source_id,
                error=str(e),
                exc_info=True,
            )
            return result(HealthStatus.ERROR, str(e) or type(e).__name__, elapsed())

        if isinstance(body, str) and detect_bot_wall(body):
            return result(HealthStatus.CLOUDFLARE, "Cloudflare protection detected", elapsed())
        return result(HealthStatus.HEALTHY, "Source is accessible", elapsed())

    async def check_all(self) -> HealthSnapshot:
        """Run one full probe cycle over the registry."""
        adapters = self.registry.all()
        results = await asyncio.gather(*(self.check_source(adapter) for adapter in adapters))
        snapshot = HealthSnapshot(
            results=MappingProxyType({a.source_id: r for a, r in zip(adapters, results)}),
            timestamp=self.cache.clock(),
        )
        self.logger.info(
            "health_cycle_completed",
            sources=len(adapters),
            healthy=sum(1 for r in results if r.status is HealthStatus.HEALTHY),
        )
        return snapshot

    def _cached_report(self) -> Optional[HealthReport]:
        now = self.cache.clock()
        snapshot = self.cache.get()
        if snapshot is None or self.cache.is_stale(now):
            return None
        return HealthReport(sources=snapshot.results, cached=True, cache_age=self.cache.age(now))

    async def _refresh(self) -> HealthReport:
        snapshot = await self.check_all()
        self.cache.set(snapshot)
        return HealthReport(sources=snapshot.results, cached=False)

    async def get_health(self, force: bool = False) -> HealthReport:
        """Return the cached snapshot, or probe every source if it is stale.

        Args:
            force: Invalidate the cache and always run a new probe cycle
        """
        if force:
            self.cache.invalidate()
            self.logger.info("health_cache_invalidated")
        else:
            report = self._cached_report()
            if report is not None:
                return report

        if not self.single_flight:
            return await self._refresh()

        async with self._refresh_lock:
            if not force:
                # Another reader may have refreshed while this one waited
                report = self._cached_report()
                if report is not None:
                    return report
            return await self._refresh()


_health_prober: Optional[HealthProber] = None


def get_health_prober() -> HealthProber:
    """Get the process-wide health prober over the global registry."""
    global _health_prober
    if _health_prober is None:
        _health_prober = HealthProber(get_adapter_registry())
    return _health_prober
