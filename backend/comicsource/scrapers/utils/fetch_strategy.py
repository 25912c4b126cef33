"""Fetch strategies: which stages to try, in which order, how often.

The default strategy is a small state machine::

    DIRECT --(failure)--> PROXY --(failure)--> FAILED

Each transition records the error that triggered it. When the last stage
fails, that stage's error is raised with the full transition chain attached
as ``error.transitions``, so callers can tell which stage failed and why the
earlier ones were abandoned.

Adapters choose a strategy as a whole (``BaseAdapter.fetch_strategy``)
because sources differ in whether direct access is reachable at all.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

import structlog

from comicsource.config import settings
from comicsource.core.exceptions import NetworkFailure, SourceError
from comicsource.scrapers.utils.http_client import FetchClient
from comicsource.scrapers.utils.retry import fetch_retrying


logger = structlog.get_logger(__name__)


class FetchStage(str, Enum):
    DIRECT = "direct"
    PROXY = "proxy"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchTransition:
    """One edge taken by the fetch state machine."""

    source: FetchStage
    target: FetchStage
    error: SourceError


class FetchStrategy(ABC):
    """Retrieval policy for a single URL."""

    name: str = ""

    @abstractmethod
    async def fetch(
        self, client: FetchClient, url: str, headers: Optional[Dict[str, str]] = None
    ) -> str:
        """Return the page body or raise a classified SourceError."""


class StagedFetchStrategy(FetchStrategy):
    """Walks an ordered list of stages until one succeeds.

    The proxy stage is skipped when the client has no proxy endpoint, so a
    deployment without a proxy surfaces the direct error unchanged.
    """

    stages: Tuple[FetchStage, ...] = ()

    def _plan(self, client: FetchClient) -> List[FetchStage]:
        return [s for s in self.stages if s is not FetchStage.PROXY or client.has_proxy]

    async def _run_stage(
        self, stage: FetchStage, client: FetchClient, url: str, headers: Optional[Dict[str, str]]
    ) -> str:
        if stage is FetchStage.DIRECT:
            return await client.fetch_direct(url, headers)
        return await client.fetch_via_proxy(url)

    async def fetch(
        self, client: FetchClient, url: str, headers: Optional[Dict[str, str]] = None
    ) -> str:
        plan = self._plan(client)
        if not plan:
            raise NetworkFailure(client.source, f"No fetch stage available for {url}")

        transitions: List[FetchTransition] = []
        for index, stage in enumerate(plan):
            try:
                return await self._run_stage(stage, client, url, headers)
            except SourceError as exc:
                target = plan[index + 1] if index + 1 < len(plan) else FetchStage.FAILED
                transitions.append(FetchTransition(source=stage, target=target, error=exc))
                logger.info(
                    "fetch_stage_failed",
                    source=client.source,
                    url=url,
                    stage=stage.value,
                    next_stage=target.value,
                    error=exc.reason,
                )
                if target is FetchStage.FAILED:
                    exc.transitions = tuple(transitions)
                    raise


class DirectThenProxyStrategy(StagedFetchStrategy):
    """Try the source directly, fall back to the proxy on any failure."""

    name = "direct-then-proxy"
    stages = (FetchStage.DIRECT, FetchStage.PROXY)


class ProxyFirstStrategy(StagedFetchStrategy):
    """Route through the proxy first; go direct only if the proxy fails."""

    name = "proxy-first"
    stages = (FetchStage.PROXY, FetchStage.DIRECT)


class DirectOnlyStrategy(StagedFetchStrategy):
    name = "direct-only"
    stages = (FetchStage.DIRECT,)


class RetryingStrategy(FetchStrategy):
    """Repeat another strategy with a bounded attempt count and fixed delay.

    Only transient failures (network errors, timeouts, 429/5xx) are retried.
    """

    name = "retrying"

    def __init__(
        self,
        inner: Optional[FetchStrategy] = None,
        attempts: Optional[int] = None,
        delay_seconds: Optional[float] = None,
    ):
        self.inner = inner or DirectThenProxyStrategy()
        self.attempts = attempts or settings.FETCH_RETRY_ATTEMPTS
        self.delay_seconds = settings.FETCH_RETRY_DELAY_SECONDS if delay_seconds is None else delay_seconds

    async def fetch(
        self, client: FetchClient, url: str, headers: Optional[Dict[str, str]] = None
    ) -> str:
        async for attempt in fetch_retrying(self.attempts, self.delay_seconds):
            with attempt:
                return await self.inner.fetch(client, url, headers)
