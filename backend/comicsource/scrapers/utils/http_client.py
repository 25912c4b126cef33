"""Single-stage HTTP access for adapters.

FetchClient knows how to perform one *direct* request or one *proxied*
request and how to classify what went wrong. Deciding which stages to try,
in which order and how often is the job of a FetchStrategy
(see fetch_strategy.py).
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import httpx
import structlog

from comicsource.config import settings
from comicsource.core.exceptions import (
    BotWallDetected,
    HttpStatusFailure,
    NetworkFailure,
    ParseFailure,
    TimeoutExceeded,
)
from comicsource.scrapers.utils.bot_wall import detect_bot_wall
from comicsource.scrapers.utils.proxy_manager import ProxyPool
from comicsource.scrapers.utils.user_agents import (
    HTML_ACCEPT,
    JSON_ACCEPT,
    build_browser_headers,
)


logger = structlog.get_logger(__name__)

DIRECT = "direct"
PROXY = "proxy"


class FetchClient:
    """Performs and classifies individual direct or proxied requests.

    Every failure is raised as a SourceError subclass tagged with the stage
    that produced it:

    - httpx timeouts → TimeoutExceeded
    - other transport errors → NetworkFailure
    - challenge pages (any status) → BotWallDetected
    - non-2xx responses → HttpStatusFailure
    """

    def __init__(
        self,
        source: str,
        proxy_pool: Optional[ProxyPool] = None,
        direct_timeout: Optional[float] = None,
        proxy_timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        user_agent: Optional[str] = None,
    ):
        """Initialize the fetch client.

        Args:
            source: Adapter name used in error messages and logs
            proxy_pool: Proxy endpoints for the proxy stage (defaults to PROXY_URL)
            direct_timeout: Seconds allowed for a direct request
            proxy_timeout: Seconds allowed for a proxied request
            http_client: Shared httpx client; when None a client is created per request
            user_agent: Fixed user-agent; when None agents are rotated
        """
        self.source = source
        self.proxy_pool = proxy_pool if proxy_pool is not None else ProxyPool(settings.get_proxy_list())
        self.direct_timeout = direct_timeout or settings.DIRECT_TIMEOUT_SECONDS
        self.proxy_timeout = proxy_timeout or settings.PROXY_TIMEOUT_SECONDS
        self.http_client = http_client
        self.user_agent = user_agent or settings.USER_AGENT or None
        self.logger = logger.bind(source=source)

    @property
    def has_proxy(self) -> bool:
        return bool(self.proxy_pool)

    @asynccontextmanager
    async def _client(self, timeout: float) -> AsyncIterator[httpx.AsyncClient]:
        if self.http_client is not None:
            yield self.http_client
            return
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            yield client

    async def _get(
        self,
        stage: str,
        url: str,
        timeout: float,
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            async with self._client(timeout) as client:
                return await client.get(url, params=params, headers=headers, timeout=timeout)
        except httpx.TimeoutException as e:
            raise TimeoutExceeded(
                self.source, f"Request timed out after {timeout:g}s", stage=stage
            ) from e
        except httpx.HTTPError as e:
            raise NetworkFailure(
                self.source, str(e) or type(e).__name__, stage=stage
            ) from e

    def _check_html(self, stage: str, response: httpx.Response, message: str = "") -> str:
        body = response.text
        if detect_bot_wall(body):
            raise BotWallDetected(self.source, stage=stage)
        if not response.is_success:
            raise HttpStatusFailure(
                self.source,
                response.status_code,
                message or f"HTTP {response.status_code}: {response.reason_phrase}",
                stage=stage,
            )
        return body

    async def fetch_direct(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """Fetch a page straight from the source.

        Raises:
            SourceError: Classified failure with stage="direct"
        """
        request_headers = build_browser_headers(HTML_ACCEPT, self.user_agent, headers)
        response = await self._get(DIRECT, url, self.direct_timeout, headers=request_headers)
        return self._check_html(DIRECT, response)

    async def fetch_via_proxy(self, url: str) -> str:
        """Fetch a page through the proxy collaborator.

        Raises:
            SourceError: Classified failure with stage="proxy"
        """
        endpoint = self.proxy_pool.get_endpoint()
        if endpoint is None:
            raise NetworkFailure(self.source, "No proxy endpoint configured", stage=PROXY)

        try:
            response = await self._get(
                PROXY,
                endpoint,
                self.proxy_timeout,
                params={"url": url},
                headers={"Accept": "text/html"},
            )
            body = self._check_html(PROXY, response, self._proxy_error_message(response))
        except (NetworkFailure, TimeoutExceeded, HttpStatusFailure):
            self.proxy_pool.mark_failed(endpoint)
            raise

        self.proxy_pool.mark_success(endpoint)
        return body

    async def fetch_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Fetch and decode a JSON document straight from the source.

        Raises:
            SourceError: Classified failure with stage="direct"
            ParseFailure: If the body is not valid JSON
        """
        request_headers = build_browser_headers(JSON_ACCEPT, self.user_agent, headers)
        response = await self._get(DIRECT, url, self.direct_timeout, params=params, headers=request_headers)
        if not response.is_success:
            if detect_bot_wall(response.text):
                raise BotWallDetected(self.source, stage=DIRECT)
            raise HttpStatusFailure(
                self.source,
                response.status_code,
                f"HTTP {response.status_code}: {response.reason_phrase}",
                stage=DIRECT,
            )
        try:
            return response.json()
        except ValueError as e:
            raise ParseFailure(self.source, f"Invalid JSON from {url}", stage=DIRECT) from e

    @staticmethod
    def _proxy_error_message(response: httpx.Response) -> str:
        """Extract the proxy's own error message from a failed response."""
        if response.is_success:
            return ""
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get("error"):
            return str(payload["error"])
        return f"HTTP {response.status_code}: {response.reason_phrase}"
