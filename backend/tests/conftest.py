"""Pytest configuration and shared fixtures."""

from typing import Callable, Dict, List, Optional, Sequence

import httpx
import pytest

from comicsource.config import settings
from comicsource.core.exceptions import SourceError
from comicsource.scrapers.base import (
    BaseAdapter,
    ChapterImage,
    ScrapedChapter,
    SearchResult,
    SeriesInfo,
    SourceType,
)
from comicsource.scrapers.registry import AdapterRegistry
from comicsource.scrapers.utils.http_client import FetchClient
from comicsource.scrapers.utils.proxy_manager import ProxyPool


PROXY_ENDPOINT = "https://proxy.test/api/proxy/html"

CHALLENGE_PAGE = """
<html>
  <head><title>Just a moment...</title></head>
  <body>
    <h1>Checking your browser before accessing the website.</h1>
    <p>This process is automatic. Your browser will redirect to your requested content shortly.</p>
    <div id="cf-chl-bypass"></div>
  </body>
</html>
"""


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


@pytest.fixture(autouse=True)
def no_source_delays(monkeypatch):
    """Skip the polite pauses adapters take between serial requests."""
    delays: List[Optional[float]] = []

    async def fake_delay(self, seconds=None):
        delays.append(seconds)

    monkeypatch.setattr(BaseAdapter, "delay", fake_delay)
    monkeypatch.setattr(settings, "FETCH_RETRY_DELAY_SECONDS", 0.0)
    return delays


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)


def routes_handler(routes: Dict[str, httpx.Response]) -> Callable[[httpx.Request], httpx.Response]:
    """Serve canned responses by URL prefix; unknown URLs get a 404.

    Each request gets a fresh copy, so one canned response can be served
    any number of times.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        for prefix, response in routes.items():
            if url.startswith(prefix):
                return httpx.Response(
                    response.status_code,
                    headers=response.headers,
                    content=response.content,
                )
        return httpx.Response(404, text="not found")

    return handler


def make_fetch_client(
    handler: Callable[[httpx.Request], httpx.Response],
    proxies: Sequence[str] = (),
    source: str = "TestSource",
) -> FetchClient:
    """Build a FetchClient whose network is the given handler."""
    transport = RecordingTransport(handler)
    client = FetchClient(
        source=source,
        proxy_pool=ProxyPool(list(proxies)),
        http_client=httpx.AsyncClient(transport=transport),
        user_agent="pytest-agent",
    )
    client.transport = transport
    return client


class FakeAdapter(BaseAdapter):
    """Configurable in-memory adapter.

    ``search_outcome`` / ``probe_outcome`` may be a value to return, an
    exception to raise, or an async callable.
    """

    source_type = SourceType.AGGREGATOR

    def __init__(
        self,
        source_id: str = "fake",
        name: str = "Fake",
        domains: Sequence[str] = ("fake.test",),
        search_outcome=None,
        probe_outcome="<html><title>ok</title></html>",
        images: Optional[List[ChapterImage]] = None,
    ):
        self.source_id = source_id
        self.name = name
        self.base_url = f"https://{domains[0]}" if domains else "https://fake.test"
        self.domains = tuple(domains)
        self.search_outcome = search_outcome if search_outcome is not None else []
        self.probe_outcome = probe_outcome
        self.images = images
        self.search_calls: List[str] = []
        self.probe_calls = 0
        super().__init__(fetch_client=make_fetch_client(routes_handler({}), source=name))

    async def _resolve(self, outcome):
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return await outcome()
        return outcome

    async def search(self, query: str) -> List[SearchResult]:
        self.search_calls.append(query)
        return await self._resolve(self.search_outcome)

    async def get_chapter_list(self, series_url: str) -> List[ScrapedChapter]:
        return []

    async def extract_info(self, url: str) -> SeriesInfo:
        return SeriesInfo(title=self.name, id=self.source_id)

    async def probe(self) -> str:
        self.probe_calls += 1
        return await self._resolve(self.probe_outcome)

    def supports_chapter_images(self) -> bool:
        return self.images is not None

    async def get_chapter_images(self, chapter_url: str) -> List[ChapterImage]:
        if self.images is None:
            return await super().get_chapter_images(chapter_url)
        return self.images


def search_result(title: str, source: str = "fake") -> SearchResult:
    return SearchResult(
        id=title.lower().replace(" ", "-"),
        title=title,
        url=f"https://{source}.test/series/{title.lower().replace(' ', '-')}",
        latest_chapter=10,
    )


@pytest.fixture
def registry() -> AdapterRegistry:
    """Registry with three fake sources: two healthy, one failing search."""
    reg = AdapterRegistry()
    reg.register(
        FakeAdapter("alpha", "Alpha", ("alpha.test",), search_outcome=[search_result("Solo Leveling", "alpha")])
    )
    reg.register(
        FakeAdapter("beta", "Beta", ("beta.test",), search_outcome=SourceError("Beta", "HTTP 503: Service Unavailable"))
    )
    reg.register(
        FakeAdapter("gamma", "Gamma", ("gamma.test",), search_outcome=[search_result("Omniscient Reader", "gamma")])
    )
    return reg
