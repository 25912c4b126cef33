"""Base source adapter interface.

All source-specific adapters inherit from BaseAdapter and implement the
abstract methods defined here. Network access always goes through
``fetch_html``/``fetch_json`` so that the adapter's fetch strategy, the
bot-wall check and error classification apply uniformly.
"""

import asyncio
import re
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup

from comicsource.config import settings
from comicsource.core.exceptions import UnsupportedCapabilityError
from comicsource.scrapers.models import (
    AdapterDescriptor,
    ChapterImage,
    ScrapedChapter,
    SearchResult,
    SeriesInfo,
    SourceType,
)
from comicsource.scrapers.utils.fetch_strategy import DirectThenProxyStrategy, FetchStrategy
from comicsource.scrapers.utils.http_client import FetchClient


class BaseAdapter(ABC):
    """Abstract base class for all source adapters.

    Subclasses describe their source with class attributes and implement
    search(), get_chapter_list() and extract_info(). Sources that can list
    page images override supports_chapter_images() and get_chapter_images().
    """

    source_id: str = ""  # Stable key, e.g. "asurascan"
    name: str = ""  # Human label, e.g. "AsuraScan"
    base_url: str = ""
    source_type: SourceType = SourceType.SCANLATOR
    domains: Tuple[str, ...] = ()  # URL fragments owned by this source

    # Whole retrieval policy; override per source when direct access is unreliable
    fetch_strategy: FetchStrategy = DirectThenProxyStrategy()

    def __init__(self, fetch_client: Optional[FetchClient] = None):
        """Initialize the adapter.

        Args:
            fetch_client: Injected client (tests, shared connection pools);
                a default one is created from settings when omitted
        """
        self.fetch_client = fetch_client or FetchClient(source=self.name)
        self.logger = structlog.get_logger(adapter=self.source_id)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.source_id}>"

    def can_handle(self, url: str) -> bool:
        """Check whether a URL belongs to this source."""
        return bool(url) and any(domain in url for domain in self.domains)

    def descriptor(self) -> AdapterDescriptor:
        return AdapterDescriptor(
            name=self.name,
            source_id=self.source_id,
            base_url=self.base_url,
            type=self.source_type,
        )

    @abstractmethod
    async def search(self, query: str) -> List[SearchResult]:
        """Search the source for series matching a query.

        Args:
            query: Free-text series title

        Returns:
            List of fully parsed SearchResult objects

        Raises:
            SourceError: If the source cannot be reached or understood
        """
        pass

    @abstractmethod
    async def get_chapter_list(self, series_url: str) -> List[ScrapedChapter]:
        """List the chapters of a series.

        Returns:
            Chapters de-duplicated by number (first wins), sorted ascending

        Raises:
            SourceError: If the source cannot be reached or understood
        """
        pass

    @abstractmethod
    async def extract_info(self, url: str) -> SeriesInfo:
        """Extract the title and identifier of a series page."""
        pass

    def supports_chapter_images(self) -> bool:
        return False

    async def get_chapter_images(self, chapter_url: str) -> List[ChapterImage]:
        """List the page images of a chapter.

        Raises:
            UnsupportedCapabilityError: Unless the adapter overrides this
        """
        raise UnsupportedCapabilityError(self.name, "does not support fetching chapter images")

    async def probe(self) -> str:
        """Perform the cheap request the health prober measures.

        Default: fetch the home page directly, so bot walls and outages show
        up instead of being masked by the proxy.
        """
        return await self.fetch_client.fetch_direct(self.base_url)

    async def fetch_html(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """Fetch a page using this adapter's fetch strategy."""
        self.logger.debug("fetching_url", url=url, strategy=self.fetch_strategy.name)
        return await self.fetch_strategy.fetch(self.fetch_client, url, headers)

    async def fetch_soup(self, url: str, headers: Optional[Dict[str, str]] = None) -> BeautifulSoup:
        html = await self.fetch_html(url, headers)
        return BeautifulSoup(html, "html.parser")

    async def fetch_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Fetch a JSON API document directly from the source."""
        self.logger.debug("fetching_json", url=url)
        return await self.fetch_client.fetch_json(url, params=params, headers=headers)

    async def delay(self, seconds: Optional[float] = None) -> None:
        """Pause between serial requests to the same source."""
        await asyncio.sleep(settings.DETAIL_FETCH_DELAY_SECONDS if seconds is None else seconds)

    def absolute_url(self, href: Optional[str]) -> Optional[str]:
        """Resolve a possibly relative link against the source's base URL."""
        if not href:
            return None
        href = href.strip()
        if href.startswith("//"):
            return f"https:{href}"
        return urljoin(self.base_url + "/", href)

    @staticmethod
    def series_id(url: str, pattern: str) -> str:
        """Extract a series id from a URL, or fall back to a millisecond timestamp."""
        match = re.search(pattern, url or "")
        if match:
            return ".".join(group for group in match.groups() if group)
        return str(int(time.time() * 1000))
