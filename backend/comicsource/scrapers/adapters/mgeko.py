"""Mgeko aggregator adapter.

Mgeko fails intermittently with 5xx responses, so its fetches are retried
with a fixed delay around the default direct-then-proxy strategy.
"""

import re
from typing import List, Optional
from urllib.parse import quote_plus

from bs4 import Tag

from comicsource.scrapers.base import (
    BaseAdapter,
    ScrapedChapter,
    SearchResult,
    SeriesInfo,
    SourceType,
)
from comicsource.scrapers.utils.fetch_strategy import RetryingStrategy
from comicsource.scrapers.utils.normalizer import ChapterListBuilder, ChapterNormalizer


COVER_CDN = "https://imgsrv4.com/avatar/288x412"

_URL_PATTERNS = (
    re.compile(r"chapter[/-](\d+)(?:[-./](\d+))?", re.IGNORECASE),
    re.compile(r"-ch[/-](\d+)(?:[-./](\d+))?", re.IGNORECASE),
    re.compile(r"[/-](\d+)-eng-li", re.IGNORECASE),
)
_SERIES_ID_PATTERN = r"/manga/([^/]+)"
_LATEST_RE = re.compile(r"Chapters?\s+(\d+)", re.IGNORECASE)
_LAZY_ATTRS = ("data-src", "data-lazy-src", "data-original")


class MgekoAdapter(BaseAdapter):
    """Mgeko (mgeko.cc) adapter."""

    source_id = "mgeko"
    name = "Mgeko"
    base_url = "https://www.mgeko.cc"
    source_type = SourceType.AGGREGATOR
    domains = ("mgeko.cc",)

    fetch_strategy = RetryingStrategy()

    async def search(self, query: str) -> List[SearchResult]:
        soup = await self.fetch_soup(f"{self.base_url}/search/?search={quote_plus(query)}")
        results = []
        for item in soup.select("ul.novel-list li.novel-item"):
            result = self._parse_search_item(item)
            if result:
                results.append(result)
        return results

    def _parse_search_item(self, item: Tag) -> Optional[SearchResult]:
        link = item.select_one('a[href*="/manga/"]')
        href = link.get("href") if link else None
        if not href:
            return None

        title_el = item.select_one("h4.novel-title")
        id_match = re.search(_SERIES_ID_PATTERN, href)
        stats = item.select_one("div.novel-stats strong")
        latest = _LATEST_RE.search(stats.get_text(strip=True)) if stats else None
        updated = item.select("div.novel-stats span")

        try:
            return SearchResult(
                id=id_match.group(1) if id_match else "",
                title=title_el.get_text(strip=True) if title_el else "",
                url=self.absolute_url(href),
                cover_image=_cover_url(item.find("img")),
                latest_chapter=float(latest.group(1)) if latest else 0,
                last_updated=updated[-1].get_text(strip=True) if updated else "",
            )
        except ValueError as e:
            self.logger.debug("search_item_skipped", href=href, error=str(e))
            return None

    async def extract_info(self, url: str) -> SeriesInfo:
        soup = await self.fetch_soup(url)
        title = ""
        for selector in ("h1.novel-title", "h1"):
            el = soup.select_one(selector)
            if el and el.get_text(strip=True):
                title = el.get_text(strip=True)
                break
        if not title and soup.title:
            title = soup.title.get_text().split(" - ")[0].strip()
        return SeriesInfo(title=title, id=self.series_id(url, _SERIES_ID_PATTERN))

    async def get_chapter_list(self, series_url: str) -> List[ScrapedChapter]:
        chapters_url = series_url
        if "/all-chapters" not in series_url:
            chapters_url = series_url.rstrip("/") + "/all-chapters"

        soup = await self.fetch_soup(chapters_url)
        builder = ChapterListBuilder()
        for link in soup.select("ul.chapter-list li a"):
            href = link.get("href")
            if not href:
                continue
            url = self.absolute_url(href)
            title_el = link.select_one("strong.chapter-title")
            builder.add(
                ChapterNormalizer.from_url(url, _URL_PATTERNS),
                url,
                title=title_el.get_text(strip=True) if title_el else None,
            )
        return builder.build()


def _cover_url(img: Optional[Tag]) -> Optional[str]:
    if img is None:
        return None
    src = img.get("src")
    if not src or "loading.gif" in src:
        src = next((img.get(attr) for attr in _LAZY_ATTRS if img.get(attr)), None)
    if not src:
        return None
    if src.startswith("http"):
        return src
    return f"{COVER_CDN}/{src.lstrip('/')}"
