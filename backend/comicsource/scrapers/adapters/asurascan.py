"""AsuraScan scanlator adapter.

Chapter numbers come from the chapter URL (``/chapter/12-5`` is 12.5).
Premium chapters are marked with an inline SVG badge and are skipped.
"""

import re
from typing import List, Optional
from urllib.parse import quote_plus

from bs4 import BeautifulSoup, Tag

from comicsource.scrapers.base import (
    BaseAdapter,
    ScrapedChapter,
    SearchResult,
    SeriesInfo,
    SourceType,
)
from comicsource.scrapers.utils.normalizer import ChapterListBuilder, ChapterNormalizer


_URL_PATTERNS = (
    re.compile(r"/chapter/(\d+)(?:[.-](\d+))?", re.IGNORECASE),
    re.compile(r"chapter[/-](\d+)(?:[.-](\d+))?$", re.IGNORECASE),
)

# Badges rendered on paywalled chapter links
_PREMIUM_SELECTORS = ('[id="clip0_568_418"]', 'circle[fill="#913FE2"]')

_SERIES_SLUG_RE = re.compile(r"series/([^/?]+)")
_LATEST_CHAPTER_RE = re.compile(r"Chapter\s+([\d.]+)", re.IGNORECASE)


class AsuraScanAdapter(BaseAdapter):
    """AsuraScan (asuracomic.net) adapter."""

    source_id = "asurascan"
    name = "AsuraScan"
    base_url = "https://asuracomic.net"
    source_type = SourceType.SCANLATOR
    domains = ("asuracomic.net",)

    async def search(self, query: str) -> List[SearchResult]:
        soup = await self.fetch_soup(f"{self.base_url}/series?page=1&name={quote_plus(query)}")
        results = []
        for link in soup.select('a[href^="series/"], a[href^="/series/"]'):
            result = self._parse_search_item(link)
            if result:
                results.append(result)
        self.logger.info("search_completed", query=query, count=len(results))
        return results

    def _parse_search_item(self, link: Tag) -> Optional[SearchResult]:
        href = link.get("href", "").strip()
        title_el = link.select_one("span.font-bold")
        title = title_el.get_text(strip=True) if title_el else ""
        if not href or not title:
            return None

        slug = _SERIES_SLUG_RE.search(href)
        chapter_el = link.select_one("span.text-\\[13px\\]")
        chapter_match = _LATEST_CHAPTER_RE.search(chapter_el.get_text(strip=True)) if chapter_el else None
        cover = link.find("img")

        try:
            return SearchResult(
                id=slug.group(1) if slug else "",
                title=title,
                url=self.absolute_url(href),
                cover_image=self.absolute_url(cover.get("src") or cover.get("data-src")) if cover else None,
                latest_chapter=float(chapter_match.group(1)) if chapter_match else 0,
            )
        except ValueError as e:
            self.logger.debug("search_item_skipped", href=href, error=str(e))
            return None

    async def extract_info(self, url: str) -> SeriesInfo:
        soup = await self.fetch_soup(url)
        title = ""
        for tag in ("h1", "h2", "h3"):
            heading = soup.find(tag)
            if heading and heading.get_text(strip=True):
                title = heading.get_text(strip=True)
                break
        if not title and soup.title:
            title = soup.title.get_text().split(" - ")[0].split("|")[0].strip()

        return SeriesInfo(title=title, id=self.series_id(url, r"/series/([^/?]+)"))

    async def get_chapter_list(self, series_url: str) -> List[ScrapedChapter]:
        soup = await self.fetch_soup(series_url)
        return self.parse_chapter_list(soup)

    def parse_chapter_list(self, soup: BeautifulSoup) -> List[ScrapedChapter]:
        builder = ChapterListBuilder()
        for link in soup.select('a[href*="/chapter/"]'):
            if any(link.select_one(selector) for selector in _PREMIUM_SELECTORS):
                continue
            href = link.get("href", "").strip()
            if href.startswith("http") or href.startswith("/"):
                url = self.absolute_url(href)
            else:
                url = f"{self.base_url}/series/{href}"

            heading = link.find("h3")
            number = ChapterNormalizer.from_url(url, _URL_PATTERNS)
            builder.add(number, url, title=heading.get_text(strip=True) if heading else None)
        return builder.build()
