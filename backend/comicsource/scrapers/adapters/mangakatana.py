"""MangaKatana aggregator adapter."""

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


MAX_SEARCH_RESULTS = 5

_SERIES_ID_PATTERN = r"/manga/([^/]+)\.(\d+)"
_TEXT_PATTERNS = (re.compile(r"Chapter\s+(\d+(?:\.\d+)?)", re.IGNORECASE),)
_LATEST_RE = re.compile(r"chapter\s+(\d+)", re.IGNORECASE)


class MangaKatanaAdapter(BaseAdapter):
    """MangaKatana (mangakatana.com) adapter.

    Chapter numbers are read from the link text; rows without a
    "Chapter N" label are ignored.
    """

    source_id = "mangakatana"
    name = "MangaKatana"
    base_url = "https://mangakatana.com"
    source_type = SourceType.AGGREGATOR
    domains = ("mangakatana.com",)

    async def search(self, query: str) -> List[SearchResult]:
        soup = await self.fetch_soup(
            f"{self.base_url}/?search={quote_plus(query)}&search_by=book_name"
        )
        results = []
        for item in soup.select("#book_list .item"):
            result = self._parse_search_item(item)
            if result:
                results.append(result)
        return results[:MAX_SEARCH_RESULTS]

    def _parse_search_item(self, item: Tag) -> Optional[SearchResult]:
        link = item.select_one("h3.title a")
        if not link:
            return None
        title = link.get_text(strip=True)
        url = link.get("href", "")
        id_match = re.search(_SERIES_ID_PATTERN, url)
        if not title or not id_match:
            return None

        cover = item.select_one(".wrap_img img")
        update = item.select_one("h3.title span")
        latest = _LATEST_RE.search(update.get_text(strip=True)) if update else None
        date = item.select_one(".date")

        try:
            return SearchResult(
                id=f"{id_match.group(1)}.{id_match.group(2)}",
                title=title,
                url=url,
                cover_image=cover.get("src") if cover else None,
                latest_chapter=float(latest.group(1)) if latest else 0,
                last_updated=date.get_text(strip=True) if date else "",
            )
        except ValueError as e:
            self.logger.debug("search_item_skipped", url=url, error=str(e))
            return None

    async def extract_info(self, url: str) -> SeriesInfo:
        soup = await self.fetch_soup(url)
        heading = soup.select_one("h1.heading")
        title = heading.get_text(strip=True) if heading else ""
        if not title and soup.title:
            title = soup.title.get_text().split(" | ")[0].strip()
        return SeriesInfo(title=title, id=self.series_id(url, _SERIES_ID_PATTERN))

    async def get_chapter_list(self, series_url: str) -> List[ScrapedChapter]:
        soup = await self.fetch_soup(series_url)
        return self.parse_chapter_list(soup)

    def parse_chapter_list(self, soup: BeautifulSoup) -> List[ScrapedChapter]:
        builder = ChapterListBuilder()
        for row in soup.select(".chapters table tbody tr"):
            link = row.select_one(".chapter a")
            if not link:
                continue
            text = link.get_text(strip=True)
            href = link.get("href")
            if not href or not text:
                continue

            date = row.select_one(".update_time")
            builder.add(
                ChapterNormalizer.from_text(text, _TEXT_PATTERNS),
                self.absolute_url(href),
                title=text,
                last_updated=date.get_text(strip=True) if date else None,
            )
        return builder.build()
