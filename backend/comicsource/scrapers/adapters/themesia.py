"""Shared scraping for WordPress sites on the MangaThemesia theme.

Themesia sites share one markup: search cards are ``.bsx`` blocks, series
pages list chapters under ``#chapterlist`` with a ``data-num`` attribute,
and readers bootstrap their pages through ``ts_reader.run({...})``. Each
site only differs in a few selectors, which subclasses override.
"""

import json
import re
from typing import List, Optional
from urllib.parse import quote_plus

from bs4 import BeautifulSoup, Tag

from comicsource.scrapers.base import (
    BaseAdapter,
    ChapterImage,
    ScrapedChapter,
    SearchResult,
    SeriesInfo,
)
from comicsource.scrapers.utils.normalizer import (
    ChapterListBuilder,
    ChapterNormalizer,
    parse_update_timestamp,
)


_LATEST_RE = re.compile(r"chapter\s+(\d+(?:\.\d+)?)", re.IGNORECASE)
_READER_RE = re.compile(r"ts_reader\.run\((\{.*?\})\)", re.DOTALL)
_SERIES_PATTERN = r"/manga/([^/]+)"


class ThemesiaAdapter(BaseAdapter):
    """Base adapter for MangaThemesia sites."""

    latest_chapter_selector = ".epxs"
    card_date_selector: Optional[str] = None
    max_search_results: Optional[int] = None
    skip_locked = False

    async def search(self, query: str) -> List[SearchResult]:
        soup = await self.fetch_soup(f"{self.base_url}/?s={quote_plus(query)}")
        results: List[SearchResult] = []
        for card in soup.select(".bsx"):
            result = self._parse_card(card)
            if result is not None:
                results.append(result)
        if self.max_search_results is not None:
            return results[: self.max_search_results]
        return results

    def _parse_card(self, card: Tag) -> Optional[SearchResult]:
        link = card.find("a")
        url = self.absolute_url(link.get("href")) if link else None
        if not url:
            return None

        title_el = card.select_one(".tt")
        cover = card.find("img")
        latest_el = card.select_one(self.latest_chapter_selector)
        latest = _LATEST_RE.search(latest_el.get_text(strip=True)) if latest_el else None
        updated = ""
        if self.card_date_selector:
            date_el = card.select_one(self.card_date_selector)
            updated = date_el.get_text(strip=True) if date_el else ""
        rating_el = card.select_one(".numscore")
        slug = re.search(_SERIES_PATTERN, url)

        try:
            return SearchResult(
                id=slug.group(1) if slug else "",
                title=title_el.get_text(strip=True) if title_el else "",
                url=url,
                cover_image=self.absolute_url(cover.get("src")) if cover else None,
                latest_chapter=float(latest.group(1)) if latest else 0,
                last_updated=updated,
                last_updated_timestamp=parse_update_timestamp(updated),
                rating=_score(rating_el.get_text(strip=True)) if rating_el else None,
            )
        except ValueError as e:
            self.logger.debug("search_item_skipped", url=url, error=str(e))
            return None

    async def extract_info(self, url: str) -> SeriesInfo:
        soup = await self.fetch_soup(url)
        title = ""
        for selector in (".entry-title", "h1"):
            el = soup.select_one(selector)
            if el and el.get_text(strip=True):
                title = el.get_text(strip=True)
                break
        if not title and soup.title:
            title = soup.title.get_text().split(" - ")[0].strip()
        return SeriesInfo(title=title, id=self.series_id(url, _SERIES_PATTERN))

    def _chapter_items(self, soup: BeautifulSoup):
        """Yield (number, url, text, date) for every readable chapter row."""
        for item in soup.select("#chapterlist ul li"):
            link = item.find("a")
            href = link.get("href") if link else None
            if not href or "#" in href:
                continue
            if self.skip_locked and link.select_one(".locked-badge"):
                continue
            url = self.absolute_url(href)
            num_el = item.select_one(".chapternum")
            date_el = item.select_one(".chapterdate")
            number = ChapterNormalizer.canonical_number(attribute=item.get("data-num"), url=url)
            yield (
                number,
                url,
                num_el.get_text(strip=True) if num_el else "",
                date_el.get_text(strip=True) if date_el else "",
            )

    async def get_chapter_list(self, series_url: str) -> List[ScrapedChapter]:
        soup = await self.fetch_soup(series_url)
        builder = ChapterListBuilder()
        for number, url, text, date in self._chapter_items(soup):
            builder.add(
                number,
                url,
                title=self._chapter_title(number, text),
                last_updated=date or None,
            )
        return builder.build()

    def _chapter_title(self, number: float, text: str) -> Optional[str]:
        return text or None

    async def get_chapter_images(self, chapter_url: str) -> List[ChapterImage]:
        """Read page images from the ts_reader bootstrap script."""
        if not self.supports_chapter_images():
            return await super().get_chapter_images(chapter_url)
        html = await self.fetch_html(chapter_url)
        urls = self._reader_urls(chapter_url, html)
        return [ChapterImage(url=url, page=page) for page, url in enumerate(urls, start=1)]

    def _reader_urls(self, chapter_url: str, html: str) -> List[str]:
        match = _READER_RE.search(html)
        if not match:
            self.logger.warning("reader_script_missing", url=chapter_url)
            return []
        try:
            data = json.loads(match.group(1))
            urls = data["sources"][0]["images"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            self.logger.warning("reader_script_unparseable", url=chapter_url, error=str(e))
            return []
        if not isinstance(urls, list):
            return []
        return [url for url in urls if isinstance(url, str) and url]


def _score(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None

