"""Madarascans scanlator adapter.

Madarascans sits behind an aggressive bot wall, so every page is requested
through the proxy first. Search results are enriched one at a time with a
fetch of the series page (latest chapter and its date), pausing between
requests.
"""

import json
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple
from urllib.parse import quote_plus

from bs4 import BeautifulSoup, Tag

from comicsource.core.exceptions import SourceError
from comicsource.scrapers.base import (
    BaseAdapter,
    ChapterImage,
    ScrapedChapter,
    SearchResult,
    SeriesInfo,
    SourceType,
)
from comicsource.scrapers.utils.fetch_strategy import ProxyFirstStrategy
from comicsource.scrapers.utils.normalizer import (
    ChapterListBuilder,
    ChapterNormalizer,
    parse_update_timestamp,
)


MAX_SEARCH_RESULTS = 5

_READER_RE = re.compile(r"ts_reader\.run\((\{.*?\})\)", re.DOTALL)
_RATING_RE = re.compile(r"(\d+(?:\.\d+)?)")


@dataclass
class _Match:
    id: str
    title: str
    url: str
    cover_image: Optional[str]
    rating: Optional[float]


class MadarascansAdapter(BaseAdapter):
    """Madarascans (madarascans.com) adapter."""

    source_id = "madarascans"
    name = "Madarascans"
    base_url = "https://madarascans.com"
    source_type = SourceType.SCANLATOR
    domains = ("madarascans.com",)

    fetch_strategy = ProxyFirstStrategy()

    async def search(self, query: str) -> List[SearchResult]:
        soup = await self.fetch_soup(f"{self.base_url}/?s={quote_plus(query)}")
        matches = [m for m in map(self._parse_card, soup.select(".legend-card")) if m]

        results: List[SearchResult] = []
        for index, match in enumerate(matches[:MAX_SEARCH_RESULTS]):
            if index:
                await self.delay()
            latest, updated = 0.0, ""
            try:
                series_soup = await self.fetch_soup(match.url)
                latest, updated = self._latest_chapter(series_soup)
            except SourceError as e:
                self.logger.warning("series_enrichment_failed", title=match.title, error=str(e))

            results.append(
                SearchResult(
                    id=match.id,
                    title=match.title,
                    url=match.url,
                    cover_image=match.cover_image,
                    latest_chapter=latest,
                    last_updated=updated,
                    last_updated_timestamp=parse_update_timestamp(updated),
                    rating=match.rating,
                )
            )
        return results

    def _parse_card(self, card: Tag) -> Optional[_Match]:
        title_link = card.select_one(".legend-content .legend-title a")
        title = title_link.get_text(strip=True) if title_link else ""
        url = title_link.get("href") if title_link else None
        if not url:
            poster = card.select_one("a.legend-poster")
            url = poster.get("href") if poster else None
        if not url or not title:
            return None

        slug = re.search(r"/series/([^/]+)", url)
        cover = card.select_one("img.legend-img")
        rating_el = card.select_one(".legend-rating")
        rating = _RATING_RE.search(rating_el.get_text(strip=True)) if rating_el else None
        return _Match(
            id=slug.group(1) if slug else "",
            title=title,
            url=url,
            cover_image=self.absolute_url(cover.get("src") or cover.get("data-src")) if cover else None,
            rating=float(rating.group(1)) if rating else None,
        )

    def _chapter_items(self, soup: BeautifulSoup):
        """Yield (number, url, text, date) for every free chapter on a series page."""
        for item in soup.select(".ch-list-grid .ch-item"):
            if "locked" in (item.get("class") or []):
                continue
            link = item.select_one("a.ch-main-anchor")
            href = link.get("href") if link else None
            if not href or "#" in href:
                continue
            num_el = link.select_one(".ch-num")
            date_el = link.select_one(".ch-date")
            text = num_el.get_text(strip=True) if num_el else ""
            number = ChapterNormalizer.canonical_number(attribute=item.get("data-ch"), text=text)
            yield number, self.absolute_url(href), text, date_el.get_text(strip=True) if date_el else ""

    def _latest_chapter(self, soup: BeautifulSoup) -> Tuple[float, str]:
        latest, updated = 0.0, ""
        for number, _, _, date in self._chapter_items(soup):
            if number > latest:
                latest, updated = number, date
        return latest, updated

    async def extract_info(self, url: str) -> SeriesInfo:
        soup = await self.fetch_soup(url)
        title = ""
        for selector in ("h1", ".legend-title"):
            el = soup.select_one(selector)
            if el and el.get_text(strip=True):
                title = el.get_text(strip=True)
                break
        if not title and soup.title:
            title = soup.title.get_text().split(" - ")[0].strip()
        return SeriesInfo(title=title, id=self.series_id(url, r"/series/([^/]+)"))

    async def get_chapter_list(self, series_url: str) -> List[ScrapedChapter]:
        soup = await self.fetch_soup(series_url)
        builder = ChapterListBuilder()
        for number, url, text, date in self._chapter_items(soup):
            builder.add(
                number,
                url,
                title=text or f"Chapter {number:g}",
                last_updated=date,
            )
        return builder.build()

    def supports_chapter_images(self) -> bool:
        return True

    async def get_chapter_images(self, chapter_url: str) -> List[ChapterImage]:
        """Read page images from the ts_reader bootstrap script."""
        html = await self.fetch_html(chapter_url)
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
        urls = [url for url in urls if url]
        return [ChapterImage(url=url, page=page) for page, url in enumerate(urls, start=1)]
