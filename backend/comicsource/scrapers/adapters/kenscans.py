"""Kenscans scanlator adapter.

Search goes through the site's JSON API; chapter lists are scraped from the
series page. Each search hit is enriched serially with its series page so
the latest free chapter and its relative date ("3 days ago") are known.
"""

import math
import re
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from comicsource.core.exceptions import ParseFailure, SourceError
from comicsource.scrapers.base import (
    BaseAdapter,
    ScrapedChapter,
    SearchResult,
    SeriesInfo,
    SourceType,
)
from comicsource.scrapers.utils.normalizer import (
    ChapterListBuilder,
    format_chapter_number,
    parse_update_timestamp,
)


API_URL = "https://api.kencomics.com"
MAX_SEARCH_RESULTS = 5

_CHAPTER_HREF_RE = re.compile(r"/chapter-(\d+(?:\.\d+)?)")
_LOCK_ICON_SELECTOR = 'svg path[d*="5.25 5.25"]'
_DATE_SELECTOR = ".text-xs.text-white\\/50"


def _rating(value: Any) -> Optional[float]:
    """Parse an API rating; blanks and placeholders like "N/A" become None."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return None
    return rating if math.isfinite(rating) else None


class KenscansAdapter(BaseAdapter):
    """Kenscans (kencomics.com) adapter."""

    source_id = "kenscans"
    name = "Kenscans"
    base_url = "https://kencomics.com"
    source_type = SourceType.SCANLATOR
    domains = ("kencomics.com",)

    async def search(self, query: str) -> List[SearchResult]:
        data = await self.fetch_json(
            f"{API_URL}/api/query",
            params={
                "page": 1,
                "perPage": 24,
                "searchTerm": query,
                "seriesType": "",
                "seriesStatus": "",
            },
            headers={"Origin": self.base_url, "Referer": f"{self.base_url}/"},
        )
        if not isinstance(data, dict):
            raise ParseFailure(self.name, "Unexpected search response shape")
        posts = data.get("posts") or []
        if not isinstance(posts, list):
            raise ParseFailure(self.name, "Unexpected search response shape")

        posts = [p for p in posts if isinstance(p, dict) and p.get("slug") and p.get("postTitle")]
        results: List[SearchResult] = []
        for index, post in enumerate(posts[:MAX_SEARCH_RESULTS]):
            if index:
                await self.delay()
            result = await self._enrich(post)
            if result is not None:
                results.append(result)
        return results

    async def _enrich(self, post: Dict[str, Any]) -> Optional[SearchResult]:
        series_url = f"{self.base_url}/series/{post['slug']}"
        latest, updated = 0.0, ""
        try:
            soup = await self.fetch_soup(series_url)
            latest, updated = self._latest_chapter(soup)
        except SourceError as e:
            self.logger.warning("series_enrichment_failed", title=post["postTitle"], error=str(e))

        try:
            return SearchResult(
                id=post["slug"],
                title=post["postTitle"],
                url=series_url,
                cover_image=post.get("featuredImage") or None,
                latest_chapter=latest,
                last_updated=updated,
                last_updated_timestamp=parse_update_timestamp(updated),
                rating=_rating(post.get("averageRating")),
            )
        except ValueError as e:
            self.logger.debug("search_item_skipped", url=series_url, error=str(e))
            return None

    def _free_chapters(self, soup: BeautifulSoup):
        for link in soup.select("a[href*='/chapter-']"):
            href = link.get("href")
            if not href or link.select_one(_LOCK_ICON_SELECTOR):
                continue
            match = _CHAPTER_HREF_RE.search(href)
            if not match:
                continue
            date_el = link.select_one(_DATE_SELECTOR)
            yield float(match.group(1)), self.absolute_url(href), date_el.get_text(strip=True) if date_el else ""

    def _latest_chapter(self, soup: BeautifulSoup) -> Tuple[float, str]:
        latest, updated = 0.0, ""
        for number, _, date in self._free_chapters(soup):
            if number > latest:
                latest, updated = number, date
        return latest, updated

    async def extract_info(self, url: str) -> SeriesInfo:
        soup = await self.fetch_soup(url)
        heading = soup.find("h1")
        title = heading.get_text(strip=True) if heading else ""
        if not title and soup.title:
            title = soup.title.get_text().split(" - ")[0].strip()
        return SeriesInfo(title=title, id=self.series_id(url, r"/series/([^/]+)"))

    async def get_chapter_list(self, series_url: str) -> List[ScrapedChapter]:
        soup = await self.fetch_soup(series_url)
        builder = ChapterListBuilder()
        for number, url, date in self._free_chapters(soup):
            builder.add(
                number,
                url,
                title=f"Chapter {format_chapter_number(number)}",
                last_updated=date,
            )
        return builder.build()
