"""WEBTOON aggregator adapter.

Episode lists are paginated (``/list?page=N``). Episodes only readable in
the mobile app are not listed, but the list page reports how many there
are, and that count is added to the latest episode number in search
results.
"""

import asyncio
from typing import List, Tuple
from urllib.parse import parse_qsl, quote_plus, urlencode, urlsplit, urlunsplit

from bs4 import BeautifulSoup

from comicsource.core.exceptions import SourceError
from comicsource.scrapers.base import (
    BaseAdapter,
    ScrapedChapter,
    SearchResult,
    SeriesInfo,
    SourceType,
)
from comicsource.scrapers.utils.normalizer import ChapterListBuilder


MAX_SEARCH_RESULTS = 5
MAX_LIST_PAGES = 200


def build_list_url(series_url: str, page: int) -> str:
    """Point a series URL at one page of its episode list."""
    parts = urlsplit(series_url)
    path = parts.path
    if not path.endswith("/list"):
        path = path.rstrip("/") + "/list"
    query = [(k, v) for k, v in parse_qsl(parts.query) if k != "page"]
    query.append(("page", str(page)))
    return urlunsplit((parts.scheme, parts.netloc, path, urlencode(query), parts.fragment))


def _episode_number(item) -> int:
    try:
        return int(item.get("data-episode-no") or 0)
    except ValueError:
        return 0


class WebtoonAdapter(BaseAdapter):
    """WEBTOON (webtoons.com) adapter."""

    source_id = "webtoon"
    name = "WEBTOON"
    base_url = "https://www.webtoons.com"
    source_type = SourceType.AGGREGATOR
    domains = ("webtoons.com",)

    async def search(self, query: str) -> List[SearchResult]:
        soup = await self.fetch_soup(f"{self.base_url}/en/search?keyword={quote_plus(query)}")

        basics = []
        for item in soup.select(".webtoon_list li")[:MAX_SEARCH_RESULTS]:
            link = item.select_one("a.link")
            href = link.get("href") if link else None
            title_el = item.select_one(".title")
            if not href or not title_el or not title_el.get_text(strip=True):
                continue
            cover = item.select_one(".image_wrap img")
            basics.append(
                (
                    link.get("data-title-no", ""),
                    title_el.get_text(strip=True),
                    self.absolute_url(href),
                    cover.get("src") if cover else None,
                )
            )

        infos = await asyncio.gather(*(self._latest_episode(url) for _, _, url, _ in basics))
        return [
            SearchResult(
                id=title_no,
                title=title,
                url=url,
                cover_image=cover,
                latest_chapter=latest,
                last_updated=updated,
            )
            for (title_no, title, url, cover), (latest, updated) in zip(basics, infos)
        ]

    async def _latest_episode(self, series_url: str) -> Tuple[float, str]:
        try:
            soup = await self.fetch_soup(build_list_url(series_url, 1))
        except SourceError as e:
            self.logger.warning("series_enrichment_failed", url=series_url, error=str(e))
            return 0, ""

        highest, updated = 0, ""
        for item in soup.select("#_listUl li._episodeItem"):
            number = _episode_number(item)
            if number > highest:
                date = item.select_one(".date")
                highest, updated = number, date.get_text(strip=True) if date else ""
        return highest + self._app_locked_count(soup), updated

    @staticmethod
    def _app_locked_count(soup: BeautifulSoup) -> int:
        el = soup.select_one(".detail_install_app strong em")
        text = el.get_text(strip=True) if el else ""
        return int(text) if text.isdigit() else 0

    async def extract_info(self, url: str) -> SeriesInfo:
        soup = await self.fetch_soup(url)
        title = ""
        for selector in (".detail_header .subj", "h1"):
            el = soup.select_one(selector)
            if el and el.get_text(strip=True):
                title = el.get_text(strip=True)
                break
        if not title:
            og = soup.select_one("meta[property='og:title']")
            if og and og.get("content"):
                title = og["content"].strip()
        if not title and soup.title:
            title = soup.title.get_text().split("|")[0].strip()
        return SeriesInfo(title=title, id=self.series_id(url, r"title_no=(\d+)"))

    async def get_chapter_list(self, series_url: str) -> List[ScrapedChapter]:
        """Walk the paginated episode list until a page adds nothing new.

        A failure on the first page propagates; a failure on a later page
        ends the walk with the episodes collected so far.
        """
        builder = ChapterListBuilder()

        for page in range(1, MAX_LIST_PAGES + 1):
            try:
                soup = await self.fetch_soup(build_list_url(series_url, page))
            except SourceError as e:
                if page == 1:
                    raise
                self.logger.warning("episode_page_failed", page=page, error=str(e))
                break

            added = self._parse_episodes(soup, builder)
            if not added or not self._has_next_page(soup, page):
                break

        return builder.build()

    def _parse_episodes(self, soup: BeautifulSoup, builder: ChapterListBuilder) -> int:
        added = 0
        for item in soup.select("#_listUl li._episodeItem"):
            number = _episode_number(item)
            if number <= 0 or number in builder:
                continue
            link = item.find("a")
            href = link.get("href") if link else None
            if not href:
                continue
            title_el = item.select_one(".subj span")
            date = item.select_one(".date")
            if builder.add(
                number,
                self.absolute_url(href),
                title=(title_el.get_text(strip=True) if title_el else "") or f"Episode {number}",
                last_updated=date.get_text(strip=True) if date else None,
                chapter_id=str(number),
            ):
                added += 1
        return added

    @staticmethod
    def _has_next_page(soup: BeautifulSoup, page: int) -> bool:
        if soup.select_one(".paginate a.pg_next"):
            return True
        for span in soup.select(".paginate a span"):
            text = span.get_text(strip=True)
            if text.isdigit() and int(text) > page:
                return True
        return False
