"""NovelCool aggregator adapter.

Chapter readers show one image per page, so chapter images are collected by
fetching ``<chapter>-<n>.html`` for every page listed in the page selector.
"""

import asyncio
import re
from typing import List, Optional
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
from comicsource.scrapers.utils.normalizer import ChapterListBuilder, ChapterNormalizer


_URL_PATTERNS = (
    re.compile(r"/Chapter[/-](\d+(?:\.\d+)?)/", re.IGNORECASE),
    re.compile(r"/chapter/Chapter[/-](\d+(?:\.\d+)?)/", re.IGNORECASE),
)
_SERIES_ID_PATTERN = r"/novel/([^/]+)\.html"
_PAGE_IMAGE_SELECTOR = ".mangaread-img img, #manga_picid_1"


class NovelCoolAdapter(BaseAdapter):
    """NovelCool (novelcool.com) adapter."""

    source_id = "novelcool"
    name = "NovelCool"
    base_url = "https://www.novelcool.com"
    source_type = SourceType.AGGREGATOR
    domains = ("novelcool.com",)

    async def search(self, query: str) -> List[SearchResult]:
        soup = await self.fetch_soup(f"{self.base_url}/search?name={quote_plus(query)}")
        items = [item for item in map(self._parse_search_item, soup.select("div.book-item")) if item]

        # Latest chapter numbers are only on the series page; fetch them concurrently
        latest = await asyncio.gather(*(self._latest_chapter(item.url) for item in items))
        for item, number in zip(items, latest):
            item.latest_chapter = number
        return items

    def _parse_search_item(self, item: Tag) -> Optional[SearchResult]:
        link = item.select_one('a[href*="/novel/"]')
        href = link.get("href") if link else None
        if not href:
            return None

        name_el = item.select_one('div.book-name[itemprop="name"]')
        title = ""
        if name_el:
            # Direct text only; child nodes hold alternative titles
            title = "".join(name_el.find_all(string=True, recursive=False)).strip()
            if not title:
                title = name_el.get_text().strip().split("\n")[0].strip()

        id_match = re.search(_SERIES_ID_PATTERN, href)
        cover = item.find("img")
        rating_el = item.select_one('div.book-rate-num[itemprop="aggregateRating"]')
        updated_el = item.select_one('span.book-data-time[itemprop="dateModified"]')

        try:
            rating = float(rating_el.get_text(strip=True)) if rating_el and rating_el.get_text(strip=True) else 0
        except ValueError:
            rating = 0

        try:
            return SearchResult(
                id=id_match.group(1) if id_match else "",
                title=title,
                url=self.absolute_url(href),
                cover_image=self.absolute_url(cover.get("src") or cover.get("cover_url")) if cover else None,
                last_updated=updated_el.get_text(strip=True) if updated_el else "",
                rating=rating,
            )
        except ValueError as e:
            self.logger.debug("search_item_skipped", href=href, error=str(e))
            return None

    async def _latest_chapter(self, series_url: str) -> float:
        try:
            chapters = await self.get_chapter_list(series_url)
        except SourceError as e:
            self.logger.warning("series_enrichment_failed", url=series_url, error=str(e))
            return 0
        return chapters[-1].number if chapters else 0

    async def extract_info(self, url: str) -> SeriesInfo:
        soup = await self.fetch_soup(url)
        title = ""
        for selector in ('div.book-name[itemprop="name"]', "h1"):
            el = soup.select_one(selector)
            if el and el.get_text(strip=True):
                title = el.get_text(strip=True)
                break
        if not title and soup.title:
            title = soup.title.get_text().split(" - ")[0].strip()
        return SeriesInfo(title=title, id=self.series_id(url, _SERIES_ID_PATTERN))

    async def get_chapter_list(self, series_url: str) -> List[ScrapedChapter]:
        soup = await self.fetch_soup(series_url)
        builder = ChapterListBuilder()
        for link in soup.select("div.chp-item a"):
            href = link.get("href")
            if not href:
                continue
            url = self.absolute_url(href)
            title_el = link.select_one("span.chapter-item-headtitle")
            builder.add(
                ChapterNormalizer.from_url(url, _URL_PATTERNS),
                url,
                title=title_el.get_text(strip=True) if title_el else None,
            )
        return builder.build()

    def supports_chapter_images(self) -> bool:
        return True

    async def get_chapter_images(self, chapter_url: str) -> List[ChapterImage]:
        """Collect one image per reader page.

        Pages are fetched in order and collection stops at the first page
        that fails to load, so page numbers never skip a failed page.
        """
        soup = await self.fetch_soup(chapter_url)
        page_count = len(soup.select("select.sl-page option")) or 1

        images: List[ChapterImage] = []
        first = _page_image(soup)
        if first:
            images.append(ChapterImage(url=first, page=1))

        stem = re.sub(r"\.html$", "", chapter_url)
        for page in range(2, page_count + 1):
            try:
                page_soup = await self.fetch_soup(f"{stem}-{page}.html")
            except SourceError as e:
                self.logger.info("chapter_page_failed", page=page, error=str(e))
                break
            image = _page_image(page_soup)
            if image:
                images.append(ChapterImage(url=image, page=page))

        return images


def _page_image(soup: BeautifulSoup) -> Optional[str]:
    img = soup.select_one(_PAGE_IMAGE_SELECTOR)
    src = img.get("src") if img else None
    return src.strip() if src else None
