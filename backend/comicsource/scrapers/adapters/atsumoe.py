"""AtsuMoe aggregator adapter.

AtsuMoe is a JSON-API site: search hits come from its document search
endpoint and chapters from a paginated ``/api/manga/chapters`` endpoint,
walked with a short pause between pages.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Tuple

from comicsource.core.exceptions import InvalidRequestError, ParseFailure, SourceError
from comicsource.scrapers.base import (
    BaseAdapter,
    ScrapedChapter,
    SearchResult,
    SeriesInfo,
    SourceType,
)
from comicsource.scrapers.utils.normalizer import ChapterListBuilder, format_relative_time


CHAPTER_PAGE_DELAY_SECONDS = 0.5
SEARCH_HIT_DELAY_SECONDS = 0.1
MAX_CHAPTER_PAGES = 100

_MANGA_ID_RE = re.compile(r"/manga/([a-zA-Z0-9]+)")


class AtsuMoeAdapter(BaseAdapter):
    """AtsuMoe (atsu.moe) adapter."""

    source_id = "atsumoe"
    name = "AtsuMoe"
    base_url = "https://atsu.moe"
    source_type = SourceType.AGGREGATOR
    domains = ("atsu.moe",)

    async def _chapters_page(self, manga_id: str, page: int) -> Dict[str, Any]:
        data = await self.fetch_json(
            f"{self.base_url}/api/manga/chapters",
            params={"id": manga_id, "filter": "all", "sort": "desc", "page": page},
        )
        if not isinstance(data, dict) or not isinstance(data.get("chapters"), list):
            raise ParseFailure(self.name, f"Unexpected chapters response for {manga_id}")
        return data

    async def search(self, query: str) -> List[SearchResult]:
        data = await self.fetch_json(
            f"{self.base_url}/collections/manga/documents/search",
            params={
                "q": query,
                "limit": 12,
                "query_by": "title,englishTitle,otherNames",
                "query_by_weights": "3,2,1",
                "include_fields": "id,title,englishTitle,poster",
                "num_typos": "4,3,2",
            },
        )
        if not isinstance(data, dict):
            raise ParseFailure(self.name, "Unexpected search response shape")

        hits = data.get("hits") or []
        if not isinstance(hits, list):
            raise ParseFailure(self.name, "Unexpected search response shape")

        results: List[SearchResult] = []
        for hit in hits:
            doc = hit.get("document") if isinstance(hit, dict) else None
            if not isinstance(doc, dict):
                continue
            title = doc.get("englishTitle") or doc.get("title")
            manga_id = doc.get("id")
            if not manga_id or not title or not isinstance(manga_id, (str, int)):
                continue
            manga_id = str(manga_id)

            latest, updated = await self._latest_chapter(manga_id)
            poster = doc.get("poster")
            try:
                results.append(
                    SearchResult(
                        id=manga_id,
                        title=title,
                        url=f"{self.base_url}/manga/{manga_id}",
                        cover_image=f"{self.base_url}{poster}" if isinstance(poster, str) and poster else None,
                        latest_chapter=latest,
                        last_updated=updated,
                    )
                )
            except ValueError as e:
                self.logger.debug("search_item_skipped", manga_id=manga_id, error=str(e))
            await self.delay(SEARCH_HIT_DELAY_SECONDS)
        return results

    async def _latest_chapter(self, manga_id: str) -> Tuple[float, str]:
        try:
            data = await self._chapters_page(manga_id, 0)
        except SourceError as e:
            self.logger.warning("series_enrichment_failed", manga_id=manga_id, error=str(e))
            return 0, ""
        if not data["chapters"]:
            return 0, ""

        newest = data["chapters"][0]
        if not isinstance(newest, dict):
            return 0, ""
        updated = ""
        created = newest.get("createdAt")
        if isinstance(created, str) and created:
            try:
                updated = format_relative_time(datetime.fromisoformat(created.replace("Z", "+00:00")))
            except ValueError:
                updated = ""
        try:
            latest = float(newest.get("number") or 0)
        except (TypeError, ValueError):
            latest = 0.0
        return latest, updated

    async def extract_info(self, url: str) -> SeriesInfo:
        """Validate a manga URL against the chapters API.

        The API exposes no title, so the manga id doubles as the title.
        """
        manga_id = self._manga_id(url)
        await self._chapters_page(manga_id, 0)
        return SeriesInfo(title=manga_id, id=manga_id)

    def _manga_id(self, url: str) -> str:
        match = _MANGA_ID_RE.search(url or "")
        if not match:
            raise InvalidRequestError("Invalid atsu.moe manga URL")
        return match.group(1)

    async def get_chapter_list(self, series_url: str) -> List[ScrapedChapter]:
        manga_id = self._manga_id(series_url)
        builder = ChapterListBuilder()

        page, total_pages = 0, 1
        while page < min(total_pages, MAX_CHAPTER_PAGES):
            data = await self._chapters_page(manga_id, page)
            total_pages = int(data.get("pages") or 1)
            for chapter in data["chapters"]:
                try:
                    number = float(chapter["number"])
                    chapter_id = str(chapter["id"])
                except (KeyError, TypeError, ValueError):
                    self.logger.debug("chapter_skipped", manga_id=manga_id, chapter=chapter)
                    continue
                builder.add(
                    number,
                    f"{self.base_url}/read/{manga_id}/{chapter_id}",
                    title=chapter.get("title"),
                    chapter_id=chapter_id,
                )

            page += 1
            if page < total_pages:
                await self.delay(CHAPTER_PAGE_DELAY_SECONDS)

        return builder.build()
