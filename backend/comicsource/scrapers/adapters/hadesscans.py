"""Hades Scans scanlator adapter (MangaThemesia)."""

from typing import Optional

from comicsource.scrapers.base import SourceType
from comicsource.scrapers.utils.normalizer import format_chapter_number

from comicsource.scrapers.adapters.themesia import ThemesiaAdapter


class HadesScansAdapter(ThemesiaAdapter):
    """Hades Scans (hadesscans.com) adapter.

    Search is capped at five cards, and chapters behind a lock badge are
    left out of chapter lists.
    """

    source_id = "hadesscans"
    name = "Hades Scans"
    base_url = "https://hadesscans.com"
    source_type = SourceType.SCANLATOR
    domains = ("hadesscans.com",)

    latest_chapter_selector = ".ch-name"
    card_date_selector = ".ch-date"
    max_search_results = 5
    skip_locked = True

    def _chapter_title(self, number: float, text: str) -> Optional[str]:
        return text or f"Chapter {format_chapter_number(number)}"

    def supports_chapter_images(self) -> bool:
        return True
