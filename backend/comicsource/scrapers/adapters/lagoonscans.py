"""LagoonScans scanlator adapter (MangaThemesia)."""

from comicsource.scrapers.base import SourceType

from comicsource.scrapers.adapters.themesia import ThemesiaAdapter


class LagoonScansAdapter(ThemesiaAdapter):
    """LagoonScans (lagoonscans.com) adapter.

    Search cards carry no update date, so ``last_updated`` stays empty.
    """

    source_id = "lagoonscans"
    name = "LagoonScans"
    base_url = "https://lagoonscans.com"
    source_type = SourceType.SCANLATOR
    domains = ("lagoonscans.com",)
