"""Search request/response schemas."""

from typing import List, Optional

from pydantic import Field

from comicsource.schemas.common import CamelModel


class SearchRequest(CamelModel):
    """Search body: a query and an optional source name ("all" fans out)."""

    query: Optional[str] = Field(None, description="Series title to search for")
    source: Optional[str] = Field(None, description='Source name, or "all"')


class SearchResultResponse(CamelModel):
    id: str
    title: str
    url: str
    cover_image: Optional[str] = None
    latest_chapter: float = 0
    last_updated: str = ""
    last_updated_timestamp: Optional[int] = None
    rating: Optional[float] = None


class SourceSearchResponse(CamelModel):
    """Results of a single-source search."""

    source: str
    results: List[SearchResultResponse]


class SourceSearchBlock(CamelModel):
    """One source's block in a fan-out search."""

    source: str
    results: List[SearchResultResponse]
    error: Optional[str] = None


class AllSourcesSearchResponse(CamelModel):
    sources: List[SourceSearchBlock]
