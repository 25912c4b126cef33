"""Chapter page image schemas."""

from typing import List, Optional

from pydantic import Field

from comicsource.schemas.common import CamelModel


class PagesRequest(CamelModel):
    """Chapter URL, plus an optional source name to bypass URL resolution."""

    url: Optional[str] = Field(None, description="Chapter URL")
    source: Optional[str] = Field(None, description="Source name")


class ChapterImageResponse(CamelModel):
    url: str
    page: int


class PagesResponse(CamelModel):
    images: List[ChapterImageResponse]
    source: str
    total_pages: int
