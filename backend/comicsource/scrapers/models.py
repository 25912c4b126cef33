"""Entity data structures returned by all adapters."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SourceType(str, Enum):
    """Kind of publisher behind a source."""

    SCANLATOR = "scanlator"
    AGGREGATOR = "aggregator"


@dataclass(frozen=True)
class AdapterDescriptor:
    """Identity of one registered source."""

    name: str
    source_id: str
    base_url: str
    type: SourceType


@dataclass
class SearchResult:
    """One series matching a search query."""

    id: str
    title: str
    url: str
    cover_image: Optional[str] = None
    latest_chapter: float = 0
    last_updated: str = ""  # Display text, e.g. "3 days ago"
    last_updated_timestamp: Optional[int] = None  # Epoch millis
    rating: Optional[float] = None

    def __post_init__(self):
        """Validate and coerce data after initialization.

        Sources hand back loosely typed JSON and scraped text, so numeric
        fields are coerced here and anything that cannot be coerced raises
        ValueError instead of reaching the response layer.
        """
        if not self.title or not isinstance(self.title, str):
            raise ValueError("title is required")
        if not self.url or not isinstance(self.url, str):
            raise ValueError("url is required")
        if self.id is None or isinstance(self.id, (dict, list)):
            raise ValueError(f"invalid id: {self.id!r}")
        self.id = str(self.id)
        if self.cover_image is not None and not isinstance(self.cover_image, str):
            raise ValueError(f"invalid cover_image: {self.cover_image!r}")
        if not isinstance(self.last_updated, str):
            raise ValueError(f"invalid last_updated: {self.last_updated!r}")
        self.latest_chapter = _finite_float("latest_chapter", self.latest_chapter)
        if self.rating is not None:
            self.rating = _finite_float("rating", self.rating)
        if self.last_updated_timestamp is not None:
            self.last_updated_timestamp = int(_finite_float("last_updated_timestamp", self.last_updated_timestamp))


def _finite_float(field_name: str, value) -> float:
    if isinstance(value, bool):
        raise ValueError(f"invalid {field_name}: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"invalid {field_name}: {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"invalid {field_name}: {value!r}")
    return number


@dataclass
class ScrapedChapter:
    """One chapter of a series, keyed by its canonical number."""

    id: str
    number: float
    url: str
    title: Optional[str] = None
    last_updated: Optional[str] = None

    def __post_init__(self):
        if not self.url:
            raise ValueError("url is required")


@dataclass
class ChapterImage:
    """One page image of a chapter."""

    url: str
    page: int  # 1-based

    def __post_init__(self):
        if not self.url:
            raise ValueError("url is required")
        if self.page < 1:
            raise ValueError("page must be >= 1")


@dataclass
class SeriesInfo:
    """Title and identifier extracted from a series page."""

    title: str
    id: str
