"""Chapter number canonicalization and date normalization utilities.

Every source spells chapter numbers differently: a ``data-ch`` attribute,
"Chapter 12.5" in link text, ``/chapter/12-5`` in a URL. ChapterNormalizer
turns all of these into one float so chapter lists can be de-duplicated and
sorted the same way for every adapter.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Pattern, Sequence

import structlog

from comicsource.scrapers.models import ScrapedChapter

logger = structlog.get_logger()


INVALID_CHAPTER = -1.0


class ChapterNormalizer:
    """Derives canonical chapter numbers from heterogeneous fragments.

    Priority, highest first:

    1. a machine-readable attribute, parsed as a float;
    2. a "Chapter N[.M]" text pattern;
    3. a URL pattern (``/chapter/N``, ``chapter-N``, ``-ch-N``) where a second
       captured group is a tenths suffix: ``12`` + ``5`` is ``12.5``.

    Anything unparseable or negative yields INVALID_CHAPTER (-1).
    """

    TEXT_PATTERNS: Sequence[Pattern] = (
        re.compile(r"chapter\s*(\d+(?:\.\d+)?)", re.IGNORECASE),
        re.compile(r"\bch\.?\s*(\d+(?:\.\d+)?)", re.IGNORECASE),
        re.compile(r"^\s*(\d+(?:\.\d+)?)\s*$"),
    )

    URL_PATTERNS: Sequence[Pattern] = (
        re.compile(r"/chapter/(\d+)(?:[.-](\d+))?", re.IGNORECASE),
        re.compile(r"chapter[/-](\d+)(?:[-./](\d+))?", re.IGNORECASE),
        re.compile(r"-ch[/-](\d+)(?:[-./](\d+))?", re.IGNORECASE),
    )

    @staticmethod
    def from_attribute(value: Optional[str]) -> float:
        """Parse an explicit chapter-number attribute such as ``data-ch="12.5"``."""
        if value is None:
            return INVALID_CHAPTER
        try:
            number = float(str(value).strip())
        except ValueError:
            return INVALID_CHAPTER
        if number != number or number < 0:  # NaN or negative
            return INVALID_CHAPTER
        return number

    @classmethod
    def from_text(cls, text: Optional[str], patterns: Optional[Sequence[Pattern]] = None) -> float:
        """Extract a chapter number from link text like "Chapter 12.5"."""
        if not text:
            return INVALID_CHAPTER
        for pattern in patterns or cls.TEXT_PATTERNS:
            match = pattern.search(text)
            if match:
                return float(match.group(1))
        return INVALID_CHAPTER

    @classmethod
    def from_url(cls, url: Optional[str], patterns: Optional[Sequence[Pattern]] = None) -> float:
        """Extract a chapter number from a chapter URL.

        A secondary captured group is a sub-chapter index expressed in
        tenths: ``/chapter/12-5`` is 12.5, never 12.05 or 125.
        """
        if not url:
            return INVALID_CHAPTER
        for pattern in patterns or cls.URL_PATTERNS:
            match = pattern.search(url)
            if not match:
                continue
            main = float(match.group(1))
            sub = match.group(2) if pattern.groups >= 2 else None
            sub_index = int(sub) if sub else 0
            if sub_index > 0:
                return main + sub_index / 10
            return main
        return INVALID_CHAPTER

    @classmethod
    def canonical_number(
        cls,
        attribute: Optional[str] = None,
        text: Optional[str] = None,
        url: Optional[str] = None,
    ) -> float:
        """Resolve a chapter number from whichever fragments are available."""
        for number in (
            cls.from_attribute(attribute) if attribute is not None else INVALID_CHAPTER,
            cls.from_text(text),
            cls.from_url(url),
        ):
            if number >= 0:
                return number
        return INVALID_CHAPTER


def format_chapter_number(number: float) -> str:
    """Render a chapter number as an id: ``12`` for 12.0, ``12.5`` for 12.5."""
    if float(number).is_integer():
        return str(int(number))
    return str(number)


class ChapterListBuilder:
    """Accumulates scraped chapters, keeping the first entry per number.

    Later entries with an already-seen number are dropped: sources list
    paywalled re-releases next to the free chapter and those must not be
    counted twice.
    """

    def __init__(self):
        self._chapters: List[ScrapedChapter] = []
        self._seen: set = set()

    def __len__(self) -> int:
        return len(self._chapters)

    def __contains__(self, number: float) -> bool:
        return number in self._seen

    def add(
        self,
        number: float,
        url: str,
        title: Optional[str] = None,
        last_updated: Optional[str] = None,
        chapter_id: Optional[str] = None,
    ) -> bool:
        """Add a chapter if its number is valid and not seen yet.

        Returns:
            True if the chapter was kept
        """
        if number is None or number < 0 or number in self._seen:
            return False
        try:
            chapter = ScrapedChapter(
                id=chapter_id or format_chapter_number(number),
                number=number,
                url=url,
                title=title or None,
                last_updated=last_updated or None,
            )
        except ValueError as e:
            logger.debug("chapter_rejected", number=number, error=str(e))
            return False
        self._seen.add(number)
        self._chapters.append(chapter)
        return True

    def build(self) -> List[ScrapedChapter]:
        """Return the kept chapters sorted ascending by number."""
        return sorted(self._chapters, key=lambda chapter: chapter.number)


def normalize_chapters(chapters: Iterable[ScrapedChapter]) -> List[ScrapedChapter]:
    """De-duplicate (first wins) and sort an arbitrary chapter sequence."""
    builder = ChapterListBuilder()
    for chapter in chapters:
        builder.add(
            chapter.number,
            chapter.url,
            title=chapter.title,
            last_updated=chapter.last_updated,
            chapter_id=chapter.id,
        )
    return builder.build()


_RELATIVE_UNITS = {
    "second": timedelta(seconds=1),
    "minute": timedelta(minutes=1),
    "min": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}

_RELATIVE_RE = re.compile(
    r"(?:about\s+)?(\d+|an?)\s+(second|minute|min|hour|day|week|month|year)s?\s+ago",
    re.IGNORECASE,
)

_ABSOLUTE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%b %d,%Y",
    "%d %B %Y",
)


def parse_update_timestamp(text: Optional[str], now: Optional[datetime] = None) -> Optional[int]:
    """Convert an update label into epoch milliseconds.

    Handles relative labels ("3 days ago", "about 2 months ago",
    "an hour ago", "yesterday") and common absolute formats.

    Returns:
        Epoch milliseconds, or None if the label is not recognised
    """
    if not text:
        return None
    now = now or datetime.now(timezone.utc)
    label = text.strip()
    lowered = label.lower()

    if lowered in ("just now", "today"):
        return int(now.timestamp() * 1000)
    if lowered == "yesterday":
        return int((now - timedelta(days=1)).timestamp() * 1000)

    match = _RELATIVE_RE.search(lowered)
    if match:
        amount = 1 if match.group(1) in ("a", "an") else int(match.group(1))
        delta = _RELATIVE_UNITS[match.group(2)] * amount
        return int((now - delta).timestamp() * 1000)

    for fmt in _ABSOLUTE_FORMATS:
        try:
            parsed = datetime.strptime(label, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp() * 1000)

    return None


def format_relative_time(moment: datetime, now: Optional[datetime] = None) -> str:
    """Render a past moment as compact relative text ("3d ago")."""
    now = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    seconds = int((now - moment).total_seconds())
    minutes, hours, days = seconds // 60, seconds // 3600, seconds // 86400

    if days >= 365:
        return f"{days // 365}y ago"
    if days >= 30:
        return f"{days // 30}mo ago"
    if days >= 7:
        return f"{days // 7}w ago"
    if days > 0:
        return f"{days}d ago"
    if hours > 0:
        return f"{hours}h ago"
    if minutes > 0:
        return f"{minutes}m ago"
    return "just now"
