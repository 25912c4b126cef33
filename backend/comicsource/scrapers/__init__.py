"""Source adapter system.

This package provides:
- The BaseAdapter contract every content source implements
- Entity data structures returned by adapters
- Fetch utilities (direct/proxy strategies, bot-wall detection) and chapter normalization
- The registry that resolves adapters by name or URL
"""

from .models import (
    AdapterDescriptor,
    ChapterImage,
    ScrapedChapter,
    SearchResult,
    SeriesInfo,
    SourceType,
)
from .base import BaseAdapter
from .registry import AdapterRegistry, adapter_registry, get_adapter_registry

__all__ = [
    # Base class
    "BaseAdapter",
    # Data structures
    "AdapterDescriptor",
    "ChapterImage",
    "ScrapedChapter",
    "SearchResult",
    "SeriesInfo",
    "SourceType",
    # Registry
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter_registry",
]
