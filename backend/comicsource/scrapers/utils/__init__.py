"""Scraper utilities for fetching, bot-wall detection, and chapter normalization."""

from .bot_wall import detect_bot_wall
from .proxy_manager import ProxyPool, ProxyEntry
from .user_agents import (
    get_random_user_agent,
    build_browser_headers,
    USER_AGENTS,
)
from .normalizer import (
    ChapterNormalizer,
    ChapterListBuilder,
    INVALID_CHAPTER,
    format_chapter_number,
    format_relative_time,
    normalize_chapters,
    parse_update_timestamp,
)
from .retry import fetch_retrying, is_transient
from .http_client import FetchClient
from .fetch_strategy import (
    FetchStage,
    FetchStrategy,
    FetchTransition,
    DirectThenProxyStrategy,
    DirectOnlyStrategy,
    ProxyFirstStrategy,
    RetryingStrategy,
)


__all__ = [
    # Bot wall
    "detect_bot_wall",
    # Proxy pool
    "ProxyPool",
    "ProxyEntry",
    # User agents
    "get_random_user_agent",
    "build_browser_headers",
    "USER_AGENTS",
    # Normalization
    "ChapterNormalizer",
    "ChapterListBuilder",
    "INVALID_CHAPTER",
    "format_chapter_number",
    "format_relative_time",
    "normalize_chapters",
    "parse_update_timestamp",
    # Retry
    "fetch_retrying",
    "is_transient",
    # Fetching
    "FetchClient",
    "FetchStage",
    "FetchStrategy",
    "FetchTransition",
    "DirectThenProxyStrategy",
    "DirectOnlyStrategy",
    "ProxyFirstStrategy",
    "RetryingStrategy",
]
