"""Search across one or all registered sources."""

import asyncio
from dataclasses import dataclass, field, replace
from typing import List, Optional

import structlog

from comicsource.core.exceptions import (
    ComickSourceException,
    InvalidRequestError,
    UnknownSourceError,
)
from comicsource.scrapers.base import BaseAdapter, SearchResult
from comicsource.scrapers.registry import AdapterRegistry, get_adapter_registry

logger = structlog.get_logger(__name__)

ALL_SOURCES = "all"


@dataclass
class SourceSearchOutcome:
    """Results of one source, or the error that replaced them."""

    source: str
    results: List[SearchResult] = field(default_factory=list)
    error: Optional[str] = None


def is_fan_out(source: Optional[str]) -> bool:
    """True when a request names no source, or "all" (any case)."""
    return not source or not source.strip() or source.strip().lower() == ALL_SOURCES


class SearchAggregator:
    """Runs a query against one adapter, or fans it out to every adapter.

    Fan-out isolates failures: an adapter that raises contributes an empty
    block with an error message instead of failing the whole search.
    Blocks are returned in registration order, not completion order.
    """

    def __init__(self, registry: AdapterRegistry):
        self.registry = registry
        self.logger = logger.bind(service="search_aggregator")

    @staticmethod
    def _clean_query(query: Optional[str]) -> str:
        cleaned = (query or "").strip()
        if not cleaned:
            raise InvalidRequestError("Query is required")
        return cleaned

    def resolve(self, source: str) -> BaseAdapter:
        """Resolve a source name.

        Raises:
            UnknownSourceError: Carrying the valid source names
        """
        adapter = self.registry.resolve_by_name(source)
        if adapter is None:
            raise UnknownSourceError(source, self.registry.names())
        return adapter

    def _validated(self, adapter: BaseAdapter, results) -> List[SearchResult]:
        """Re-check every result an adapter returned, dropping malformed ones.

        Adapters may hand back anything; only well-formed SearchResults
        reach the response layer.
        """
        valid: List[SearchResult] = []
        for result in results or []:
            try:
                if not isinstance(result, SearchResult):
                    raise TypeError(f"expected SearchResult, got {type(result).__name__}")
                valid.append(replace(result))
            except (TypeError, ValueError) as e:
                self.logger.warning(
                    "search_result_dropped",
                    source=adapter.name,
                    result=repr(result),
                    error=str(e),
                )
        return valid

    async def search_source(self, query: str, source: str) -> SourceSearchOutcome:
        """Search a single source; its errors propagate unchanged."""
        cleaned = self._clean_query(query)
        adapter = self.resolve(source)
        results = self._validated(adapter, await adapter.search(cleaned))
        self.logger.info("source_searched", source=adapter.name, query=cleaned, count=len(results))
        return SourceSearchOutcome(source=adapter.name, results=results)

    async def _search_isolated(self, adapter: BaseAdapter, query: str) -> SourceSearchOutcome:
        try:
            results = self._validated(adapter, await adapter.search(query))
        except Exception as e:
            message = e.message if isinstance(e, ComickSourceException) else str(e) or type(e).__name__
            self.logger.warning("source_search_failed", source=adapter.name, query=query, error=message)
            return SourceSearchOutcome(source=adapter.name, error=message)
        return SourceSearchOutcome(source=adapter.name, results=results)

    async def search_all(self, query: str) -> List[SourceSearchOutcome]:
        """Search every registered source concurrently."""
        cleaned = self._clean_query(query)
        adapters = self.registry.all()
        outcomes = await asyncio.gather(*(self._search_isolated(a, cleaned) for a in adapters))
        self.logger.info(
            "all_sources_searched",
            query=cleaned,
            sources=len(outcomes),
            failed=sum(1 for o in outcomes if o.error),
        )
        return list(outcomes)


_search_aggregator: Optional[SearchAggregator] = None


def get_search_aggregator() -> SearchAggregator:
    """Get the process-wide search aggregator over the global registry."""
    global _search_aggregator
    if _search_aggregator is None:
        _search_aggregator = SearchAggregator(get_adapter_registry())
    return _search_aggregator
