"""Registry of source adapter instances."""

from typing import Dict, List, Optional, Tuple

import structlog

from comicsource.core.exceptions import AdapterRegistrationError, NotFoundError
from comicsource.scrapers.base import BaseAdapter
from comicsource.scrapers.models import AdapterDescriptor


logger = structlog.get_logger(__name__)


class AdapterRegistry:
    """Ordered set of adapters, looked up by name, id or URL.

    Registration order is preserved: it is the order of the fan-out search
    response and of the health report. Adapters must claim mutually
    exclusive domains; an overlapping claim is rejected at registration.
    """

    def __init__(self):
        self._adapters: Dict[str, BaseAdapter] = {}

    def __len__(self) -> int:
        return len(self._adapters)

    def __contains__(self, source_id: str) -> bool:
        return source_id in self._adapters

    def register(self, adapter: BaseAdapter) -> None:
        """Register an adapter instance.

        Args:
            adapter: Adapter instance (must inherit from BaseAdapter)

        Raises:
            AdapterRegistrationError: If the id is taken or a domain overlaps
        """
        if not isinstance(adapter, BaseAdapter):
            raise AdapterRegistrationError(f"Adapter must inherit from BaseAdapter: {adapter!r}")
        if not adapter.source_id or not adapter.name:
            raise AdapterRegistrationError(f"Adapter is missing source_id or name: {adapter!r}")
        if adapter.source_id in self._adapters:
            raise AdapterRegistrationError(f"Duplicate source_id: {adapter.source_id}")

        for other in self._adapters.values():
            overlap = _overlapping_domain(adapter.domains, other.domains)
            if overlap:
                raise AdapterRegistrationError(
                    f"{adapter.source_id} domain '{overlap[0]}' overlaps "
                    f"{other.source_id} domain '{overlap[1]}'"
                )

        self._adapters[adapter.source_id] = adapter
        logger.info(
            "adapter_registered",
            source_id=adapter.source_id,
            adapter_class=type(adapter).__name__,
            strategy=adapter.fetch_strategy.name,
        )

    def resolve_by_url(self, url: str) -> Optional[BaseAdapter]:
        """Find the adapter whose can_handle accepts a URL.

        Returns:
            First matching adapter in registration order, or None
        """
        matches = [a for a in self._adapters.values() if a.can_handle(url)]
        if not matches:
            logger.debug("adapter_not_resolved", url=url)
            return None
        if len(matches) > 1:
            logger.warning(
                "ambiguous_adapter_match",
                url=url,
                matches=[a.source_id for a in matches],
                chosen=matches[0].source_id,
            )
        return matches[0]

    def resolve_by_name(self, name: str) -> Optional[BaseAdapter]:
        """Find an adapter by display name, falling back to source id.

        Both comparisons are case-insensitive and exact.
        """
        wanted = (name or "").strip().lower()
        if not wanted:
            return None
        for adapter in self._adapters.values():
            if adapter.name.lower() == wanted:
                return adapter
        for adapter in self._adapters.values():
            if adapter.source_id.lower() == wanted:
                return adapter
        return None

    def get(self, source_id: str) -> BaseAdapter:
        """Get an adapter by source id.

        Raises:
            NotFoundError: If no adapter is registered under the id
        """
        adapter = self._adapters.get(source_id)
        if adapter is None:
            raise NotFoundError("Source", source_id)
        return adapter

    def all(self) -> Tuple[BaseAdapter, ...]:
        """Snapshot of every registered adapter in registration order."""
        return tuple(self._adapters.values())

    def descriptors(self) -> List[AdapterDescriptor]:
        return [adapter.descriptor() for adapter in self._adapters.values()]

    def names(self) -> List[str]:
        """Lowercased display names, as listed in unknown-source errors."""
        return [adapter.name.lower() for adapter in self._adapters.values()]


def _overlapping_domain(
    domains: Tuple[str, ...], others: Tuple[str, ...]
) -> Optional[Tuple[str, str]]:
    for domain in domains:
        for other in others:
            if domain in other or other in domain:
                return domain, other
    return None


# Global registry instance
adapter_registry = AdapterRegistry()


def get_adapter_registry() -> AdapterRegistry:
    """Get the global adapter registry instance.

    Returns:
        AdapterRegistry instance
    """
    return adapter_registry
