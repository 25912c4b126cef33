"""FastAPI dependency injection providers.

Routes receive the registry, prober and aggregator through these providers
so tests can swap them with ``app.dependency_overrides``.
"""

from comicsource.scrapers.registry import AdapterRegistry, get_adapter_registry
from comicsource.services.health_service import HealthProber, get_health_prober
from comicsource.services.search_service import SearchAggregator, get_search_aggregator


def get_registry() -> AdapterRegistry:
    return get_adapter_registry()


def get_prober() -> HealthProber:
    return get_health_prober()


def get_aggregator() -> SearchAggregator:
    return get_search_aggregator()
