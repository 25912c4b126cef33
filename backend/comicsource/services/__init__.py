"""Services that orchestrate adapters: health probing and search."""

from comicsource.services.health_service import (
    HealthCache,
    HealthProber,
    HealthReport,
    HealthResult,
    HealthSnapshot,
    HealthStatus,
    get_health_prober,
)
from comicsource.services.search_service import (
    SearchAggregator,
    SourceSearchOutcome,
    get_search_aggregator,
    is_fan_out,
)

__all__ = [
    "HealthCache",
    "HealthProber",
    "HealthReport",
    "HealthResult",
    "HealthSnapshot",
    "HealthStatus",
    "get_health_prober",
    "SearchAggregator",
    "SourceSearchOutcome",
    "get_search_aggregator",
    "is_fan_out",
]
