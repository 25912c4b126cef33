"""Register all built-in adapters with the registry.

This module is imported during application startup (and by the source
runner script) to populate the adapter registry.
"""

from typing import Optional

import structlog

from comicsource.core.exceptions import AdapterRegistrationError
from comicsource.scrapers.adapters import (
    # Scanlators
    AsuraScanAdapter,
    MadarascansAdapter,
    KenscansAdapter,
    HadesScansAdapter,
    LagoonScansAdapter,
    # Aggregators
    MangaKatanaAdapter,
    NovelCoolAdapter,
    MgekoAdapter,
    WebtoonAdapter,
    AtsuMoeAdapter,
)
from comicsource.scrapers.registry import AdapterRegistry, get_adapter_registry

logger = structlog.get_logger(__name__)

# Registration order is the order of fan-out search blocks and health entries
BUILTIN_ADAPTERS = (
    AsuraScanAdapter,
    MangaKatanaAdapter,
    MadarascansAdapter,
    NovelCoolAdapter,
    MgekoAdapter,
    KenscansAdapter,
    WebtoonAdapter,
    AtsuMoeAdapter,
    HadesScansAdapter,
    LagoonScansAdapter,
)


def register_all_adapters(registry: Optional[AdapterRegistry] = None) -> AdapterRegistry:
    """Register every built-in adapter.

    Safe to call more than once: adapters whose source_id is already
    registered are skipped.

    Args:
        registry: Target registry (defaults to the global one)

    Returns:
        The populated registry
    """
    registry = registry if registry is not None else get_adapter_registry()

    for adapter_class in BUILTIN_ADAPTERS:
        if adapter_class.source_id in registry:
            continue
        try:
            registry.register(adapter_class())
        except AdapterRegistrationError as e:
            logger.error(
                "adapter_registration_failed",
                source_id=adapter_class.source_id,
                error=str(e),
            )
            raise

    logger.info(
        "all_adapters_registered",
        count=len(registry),
        sources=[adapter.source_id for adapter in registry.all()],
    )
    return registry
