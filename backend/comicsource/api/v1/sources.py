"""Registered source listing."""

from fastapi import APIRouter, Depends

from comicsource.dependencies import get_registry
from comicsource.schemas import SourceDescriptorResponse, SourceListResponse
from comicsource.scrapers.registry import AdapterRegistry

router = APIRouter()


@router.get("", response_model=SourceListResponse)
async def list_sources(registry: AdapterRegistry = Depends(get_registry)):
    """List every registered source in registration order."""
    return SourceListResponse(
        sources=[
            SourceDescriptorResponse(
                name=d.name,
                source_id=d.source_id,
                base_url=d.base_url,
                type=d.type.value,
            )
            for d in registry.descriptors()
        ]
    )
