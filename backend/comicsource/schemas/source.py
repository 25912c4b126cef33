"""Source descriptor schemas."""

from typing import List

from comicsource.schemas.common import CamelModel


class SourceDescriptorResponse(CamelModel):
    """Identity of one registered source."""

    name: str
    source_id: str
    base_url: str
    type: str


class SourceListResponse(CamelModel):
    sources: List[SourceDescriptorResponse]
