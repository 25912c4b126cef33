"""Pydantic schemas for the Comick Source API.

All request/response models are defined here for easy import.
"""

from comicsource.schemas.common import CamelModel, ErrorDetail, ErrorResponse
from comicsource.schemas.health import HealthReportResponse, HealthResultResponse
from comicsource.schemas.pages import ChapterImageResponse, PagesRequest, PagesResponse
from comicsource.schemas.search import (
    AllSourcesSearchResponse,
    SearchRequest,
    SearchResultResponse,
    SourceSearchBlock,
    SourceSearchResponse,
)
from comicsource.schemas.source import SourceDescriptorResponse, SourceListResponse

__all__ = [
    # Common
    "CamelModel",
    "ErrorDetail",
    "ErrorResponse",
    # Health
    "HealthReportResponse",
    "HealthResultResponse",
    # Pages
    "ChapterImageResponse",
    "PagesRequest",
    "PagesResponse",
    # Search
    "AllSourcesSearchResponse",
    "SearchRequest",
    "SearchResultResponse",
    "SourceSearchBlock",
    "SourceSearchResponse",
    # Sources
    "SourceDescriptorResponse",
    "SourceListResponse",
]
