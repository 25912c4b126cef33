"""API v1 router -- aggregates all endpoint routers."""

from fastapi import APIRouter

from comicsource.api.v1 import health, pages, search, sources

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(pages.router, prefix="/pages", tags=["pages"])
api_router.include_router(sources.router, prefix="/sources", tags=["sources"])
