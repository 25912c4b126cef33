"""Chapter page image endpoint."""

from fastapi import APIRouter, Depends

from comicsource.core.exceptions import InvalidRequestError, UnknownSourceError
from comicsource.dependencies import get_registry
from comicsource.schemas import ChapterImageResponse, PagesRequest, PagesResponse
from comicsource.scrapers.registry import AdapterRegistry

router = APIRouter()


@router.post("", response_model=PagesResponse)
async def get_pages(body: PagesRequest, registry: AdapterRegistry = Depends(get_registry)):
    """List the page images of a chapter.

    The adapter is resolved by ``source`` when given; a name that matches
    nothing falls back to resolving the chapter URL.
    """
    url = (body.url or "").strip()
    if not url:
        raise InvalidRequestError("URL is required")

    adapter = registry.resolve_by_name(body.source) if body.source else None
    if adapter is None:
        adapter = registry.resolve_by_url(url)
    if adapter is None:
        if body.source:
            raise UnknownSourceError(body.source, registry.names())
        raise InvalidRequestError("No source found for this URL")

    if not adapter.supports_chapter_images():
        raise InvalidRequestError(f"{adapter.name} does not support fetching chapter images")

    images = await adapter.get_chapter_images(url)
    return PagesResponse(
        images=[ChapterImageResponse(url=i.url, page=i.page) for i in images],
        source=adapter.name,
        total_pages=len(images),
    )
