"""Search endpoint."""

from dataclasses import asdict
from typing import List, Union

from fastapi import APIRouter, Depends

from comicsource.dependencies import get_aggregator
from comicsource.schemas import (
    AllSourcesSearchResponse,
    SearchRequest,
    SearchResultResponse,
    SourceSearchBlock,
    SourceSearchResponse,
)
from comicsource.services.search_service import SearchAggregator, is_fan_out

router = APIRouter()


def _results(results) -> List[SearchResultResponse]:
    return [SearchResultResponse(**asdict(r)) for r in results]


@router.post(
    "",
    response_model=Union[AllSourcesSearchResponse, SourceSearchResponse],
    response_model_exclude_none=True,
)
async def search(body: SearchRequest, aggregator: SearchAggregator = Depends(get_aggregator)):
    """Search one source, or every source when ``source`` is omitted or "all".

    Fan-out responses hold one block per source in registration order; a
    source that failed carries ``error`` and no results. Single-source
    failures propagate as error responses.
    """
    if is_fan_out(body.source):
        outcomes = await aggregator.search_all(body.query)
        return AllSourcesSearchResponse(
            sources=[
                SourceSearchBlock(
                    source=o.source,
                    results=_results(o.results),
                    error=o.error,
                )
                for o in outcomes
            ]
        )

    outcome = await aggregator.search_source(body.query, body.source)
    return SourceSearchResponse(
        source=outcome.source,
        results=_results(outcome.results),
    )
