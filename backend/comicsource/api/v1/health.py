"""Source health endpoints."""

from fastapi import APIRouter, Depends

from comicsource.dependencies import get_prober
from comicsource.schemas import HealthReportResponse, HealthResultResponse
from comicsource.services.health_service import HealthProber, HealthReport

router = APIRouter()


def _to_response(report: HealthReport) -> HealthReportResponse:
    return HealthReportResponse(
        sources={
            source_id: HealthResultResponse(
                status=result.status.value,
                message=result.message,
                response_time=result.response_time,
                last_checked=result.last_checked,
            )
            for source_id, result in report.sources.items()
        },
        cached=report.cached,
        cache_age=report.cache_age,
    )


@router.get("/health", response_model=HealthReportResponse, response_model_exclude_none=True)
async def get_health(prober: HealthProber = Depends(get_prober)):
    """Return the health of every source.

    Served from a 5-minute snapshot when one is fresh (``cached: true`` with
    ``cacheAge`` in seconds); otherwise every source is probed.
    """
    return _to_response(await prober.get_health())


@router.post("/health", response_model=HealthReportResponse, response_model_exclude_none=True)
async def refresh_health(prober: HealthProber = Depends(get_prober)):
    """Discard the cached snapshot and probe every source."""
    return _to_response(await prober.get_health(force=True))
