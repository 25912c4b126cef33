"""Source health schemas."""

from datetime import datetime
from typing import Dict, Optional

from comicsource.schemas.common import CamelModel


class HealthResultResponse(CamelModel):
    """Probe outcome of one source."""

    status: str  # healthy | cloudflare | timeout | error
    message: str
    response_time: Optional[int] = None  # Milliseconds
    last_checked: datetime


class HealthReportResponse(CamelModel):
    """Health of every source, keyed by source id."""

    sources: Dict[str, HealthResultResponse]
    cached: bool
    cache_age: Optional[int] = None  # Seconds since the snapshot was taken
