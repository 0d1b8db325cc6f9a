"""Status router for loadoutd API.

Provides health check and status information.
"""

import logging
import time
from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends

from loadout_library import __version__
from loadout_library.config.settings import LoadoutSettings
from loadout_library.models.optimizations import CATALOG
from loadout_library.models.optimizations import CATALOG_VERSION

from ..dependencies import get_settings
from ..models import StatusResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["status"])

# Track daemon start time for uptime calculation
_start_time = time.time()


@router.get("/status", response_model=StatusResponse)
async def get_status(settings: Annotated[LoadoutSettings, Depends(get_settings)]) -> StatusResponse:
    """Get daemon status.

    Returns:
        Daemon status including version, catalog version and uptime
    """
    uptime = time.time() - _start_time

    return StatusResponse(
        status="running",
        version=__version__,
        catalog_version=CATALOG_VERSION,
        optimization_count=len(CATALOG),
        debounce_ms=settings.debounce_ms,
        uptime_seconds=uptime,
    )


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Simple health status
    """
    return {"status": "healthy"}
