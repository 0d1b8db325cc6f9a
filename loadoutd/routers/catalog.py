"""Catalog API endpoints."""

from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends

from ..dependencies import get_compile_service
from ..models import CatalogResponse
from ..services.compile_service import CompileService

router = APIRouter(prefix="/api/v1", tags=["catalog"])


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog(
    service: Annotated[CompileService, Depends(get_compile_service)],
) -> CatalogResponse:
    """List every optimization key with its tier, category and flags.

    Args:
        service: Compile service instance

    Returns:
        Catalog entries in script order
    """
    return service.catalog()
