"""Compile API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException

from loadout_library.exceptions import CompilationError

from ..dependencies import get_compile_service
from ..models import CompileRequest
from ..models import CompileResponse
from ..models import DiffResponse
from ..models import VerifyResponse
from ..services.compile_service import CompileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["compile"])


@router.post("/compile", response_model=CompileResponse)
async def compile_loadout(
    request: CompileRequest,
    service: Annotated[CompileService, Depends(get_compile_service)],
) -> CompileResponse:
    """Compile a hardware profile and selection into a script.

    Unknown optimization keys are dropped and listed in ``ignoredKeys``.

    Args:
        request: Compile request
        service: Compile service instance

    Returns:
        Script, guide, fragment summaries and change flag

    Raises:
        HTTPException:
            - 400 for invalid hardware tags or DNS provider
            - 500 if a rule fails
    """
    try:
        return service.compile(request)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except CompilationError as exc:
        logger.error(f"Failed to compile loadout: {exc}")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/compile/diff", response_model=DiffResponse)
async def get_diff(
    service: Annotated[CompileService, Depends(get_compile_service)],
) -> DiffResponse:
    """Get the diff of the previous compiled script against the current one.

    Before two distinct scripts have been compiled the missing side is
    treated as empty.
    """
    return service.diff()


@router.post("/verify", response_model=VerifyResponse)
async def verify_loadout(
    request: CompileRequest,
    service: Annotated[CompileService, Depends(get_compile_service)],
) -> VerifyResponse:
    """Render a read-only script that checks whether a selection was applied.

    Raises:
        HTTPException: 400 for invalid hardware tags or DNS provider
    """
    try:
        return service.verify(request)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
