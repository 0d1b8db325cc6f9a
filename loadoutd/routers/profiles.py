"""Saved profile API endpoints."""

import logging
from typing import Annotated
from typing import Any

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException

from loadout_library.exceptions import ProfileLoadError

from ..dependencies import get_compile_service
from ..dependencies import get_profile_store
from ..models import CompileRequest
from ..models import LoadedProfileResponse
from ..models import LoadProfileRequest
from ..models import SavedProfileInfo
from ..services.compile_service import CompileService
from ..services.profile_store import ProfileStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/profiles", tags=["profiles"])


@router.post("/load", response_model=LoadedProfileResponse)
async def load_profile(
    request: LoadProfileRequest,
    service: Annotated[CompileService, Depends(get_compile_service)],
) -> LoadedProfileResponse:
    """Normalize a saved profile document.

    Keys from other catalog versions are dropped and listed in
    ``ignoredKeys``.

    Raises:
        HTTPException: 400 if the document is malformed
    """
    try:
        return service.load_profile(request)
    except ProfileLoadError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("", response_model=list[SavedProfileInfo])
async def list_profiles(
    store: Annotated[ProfileStore, Depends(get_profile_store)],
) -> list[SavedProfileInfo]:
    """List saved profiles.

    Returns:
        Saved profiles sorted by name
    """
    return store.list_profiles()


@router.get("/{name}")
async def get_profile(
    name: str,
    store: Annotated[ProfileStore, Depends(get_profile_store)],
) -> dict[str, Any]:
    """Get a saved profile document by name.

    Raises:
        HTTPException: 400 for an invalid name, 404 if not found
    """
    try:
        return store.get(name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Profile not found: {name}") from exc


@router.put("/{name}")
async def save_profile(
    name: str,
    request: CompileRequest,
    service: Annotated[CompileService, Depends(get_compile_service)],
    store: Annotated[ProfileStore, Depends(get_profile_store)],
) -> dict[str, Any]:
    """Save a selection as a profile document, replacing any profile with that name.

    Args:
        name: Profile name (lowercase letters, digits and hyphens)
        request: Selection to save
        service: Compile service instance
        store: Profile store instance

    Returns:
        The written profile document

    Raises:
        HTTPException:
            - 400 for an invalid name or selection
            - 500 if the document cannot be written
    """
    try:
        snapshot, _ = service.build_snapshot(request)
        return store.save(name, snapshot)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except OSError as exc:
        logger.error(f"Failed to save profile {name}: {exc}")
        raise HTTPException(status_code=500, detail="Internal server error") from exc


@router.delete("/{name}", status_code=204)
async def delete_profile(
    name: str,
    store: Annotated[ProfileStore, Depends(get_profile_store)],
) -> None:
    """Delete a saved profile.

    Raises:
        HTTPException: 400 for an invalid name, 404 if not found
    """
    try:
        store.delete(name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Profile not found: {name}") from exc
