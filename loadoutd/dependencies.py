"""Shared dependency factories for FastAPI endpoints.

The compile service is a process-wide singleton because its change tracker
must outlive individual requests.
"""

from functools import lru_cache

from loadout_library.config import load_config
from loadout_library.config.settings import LoadoutSettings
from loadout_library.storage import get_profiles_dir

from .services.compile_service import CompileService
from .services.profile_store import ProfileStore


@lru_cache(maxsize=1)
def get_settings() -> LoadoutSettings:
    """Get daemon settings.

    Returns:
        LoadoutSettings loaded from daemon.yaml and the environment
    """
    return load_config()


@lru_cache(maxsize=1)
def get_compile_service() -> CompileService:
    """Get the shared compile service.

    Returns:
        CompileService instance
    """
    return CompileService(settings=get_settings())


def get_profile_store() -> ProfileStore:
    """Get saved profile store.

    Returns:
        ProfileStore rooted at the profiles directory
    """
    return ProfileStore(get_profiles_dir())
