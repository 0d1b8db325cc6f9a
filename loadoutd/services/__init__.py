"""Services for loadoutd."""

from .compile_service import CompileService
from .profile_store import ProfileStore

__all__ = [
    "CompileService",
    "ProfileStore",
]
