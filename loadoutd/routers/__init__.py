"""API routers for loadoutd.

This module contains FastAPI routers for all API endpoints.
"""

from .catalog import router as catalog_router
from .compile import router as compile_router
from .profiles import router as profiles_router
from .status import router as status_router

__all__ = [
    "catalog_router",
    "compile_router",
    "profiles_router",
    "status_router",
]
