"""Main FastAPI application for loadoutd.

This module creates and configures the FastAPI application that exposes
the loadout compiler via REST API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from loadout_library import __version__

from .dependencies import get_settings
from .models import ErrorResponse
from .models import ValidationErrorDetail
from .routers import catalog_router
from .routers import compile_router
from .routers import profiles_router
from .routers import status_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    # Startup
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(f"Starting loadoutd on {settings.host}:{settings.port}")
    logger.info(f"Default DNS provider: {settings.dns_provider}, debounce: {settings.debounce_ms}ms")

    yield

    # Shutdown
    logger.info("Shutting down loadoutd")


# Create FastAPI application
app = FastAPI(
    title="loadoutd",
    description="REST API for compiling Windows gaming loadout scripts",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware - origins configured in daemon.yaml
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.info(f"CORS enabled for origins: {settings.cors_origins}")

# Include routers
app.include_router(catalog_router)
app.include_router(compile_router)
app.include_router(profiles_router)
app.include_router(status_router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as ErrorResponse bodies."""
    body = ErrorResponse(error=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(by_alias=True, exclude_none=True))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as ErrorResponse bodies."""
    details = [
        ValidationErrorDetail(loc=[str(part) for part in err["loc"]], msg=err["msg"], type=err["type"])
        for err in exc.errors()
    ]
    body = ErrorResponse(error="Invalid request", validation_errors=details)
    return JSONResponse(status_code=422, content=body.model_dump(by_alias=True, exclude_none=True))


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint.

    Returns:
        Welcome message with API information
    """
    return {
        "name": "loadoutd",
        "version": __version__,
        "description": "REST API for compiling Windows gaming loadout scripts",
        "docs": "/docs",
        "openapi": "/openapi.json",
    }
