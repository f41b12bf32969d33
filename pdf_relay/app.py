"""
PDF Relay - FastAPI application.

Exposes a health check plus three endpoints that save base64 PDFs to
Dropbox, render HTML to PDF through PDFShift, or do both in one call.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import RelaySettings, get_settings, validate_config_on_startup
from .errors import RelayError
from .models import HealthResponse
from .routes import router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    logger.info(f"{settings.service_name} v{__version__} starting")
    validate_config_on_startup(settings)
    yield
    logger.info(f"{settings.service_name} shutting down")


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Render relay errors in the shared JSON envelope."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error", "error": str(exc)},
    )


async def health_check(settings: RelaySettings = Depends(get_settings)) -> HealthResponse:
    """
    Liveness check.

    Always 200: it does not depend on upstream credentials or reachability.
    """
    return HealthResponse(status="OK", message=f"{settings.service_name} is running")


def create_app(settings: Optional[RelaySettings] = None) -> FastAPI:
    """
    Build the relay application.

    Args:
        settings: Explicit settings to inject. When omitted the cached
            environment settings are used.

    Returns:
        Configured FastAPI app
    """
    effective = settings or get_settings()
    logging.getLogger().setLevel(effective.log_level)

    app = FastAPI(
        title=effective.service_name,
        version=__version__,
        description="Relay that renders HTML to PDF via PDFShift and stores PDFs in Dropbox",
        lifespan=lifespan,
    )
    app.state.settings = effective
    if settings is not None:
        app.dependency_overrides[get_settings] = lambda: settings

    origins = effective.cors_origins_list
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials="*" not in origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.add_api_route("/health", health_check, methods=["GET"], response_model=HealthResponse)
    app.include_router(router)

    return app


app = create_app()
