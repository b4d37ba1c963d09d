"""
Main entrypoint for the Registry POS API.

This module assembles the FastAPI application, sets up logging,
registers the error handlers and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``, e.g.::

    uvicorn registry_pos_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.errors import RegistryError, StorageFailure
from .core.logging_config import setup_logging
from .core.security import gate_enabled
from .core.store import Store, create_store

logger = logging.getLogger(__name__)


async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    if isinstance(exc, StorageFailure):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})
    logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed payloads are reported as 400 like every other invalid argument.
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": f"Invalid payload: {problems}"})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def create_app(
    store: Optional[Store] = None,
    clock: Optional[Callable[[], date]] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    store : Optional[Store]
        Storage backend.  Defaults to the backend selected by
        ``settings.storage_backend``.
    clock : Optional[Callable[[], date]]
        Source of "today" for new registry entries.  Defaults to the
        server's local date.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that the store factory
    # can log which backend it picked.
    setup_logging(settings.log_level, settings.log_file or None)

    if store is None:
        store = create_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Create tables/files and apply migrations before serving requests.
        app.state.store.initialise()
        if not gate_enabled():
            logger.warning("APP_PASSWORD is not set; the device gate is disabled")
        yield

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.clock = clock or date.today

    app.add_exception_handler(RegistryError, registry_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(v1_router, prefix="/api/v1")
    # Unversioned alias for clients that call /api/products and /api/registry.
    app.include_router(v1_router, prefix="/api", include_in_schema=False)

    @app.get("/", tags=["health"])
    async def root() -> dict:
        return {
            "service": settings.project_name,
            "version": settings.api_version,
            "status": "ok",
        }

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
