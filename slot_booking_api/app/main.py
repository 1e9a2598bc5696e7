"""
Main entrypoint for the Slot Booking API.

This module assembles the FastAPI application, sets up logging, builds
the shared record store and services, and includes the versioned
routers.  The ``create_app`` function builds and configures the app,
which is then instantiated at module import time as ``app``, so it can
be served directly::

    uvicorn slot_booking_api.app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.exceptions import LockTimeout, StoreError
from .core.logging_config import setup_logging
from .core.store import JsonStore
from .services.booking_service import BookingService
from .services.service_service import ServiceService
from .services.user_service import UserService

logger = logging.getLogger(__name__)


def create_app(config: Optional[Settings] = None, store: Optional[JsonStore] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    config : Optional[Settings]
        Settings to use; the process-wide defaults when omitted.
    store : Optional[JsonStore]
        Store to serve from.  Built from ``config`` when omitted.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    config = config or default_settings
    setup_logging(config.log_level, config.log_file or None)

    store = store or JsonStore.from_settings(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if await store.initialize():
            logger.info("Created new store at %s", store.path)
        else:
            logger.info("Using existing store at %s", store.path)
        yield

    app = FastAPI(title=config.project_name, version=config.api_version, debug=config.debug, lifespan=lifespan)

    app.state.settings = config
    app.state.store = store
    app.state.user_service = UserService(store, config)
    app.state.service_service = ServiceService(store)
    app.state.booking_service = BookingService(store, app.state.service_service)

    @app.exception_handler(LockTimeout)
    async def lock_timeout_handler(request: Request, exc: LockTimeout) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "The data store is busy, please retry"},
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An internal error occurred"},
        )

    app.include_router(v1_router, prefix="/api/v1")

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
