"""FastAPI application entrypoint and configuration.

This module provides the main FastAPI application factory that sets up
logging, CORS middleware, includes API routers for the catalog, the analysis
endpoint and credential status, and exposes a health check endpoint for
monitoring.

Example:
    The application can be run with uvicorn:
        $ uvicorn eecatalog.main:app --reload

    Or imported and used programmatically:
        >>> from eecatalog.main import app
        >>> # Use app in ASGI server
"""

import contextlib
import logging
from collections.abc import AsyncIterator

import fastapi
from fastapi.middleware import cors

from eecatalog.api import auth, catalog, endpoint
from eecatalog.core import config


@contextlib.asynccontextmanager
async def lifespan(app: fastapi.FastAPI) -> AsyncIterator[None]:
    """Close the shared endpoint clients on shutdown."""
    yield
    await endpoint.close_endpoint_clients()


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application.

    Configures the root log level from settings, sets up CORS middleware,
    includes API routers for catalog, endpoint and auth, adds a health
    check endpoint, and closes the shared endpoint clients on shutdown.

    Returns:
        Configured FastAPI application instance ready for ASGI server.
    """
    settings = config.get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    app = fastapi.FastAPI(
        title="Earth Engine Catalog",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(catalog.router)
    app.include_router(endpoint.router)
    app.include_router(auth.router)

    app.add_middleware(
        cors.CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:  # type: ignore[misc]
        """Health check endpoint for monitoring and load balancers.

        Returns:
            Dictionary with status "ok" if the service is running.
        """
        return {"status": "ok"}

    return app


app = create_app()
