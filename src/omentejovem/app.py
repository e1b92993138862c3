"""FastAPI application factory."""

from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from omentejovem.api.routes import collections, filters, galleries
from omentejovem.core.config import Settings, configure_logging
from omentejovem.core.dependencies import build_gallery_service, create_http_client
from omentejovem.services.filters.tree import build_filter_tree

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager.

    Handles startup and shutdown tasks:
    - Startup: configure logging, open the shared HTTP client, resolve API keys
      once and build the gallery service and filter tree
    - Shutdown: close the HTTP client
    """
    settings: Settings = app.state.settings

    configure_logging(settings)

    http_client = create_http_client(settings)
    try:
        app.state.gallery_service = await build_gallery_service(settings, http_client)
        app.state.filter_tree = build_filter_tree(first_year=settings.filter_first_year)

        logger.info(
            "application.startup",
            app_env=settings.app_env,
            cms=settings.wordpress_api_url,
            fetch_concurrency=settings.fetch_concurrency,
        )

        yield
    finally:
        logger.info("application.shutdown")
        await http_client.aclose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        settings: Settings to use (loaded from the environment when omitted)

    Returns:
        Configured FastAPI application instance
    """
    if settings is None:
        settings = Settings()  # type: ignore[call-arg]

    app = FastAPI(
        title="omentejovem gallery API",
        description="Artwork aggregation across WordPress, OpenSea and Objkt",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(galleries.router)
    app.include_router(collections.router)
    app.include_router(filters.router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


# Create app instance for uvicorn
app = create_app()


def run() -> None:
    """Serve the API with uvicorn on HOST:PORT."""
    settings: Settings = app.state.settings
    uvicorn.run("omentejovem.app:app", host=settings.host, port=settings.port)
