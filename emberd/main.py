"""Main FastAPI application for emberd.

This module creates the FastAPI application that serves ember apps managed
by ember_library and exposes their build state over a small REST API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from ember_library.config.loader import load_config
from ember_library.config.settings import EmberCliSettings
from ember_library.registry import EmberCli

from .routers import apps_router
from .routers import pages_router

logger = logging.getLogger(__name__)


def create_app(settings: EmberCliSettings | None = None, registry: EmberCli | None = None) -> FastAPI:
    """Create the emberd application.

    Args:
        settings: Settings to use (default: load_config())
        registry: Pre-built app registry (default: built from settings)

    Returns:
        Configured FastAPI application
    """
    if registry is None:
        if settings is None:
            settings = load_config()
        registry = EmberCli.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Starting emberd ({registry.context.environment}) with apps: {', '.join(a.name for a in registry) or 'none'}"
        )
        yield
        logger.info("Shutting down emberd")
        registry.stop()

    app = FastAPI(
        title="emberd",
        description="Serves ember-cli apps and blocks requests until their builds finish",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.ember = registry

    app.include_router(apps_router)

    # Built assets are exposed through per-app symlinks under tool_root/assets
    assets_dir = registry.context.tool_root / "assets"
    assets_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/assets", StaticFiles(directory=str(assets_dir), follow_symlink=True), name="assets")

    @app.get("/")
    async def root() -> dict[str, object]:
        """Root endpoint.

        Returns:
            Service information and mounted apps
        """
        return {
            "name": "emberd",
            "version": "0.1.0",
            "environment": registry.context.environment,
            "apps": [a.name for a in registry],
        }

    # Catch-all app routes go last
    app.include_router(pages_router)

    return app
