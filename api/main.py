"""
api/main.py - FastAPI entry point.

Lifespan:
  - Builds the JSON entity store and the EntityCatalog, loads the catalog once
  - Creates the stateless LinkDetector and the render style
  - Catalog refreshes afterwards go through POST /entities/reload
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from adapters.entity_catalog import CatalogReloadError, EntityCatalog
from adapters.entity_store import JsonDirectoryEntityStore
from adapters.link_detector import RegexLinkDetector
from adapters.markup_renderer import RenderStyle
from api.routers import entities, export, links
from api.schemas import HealthResponse
from config import Settings

logger = logging.getLogger("novel_codex.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    store = JsonDirectoryEntityStore(settings.data_dir, settings.entity_dirs)
    app.state.catalog = EntityCatalog(store)
    try:
        report = app.state.catalog.reload()
        logger.info(
            "Loaded %d entities from %s (%d skipped).",
            report.loaded, settings.data_dir, len(report.skipped),
        )
    except CatalogReloadError as exc:
        logger.error("Initial catalog load failed, starting empty: %s", exc)

    # Stateless components, created once
    app.state.link_detector = RegexLinkDetector()
    app.state.render_style = RenderStyle.from_settings(settings)

    logger.info("NovelCodex API ready.")
    yield
    logger.info("Shutting down.")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Routers
    app.include_router(entities.router)
    app.include_router(links.router)
    app.include_router(export.router)

    # Health
    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health(request: Request):
        catalog: EntityCatalog = request.app.state.catalog
        return HealthResponse(
            status="ok" if len(catalog) else "empty",
            entities=len(catalog),
            catalog_version=catalog.version,
            version=settings.app_version,
        )

    # Global error handler
    @app.exception_handler(KeyError)
    async def key_error_handler(request: Request, exc: KeyError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    return app


app = create_app()
