"""GearSphere build engine — FastAPI application.

Mounts two routers under /api:
- build suggestions (public)
- catalog browsing (public) and management (X-API-Key authenticated)

Both share the catalog database and the build cache.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gearsphere.api.builds import router as builds_router
from gearsphere.api.builds import set_cache as set_builds_cache
from gearsphere.api.catalog import router as catalog_router
from gearsphere.api.catalog import set_cache as set_catalog_cache
from gearsphere.cache.redis_cache import BuildCache
from gearsphere.catalog.database import init_db

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

# Storefront dev servers
DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:3000"


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create catalog tables and attach the build cache for the app's lifetime."""
    init_db()

    build_cache = BuildCache()
    shared = build_cache if await build_cache.connect() else None
    if shared is None:
        logger.warning("Build caching disabled; every suggestion queries the catalog")

    set_builds_cache(shared)
    set_catalog_cache(shared)
    try:
        yield
    finally:
        set_builds_cache(None)
        set_catalog_cache(None)
        await build_cache.disconnect()
        logger.info("GearSphere build engine stopped")


def create_app() -> FastAPI:
    """Build the FastAPI app with both routers and CORS for the storefront."""
    application = FastAPI(
        title="GearSphere Build Engine",
        description=(
            "PC component catalog and budget-based build suggestions.\n\n"
            "- `GET /api/suggest-build`: one part per category for a budget\n"
            "- `/api/products`, `/api/components`: catalog; writes need `X-API-Key`\n"
        ),
        version=VERSION,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "X-API-Key"],
    )

    application.include_router(builds_router)
    application.include_router(catalog_router)

    @application.get("/", tags=["Root"])
    async def index():
        return {
            "engine": "GearSphere",
            "version": VERSION,
            "endpoints": {
                "suggest_build": "/api/suggest-build?budget=<amount>&usage=<gaming|workstation|multimedia>",
                "catalog": "/api/products",
                "components": "/api/components/{type}",
                "health": "/api/health",
            },
        }

    return application


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "gearsphere.api.app:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
    )
