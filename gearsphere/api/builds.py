"""Build suggestion gateway.

Routes under /api — public, no API key required.
"""

from __future__ import annotations

import asyncio
import logging
import os
from decimal import Decimal
from functools import partial

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from gearsphere.cache.redis_cache import BuildCache, build_cache_key
from gearsphere.catalog.database import get_session_factory
from gearsphere.catalog.store import CatalogStore
from gearsphere.engine.allocator import InvalidBudgetError, parse_budget, suggest_build
from gearsphere.engine.weights import normalize_usage
from gearsphere.models.build import BuildResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Build Suggestions"])

BUILD_TIMEOUT = float(os.getenv("GEARSPHERE_BUILD_TIMEOUT", "10"))

# Set by app lifespan — shared resources
_cache: BuildCache | None = None


def set_cache(cache: BuildCache | None) -> None:
    """Called during app startup to inject the cache."""
    global _cache
    _cache = cache


def _run_build(
    session_factory: sessionmaker,
    amount: Decimal,
    usage: str | None,
) -> BuildResponse:
    """Compute a build in the executor on a session this thread opens and closes.

    The thread can outlive a timed-out request.
    """
    db = session_factory()
    try:
        return suggest_build(amount, usage, CatalogStore(db).best_affordable)
    finally:
        db.close()


# ──────────────────────────────────────────────
# Routes
# ──────────────────────────────────────────────


@router.get("/health")
async def health():
    """Health check for storefront monitoring."""
    return {
        "status": "healthy",
        "cache_available": _cache is not None and _cache.available,
    }


@router.get(
    "/suggest-build",
    response_model=BuildResponse,
    responses={400: {"model": ErrorResponse}, 504: {"description": "Build timed out"}},
)
async def suggest_build_endpoint(
    budget: str | None = None,
    usage: str | None = None,
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """Suggest one part per category for a budget and usage.

    ``usage`` is one of gaming, workstation or multimedia (case-insensitive);
    anything else gets gaming weights. Results are cached until the next
    catalog change.
    """
    try:
        amount = parse_budget(budget)
    except InvalidBudgetError as e:
        logger.info("Rejected build request with budget %r", budget)
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(message=str(e)).model_dump(),
        )

    # Keys carry the catalog generation seen before computing
    generation = await _cache.generation() if _cache else None
    cache_key = None
    if generation is not None:
        cache_key = build_cache_key(normalize_usage(usage), amount, generation)
        cached = await _cache.get_build(cache_key)
        if cached is not None:
            logger.info("Cache HIT for build suggestion")
            return JSONResponse(content=cached)

    try:
        response = await asyncio.wait_for(
            asyncio.get_running_loop().run_in_executor(
                None, partial(_run_build, session_factory, amount, usage)
            ),
            timeout=BUILD_TIMEOUT,
        )
    except asyncio.TimeoutError:
        logger.error("Build suggestion timed out after %.1fs", BUILD_TIMEOUT)
        raise HTTPException(
            status_code=504,
            detail=f"Build suggestion timed out after {BUILD_TIMEOUT:g}s",
        )

    payload = response.to_payload()

    if cache_key is not None and _cache:
        await _cache.put_build(cache_key, payload)

    return JSONResponse(content=payload)
