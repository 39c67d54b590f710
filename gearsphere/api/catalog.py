"""Catalog gateway — product browsing and management.

Reads are public. Writes require an X-API-Key header, are rate limited
per key, and clear the build cache.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from gearsphere.api.auth import check_rate_limit
from gearsphere.cache.redis_cache import BuildCache
from gearsphere.catalog.database import get_db
from gearsphere.catalog.store import (
    CatalogError,
    MAX_PAGE_SIZE,
    CatalogStore,
    ProductNotFoundError,
)
from gearsphere.models.build import ProductListResponse
from gearsphere.models.components import (
    ComponentDetail,
    ComponentType,
    ProductCreate,
    ProductOut,
    ProductUpdate,
    StockUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Catalog"])

# Set by app lifespan — shared resources
_cache: BuildCache | None = None


def set_cache(cache: BuildCache | None) -> None:
    """Called during app startup to inject the cache."""
    global _cache
    _cache = cache


def _http_error(e: CatalogError) -> HTTPException:
    if isinstance(e, ProductNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=409, detail=str(e))


async def _invalidate_builds() -> None:
    if _cache:
        await _cache.invalidate()


# ──────────────────────────────────────────────
# Reads
# ──────────────────────────────────────────────


@router.get("/products", response_model=ProductListResponse)
def list_products(
    category: ComponentType | None = None,
    limit: int = 50,
    offset: int = 0,
    db: Session = Depends(get_db),
):
    items, total = CatalogStore(db).list_products(category, limit=limit, offset=offset)
    return {
        "items": items,
        "total": total,
        "limit": min(max(limit, 1), MAX_PAGE_SIZE),
        "offset": max(offset, 0),
    }


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return CatalogStore(db).get_product(product_id)
    except CatalogError as e:
        raise _http_error(e)


@router.get("/components/{component_type}", response_model=list[ComponentDetail])
def list_components(component_type: ComponentType, db: Session = Depends(get_db)):
    """All products of one category with their detailed specifications."""
    return CatalogStore(db).list_components(component_type)


@router.get("/components/{component_type}/{product_id}", response_model=ComponentDetail)
def get_component(
    component_type: ComponentType,
    product_id: int,
    db: Session = Depends(get_db),
):
    try:
        return CatalogStore(db).get_component(component_type, product_id)
    except CatalogError as e:
        raise _http_error(e)


# ──────────────────────────────────────────────
# Writes (API key required)
# ──────────────────────────────────────────────


@router.post(
    "/products",
    response_model=ProductOut,
    status_code=201,
    dependencies=[Depends(check_rate_limit)],
)
async def add_product(payload: ProductCreate, db: Session = Depends(get_db)):
    try:
        product = await run_in_threadpool(CatalogStore(db).add_product, payload)
    except CatalogError as e:
        raise _http_error(e)
    await _invalidate_builds()
    return product


@router.patch(
    "/products/{product_id}",
    response_model=ProductOut,
    dependencies=[Depends(check_rate_limit)],
)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
):
    try:
        product = await run_in_threadpool(
            CatalogStore(db).update_product, product_id, payload
        )
    except CatalogError as e:
        raise _http_error(e)
    await _invalidate_builds()
    return product


@router.put(
    "/products/{product_id}/stock",
    response_model=ProductOut,
    dependencies=[Depends(check_rate_limit)],
)
async def update_stock(
    product_id: int,
    payload: StockUpdate,
    db: Session = Depends(get_db),
):
    """Set stock; status is recomputed unless the product is marked Discontinued."""
    status = payload.status.value if payload.status is not None else None
    try:
        product = await run_in_threadpool(
            CatalogStore(db).update_stock,
            product_id,
            payload.stock,
            status=status,
            last_restock_date=payload.last_restock_date,
        )
    except CatalogError as e:
        raise _http_error(e)
    await _invalidate_builds()
    return product


@router.delete("/products/{product_id}", dependencies=[Depends(check_rate_limit)])
async def delete_product(product_id: int, db: Session = Depends(get_db)):
    try:
        await run_in_threadpool(CatalogStore(db).delete_product, product_id)
    except CatalogError as e:
        raise _http_error(e)
    await _invalidate_builds()
    return {"success": True, "message": "Product deleted successfully"}
