"""Catalog store — product reads, writes, and the affordability query.

Wraps one SQLAlchemy session. Reads used by the build allocator degrade
to "nothing found" on database errors; catalog writes roll back and
raise.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gearsphere.catalog.tables import EXTENSION_TABLES, Product
from gearsphere.models.components import (
    BUYABLE_STATUSES,
    LOW_STOCK_THRESHOLD,
    ComponentDetail,
    ComponentType,
    ProductCreate,
    ProductOut,
    ProductStatus,
    ProductUpdate,
    derive_status,
)

logger = logging.getLogger(__name__)

MEDIA_ROOT = os.getenv("GEARSPHERE_MEDIA_ROOT", ".")

MAX_PAGE_SIZE = 200


# ──────────────────────────────────────────────
# Custom Exceptions
# ──────────────────────────────────────────────


class CatalogError(Exception):
    """Base exception for catalog failures."""


class ProductNotFoundError(CatalogError):
    """Raised when a product id does not exist (in the requested category)."""


class CategoryMismatchError(CatalogError):
    """Raised when attributes do not belong to the product's category."""


class CatalogIntegrityError(CatalogError):
    """Raised when a write violates a database constraint."""


# ──────────────────────────────────────────────
# Store
# ──────────────────────────────────────────────


class CatalogStore:
    """Product catalog backed by the relational store."""

    def __init__(self, db: Session, media_root: str = MEDIA_ROOT) -> None:
        self.db = db
        self.media_root = Path(media_root)

    # ── Affordability ──

    def best_affordable(
        self,
        component_type: ComponentType,
        max_price: Decimal,
    ) -> ProductOut | None:
        """Highest-priced buyable product of a category at or under ``max_price``.

        Only products with a row in the category's extension table and a
        status of "In Stock" or "Low Stock" qualify. Equal prices resolve to
        the lowest product id. Database errors are logged and treated as
        "no product found".
        """
        extension = EXTENSION_TABLES[component_type]
        try:
            row = (
                self.db.query(Product)
                .join(extension, extension.product_id == Product.product_id)
                .filter(
                    Product.price <= max_price,
                    Product.status.in_([s.value for s in BUYABLE_STATUSES]),
                )
                .order_by(Product.price.desc(), Product.product_id.asc())
                .first()
            )
        except SQLAlchemyError as e:
            logger.warning(
                "Affordability query failed for %s under %s: %s",
                extension.__tablename__, max_price, e,
            )
            self.db.rollback()
            return None

        return ProductOut.model_validate(row) if row is not None else None

    # ── Reads ──

    def _get_or_raise(self, product_id: int) -> Product:
        product = self.db.get(Product, product_id)
        if product is None:
            raise ProductNotFoundError(f"Product {product_id} not found")
        return product

    def get_product(self, product_id: int) -> ProductOut:
        return ProductOut.model_validate(self._get_or_raise(product_id))

    def list_products(
        self,
        component_type: ComponentType | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[ProductOut], int]:
        """Page through products, newest first. Returns (items, total)."""
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        offset = max(offset, 0)

        query = self.db.query(Product)
        if component_type is not None:
            query = query.filter(Product.category == component_type.label)

        total = query.count()
        rows = (
            query
            .order_by(Product.product_id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [ProductOut.model_validate(r) for r in rows], total

    def _detail_query(self, component_type: ComponentType):
        extension = EXTENSION_TABLES[component_type]
        return (
            self.db.query(Product, extension)
            .join(extension, extension.product_id == Product.product_id)
            .filter(Product.category == component_type.label)
        )

    @staticmethod
    def _to_detail(product: Product, extension) -> ComponentDetail:
        base = ProductOut.model_validate(product).model_dump()
        return ComponentDetail(**base, specs=extension.specs())

    def list_components(self, component_type: ComponentType) -> list[ComponentDetail]:
        """All products of a category with their extension attributes."""
        rows = self._detail_query(component_type).order_by(Product.product_id).all()
        return [self._to_detail(p, ext) for p, ext in rows]

    def get_component(self, component_type: ComponentType, product_id: int) -> ComponentDetail:
        row = (
            self._detail_query(component_type)
            .filter(Product.product_id == product_id)
            .first()
        )
        if row is None:
            raise ProductNotFoundError(
                f"No {component_type.label} with product id {product_id}"
            )
        return self._to_detail(*row)

    # ── Writes ──

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise CatalogIntegrityError(f"Error {action}: {e.orig}") from e
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Catalog write failed while %s", action)
            raise

    def add_product(self, payload: ProductCreate) -> ProductOut:
        """Insert a product and its extension row in one transaction."""
        component_type = payload.component_type
        product = Product(
            name=payload.name,
            category=component_type.label,
            price=payload.price,
            stock=payload.stock,
            status=derive_status(payload.stock).value,
            manufacturer=payload.manufacturer,
            description=payload.description,
            image_url=payload.image_url,
        )
        self.db.add(product)
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise CatalogIntegrityError(f"Error adding product: {e.orig}") from e

        extension = EXTENSION_TABLES[component_type](
            product_id=product.product_id,
            category=component_type.label,
            **payload.attributes.model_dump(exclude={"component_type"}),
        )
        self.db.add(extension)
        self._commit("adding product")
        self.db.refresh(product)

        logger.info(
            "Added %s product %d (%s)",
            component_type.label, product.product_id, product.name,
        )
        return ProductOut.model_validate(product)

    def update_product(self, product_id: int, payload: ProductUpdate) -> ProductOut:
        """Apply a partial update; stock changes recompute the status."""
        product = self._get_or_raise(product_id)
        updates = payload.model_dump(exclude_unset=True, exclude={"attributes", "status"})

        for field, value in updates.items():
            setattr(product, field, value)

        if "stock" in updates or payload.status is not None:
            requested = payload.status.value if payload.status is not None else None
            product.status = derive_status(product.stock, requested).value

        if payload.attributes is not None:
            component_type = ComponentType(payload.attributes.component_type)
            if component_type.label != product.category:
                self.db.rollback()
                raise CategoryMismatchError(
                    f"Product {product_id} is a {product.category}, "
                    f"not a {component_type.label}"
                )
            extension_cls = EXTENSION_TABLES[component_type]
            extension = self.db.get(extension_cls, product_id)
            if extension is None:
                extension = extension_cls(product_id=product_id, category=product.category)
                self.db.add(extension)
            for field, value in payload.attributes.model_dump(
                exclude={"component_type"}, exclude_unset=True
            ).items():
                setattr(extension, field, value)

        self._commit("updating product")
        self.db.refresh(product)
        return ProductOut.model_validate(product)

    def update_stock(
        self,
        product_id: int,
        stock: int,
        status: str | None = None,
        last_restock_date: datetime | None = None,
    ) -> ProductOut:
        """Set the stock level; status follows stock unless "Discontinued"."""
        product = self._get_or_raise(product_id)

        product.stock = stock
        product.status = derive_status(stock, status).value
        product.last_restock_date = last_restock_date or datetime.now(timezone.utc)

        self._commit("updating stock")
        self.db.refresh(product)

        if stock <= LOW_STOCK_THRESHOLD and product.status != ProductStatus.DISCONTINUED.value:
            logger.warning(
                "Low stock: product %d (%s) has %d left",
                product.product_id, product.name, stock,
            )
        return ProductOut.model_validate(product)

    def delete_product(self, product_id: int) -> None:
        """Remove the product row, its extension row, and its image file."""
        product = self._get_or_raise(product_id)
        image_url = product.image_url

        extension_cls = EXTENSION_TABLES.get(product.component_type)
        extension = self.db.get(extension_cls, product_id) if extension_cls else None
        if extension is not None:
            self.db.delete(extension)
            self.db.flush()

        self.db.delete(product)
        self._commit("deleting product")
        logger.info("Deleted product %d", product_id)

        if image_url:
            self._remove_image(image_url)

    def _remove_image(self, image_url: str) -> None:
        root = self.media_root.resolve()
        path = (root / image_url).resolve()
        if root not in path.parents:
            logger.warning("Refusing to delete image outside media root: %s", image_url)
            return
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not delete image %s: %s", path, e)
