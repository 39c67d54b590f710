"""Tests for the catalog store and the affordability query."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from conftest import make_product
from gearsphere.catalog.store import (
    CatalogIntegrityError,
    CatalogStore,
    CategoryMismatchError,
    ProductNotFoundError,
)
from gearsphere.catalog.tables import CPU, EXTENSION_TABLES, OperatingSystem, Product
from gearsphere.models.components import (
    ComponentType,
    ProductStatus,
    ProductUpdate,
    derive_status,
)


# ──────────────────────────────────────────────
# Status Derivation
# ──────────────────────────────────────────────


class TestDeriveStatus:
    def test_zero_is_out_of_stock(self):
        assert derive_status(0) == ProductStatus.OUT_OF_STOCK

    def test_one_to_five_is_low_stock(self):
        assert derive_status(1) == ProductStatus.LOW_STOCK
        assert derive_status(5) == ProductStatus.LOW_STOCK

    def test_above_five_is_in_stock(self):
        assert derive_status(6) == ProductStatus.IN_STOCK

    def test_discontinued_overrides_stock(self):
        assert derive_status(40, "Discontinued") == ProductStatus.DISCONTINUED

    def test_other_manual_status_ignored(self):
        """Only Discontinued may be set by hand."""
        assert derive_status(0, "In Stock") == ProductStatus.OUT_OF_STOCK


# ──────────────────────────────────────────────
# Adding Products
# ──────────────────────────────────────────────


class TestAddProduct:
    def test_category_comes_from_attributes(self, store):
        product = store.add_product(make_product(
            name="Windows 11 Pro",
            attributes={"component_type": "os", "version": "23H2"},
        ))
        assert product.category == "Operating System"

    def test_status_derived_from_stock(self, store):
        assert store.add_product(make_product(stock=0)).status == "Out of Stock"
        assert store.add_product(make_product(stock=3)).status == "Low Stock"
        assert store.add_product(make_product(stock=30)).status == "In Stock"

    def test_extension_row_created(self, store, db):
        product = store.add_product(make_product(
            attributes={"component_type": "cpu", "socket": "AM5", "core_count": 8},
        ))
        row = db.get(CPU, product.product_id)
        assert row is not None
        assert row.socket == "AM5"
        assert row.core_count == 8
        assert row.category == "CPU"

    def test_extension_tables_cover_every_category(self):
        assert set(EXTENSION_TABLES) == set(ComponentType)
        for component_type, cls in EXTENSION_TABLES.items():
            assert cls.__tablename__ == component_type.table


class TestCategoryConstraints:
    def test_extension_category_must_match_product(self, store, db):
        """A CPU product cannot get an operating_system row."""
        product = store.add_product(make_product())
        db.add(OperatingSystem(product_id=product.product_id, category="CPU"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_extension_requires_existing_product(self, db):
        db.add(CPU(product_id=999, category="CPU"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


# ──────────────────────────────────────────────
# Affordability Query
# ──────────────────────────────────────────────


class TestBestAffordable:
    def test_picks_highest_price_under_ceiling(self, store):
        store.add_product(make_product(name="Cheap", price="10000.00"))
        store.add_product(make_product(name="Mid", price="20000.00"))
        store.add_product(make_product(name="Pricey", price="30000.00"))

        best = store.best_affordable(ComponentType.CPU, Decimal("25000"))
        assert best is not None
        assert best.name == "Mid"

    def test_ceiling_is_inclusive(self, store):
        store.add_product(make_product(name="Exact", price="16500.00"))
        best = store.best_affordable(ComponentType.CPU, Decimal("16500.00"))
        assert best is not None
        assert best.name == "Exact"

    def test_ties_break_by_lowest_id(self, store):
        first = store.add_product(make_product(name="First", price="15000.00"))
        store.add_product(make_product(name="Second", price="15000.00"))

        best = store.best_affordable(ComponentType.CPU, Decimal("20000"))
        assert best.product_id == first.product_id

    def test_low_stock_is_buyable(self, store):
        store.add_product(make_product(name="Last few", stock=2))
        assert store.best_affordable(ComponentType.CPU, Decimal("50000")).name == "Last few"

    def test_out_of_stock_and_discontinued_skipped(self, store):
        store.add_product(make_product(name="Gone", price="40000.00", stock=0))
        dropped = store.add_product(make_product(name="Dropped", price="35000.00"))
        store.update_stock(dropped.product_id, 20, status="Discontinued")
        store.add_product(make_product(name="Available", price="10000.00"))

        best = store.best_affordable(ComponentType.CPU, Decimal("50000"))
        assert best.name == "Available"

    def test_only_matching_category_table(self, store):
        store.add_product(make_product(
            name="Monitor",
            price="20000.00",
            attributes={"component_type": "monitor", "refresh_rate": 144},
        ))
        assert store.best_affordable(ComponentType.CPU, Decimal("50000")) is None
        assert store.best_affordable(ComponentType.MONITOR, Decimal("50000")).name == "Monitor"

    def test_none_when_nothing_affordable(self, store):
        store.add_product(make_product(price="30000.00"))
        assert store.best_affordable(ComponentType.CPU, Decimal("100")) is None

    def test_data_access_failure_degrades_to_none(self):
        """A database error counts as 'no product found'."""
        session = MagicMock()
        session.query.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        store = CatalogStore(session)

        assert store.best_affordable(ComponentType.GPU, Decimal("50000")) is None
        session.rollback.assert_called_once()


# ──────────────────────────────────────────────
# Reads
# ──────────────────────────────────────────────


class TestReads:
    def test_get_product_not_found(self, store):
        with pytest.raises(ProductNotFoundError):
            store.get_product(42)

    def test_list_products_newest_first(self, store, sample_catalog):
        items, total = store.list_products(limit=3)
        assert total == len(sample_catalog)
        assert [p.product_id for p in items] == [11, 10, 9]

    def test_list_products_by_category(self, store, sample_catalog):
        items, total = store.list_products(ComponentType.CPU)
        assert total == 2
        assert all(p.category == "CPU" for p in items)

    def test_list_products_clamps_limit(self, store, sample_catalog):
        items, _ = store.list_products(limit=0)
        assert len(items) == 1

    def test_list_components_includes_specs(self, store, sample_catalog):
        gpus = store.list_components(ComponentType.GPU)
        assert len(gpus) == 1
        assert gpus[0].specs["chipset"] == "GeForce RTX 3060"
        assert gpus[0].specs["memory"] == 12
        assert "product_id" not in gpus[0].specs

    def test_get_component_wrong_category(self, store, sample_catalog):
        cpu_id = sample_catalog[0].product_id
        assert store.get_component(ComponentType.CPU, cpu_id).specs["socket"] == "AM4"
        with pytest.raises(ProductNotFoundError):
            store.get_component(ComponentType.GPU, cpu_id)


# ──────────────────────────────────────────────
# Updates
# ──────────────────────────────────────────────


class TestUpdateStock:
    def test_status_recomputed(self, store):
        product = store.add_product(make_product(stock=10))
        updated = store.update_stock(product.product_id, 4)
        assert updated.stock == 4
        assert updated.status == "Low Stock"

    def test_discontinued_override(self, store):
        product = store.add_product(make_product(stock=10))
        updated = store.update_stock(product.product_id, 10, status="Discontinued")
        assert updated.status == "Discontinued"

    def test_restock_clears_discontinued(self, store):
        """Without an explicit Discontinued the status follows stock again."""
        product = store.add_product(make_product(stock=10))
        store.update_stock(product.product_id, 10, status="Discontinued")
        assert store.update_stock(product.product_id, 8).status == "In Stock"

    def test_restock_date_recorded(self, store):
        product = store.add_product(make_product())
        when = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        updated = store.update_stock(product.product_id, 12, last_restock_date=when)
        assert updated.last_restock_date.replace(tzinfo=None) == when.replace(tzinfo=None)

    def test_missing_product(self, store):
        with pytest.raises(ProductNotFoundError):
            store.update_stock(7, 1)


class TestUpdateProduct:
    def test_partial_update(self, store):
        product = store.add_product(make_product(name="Old", price="100.00"))
        updated = store.update_product(
            product.product_id, ProductUpdate(name="New", price=Decimal("150.00"))
        )
        assert updated.name == "New"
        assert updated.price == 150.0
        assert updated.status == "In Stock"

    def test_stock_change_recomputes_status(self, store):
        product = store.add_product(make_product(stock=10))
        updated = store.update_product(product.product_id, ProductUpdate(stock=0))
        assert updated.status == "Out of Stock"

    def test_attribute_update(self, store, db):
        product = store.add_product(make_product())
        store.update_product(
            product.product_id,
            ProductUpdate.model_validate(
                {"attributes": {"component_type": "cpu", "tdp": 105}}
            ),
        )
        row = db.get(CPU, product.product_id)
        assert row.tdp == 105
        assert row.socket == "AM5"  # untouched

    def test_attribute_category_mismatch(self, store):
        product = store.add_product(make_product())
        with pytest.raises(CategoryMismatchError):
            store.update_product(
                product.product_id,
                ProductUpdate.model_validate(
                    {"attributes": {"component_type": "gpu", "memory": 8}}
                ),
            )


# ──────────────────────────────────────────────
# Deletion
# ──────────────────────────────────────────────


class TestDeleteProduct:
    def test_removes_row_extension_and_image(self, store, db, tmp_path):
        image = tmp_path / "uploads" / "cpu.png"
        image.parent.mkdir()
        image.write_bytes(b"png")
        product = store.add_product(make_product(image_url="uploads/cpu.png"))

        store.delete_product(product.product_id)

        assert db.get(Product, product.product_id) is None
        assert db.get(CPU, product.product_id) is None
        assert not image.exists()

    def test_missing_image_file_is_fine(self, store):
        product = store.add_product(make_product(image_url="uploads/none.png"))
        store.delete_product(product.product_id)
        with pytest.raises(ProductNotFoundError):
            store.get_product(product.product_id)

    def test_image_outside_media_root_kept(self, store, tmp_path):
        outside = tmp_path.parent / "keep-me.png"
        outside.write_bytes(b"png")
        product = store.add_product(make_product(image_url="../keep-me.png"))

        store.delete_product(product.product_id)
        assert outside.exists()
        outside.unlink()

    def test_delete_missing_product(self, store):
        with pytest.raises(ProductNotFoundError):
            store.delete_product(404)


class TestIntegrity:
    def test_negative_price_rejected_by_schema(self, store, db):
        db.add(Product(name="Bad", category="CPU", price=-1, stock=1, status="In Stock"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_integrity_error_wrapped(self, store, monkeypatch):
        def boom():
            raise IntegrityError("INSERT", {}, Exception("constraint failed"))

        monkeypatch.setattr(store.db, "flush", boom)
        with pytest.raises(CatalogIntegrityError):
            store.add_product(make_product())
