"""Shared fixtures — in-memory SQLite catalog, no server or Redis needed."""

from __future__ import annotations

import os

# Keep the module-level engine off the filesystem
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gearsphere.catalog import tables  # noqa: F401
from gearsphere.catalog.database import Base, create_db_engine
from gearsphere.catalog.store import CatalogStore
from gearsphere.models.components import ProductCreate


# ──────────────────────────────────────────────
# Sample Catalog (LKR)
# ──────────────────────────────────────────────

# Every part fits its gaming ceiling at a 150,000 budget
SAMPLE_PRODUCTS = [
    {"name": "AMD Ryzen 5 5600X", "price": "24000.00", "stock": 12, "manufacturer": "AMD",
     "attributes": {"component_type": "cpu", "socket": "AM4", "core_count": 6,
                    "thread_count": 12, "tdp": 65}},
    {"name": "Intel Core i3-12100F", "price": "18500.00", "stock": 3, "manufacturer": "Intel",
     "attributes": {"component_type": "cpu", "socket": "LGA1700", "core_count": 4,
                    "thread_count": 8, "tdp": 58}},
    {"name": "MSI B550M PRO-VDH", "price": "19500.00", "stock": 7, "manufacturer": "MSI",
     "attributes": {"component_type": "motherboard", "socket": "AM4",
                    "form_factor": "Micro ATX", "memory_type": "DDR4", "wifi": False}},
    {"name": "Corsair Vengeance LPX 16GB", "price": "15000.00", "stock": 20,
     "manufacturer": "Corsair",
     "attributes": {"component_type": "ram", "memory_type": "DDR4", "speed": 3200,
                    "modules": "2 x 8GB", "cas_latency": 16}},
    {"name": "Samsung 970 EVO Plus 1TB", "price": "16000.00", "stock": 9,
     "manufacturer": "Samsung",
     "attributes": {"component_type": "storage", "storage_type": "SSD",
                    "capacity": 1000, "interface": "M.2 PCIe 3.0 X4"}},
    {"name": "Gigabyte RTX 3060 Gaming OC", "price": "48000.00", "stock": 4,
     "manufacturer": "Gigabyte",
     "attributes": {"component_type": "gpu", "chipset": "GeForce RTX 3060",
                    "memory": 12, "memory_type": "GDDR6", "tdp": 170}},
    {"name": "Cooler Master MWE 550 Bronze", "price": "9500.00", "stock": 15,
     "manufacturer": "Cooler Master",
     "attributes": {"component_type": "psu", "wattage": 550,
                    "efficiency_rating": "80+ Bronze", "modular": "No"}},
    {"name": "Tecware Nexus Air", "price": "8000.00", "stock": 6, "manufacturer": "Tecware",
     "attributes": {"component_type": "case", "type": "ATX Mid Tower",
                    "side_panel": "Tempered Glass", "max_gpu_length": 330}},
    {"name": "DeepCool AK400", "price": "4900.00", "stock": 10, "manufacturer": "DeepCool",
     "attributes": {"component_type": "cooler", "fan_rpm": "500 - 1850",
                    "height": 155, "water_cooled": False}},
    {"name": "Windows 11 Home", "price": "6500.00", "stock": 50, "manufacturer": "Microsoft",
     "attributes": {"component_type": "os", "model": "Windows 11 Home",
                    "mode": "64-bit", "version": "23H2"}},
    {"name": "AOC 24G2 24\"", "price": "8200.00", "stock": 8, "manufacturer": "AOC",
     "attributes": {"component_type": "monitor", "screen_size": 23.8,
                    "resolution": "1920x1080", "refresh_rate": 144, "panel_type": "IPS"}},
]


def make_product(**overrides) -> ProductCreate:
    """Build a ProductCreate payload, defaulting to an in-stock CPU."""
    data = {
        "name": "Test CPU",
        "price": "10000.00",
        "stock": 10,
        "manufacturer": "AMD",
        "attributes": {"component_type": "cpu", "socket": "AM5"},
    }
    data.update(overrides)
    return ProductCreate.model_validate(data)


# ──────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────


@pytest.fixture
def engine():
    eng = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db, tmp_path):
    return CatalogStore(db, media_root=str(tmp_path))


@pytest.fixture
def sample_catalog(store):
    """The sample products, inserted in order (ids 1..11)."""
    return [store.add_product(ProductCreate.model_validate(p)) for p in SAMPLE_PRODUCTS]
