"""Catalog ORM models — products and their category extension tables.

Every product has exactly one extension row, in the table that matches
its category. The pairing is enforced by the schema: each extension row
repeats the product's category, pinned by a CHECK constraint to its own
label, and references ``products(product_id, category)`` as a whole.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, ClassVar

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKeyConstraint,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declared_attr

from gearsphere.catalog.database import Base
from gearsphere.models.components import ComponentType, ProductStatus


def _sql_list(values) -> str:
    return ", ".join(f"'{v}'" for v in values)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        UniqueConstraint("product_id", "category", name="uq_products_id_category"),
        CheckConstraint(
            f"category IN ({_sql_list(ct.label for ct in ComponentType)})",
            name="ck_products_category",
        ),
        CheckConstraint(
            f"status IN ({_sql_list(s.value for s in ProductStatus)})",
            name="ck_products_status",
        ),
        CheckConstraint("stock >= 0", name="ck_products_stock"),
        CheckConstraint("price >= 0", name="ck_products_price"),
    )

    product_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=ProductStatus.OUT_OF_STOCK.value)
    manufacturer = Column(String(100))
    description = Column(Text)
    image_url = Column(String(500))
    last_restock_date = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    @property
    def component_type(self) -> ComponentType:
        return ComponentType.from_label(self.category)


class CategoryExtension:
    """Columns and constraints shared by every extension table."""

    component_type: ClassVar[ComponentType]

    product_id = Column(Integer, primary_key=True)
    category = Column(String(50), nullable=False)

    @declared_attr
    def __tablename__(cls) -> str:
        return cls.component_type.table

    @declared_attr
    def __table_args__(cls):
        table = cls.component_type.table
        return (
            ForeignKeyConstraint(
                ["product_id", "category"],
                ["products.product_id", "products.category"],
                ondelete="CASCADE",
                name=f"fk_{table}_product",
            ),
            CheckConstraint(
                f"category = '{cls.component_type.label}'",
                name=f"ck_{table}_category",
            ),
        )

    def specs(self) -> dict[str, Any]:
        """Category-specific attribute values, keyed by column name."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
            if column.name not in ("product_id", "category")
        }


class CPU(CategoryExtension, Base):
    component_type = ComponentType.CPU

    series = Column(String(100))
    socket = Column(String(50))
    core_count = Column(Integer)
    thread_count = Column(Integer)
    core_clock = Column(Float)
    core_boost_clock = Column(Float)
    tdp = Column(Integer)
    integrated_graphics = Column(String(100))


class Motherboard(CategoryExtension, Base):
    component_type = ComponentType.MOTHERBOARD

    socket = Column(String(50))
    form_factor = Column(String(50))
    chipset = Column(String(50))
    memory_max = Column(Integer)
    memory_slots = Column(Integer)
    memory_type = Column(String(50))
    sata_ports = Column(Integer)
    wifi = Column(Boolean)


class Memory(CategoryExtension, Base):
    component_type = ComponentType.RAM

    memory_type = Column(String(50))
    speed = Column(Integer)
    modules = Column(String(50))
    cas_latency = Column(Integer)
    voltage = Column(Float)


class Storage(CategoryExtension, Base):
    component_type = ComponentType.STORAGE

    storage_type = Column(String(50))
    capacity = Column(Integer)
    interface = Column(String(50))
    form_factor = Column(String(50))


class VideoCard(CategoryExtension, Base):
    component_type = ComponentType.GPU

    chipset = Column(String(100))
    memory = Column(Integer)
    memory_type = Column(String(50))
    core_clock = Column(Integer)
    boost_clock = Column(Integer)
    interface = Column(String(50))
    length = Column(Integer)
    tdp = Column(Integer)
    cooling = Column(String(100))


class PowerSupply(CategoryExtension, Base):
    component_type = ComponentType.PSU

    wattage = Column(Integer)
    type = Column(String(50))
    efficiency_rating = Column(String(50))
    length = Column(Integer)
    modular = Column(String(50))
    sata_connectors = Column(Integer)


class PCCase(CategoryExtension, Base):
    component_type = ComponentType.CASE

    type = Column(String(100))
    side_panel = Column(String(100))
    color = Column(String(50))
    max_gpu_length = Column(Integer)
    volume = Column(Float)
    dimensions = Column(String(100))


class CPUCooler(CategoryExtension, Base):
    component_type = ComponentType.COOLER

    fan_rpm = Column(String(50))
    noise_level = Column(String(50))
    color = Column(String(50))
    height = Column(Integer)
    water_cooled = Column(Boolean)


class OperatingSystem(CategoryExtension, Base):
    component_type = ComponentType.OS

    model = Column(String(100))
    mode = Column(String(50))
    version = Column(String(50))
    max_supported_memory = Column(String(50))


class Monitor(CategoryExtension, Base):
    component_type = ComponentType.MONITOR

    screen_size = Column(Float)
    resolution = Column(String(50))
    refresh_rate = Column(Integer)
    panel_type = Column(String(50))
    aspect_ratio = Column(String(20))
    brightness = Column(Integer)


EXTENSION_TABLES: dict[ComponentType, type[CategoryExtension]] = {
    cls.component_type: cls
    for cls in (
        CPU,
        Motherboard,
        Memory,
        Storage,
        VideoCard,
        PowerSupply,
        PCCase,
        CPUCooler,
        OperatingSystem,
        Monitor,
    )
}
