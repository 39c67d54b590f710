"""Shared enums, category attribute schemas, and product models for GearSphere."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# ──────────────────────────────────────────────
# Enums — Shared Vocabulary
# ──────────────────────────────────────────────


class ComponentType(str, Enum):
    """Hardware component categories used in PC builds.

    Member order is the build order: it fixes the key order of every
    build response.
    """

    CPU = "cpu"
    MOTHERBOARD = "motherboard"
    RAM = "ram"
    STORAGE = "storage"
    GPU = "gpu"
    PSU = "psu"
    CASE = "case"
    COOLER = "cooler"
    OS = "os"
    MONITOR = "monitor"

    @property
    def table(self) -> str:
        """Name of the extension table holding this category's attributes."""
        return _TABLES[self]

    @property
    def label(self) -> str:
        """Value stored in ``products.category`` for this category."""
        return _LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> "ComponentType":
        for member, value in _LABELS.items():
            if value == label:
                return member
        raise ValueError(f"Unknown product category: {label!r}")


_TABLES: dict[ComponentType, str] = {
    ComponentType.CPU: "cpu",
    ComponentType.MOTHERBOARD: "motherboard",
    ComponentType.RAM: "memory",
    ComponentType.STORAGE: "storage",
    ComponentType.GPU: "video_card",
    ComponentType.PSU: "power_supply",
    ComponentType.CASE: "pc_case",
    ComponentType.COOLER: "cpu_cooler",
    ComponentType.OS: "operating_system",
    ComponentType.MONITOR: "monitor",
}

_LABELS: dict[ComponentType, str] = {
    ComponentType.CPU: "CPU",
    ComponentType.MOTHERBOARD: "Motherboard",
    ComponentType.RAM: "Memory",
    ComponentType.STORAGE: "Storage",
    ComponentType.GPU: "Video Card",
    ComponentType.PSU: "Power Supply",
    ComponentType.CASE: "PC Case",
    ComponentType.COOLER: "CPU Cooler",
    ComponentType.OS: "Operating System",
    ComponentType.MONITOR: "Monitor",
}


class ProductStatus(str, Enum):
    """Stock status shown in the storefront."""

    IN_STOCK = "In Stock"
    LOW_STOCK = "Low Stock"
    OUT_OF_STOCK = "Out of Stock"
    DISCONTINUED = "Discontinued"


# Statuses the build allocator may pick from
BUYABLE_STATUSES = (ProductStatus.IN_STOCK, ProductStatus.LOW_STOCK)

LOW_STOCK_THRESHOLD = 5


def derive_status(stock: int, requested: str | None = None) -> ProductStatus:
    """Compute a product's status from its stock level.

    Only "Discontinued" may be set manually; any other requested status is
    ignored and recomputed from ``stock``.
    """
    if requested == ProductStatus.DISCONTINUED.value:
        return ProductStatus.DISCONTINUED
    if stock <= 0:
        return ProductStatus.OUT_OF_STOCK
    if stock <= LOW_STOCK_THRESHOLD:
        return ProductStatus.LOW_STOCK
    return ProductStatus.IN_STOCK


class Usage(str, Enum):
    """Build usage intent — selects a weight profile."""

    GAMING = "gaming"
    WORKSTATION = "workstation"
    MULTIMEDIA = "multimedia"


# ──────────────────────────────────────────────
# Category Attribute Schemas
# ──────────────────────────────────────────────

# Field names match the extension table columns one-to-one.


class CPUAttributes(BaseModel):
    component_type: Literal["cpu"] = "cpu"
    series: str | None = None
    socket: str | None = None
    core_count: int | None = Field(default=None, ge=1)
    thread_count: int | None = Field(default=None, ge=1)
    core_clock: float | None = None
    core_boost_clock: float | None = None
    tdp: int | None = Field(default=None, ge=0)
    integrated_graphics: str | None = None


class MotherboardAttributes(BaseModel):
    component_type: Literal["motherboard"] = "motherboard"
    socket: str | None = None
    form_factor: str | None = None
    chipset: str | None = None
    memory_max: int | None = None
    memory_slots: int | None = None
    memory_type: str | None = None
    sata_ports: int | None = None
    wifi: bool | None = None


class MemoryAttributes(BaseModel):
    component_type: Literal["ram"] = "ram"
    memory_type: str | None = None
    speed: int | None = None
    modules: str | None = None
    cas_latency: int | None = None
    voltage: float | None = None


class StorageAttributes(BaseModel):
    component_type: Literal["storage"] = "storage"
    storage_type: str | None = None
    capacity: int | None = None
    interface: str | None = None
    form_factor: str | None = None


class GPUAttributes(BaseModel):
    component_type: Literal["gpu"] = "gpu"
    chipset: str | None = None
    memory: int | None = None
    memory_type: str | None = None
    core_clock: int | None = None
    boost_clock: int | None = None
    interface: str | None = None
    length: int | None = None
    tdp: int | None = Field(default=None, ge=0)
    cooling: str | None = None


class PSUAttributes(BaseModel):
    component_type: Literal["psu"] = "psu"
    wattage: int | None = Field(default=None, ge=0)
    type: str | None = None
    efficiency_rating: str | None = None
    length: int | None = None
    modular: str | None = None
    sata_connectors: int | None = None


class CaseAttributes(BaseModel):
    component_type: Literal["case"] = "case"
    type: str | None = None
    side_panel: str | None = None
    color: str | None = None
    max_gpu_length: int | None = None
    volume: float | None = None
    dimensions: str | None = None


class CoolerAttributes(BaseModel):
    component_type: Literal["cooler"] = "cooler"
    fan_rpm: str | None = None
    noise_level: str | None = None
    color: str | None = None
    height: int | None = None
    water_cooled: bool | None = None


class OSAttributes(BaseModel):
    component_type: Literal["os"] = "os"
    model: str | None = None
    mode: str | None = None
    version: str | None = None
    max_supported_memory: str | None = None


class MonitorAttributes(BaseModel):
    component_type: Literal["monitor"] = "monitor"
    screen_size: float | None = None
    resolution: str | None = None
    refresh_rate: int | None = None
    panel_type: str | None = None
    aspect_ratio: str | None = None
    brightness: int | None = None


# Tagged union: the variant decides the product's category and table
CategoryAttributes = Annotated[
    CPUAttributes
    | MotherboardAttributes
    | MemoryAttributes
    | StorageAttributes
    | GPUAttributes
    | PSUAttributes
    | CaseAttributes
    | CoolerAttributes
    | OSAttributes
    | MonitorAttributes,
    Field(discriminator="component_type"),
]


# ──────────────────────────────────────────────
# Product Models
# ──────────────────────────────────────────────


class ProductCreate(BaseModel):
    """Payload for adding a product together with its category attributes."""

    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    manufacturer: str = Field(min_length=1, max_length=100)
    description: str | None = None
    image_url: str | None = None
    attributes: CategoryAttributes

    @property
    def component_type(self) -> ComponentType:
        return ComponentType(self.attributes.component_type)


class ProductUpdate(BaseModel):
    """Partial product update. Category cannot change."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    stock: int | None = Field(default=None, ge=0)
    status: ProductStatus | None = None
    manufacturer: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    image_url: str | None = None
    attributes: CategoryAttributes | None = None


class StockUpdate(BaseModel):
    """Stock level change; only "Discontinued" is honoured as a manual status."""

    stock: int = Field(ge=0)
    status: ProductStatus | None = None
    last_restock_date: datetime | None = None


class ProductOut(BaseModel):
    """Product row as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    product_id: int
    name: str
    category: str
    price: float
    stock: int
    status: str
    manufacturer: str | None = None
    description: str | None = None
    image_url: str | None = None
    last_restock_date: datetime | None = None


class ComponentDetail(ProductOut):
    """Product row merged with its category-specific attributes."""

    specs: dict[str, Any] = Field(default_factory=dict)
