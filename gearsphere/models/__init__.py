"""Pydantic models for products, category attributes, and build responses."""

from gearsphere.models.build import (
    BuildResponse,
    ErrorResponse,
    ProductListResponse,
)
from gearsphere.models.components import (
    BUYABLE_STATUSES,
    CaseAttributes,
    CategoryAttributes,
    ComponentDetail,
    ComponentType,
    CoolerAttributes,
    CPUAttributes,
    GPUAttributes,
    MemoryAttributes,
    MonitorAttributes,
    MotherboardAttributes,
    OSAttributes,
    ProductCreate,
    ProductOut,
    ProductStatus,
    ProductUpdate,
    PSUAttributes,
    StockUpdate,
    StorageAttributes,
    Usage,
    derive_status,
)

__all__ = [
    # Components & enums
    "BUYABLE_STATUSES",
    "CaseAttributes",
    "CategoryAttributes",
    "ComponentDetail",
    "ComponentType",
    "CoolerAttributes",
    "CPUAttributes",
    "GPUAttributes",
    "MemoryAttributes",
    "MonitorAttributes",
    "MotherboardAttributes",
    "OSAttributes",
    "ProductCreate",
    "ProductOut",
    "ProductStatus",
    "ProductUpdate",
    "PSUAttributes",
    "StockUpdate",
    "StorageAttributes",
    "Usage",
    "derive_status",
    # Build models
    "BuildResponse",
    "ErrorResponse",
    "ProductListResponse",
]
