"""Build suggestion result and response models for GearSphere."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from gearsphere.models.components import ProductOut


# ──────────────────────────────────────────────
# Build Response
# ──────────────────────────────────────────────


class BuildResponse(BaseModel):
    """Top-level response returned by the suggest-build endpoint.

    ``build`` always holds one key per component category; a category with
    no affordable product maps to ``None`` and gets a ``debug`` entry.
    """

    success: bool = True
    build: dict[str, ProductOut | None]
    total: float
    label: str
    usage: str
    debug: dict[str, str] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """JSON body with ``debug`` left out when every category matched."""
        exclude = None if self.debug else {"debug"}
        return self.model_dump(mode="json", exclude=exclude)


class ErrorResponse(BaseModel):
    """Failure body shared by the build endpoints."""

    success: bool = False
    message: str


class ProductListResponse(BaseModel):
    items: list[ProductOut]
    total: int
    limit: int
    offset: int
