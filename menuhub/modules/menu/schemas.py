"""Pydantic request/response schemas for the menu module."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from menuhub.models.enums import AssignmentType, MenuCategory
from menuhub.modules.menu.constants import ABV_MAX, ABV_MIN, ITEM_ATTRIBUTE_FIELDS


# ---------------------------------------------------------------------------
# Catalog item
# ---------------------------------------------------------------------------

class CatalogItem(BaseModel):
    """One stored catalog row. Draft and live rows share this shape."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: uuid.UUID
    name: str
    ingredients: str = ""
    unit_size: str = ""
    abv: Decimal = Decimal("0")
    price: Decimal
    image_url: str = ""
    category: MenuCategory
    in_stock: bool = True
    assignment_type: AssignmentType = AssignmentType.ALL_USERS
    is_draft: bool = False
    created_at: datetime | None = None

    @field_validator("image_url", mode="before")
    @classmethod
    def _blank_image(cls, value: str | None) -> str:
        return value or ""

    def attributes(self) -> dict:
        """Return the editable attributes, suitable for cloning into a new row."""
        return self.model_dump(include=set(ITEM_ATTRIBUTE_FIELDS))


class CatalogItemCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    ingredients: str = Field(..., min_length=1, max_length=5000)
    unit_size: str = Field(..., min_length=1, max_length=50)
    abv: Decimal = Field(Decimal("0"), ge=ABV_MIN, le=ABV_MAX)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    image_url: str = ""
    category: MenuCategory = MenuCategory.SPIRITS
    in_stock: bool = True
    assignment_type: AssignmentType = AssignmentType.ALL_USERS


class CatalogItemUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=255)
    ingredients: str | None = Field(None, min_length=1, max_length=5000)
    unit_size: str | None = Field(None, min_length=1, max_length=50)
    abv: Decimal | None = Field(None, ge=ABV_MIN, le=ABV_MAX)
    price: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    image_url: str | None = None
    category: MenuCategory | None = None
    in_stock: bool | None = None
    assignment_type: AssignmentType | None = None


# ---------------------------------------------------------------------------
# Draft view
# ---------------------------------------------------------------------------

class DraftViewItem(CatalogItem):
    live_present: bool
    pending_delete: bool = False
    supersedes_id: uuid.UUID | None = None


class DraftViewResponse(BaseModel):
    items: list[DraftViewItem]
    total: int


class DraftSummary(BaseModel):
    draft_only_count: int
    in_stock_count: int
    out_of_stock_count: int
    pending_deletion_count: int


class DraftStatusResponse(DraftSummary):
    has_unpublished_changes: bool
    publishing: bool = False


class TrackerState(BaseModel):
    pending_deletions: list[uuid.UUID]
    auto_created_for_deletion: list[uuid.UUID]
    draft_to_live: dict[uuid.UUID, uuid.UUID]


# ---------------------------------------------------------------------------
# Publish
# ---------------------------------------------------------------------------

class PublishFailure(BaseModel):
    id: uuid.UUID
    reason: str
    step: str


class PublishResult(BaseModel):
    applied_deletions: list[uuid.UUID] = Field(default_factory=list)
    superseded: list[uuid.UUID] = Field(default_factory=list)
    promoted: list[uuid.UUID] = Field(default_factory=list)
    failures: list[PublishFailure] = Field(default_factory=list)

    # Ground truth reloaded after the publish; not part of the API payload
    live: list[CatalogItem] = Field(default_factory=list, exclude=True)
    draft: list[CatalogItem] = Field(default_factory=list, exclude=True)

    @property
    def succeeded(self) -> bool:
        return not self.failures


# ---------------------------------------------------------------------------
# Customer menu
# ---------------------------------------------------------------------------

class MenuResponse(BaseModel):
    items: list[CatalogItem]
    total: int
