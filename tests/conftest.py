"""Pytest fixtures for menuhub tests."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from menuhub.database.base import Base
from menuhub.exceptions import TransientStoreException
from menuhub.models.enums import AssignmentType, CatalogPartition, MenuCategory
from menuhub.modules.menu.constants import ITEM_ATTRIBUTE_FIELDS
from menuhub.modules.menu.schemas import CatalogItem
from menuhub.modules.menu.store import SqlAlchemyCatalogStore
from menuhub.modules.menu.tracker import ChangeTracker

import menuhub.models  # noqa: F401


def item_attributes(name: str = "Negroni", **overrides: Any) -> dict[str, Any]:
    """Valid attributes for a new menu item."""
    attributes = {
        "name": name,
        "ingredients": "Gin, Campari, sweet vermouth",
        "unit_size": "90ml",
        "abv": Decimal("24.00"),
        "price": Decimal("12.50"),
        "image_url": "",
        "category": MenuCategory.COCKTAILS,
        "in_stock": True,
        "assignment_type": AssignmentType.ALL_USERS,
    }
    attributes.update(overrides)
    return attributes


class InMemoryCatalogStore:
    """Dict-backed catalog store with failure injection for publish tests."""

    def __init__(self) -> None:
        self.rows: dict[uuid.UUID, CatalogItem] = {}
        self.fail_deletes: set[uuid.UUID] = set()
        self.fail_bulk = False
        self.calls: list[tuple[str, Any]] = []

    def seed(self, partition: CatalogPartition, name: str = "Negroni", **overrides: Any) -> CatalogItem:
        item = CatalogItem(
            id=uuid.uuid4(),
            is_draft=partition.is_draft,
            created_at=datetime.now(timezone.utc),
            **item_attributes(name, **overrides),
        )
        self.rows[item.id] = item
        return item

    async def list_items(self, partition: CatalogPartition) -> list[CatalogItem]:
        self.calls.append(("list_items", partition))
        rows = [row for row in self.rows.values() if row.is_draft == partition.is_draft]
        return sorted(rows, key=lambda row: (row.name, str(row.id)))

    async def get_item(self, item_id: uuid.UUID) -> CatalogItem | None:
        return self.rows.get(item_id)

    async def create_item(self, attributes: Mapping[str, Any], partition: CatalogPartition) -> CatalogItem:
        self.calls.append(("create_item", partition))
        values = {key: attributes[key] for key in ITEM_ATTRIBUTE_FIELDS if key in attributes}
        item = CatalogItem(
            id=uuid.uuid4(),
            is_draft=partition.is_draft,
            created_at=datetime.now(timezone.utc),
            **values,
        )
        self.rows[item.id] = item
        return item

    async def update_item(self, item_id: uuid.UUID, changes: Mapping[str, Any]) -> CatalogItem | None:
        self.calls.append(("update_item", item_id))
        row = self.rows.get(item_id)
        if row is None:
            return None
        updated = row.model_copy(update=dict(changes))
        self.rows[item_id] = updated
        return updated

    async def delete_item(self, item_id: uuid.UUID) -> bool:
        self.calls.append(("delete_item", item_id))
        if item_id in self.fail_deletes:
            raise TransientStoreException("Catalog store is unavailable")
        return self.rows.pop(item_id, None) is not None

    async def set_partition_bulk(self, item_ids: Iterable[uuid.UUID], partition: CatalogPartition) -> int:
        ids = list(item_ids)
        self.calls.append(("set_partition_bulk", ids))
        if self.fail_bulk:
            raise TransientStoreException("Catalog store is unavailable")
        count = 0
        for item_id in ids:
            row = self.rows.get(item_id)
            if row is None:
                continue
            self.rows[item_id] = row.model_copy(update={"is_draft": partition.is_draft})
            count += 1
        return count

    async def list_assigned_item_ids(self, user_id: uuid.UUID) -> set[uuid.UUID]:
        return set()


@pytest.fixture
def memory_store() -> InMemoryCatalogStore:
    return InMemoryCatalogStore()


@pytest.fixture
def tracker() -> ChangeTracker:
    return ChangeTracker()


# SQLite file per test; each store call opens its own connection
@pytest_asyncio.fixture
async def async_test_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'menu.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(async_test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def sql_store(session_factory) -> SqlAlchemyCatalogStore:
    return SqlAlchemyCatalogStore(session_factory)
