"""Catalog record store — durable draft/live rows behind a narrow async contract."""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Iterable, Mapping
from contextlib import asynccontextmanager
from typing import Any, Protocol

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from menuhub.exceptions import TransientStoreException
from menuhub.models.enums import AssignmentType, CatalogPartition, MenuCategory
from menuhub.models.menu_item import MenuItem
from menuhub.models.user_menu import UserMenuAssignment
from menuhub.modules.menu.constants import ITEM_ATTRIBUTE_FIELDS
from menuhub.modules.menu.schemas import CatalogItem

logger = logging.getLogger(__name__)


class CatalogRecordStore(Protocol):
    """Storage collaborator for catalog rows.

    Every call is independently durable. Implementations raise
    :class:`TransientStoreException` when the backend cannot be reached.
    """

    async def list_items(self, partition: CatalogPartition) -> list[CatalogItem]: ...

    async def get_item(self, item_id: uuid.UUID) -> CatalogItem | None: ...

    async def create_item(
        self, attributes: Mapping[str, Any], partition: CatalogPartition
    ) -> CatalogItem: ...

    async def update_item(
        self, item_id: uuid.UUID, changes: Mapping[str, Any]
    ) -> CatalogItem | None: ...

    async def delete_item(self, item_id: uuid.UUID) -> bool: ...

    async def set_partition_bulk(
        self, item_ids: Iterable[uuid.UUID], partition: CatalogPartition
    ) -> int: ...

    async def list_assigned_item_ids(self, user_id: uuid.UUID) -> set[uuid.UUID]: ...


def _coerce_attributes(attributes: Mapping[str, Any]) -> dict[str, Any]:
    values = {key: attributes[key] for key in ITEM_ATTRIBUTE_FIELDS if key in attributes}
    if values.get("category") is not None:
        values["category"] = MenuCategory(values["category"])
    if values.get("assignment_type") is not None:
        values["assignment_type"] = AssignmentType(values["assignment_type"])
    return values


class SqlAlchemyCatalogStore:
    """``CatalogRecordStore`` over the ``menu_items`` table.

    Each call runs in its own session and transaction, so a failed call
    never rolls back an earlier one and calls may run concurrently.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session, session.begin():
                yield session
        except SQLAlchemyError as exc:
            logger.warning("Catalog store call failed: %s", exc)
            raise TransientStoreException("Catalog store is unavailable") from exc

    async def list_items(self, partition: CatalogPartition) -> list[CatalogItem]:
        stmt = (
            select(MenuItem)
            .where(MenuItem.is_draft == partition.is_draft)
            .order_by(MenuItem.name, MenuItem.created_at, MenuItem.id)
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
            return [CatalogItem.model_validate(row) for row in result.scalars().all()]

    async def get_item(self, item_id: uuid.UUID) -> CatalogItem | None:
        async with self._transaction() as session:
            row = await session.get(MenuItem, item_id)
            return CatalogItem.model_validate(row) if row is not None else None

    async def create_item(
        self, attributes: Mapping[str, Any], partition: CatalogPartition
    ) -> CatalogItem:
        async with self._transaction() as session:
            row = MenuItem(**_coerce_attributes(attributes), is_draft=partition.is_draft)
            session.add(row)
            await session.flush()
            await session.refresh(row)
            item = CatalogItem.model_validate(row)
        logger.debug("Created %s menu item %s", partition.value, item.id)
        return item

    async def update_item(
        self, item_id: uuid.UUID, changes: Mapping[str, Any]
    ) -> CatalogItem | None:
        async with self._transaction() as session:
            row = await session.get(MenuItem, item_id)
            if row is None:
                return None
            for field, value in _coerce_attributes(changes).items():
                setattr(row, field, value)
            await session.flush()
            await session.refresh(row)
            return CatalogItem.model_validate(row)

    async def delete_item(self, item_id: uuid.UUID) -> bool:
        async with self._transaction() as session:
            result = await session.execute(delete(MenuItem).where(MenuItem.id == item_id))
            return result.rowcount > 0

    async def set_partition_bulk(
        self, item_ids: Iterable[uuid.UUID], partition: CatalogPartition
    ) -> int:
        ids = list(item_ids)
        if not ids:
            return 0
        stmt = (
            update(MenuItem)
            .where(MenuItem.id.in_(ids))
            .values(is_draft=partition.is_draft)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
            return result.rowcount

    async def list_assigned_item_ids(self, user_id: uuid.UUID) -> set[uuid.UUID]:
        stmt = select(UserMenuAssignment.menu_item_id).where(
            UserMenuAssignment.user_id == user_id,
            UserMenuAssignment.is_active.is_(True),
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
            return set(result.scalars().all())
