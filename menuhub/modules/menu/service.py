"""Menu draft service — the operations behind the administrator's draft menu."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from menuhub.exceptions import BusinessRuleException, NotFoundException
from menuhub.models.enums import CatalogPartition
from menuhub.modules.menu.cache import MenuCache
from menuhub.modules.menu.publisher import PublishCoordinator
from menuhub.modules.menu.reconciliation import (
    compute_draft_view,
    compute_has_unpublished_changes,
    compute_user_menu,
    summarize_draft,
)
from menuhub.modules.menu.schemas import (
    CatalogItem,
    CatalogItemCreate,
    CatalogItemUpdate,
    DraftStatusResponse,
    DraftViewItem,
    PublishResult,
)
from menuhub.modules.menu.store import CatalogRecordStore
from menuhub.modules.menu.tracker import ChangeTracker
from menuhub.modules.menu.validators import parse_item_changes, parse_item_create

logger = logging.getLogger(__name__)


class MenuDraftService:
    """Binds one administrator's :class:`ChangeTracker` to the catalog store.

    Row sets are re-read from storage on every call, so the tracker's side
    tables are the only state carried between calls.
    """

    def __init__(
        self,
        store: CatalogRecordStore,
        tracker: ChangeTracker,
        *,
        cache: MenuCache | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self._store = store
        self._tracker = tracker
        self._cache = cache
        self._coordinator = PublishCoordinator(
            store,
            max_concurrency=max_concurrency,
            on_published=self._after_publish if cache is not None else None,
        )

    @property
    def tracker(self) -> ChangeTracker:
        return self._tracker

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _load(self) -> tuple[list[CatalogItem], list[CatalogItem]]:
        live = await self._store.list_items(CatalogPartition.LIVE)
        draft = await self._store.list_items(CatalogPartition.DRAFT)
        return live, draft

    async def list_live(self) -> list[CatalogItem]:
        return await self._store.list_items(CatalogPartition.LIVE)

    async def get_draft_view(self) -> list[DraftViewItem]:
        live, draft = await self._load()
        return compute_draft_view(
            live,
            draft,
            self._tracker.pending_deletions,
            self._tracker.draft_to_live,
        )

    async def has_unpublished_changes(self) -> bool:
        if self._tracker.has_pending_deletions:
            return True
        live, draft = await self._load()
        return compute_has_unpublished_changes(live, draft)

    async def get_status(self) -> DraftStatusResponse:
        live, draft = await self._load()
        summary = summarize_draft(live, draft, self._tracker.pending_deletions)
        changed = self._tracker.has_pending_deletions or compute_has_unpublished_changes(live, draft)
        return DraftStatusResponse(
            **summary.model_dump(),
            has_unpublished_changes=changed,
            publishing=self._tracker.publishing,
        )

    # ------------------------------------------------------------------
    # Staging
    # ------------------------------------------------------------------

    async def stage_new(self, data: CatalogItemCreate | Mapping[str, Any]) -> CatalogItem:
        attributes = parse_item_create(data).model_dump()
        item = await self._store.create_item(attributes, CatalogPartition.DRAFT)
        logger.info("Staged new menu item %s (%s)", item.id, item.name)
        return item

    async def stage_edit(
        self, item_id: uuid.UUID, changes: CatalogItemUpdate | Mapping[str, Any]
    ) -> CatalogItem:
        values = parse_item_changes(changes)
        live, draft = await self._load()

        target = self._tracker.find_draft(item_id, draft)
        if target is None:
            live_item = next((row for row in live if row.id == item_id), None)
            if live_item is None:
                raise NotFoundException(f"Menu item {item_id} not found")
            target, created = await self._tracker.record_copy_for_edit(
                self._store, live_item, draft, changes=values
            )
            if created:
                return target

        updated = await self._store.update_item(target.id, values)
        if updated is None:
            raise NotFoundException(f"Menu item {target.id} not found")
        self._tracker.claim_for_edit(updated.id)
        logger.info("Staged changes to menu item %s: %s", updated.id, sorted(values))
        return updated

    async def toggle_stock(self, item_id: uuid.UUID) -> CatalogItem:
        live, draft = await self._load()
        current = self._tracker.find_draft(item_id, draft)
        if current is None:
            current = next((row for row in live if row.id == item_id), None)
        if current is None:
            raise NotFoundException(f"Menu item {item_id} not found")
        return await self.stage_edit(item_id, {"in_stock": not current.in_stock})

    async def mark_for_deletion(self, item_id: uuid.UUID) -> CatalogItem:
        live, draft = await self._load()
        item = self._tracker.find_draft(item_id, draft)
        if item is None:
            item = next((row for row in live if row.id == item_id), None)
        if item is None:
            raise NotFoundException(f"Menu item {item_id} not found")
        return await self._tracker.mark_for_deletion(self._store, item, draft)

    async def cancel_deletion(self, item_id: uuid.UUID) -> None:
        cancelled = await self._tracker.cancel_deletion(self._store, item_id)
        if not cancelled:
            raise NotFoundException(f"Menu item {item_id} is not pending deletion")

    # ------------------------------------------------------------------
    # Publish and session lifecycle
    # ------------------------------------------------------------------

    async def publish(self) -> PublishResult:
        draft = await self._store.list_items(CatalogPartition.DRAFT)
        return await self._coordinator.publish(self._tracker, draft)

    async def _after_publish(self, result: PublishResult) -> None:
        await self._cache.invalidate_all()

    async def discard(self, discard_edits: bool = False) -> None:
        """Drop this session's staged deletions and, if asked, its edit copies.

        Copies of live items made for editing are only tracked in memory;
        closing the session without discarding them would leave drafts that
        publish as new items next to the originals.
        """
        edit_copies = self._tracker.edit_copies()
        if edit_copies and not discard_edits:
            raise BusinessRuleException(
                "Session has staged edits of live items; discard them to close the session",
                details=[{"id": str(draft_id)} for draft_id in edit_copies],
            )

        for draft_id in sorted(self._tracker.pending_deletions, key=str):
            await self._tracker.cancel_deletion(self._store, draft_id)
        for draft_id in edit_copies:
            if not await self._store.delete_item(draft_id):
                logger.warning("Edit copy %s was already gone on discard", draft_id)
        self._tracker.reset()


async def get_user_menu(
    store: CatalogRecordStore,
    user_id: uuid.UUID,
    cache: MenuCache | None = None,
) -> list[CatalogItem]:
    """Return the live items *user_id* may order, through the cache when given."""

    async def _compute() -> list[CatalogItem]:
        live = await store.list_items(CatalogPartition.LIVE)
        assigned = await store.list_assigned_item_ids(user_id)
        return compute_user_menu(live, assigned)

    if cache is None:
        return await _compute()
    return await cache.get_or_set(user_id, _compute)
