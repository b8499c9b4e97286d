"""Change tracker — one administrator's staged deletions and draft copies.

Draft copies of live items are stored as *new* rows with their own ids, so
the tracker remembers which live row each copy is meant to replace
(``draft_to_live``). Copies created only to carry a pending deletion are
remembered separately so that cancelling the deletion removes them again.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Collection, Mapping, Sequence
from typing import Any

from menuhub.models.enums import CatalogPartition
from menuhub.modules.menu.schemas import CatalogItem, TrackerState
from menuhub.modules.menu.store import CatalogRecordStore

logger = logging.getLogger(__name__)


class ChangeTracker:
    def __init__(self) -> None:
        self.pending_deletions: set[uuid.UUID] = set()
        self.auto_created_for_deletion: set[uuid.UUID] = set()
        self.draft_to_live: dict[uuid.UUID, uuid.UUID] = {}
        # Set while a publish runs; a second publish is rejected
        self.publishing = False

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def live_id_for(self, draft_id: uuid.UUID) -> uuid.UUID | None:
        return self.draft_to_live.get(draft_id)

    def mapped_draft_id(self, live_id: uuid.UUID) -> uuid.UUID | None:
        for draft_id, mapped_live_id in self.draft_to_live.items():
            if mapped_live_id == live_id:
                return draft_id
        return None

    def find_draft(
        self, item_id: uuid.UUID, draft_rows: Sequence[CatalogItem]
    ) -> CatalogItem | None:
        """Return the draft row standing in for *item_id*, if one is loaded."""
        by_id = {row.id: row for row in draft_rows}
        if item_id in by_id:
            return by_id[item_id]
        draft_id = self.mapped_draft_id(item_id)
        return by_id.get(draft_id) if draft_id is not None else None

    def edit_copies(self) -> list[uuid.UUID]:
        """Draft copies that carry staged edits rather than only a deletion."""
        return [
            draft_id
            for draft_id in self.draft_to_live
            if draft_id not in self.auto_created_for_deletion
        ]

    @property
    def has_pending_deletions(self) -> bool:
        return bool(self.pending_deletions)

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    async def _resolve_copy(
        self,
        store: CatalogRecordStore,
        live_id: uuid.UUID,
        draft_rows: Sequence[CatalogItem],
    ) -> CatalogItem | None:
        existing = self.find_draft(live_id, draft_rows)
        if existing is not None:
            return existing
        draft_id = self.mapped_draft_id(live_id)
        if draft_id is None:
            return None
        # The mapping may be ahead of a stale row list; ask storage
        row = await store.get_item(draft_id)
        if row is None or not row.is_draft:
            logger.warning("Draft copy %s of live item %s no longer exists", draft_id, live_id)
            self._forget(draft_id)
            return None
        return row

    async def mark_for_deletion(
        self,
        store: CatalogRecordStore,
        item: CatalogItem,
        draft_rows: Sequence[CatalogItem],
    ) -> CatalogItem:
        """Stage *item* for permanent deletion at the next publish.

        A live item without a draft counterpart first gets a draft copy so
        the deletion is visible (and cancellable) in the draft view.
        Returns the draft row that carries the deletion.
        """
        if item.is_draft:
            draft = item
        else:
            draft = await self._resolve_copy(store, item.id, draft_rows)
            if draft is None:
                draft = await store.create_item(item.attributes(), CatalogPartition.DRAFT)
                self.draft_to_live[draft.id] = item.id
                self.auto_created_for_deletion.add(draft.id)
                logger.info("Created draft copy %s of live item %s for deletion", draft.id, item.id)

        if draft.id not in self.pending_deletions:
            self.pending_deletions.add(draft.id)
            logger.info("Menu item %s marked for deletion", draft.id)
        return draft

    async def cancel_deletion(self, store: CatalogRecordStore, item_id: uuid.UUID) -> bool:
        """Withdraw a pending deletion by draft id or by the live id it replaces.

        Returns False when nothing was pending for *item_id*.
        """
        draft_id = item_id
        if draft_id not in self.pending_deletions:
            draft_id = self.mapped_draft_id(item_id)
            if draft_id is None or draft_id not in self.pending_deletions:
                return False

        if draft_id in self.auto_created_for_deletion:
            deleted = await store.delete_item(draft_id)
            if not deleted:
                logger.warning("Draft copy %s was already gone when its deletion was cancelled", draft_id)
            self._forget(draft_id)
        else:
            self.pending_deletions.discard(draft_id)
        logger.info("Pending deletion of menu item %s cancelled", draft_id)
        return True

    async def record_copy_for_edit(
        self,
        store: CatalogRecordStore,
        live_item: CatalogItem,
        draft_rows: Sequence[CatalogItem],
        changes: Mapping[str, Any] | None = None,
    ) -> tuple[CatalogItem, bool]:
        """Return the draft row that stages edits of *live_item*.

        An existing draft counterpart is reused; otherwise a new draft row is
        cloned from *live_item* with *changes* applied and mapped to it.
        The second element of the result tells whether a row was created.
        """
        existing = await self._resolve_copy(store, live_item.id, draft_rows)
        if existing is not None:
            return existing, False

        attributes = {**live_item.attributes(), **(changes or {})}
        draft = await store.create_item(attributes, CatalogPartition.DRAFT)
        self.draft_to_live[draft.id] = live_item.id
        logger.info("Created draft copy %s of live item %s for editing", draft.id, live_item.id)
        return draft, True

    def claim_for_edit(self, draft_id: uuid.UUID) -> None:
        """Keep a deletion copy once it also carries edits."""
        self.auto_created_for_deletion.discard(draft_id)

    def _forget(self, draft_id: uuid.UUID) -> None:
        self.pending_deletions.discard(draft_id)
        self.auto_created_for_deletion.discard(draft_id)
        self.draft_to_live.pop(draft_id, None)

    # ------------------------------------------------------------------
    # Publish bookkeeping
    # ------------------------------------------------------------------

    def reset(self) -> None:
        self.pending_deletions.clear()
        self.auto_created_for_deletion.clear()
        self.draft_to_live.clear()

    def retain(
        self,
        failed_deletions: Collection[uuid.UUID],
        failed_supersessions: Collection[uuid.UUID],
    ) -> None:
        """Keep only the entries a publish could not apply, so it can be retried.

        When a deletion copy is gone but its live row survived, the live row
        itself stays pending so the deletion remains visible and cancellable.
        """
        applied = set(self.pending_deletions) - set(failed_deletions)
        orphaned_live = {
            live_id
            for draft_id, live_id in self.draft_to_live.items()
            if draft_id in applied and live_id in failed_supersessions
        }
        self.pending_deletions = (set(self.pending_deletions) & set(failed_deletions)) | orphaned_live
        self.draft_to_live = {
            draft_id: live_id
            for draft_id, live_id in self.draft_to_live.items()
            if live_id in failed_supersessions and draft_id not in applied
        }
        self.auto_created_for_deletion = (
            set(self.auto_created_for_deletion) & self.pending_deletions & set(self.draft_to_live)
        )

    def snapshot(self) -> TrackerState:
        return TrackerState(
            pending_deletions=sorted(self.pending_deletions, key=str),
            auto_created_for_deletion=sorted(self.auto_created_for_deletion, key=str),
            draft_to_live=dict(self.draft_to_live),
        )
