"""Publish coordinator — folds one administrator's draft state into the live menu."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable, Sequence

from menuhub.config import settings
from menuhub.exceptions import (
    NotFoundException,
    PublishInProgressException,
    TransientStoreException,
)
from menuhub.models.enums import CatalogPartition
from menuhub.modules.menu.constants import STEP_DELETE, STEP_PROMOTE, STEP_SUPERSEDE
from menuhub.modules.menu.schemas import CatalogItem, PublishFailure, PublishResult
from menuhub.modules.menu.store import CatalogRecordStore
from menuhub.modules.menu.tracker import ChangeTracker

logger = logging.getLogger(__name__)

PublishHook = Callable[[PublishResult], Awaitable[None]]

# Runs still in flight after their caller was cancelled
_running: set[asyncio.Task] = set()


def _transient(failed: dict[uuid.UUID, str]) -> set[uuid.UUID]:
    return {item_id for item_id, reason in failed.items() if reason != NotFoundException.code}


def _finish_run(task: asyncio.Task) -> None:
    _running.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("Publish run failed: %s", exc)


class PublishCoordinator:
    """Run the publish transaction against a :class:`CatalogRecordStore`.

    Steps run strictly in order:

    1. permanently delete every pending deletion;
    2. delete every live row that a draft copy supersedes;
    3. promote the remaining draft rows to live in one bulk call;
    4. reload both partitions from storage;
    5. reset the tracker, keeping only entries that failed.

    Per-item failures in steps 1-3 are recorded and never abort the run.
    Calls within steps 1 and 2 run concurrently, bounded by
    ``max_concurrency``.
    """

    def __init__(
        self,
        store: CatalogRecordStore,
        *,
        max_concurrency: int | None = None,
        on_published: PublishHook | None = None,
    ) -> None:
        self._store = store
        self._max_concurrency = max(1, max_concurrency or settings.publish_max_concurrency)
        self._on_published = on_published

    async def publish(
        self, tracker: ChangeTracker, draft_rows: Sequence[CatalogItem]
    ) -> PublishResult:
        if tracker.publishing:
            raise PublishInProgressException("A publish is already in progress for this session")
        tracker.publishing = True
        # Once started the run completes even if the caller goes away
        task = asyncio.create_task(self._run(tracker, list(draft_rows)))
        _running.add(task)
        task.add_done_callback(_finish_run)
        return await asyncio.shield(task)

    async def _run(self, tracker: ChangeTracker, draft_rows: list[CatalogItem]) -> PublishResult:
        try:
            result = await self._apply(tracker, draft_rows)
        finally:
            tracker.publishing = False

        logger.info(
            "Publish finished: %d deleted, %d superseded, %d promoted, %d failed",
            len(result.applied_deletions),
            len(result.superseded),
            len(result.promoted),
            len(result.failures),
        )
        if self._on_published is not None:
            try:
                await self._on_published(result)
            except Exception:
                logger.exception("Post-publish hook failed; the publish itself was applied")
        return result

    async def _apply(self, tracker: ChangeTracker, draft_rows: list[CatalogItem]) -> PublishResult:
        failures: list[PublishFailure] = []

        # Step 1: pending deletions
        pending = sorted(tracker.pending_deletions, key=str)
        failed_deletions = await self._delete_each(pending)
        applied_deletions = [item_id for item_id in pending if item_id not in failed_deletions]
        failures.extend(
            PublishFailure(id=item_id, reason=reason, step=STEP_DELETE)
            for item_id, reason in failed_deletions.items()
        )
        logger.info("Publish step 1: deleted %d of %d pending rows", len(applied_deletions), len(pending))

        # Step 2: superseded live rows
        mapping = dict(tracker.draft_to_live)
        live_targets = list(dict.fromkeys(mapping.values()))
        failed_supersessions = await self._delete_each(live_targets)
        superseded = [live_id for live_id in live_targets if live_id not in failed_supersessions]
        failures.extend(
            PublishFailure(id=live_id, reason=reason, step=STEP_SUPERSEDE)
            for live_id, reason in failed_supersessions.items()
        )
        logger.info("Publish step 2: removed %d of %d superseded live rows", len(superseded), len(live_targets))

        # Rows reported missing are already gone; only transient failures are retried
        retry_deletions = _transient(failed_deletions)
        retry_supersessions = _transient(failed_supersessions)

        # Step 3: promotion. A copy whose live row survived would duplicate it.
        blocked = {
            draft_id for draft_id, live_id in mapping.items() if live_id in retry_supersessions
        }
        to_promote = [
            row.id
            for row in draft_rows
            if row.id not in tracker.pending_deletions and row.id not in blocked
        ]
        promote_error: str | None = None
        if to_promote:
            try:
                count = await self._store.set_partition_bulk(to_promote, CatalogPartition.LIVE)
                logger.info("Publish step 3: promoted %d of %d draft rows", count, len(to_promote))
            except TransientStoreException as exc:
                logger.warning("Publish step 3: bulk promotion failed: %s", exc.message)
                promote_error = exc.code

        # Steps 4 and 5: reload ground truth, then reset the tracker
        try:
            live = await self._store.list_items(CatalogPartition.LIVE)
            draft = await self._store.list_items(CatalogPartition.DRAFT)
        finally:
            tracker.retain(retry_deletions, retry_supersessions)

        live_ids = {row.id for row in live}
        promoted = [item_id for item_id in to_promote if item_id in live_ids]
        for item_id in to_promote:
            if item_id in live_ids:
                continue
            failures.append(
                PublishFailure(
                    id=item_id,
                    reason=promote_error or NotFoundException.code,
                    step=STEP_PROMOTE,
                )
            )

        return PublishResult(
            applied_deletions=applied_deletions,
            superseded=superseded,
            promoted=promoted,
            failures=failures,
            live=live,
            draft=draft,
        )

    async def _delete_each(self, item_ids: list[uuid.UUID]) -> dict[uuid.UUID, str]:
        """Delete *item_ids* and return a failure reason per id that was not deleted."""
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _delete(item_id: uuid.UUID) -> tuple[uuid.UUID, str | None]:
            async with semaphore:
                try:
                    deleted = await self._store.delete_item(item_id)
                except TransientStoreException as exc:
                    logger.warning("Failed to delete menu item %s during publish: %s", item_id, exc.message)
                    return item_id, exc.code
            if not deleted:
                logger.warning("Menu item %s was not found during publish", item_id)
                return item_id, NotFoundException.code
            return item_id, None

        results = await asyncio.gather(*(_delete(item_id) for item_id in item_ids))
        return {item_id: reason for item_id, reason in results if reason is not None}
