"""Draft/live reconciliation — pure projections over catalog row sets.

Nothing here touches storage or session state; callers pass in the rows and
side tables and get a fresh result back. The same inputs always produce the
same output.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import Collection, Iterable, Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from menuhub.models.enums import AssignmentType
from menuhub.modules.menu.schemas import CatalogItem, DraftSummary, DraftViewItem

# Rows arriving from older clients use camelCase keys
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id",),
    "name": ("name",),
    "ingredients": ("ingredients", "description"),
    "unit_size": ("unit_size", "unitSize"),
    "abv": ("abv",),
    "price": ("price",),
    "image_url": ("image_url", "imageUrl"),
    "category": ("category",),
    "in_stock": ("in_stock", "inStock"),
    "assignment_type": ("assignment_type", "assignmentType"),
}

_TRUE_STRINGS = frozenset({"true", "t", "yes", "y", "1", "on"})


def _read(row: Any, field: str) -> Any:
    for key in _FIELD_ALIASES[field]:
        if isinstance(row, Mapping):
            if key in row:
                return row[key]
        elif hasattr(row, key):
            return getattr(row, key)
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        value = value.value
    return str(value).strip()


def _as_number(value: Any) -> Decimal | None:
    if value is None or value == "":
        return Decimal(0)
    if isinstance(value, bool):
        return Decimal(int(value))
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _row_key(row: Any) -> str:
    return str(_read(row, "id"))


def normalize_snapshot(row: CatalogItem | Mapping[str, Any]) -> dict[str, Any]:
    """Return the comparable attributes of *row* with formatting noise removed.

    Strings are trimmed, numbers become ``Decimal`` (so ``"5"``, ``5`` and
    ``"5.0"`` compare equal) and booleans are coerced from their common
    string spellings.
    """
    return {
        "name": _as_text(_read(row, "name")),
        "ingredients": _as_text(_read(row, "ingredients")),
        "unit_size": _as_text(_read(row, "unit_size")),
        "abv": _as_number(_read(row, "abv")),
        "price": _as_number(_read(row, "price")),
        "image_url": _as_text(_read(row, "image_url")),
        "category": _as_text(_read(row, "category")),
        "in_stock": _as_bool(_read(row, "in_stock")),
        "assignment_type": _as_text(_read(row, "assignment_type")) or AssignmentType.ALL_USERS.value,
    }


def compute_has_unpublished_changes(
    live_rows: Iterable[CatalogItem | Mapping[str, Any]],
    draft_rows: Iterable[CatalogItem | Mapping[str, Any]],
) -> bool:
    """Return True when the draft row set differs from the live row set.

    Differences are: a draft id missing from live (new item), a live id
    missing from the draft rows (deleted item), or a shared id whose
    normalized snapshots differ. An empty draft set has nothing to publish.
    """
    drafts = {_row_key(row): normalize_snapshot(row) for row in draft_rows}
    if not drafts:
        return False
    lives = {_row_key(row): normalize_snapshot(row) for row in live_rows}

    if any(key not in lives for key in drafts):
        return True
    if any(key not in drafts for key in lives):
        return True
    return any(snapshot != lives[key] for key, snapshot in drafts.items())


def compute_draft_view(
    live_rows: Sequence[CatalogItem],
    draft_rows: Sequence[CatalogItem],
    pending_deletions: Collection[uuid.UUID] = frozenset(),
    draft_to_live: Mapping[uuid.UUID, uuid.UUID] | None = None,
) -> list[DraftViewItem]:
    """Merge draft and live rows into the list an administrator edits.

    Every draft row comes first, in input order. Live rows follow unless a
    draft row stands in for them, either by sharing their id or through
    *draft_to_live*. Live rows marked for deletion without a draft stand-in
    stay visible so the deletion can be cancelled.
    """
    mapping = dict(draft_to_live or {})
    live_ids = {row.id for row in live_rows}
    draft_ids = {row.id for row in draft_rows}
    represented = draft_ids | {
        live_id for draft_id, live_id in mapping.items() if draft_id in draft_ids
    }

    view: list[DraftViewItem] = []
    for row in draft_rows:
        supersedes = mapping.get(row.id)
        view.append(
            DraftViewItem(
                **row.model_dump(),
                live_present=row.id in live_ids or supersedes in live_ids,
                pending_delete=row.id in pending_deletions,
                supersedes_id=supersedes,
            )
        )
    for row in live_rows:
        if row.id in represented:
            continue
        view.append(
            DraftViewItem(
                **row.model_dump(),
                live_present=True,
                pending_delete=row.id in pending_deletions,
            )
        )
    return view


def summarize_draft(
    live_rows: Sequence[CatalogItem],
    draft_rows: Sequence[CatalogItem],
    pending_deletions: Collection[uuid.UUID] = frozenset(),
) -> DraftSummary:
    live_ids = {row.id for row in live_rows}
    in_stock = sum(1 for row in draft_rows if row.in_stock)
    return DraftSummary(
        draft_only_count=sum(1 for row in draft_rows if row.id not in live_ids),
        in_stock_count=in_stock,
        out_of_stock_count=len(draft_rows) - in_stock,
        pending_deletion_count=len(pending_deletions),
    )


def compute_user_menu(
    live_rows: Sequence[CatalogItem],
    assigned_item_ids: Collection[uuid.UUID],
) -> list[CatalogItem]:
    """Return the live items one customer can order.

    General items come first, followed by the specialized items assigned to
    the customer. Each item appears once.
    """
    seen: set[uuid.UUID] = set()
    menu: list[CatalogItem] = []
    general = [row for row in live_rows if row.assignment_type is AssignmentType.ALL_USERS]
    specialized = [
        row
        for row in live_rows
        if row.assignment_type is AssignmentType.SPECIFIC_USERS and row.id in assigned_item_ids
    ]
    for row in (*general, *specialized):
        if row.id in seen:
            continue
        seen.add(row.id)
        menu.append(row)
    return menu
