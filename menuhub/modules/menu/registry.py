"""Editing session registry — one change tracker per administrator."""

from __future__ import annotations

import logging
import uuid

from menuhub.modules.menu.tracker import ChangeTracker

logger = logging.getLogger(__name__)


class EditingSessionRegistry:
    """Holds the in-memory tracker of each administrator with the draft menu open.

    Trackers are process-local and not shared between administrators.
    """

    def __init__(self) -> None:
        self._sessions: dict[uuid.UUID, ChangeTracker] = {}

    def open(self, admin_id: uuid.UUID) -> ChangeTracker:
        tracker = self._sessions.get(admin_id)
        if tracker is None:
            tracker = ChangeTracker()
            self._sessions[admin_id] = tracker
            logger.info("Opened menu editing session for admin %s", admin_id)
        return tracker

    def close(self, admin_id: uuid.UUID) -> None:
        if self._sessions.pop(admin_id, None) is not None:
            logger.info("Closed menu editing session for admin %s", admin_id)

    def __len__(self) -> int:
        return len(self._sessions)


registry = EditingSessionRegistry()


def get_registry() -> EditingSessionRegistry:
    """FastAPI dependency returning the process-wide session registry."""
    return registry
