"""Menu module — draft editing, publish, and per-customer menus."""

from menuhub.modules.menu.cache import MenuCache
from menuhub.modules.menu.publisher import PublishCoordinator
from menuhub.modules.menu.registry import EditingSessionRegistry
from menuhub.modules.menu.service import MenuDraftService, get_user_menu
from menuhub.modules.menu.store import CatalogRecordStore, SqlAlchemyCatalogStore
from menuhub.modules.menu.tracker import ChangeTracker

__all__ = [
    # Storage
    "CatalogRecordStore",
    "SqlAlchemyCatalogStore",
    # Draft state
    "ChangeTracker",
    "EditingSessionRegistry",
    "PublishCoordinator",
    "MenuDraftService",
    # Customer menus
    "MenuCache",
    "get_user_menu",
]
