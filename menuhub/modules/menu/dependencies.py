"""FastAPI dependency functions for the menu module."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from menuhub.database.session import get_session_factory
from menuhub.modules.auth.auth import AuthenticatedUser, require_admin
from menuhub.modules.menu.cache import MenuCache
from menuhub.modules.menu.registry import EditingSessionRegistry, get_registry
from menuhub.modules.menu.service import MenuDraftService
from menuhub.modules.menu.store import CatalogRecordStore, SqlAlchemyCatalogStore

_menu_cache = MenuCache()


def get_catalog_store(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> CatalogRecordStore:
    return SqlAlchemyCatalogStore(session_factory)


def get_menu_cache() -> MenuCache:
    return _menu_cache


def get_draft_service(
    admin: AuthenticatedUser = Depends(require_admin),
    store: CatalogRecordStore = Depends(get_catalog_store),
    registry: EditingSessionRegistry = Depends(get_registry),
    cache: MenuCache = Depends(get_menu_cache),
) -> MenuDraftService:
    """Build the draft service bound to the calling administrator's session."""
    return MenuDraftService(store, registry.open(admin.id), cache=cache)
