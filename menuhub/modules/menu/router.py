"""Menu module API router — draft editing, publish, and customer menus."""

import uuid

from fastapi import APIRouter, Depends, Query, Request

from menuhub.modules.auth.auth import AuthenticatedUser, get_current_user, require_admin
from menuhub.modules.menu.cache import MenuCache
from menuhub.modules.menu.dependencies import (
    get_catalog_store,
    get_draft_service,
    get_menu_cache,
)
from menuhub.modules.menu.registry import EditingSessionRegistry, get_registry
from menuhub.modules.menu.schemas import (
    CatalogItem,
    CatalogItemCreate,
    CatalogItemUpdate,
    DraftStatusResponse,
    DraftViewResponse,
    MenuResponse,
    PublishResult,
    TrackerState,
)
from menuhub.modules.menu.service import MenuDraftService, get_user_menu
from menuhub.modules.menu.store import CatalogRecordStore
from menuhub.rate_limit import limiter


# ====================================================================
# Draft Router (administrators)
# ====================================================================

draft_router = APIRouter(prefix="/menu/draft", tags=["menu-draft"])


@draft_router.get("", response_model=DraftViewResponse)
@limiter.limit("120/minute")
async def get_draft_view(
    request: Request,
    svc: MenuDraftService = Depends(get_draft_service),
) -> DraftViewResponse:
    items = await svc.get_draft_view()
    return DraftViewResponse(items=items, total=len(items))


@draft_router.get("/status", response_model=DraftStatusResponse)
@limiter.limit("120/minute")
async def get_draft_status(
    request: Request,
    svc: MenuDraftService = Depends(get_draft_service),
) -> DraftStatusResponse:
    return await svc.get_status()


@draft_router.get("/session", response_model=TrackerState)
@limiter.limit("60/minute")
async def get_session_state(
    request: Request,
    svc: MenuDraftService = Depends(get_draft_service),
) -> TrackerState:
    return svc.tracker.snapshot()


@draft_router.delete("/session", status_code=204)
@limiter.limit("30/minute")
async def close_session(
    request: Request,
    discard_edits: bool = Query(False),
    admin: AuthenticatedUser = Depends(require_admin),
    registry: EditingSessionRegistry = Depends(get_registry),
    svc: MenuDraftService = Depends(get_draft_service),
) -> None:
    await svc.discard(discard_edits=discard_edits)
    registry.close(admin.id)


@draft_router.post("/items", response_model=CatalogItem, status_code=201)
@limiter.limit("30/minute")
async def stage_new_item(
    request: Request,
    data: CatalogItemCreate,
    svc: MenuDraftService = Depends(get_draft_service),
) -> CatalogItem:
    return await svc.stage_new(data)


@draft_router.patch("/items/{item_id}", response_model=CatalogItem)
@limiter.limit("60/minute")
async def stage_item_edit(
    request: Request,
    item_id: uuid.UUID,
    data: CatalogItemUpdate,
    svc: MenuDraftService = Depends(get_draft_service),
) -> CatalogItem:
    return await svc.stage_edit(item_id, data)


@draft_router.post("/items/{item_id}/toggle-stock", response_model=CatalogItem)
@limiter.limit("60/minute")
async def toggle_item_stock(
    request: Request,
    item_id: uuid.UUID,
    svc: MenuDraftService = Depends(get_draft_service),
) -> CatalogItem:
    return await svc.toggle_stock(item_id)


@draft_router.post("/items/{item_id}/delete", response_model=CatalogItem)
@limiter.limit("30/minute")
async def mark_item_for_deletion(
    request: Request,
    item_id: uuid.UUID,
    svc: MenuDraftService = Depends(get_draft_service),
) -> CatalogItem:
    return await svc.mark_for_deletion(item_id)


@draft_router.delete("/items/{item_id}/delete", status_code=204)
@limiter.limit("30/minute")
async def cancel_item_deletion(
    request: Request,
    item_id: uuid.UUID,
    svc: MenuDraftService = Depends(get_draft_service),
) -> None:
    await svc.cancel_deletion(item_id)


@draft_router.post("/publish", response_model=PublishResult)
@limiter.limit("10/minute")
async def publish_draft(
    request: Request,
    svc: MenuDraftService = Depends(get_draft_service),
) -> PublishResult:
    return await svc.publish()


# ====================================================================
# Menu Router
# ====================================================================

menu_router = APIRouter(prefix="/menu", tags=["menu"])


@menu_router.get("/live", response_model=MenuResponse)
@limiter.limit("60/minute")
async def list_live_menu(
    request: Request,
    svc: MenuDraftService = Depends(get_draft_service),
) -> MenuResponse:
    items = await svc.list_live()
    return MenuResponse(items=items, total=len(items))


@menu_router.get("/me", response_model=MenuResponse)
@limiter.limit("60/minute")
async def get_my_menu(
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
    store: CatalogRecordStore = Depends(get_catalog_store),
    cache: MenuCache = Depends(get_menu_cache),
) -> MenuResponse:
    items = await get_user_menu(store, user.id, cache)
    return MenuResponse(items=items, total=len(items))
