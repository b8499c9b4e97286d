"""Centralized v1 API router — all module routers are included here."""

from fastapi import APIRouter

from menuhub.modules.menu.router import draft_router, menu_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(draft_router)
v1_router.include_router(menu_router)
