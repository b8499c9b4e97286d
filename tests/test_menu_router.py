"""Unit tests for menu router endpoints."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from menuhub.app import create_app
from menuhub.models.enums import CatalogPartition, UserRole
from menuhub.modules.auth.auth import AuthenticatedUser, get_current_user
from menuhub.modules.menu.cache import MenuCache
from menuhub.modules.menu.dependencies import get_catalog_store, get_menu_cache
from menuhub.modules.menu.registry import EditingSessionRegistry, get_registry
from menuhub.rate_limit import limiter

from conftest import InMemoryCatalogStore, item_attributes

# ── Test app setup ────────────────────────────────────────────────────────

_admin = AuthenticatedUser(id=uuid.uuid4(), email="admin@menuhub.test", role=UserRole.ADMIN)
_customer = AuthenticatedUser(id=uuid.uuid4(), email="guest@menuhub.test", role=UserRole.CUSTOMER)


def _payload(name: str = "Negroni", **overrides) -> dict:
    data = {**item_attributes(name, **overrides)}
    data["abv"] = str(data["abv"])
    data["price"] = str(data["price"])
    data["category"] = data["category"].value
    data["assignment_type"] = data["assignment_type"].value
    return data


class _Harness:
    def __init__(self) -> None:
        self.store = InMemoryCatalogStore()
        self.registry = EditingSessionRegistry()
        self.cache = AsyncMock(spec=MenuCache)
        self.user = _admin

        async def _compute(user_id, factory):
            return await factory()

        self.cache.get_or_set.side_effect = _compute


@pytest.fixture
def harness():
    return _Harness()


@pytest.fixture
def client(harness):
    app = create_app()

    async def _override_get_current_user():
        return harness.user

    app.dependency_overrides[get_current_user] = _override_get_current_user
    app.dependency_overrides[get_catalog_store] = lambda: harness.store
    app.dependency_overrides[get_menu_cache] = lambda: harness.cache
    app.dependency_overrides[get_registry] = lambda: harness.registry

    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        limiter.enabled = True


# ── Draft editing ─────────────────────────────────────────────────────────


class TestDraftEndpoints:
    def test_stage_new_item_and_view_it(self, client):
        resp = client.post("/api/v1/menu/draft/items", json=_payload("Paloma"))
        assert resp.status_code == 201
        item_id = resp.json()["id"]

        view = client.get("/api/v1/menu/draft").json()
        assert view["total"] == 1
        assert view["items"][0]["id"] == item_id
        assert view["items"][0]["live_present"] is False

        status = client.get("/api/v1/menu/draft/status").json()
        assert status["has_unpublished_changes"] is True
        assert status["draft_only_count"] == 1

    def test_invalid_item_is_rejected(self, client, harness):
        resp = client.post("/api/v1/menu/draft/items", json=_payload("Paloma", price="-2"))

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
        assert harness.store.rows == {}

    def test_edit_of_unknown_item_returns_404(self, client):
        resp = client.patch(f"/api/v1/menu/draft/items/{uuid.uuid4()}", json={"price": "9.00"})

        assert resp.status_code == 404
        body = resp.json()["error"]
        assert body["code"] == "NOT_FOUND"
        assert body["requestId"]

    def test_toggle_stock_creates_a_draft_copy(self, client, harness):
        live = harness.store.seed(CatalogPartition.LIVE, "Mojito")

        resp = client.post(f"/api/v1/menu/draft/items/{live.id}/toggle-stock")

        assert resp.status_code == 200
        assert resp.json()["in_stock"] is False
        assert resp.json()["id"] != str(live.id)
        session = client.get("/api/v1/menu/draft/session").json()
        assert session["draft_to_live"] == {resp.json()["id"]: str(live.id)}

    def test_mark_and_cancel_deletion(self, client, harness):
        live = harness.store.seed(CatalogPartition.LIVE, "Mojito")

        marked = client.post(f"/api/v1/menu/draft/items/{live.id}/delete")
        assert marked.status_code == 200
        view = client.get("/api/v1/menu/draft").json()
        assert [item["pending_delete"] for item in view["items"]] == [True]

        cancelled = client.delete(f"/api/v1/menu/draft/items/{live.id}/delete")
        assert cancelled.status_code == 204
        view = client.get("/api/v1/menu/draft").json()
        assert [item["id"] for item in view["items"]] == [str(live.id)]

        again = client.delete(f"/api/v1/menu/draft/items/{live.id}/delete")
        assert again.status_code == 404

    def test_customer_cannot_edit_the_draft(self, client, harness):
        harness.user = _customer

        resp = client.get("/api/v1/menu/draft")

        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "FORBIDDEN"

    def test_request_id_is_echoed(self, client):
        resp = client.get("/api/v1/menu/draft", headers={"X-Request-ID": "req-123"})

        assert resp.headers["X-Request-ID"] == "req-123"


# ── Publish and session ───────────────────────────────────────────────────


class TestPublishEndpoints:
    def test_publish_promotes_drafts_and_clears_cache(self, client, harness):
        created = client.post("/api/v1/menu/draft/items", json=_payload("Paloma")).json()

        resp = client.post("/api/v1/menu/draft/publish")

        assert resp.status_code == 200
        body = resp.json()
        assert body["promoted"] == [created["id"]]
        assert body["failures"] == []
        assert "live" not in body
        harness.cache.invalidate_all.assert_awaited_once()

        live = client.get("/api/v1/menu/live").json()
        assert [item["name"] for item in live["items"]] == ["Paloma"]

    def test_publish_reports_failures(self, client, harness):
        live = harness.store.seed(CatalogPartition.LIVE, "Mojito")
        client.post(f"/api/v1/menu/draft/items/{live.id}/toggle-stock")
        harness.store.fail_deletes.add(live.id)

        body = client.post("/api/v1/menu/draft/publish").json()

        assert body["failures"] == [
            {"id": str(live.id), "reason": "STORE_UNAVAILABLE", "step": "supersede"}
        ]
        assert body["promoted"] == []

    def test_second_publish_is_rejected(self, client, harness):
        harness.registry.open(_admin.id).publishing = True

        resp = client.post("/api/v1/menu/draft/publish")

        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "PUBLISH_IN_PROGRESS"

    def test_close_session_with_edits_needs_confirmation(self, client, harness):
        live = harness.store.seed(CatalogPartition.LIVE, "Mojito")
        client.patch(f"/api/v1/menu/draft/items/{live.id}", json={"price": "14.00"})

        refused = client.delete("/api/v1/menu/draft/session")
        assert refused.status_code == 422
        assert refused.json()["error"]["code"] == "BUSINESS_RULE_VIOLATION"

        closed = client.delete("/api/v1/menu/draft/session", params={"discard_edits": "true"})
        assert closed.status_code == 204
        assert len(harness.registry) == 0
        assert [row.id for row in harness.store.rows.values()] == [live.id]


# ── Customer menu ─────────────────────────────────────────────────────────


class TestCustomerMenu:
    def test_customer_menu_goes_through_the_cache(self, client, harness):
        harness.user = _customer
        harness.store.seed(CatalogPartition.LIVE, "Lager")
        harness.store.seed(CatalogPartition.DRAFT, "Unpublished")

        resp = client.get("/api/v1/menu/me")

        assert resp.status_code == 200
        assert [item["name"] for item in resp.json()["items"]] == ["Lager"]
        harness.cache.get_or_set.assert_awaited_once()
        assert harness.cache.get_or_set.await_args.args[0] == _customer.id
