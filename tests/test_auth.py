"""Tests for bearer token verification on menu endpoints."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from menuhub.app import create_app
from menuhub.config import settings
from menuhub.modules.menu.dependencies import get_catalog_store
from menuhub.modules.menu.registry import EditingSessionRegistry, get_registry

from conftest import InMemoryCatalogStore


def _token(role: str = "admin", **claims) -> str:
    payload = {
        "sub": str(uuid.uuid4()),
        "email": "someone@menuhub.test",
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
    }
    payload.update(claims)
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@pytest.fixture
def client():
    app = create_app()
    store = InMemoryCatalogStore()
    registry = EditingSessionRegistry()
    app.dependency_overrides[get_catalog_store] = lambda: store
    app.dependency_overrides[get_registry] = lambda: registry
    return TestClient(app)


def _get_draft(client, token=None):
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return client.get("/api/v1/menu/draft", headers=headers)


class TestBearerAuth:
    def test_missing_token(self, client):
        resp = _get_draft(client)

        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "UNAUTHORIZED"

    def test_bad_signature(self, client):
        token = jwt.encode({"sub": str(uuid.uuid4()), "email": "x@y.z"}, "not-the-key", algorithm="HS256")

        assert _get_draft(client, token).status_code == 401

    def test_expired_token(self, client):
        token = _token(exp=datetime.now(timezone.utc) - timedelta(minutes=1))

        assert _get_draft(client, token).status_code == 401

    def test_missing_claims(self, client):
        token = jwt.encode({"sub": "not-a-uuid"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

        resp = _get_draft(client, token)

        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Token is missing required claims"

    def test_customer_is_forbidden(self, client):
        assert _get_draft(client, _token(role="customer")).status_code == 403

    def test_admin_is_allowed(self, client):
        resp = _get_draft(client, _token())

        assert resp.status_code == 200
        assert resp.json() == {"items": [], "total": 0}
