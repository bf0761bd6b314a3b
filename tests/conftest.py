import copy
import os
import sys

import httpx
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from srcmarket.app.config import Config
from srcmarket.app.factory import create_app


def _user(uid, name, verified=False):
    return {"id": uid, "username": name.lower().replace(" ", "_"), "name": name, "is_verified": verified}


LISTINGS = [
    {"id": 1, "username": "neo", "price": 500, "seller_id": 100, "seller": _user(100, "Morpheus", True),
     "buyer_id": None, "buyer": None, "status": "active", "created_at": "2024-01-01T00:00:00Z",
     "updated_at": "2024-01-01T00:00:00Z", "sold_at": None, "purchase_url": "https://pay.test/username/1"},
    {"id": 2, "username": "ab", "price": 100, "seller_id": 101, "seller": _user(101, "Trinity"),
     "buyer_id": None, "buyer": None, "status": "active", "created_at": "2024-06-01T12:00:00Z",
     "updated_at": "2024-06-01T12:00:00Z", "sold_at": None},
    {"id": 3, "username": "oracle", "price": 300, "seller_id": 102, "seller": _user(102, "Smith"),
     "buyer_id": None, "buyer": None, "status": "active", "created_at": "2024-03-15T10:30:00Z",
     "updated_at": "2024-03-15T10:30:00Z", "sold_at": None},
]

BADGES = [
    {"id": 10, "name": "Gold Star", "description": "Shiny", "image_path": "gold.png", "price": 1000,
     "creator_id": 200, "creator": _user(200, "Alice"), "copies_sold": 5, "max_copies": 10,
     "is_sold_out": False, "purchases": [{"buyer_id": 1, "buyer": _user(1, "Bob"), "purchase_date": "2024-02-02T08:00:00Z"}],
     "purchase_url": "https://pay.test/badge/10"},
    {"id": 11, "name": "Infinite", "description": "No cap", "image_path": "", "price": 50,
     "creator_id": 201, "creator": _user(201, "Carol"), "copies_sold": 999, "max_copies": 0,
     "is_sold_out": True, "purchases": [], "purchase_url": "https://pay.test/badge/11"},
    {"id": 12, "name": "Rare Gem", "description": "Only three", "image_path": "gem.png", "price": 2000,
     "creator_id": 200, "creator": _user(200, "Alice"), "copies_sold": 3, "max_copies": 3,
     "is_sold_out": True, "purchases": [], "purchase_url": "https://pay.test/badge/12"},
]

HISTORY_NEO = {
    "success": True,
    "data": {
        "username": "neo",
        "current_owner": {"id": 100, "username": "morpheus", "name": "Morpheus"},
        "ownership_history": [
            {"timestamp": "2023-05-01T09:15:00Z", "price": 0, "buyer_id": 300, "buyer_username": "architect",
             "seller_id": None, "seller_username": ""},
            {"timestamp": "2023-11-20T18:45:00Z", "price": 250, "buyer_id": 100, "buyer_username": "morpheus",
             "seller_id": 300, "seller_username": "architect"},
        ],
        "users": {"100": _user(100, "Morpheus", True)},
    },
}


class FakeBackend:
    """Stands in for the remote marketplace API behind an httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.routes = {
            "/api/username/marketplace": (200, {"success": True, "listings": copy.deepcopy(LISTINGS)}),
            "/api/badges": (200, {"success": True, "badges": copy.deepcopy(BADGES)}),
            "/api/badges/trending": (200, {"success": True, "badges": copy.deepcopy(BADGES[:1])}),
            "/api/username/history/neo": (200, copy.deepcopy(HISTORY_NEO)),
        }

    def fail(self, path, status):
        self.routes[path] = (status, {"detail": "unavailable"})

    def disconnect(self, path):
        self.routes[path] = httpx.ConnectError

    def redirect(self, path, target, status=301):
        self.routes[path] = (status, {"Location": target})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"success": False, "error": "not found"})
        if route is httpx.ConnectError:
            raise httpx.ConnectError("connection refused", request=request)
        status, body = route
        if 300 <= status < 400:
            return httpx.Response(status, headers=body)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


def forward_to(app):
    """Route the page loader's HTTP calls back into the app's own /api routes."""

    def handler(request: httpx.Request) -> httpx.Response:
        resp = app.test_client().get(request.url.raw_path.decode("ascii"))
        return httpx.Response(
            resp.status_code,
            content=resp.get_data(),
            headers={"Content-Type": resp.content_type},
        )

    return handler


@pytest.fixture()
def backend():
    return FakeBackend()


@pytest.fixture()
def app(backend):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        UPSTREAM_BASE_URL = "https://backend.test"
        IMAGE_BASE_URL = "https://backend.test"
        STOREFRONT_API_BASE = ""
        UPSTREAM_TRANSPORT = httpx.MockTransport(backend)

    app = create_app(TestConfig)
    app.config["STOREFRONT_TRANSPORT"] = httpx.MockTransport(forward_to(app))
    return app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client
