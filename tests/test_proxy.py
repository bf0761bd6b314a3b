# run with: pytest tests/test_proxy.py -v

import atexit

import httpx
from flask import Flask

from srcmarket.app.upstream import Upstream


# PROXY-001: listings relayed verbatim
def test_marketplace_relays_backend_body(client, backend):
    r = client.get("/api/marketplace?status=active")

    assert r.status_code == 200
    assert r.json["success"] is True
    assert [l["id"] for l in r.json["listings"]] == [1, 2, 3]
    assert backend.requests[-1].url.params["status"] == "active"


# PROXY-002: status defaults to active and other values pass through
def test_marketplace_status_param(client, backend):
    client.get("/api/marketplace")
    assert backend.requests[-1].url.params["status"] == "active"

    client.get("/api/marketplace?status=sold")
    assert backend.requests[-1].url.params["status"] == "sold"


# PROXY-003: remote 503 is passed through as an error envelope
def test_marketplace_remote_503(client, backend):
    backend.fail("/api/username/marketplace", 503)

    r = client.get("/api/marketplace")

    assert r.status_code == 503
    assert r.json == {"success": False, "error": "API returned 503", "listings": []}


# PROXY-004: network failure becomes a 500 envelope
def test_marketplace_network_failure(client, backend):
    backend.disconnect("/api/username/marketplace")

    r = client.get("/api/marketplace")

    assert r.status_code == 500
    assert r.json["success"] is False
    assert r.json["error"] == "Failed to fetch marketplace"
    assert r.json["listings"] == []


# PROXY-005: nothing proxied may be cached
def test_responses_are_not_cacheable(client, backend):
    assert client.get("/api/badges").headers["Cache-Control"] == "no-store"
    backend.fail("/api/badges", 502)
    assert client.get("/api/badges").headers["Cache-Control"] == "no-store"


def test_outbound_requests_bypass_cache(client, backend):
    client.get("/api/badges/trending")
    sent = backend.requests[-1]
    assert sent.headers["Cache-Control"] == "no-cache"
    assert sent.headers["Accept"] == "application/json"


def test_badges_and_trending(client, backend):
    all_badges = client.get("/api/badges")
    trending = client.get("/api/badges/trending")

    assert [b["id"] for b in all_badges.json["badges"]] == [10, 11, 12]
    assert [b["id"] for b in trending.json["badges"]] == [10]
    assert [req.url.path for req in backend.requests] == ["/api/badges", "/api/badges/trending"]


# PROXY-006: a backend redirect is followed and the final body relayed
def test_badges_follow_backend_redirect(client, backend):
    backend.routes["/api/v2/badges"] = backend.routes["/api/badges"]
    backend.redirect("/api/badges", "/api/v2/badges")

    r = client.get("/api/badges")

    assert r.status_code == 200
    assert [b["id"] for b in r.json["badges"]] == [10, 11, 12]
    assert [req.url.path for req in backend.requests] == ["/api/badges", "/api/v2/badges"]


def test_trending_network_failure(client, backend):
    backend.disconnect("/api/badges/trending")

    r = client.get("/api/badges/trending")

    assert r.status_code == 500
    assert r.json == {"success": False, "error": "Failed to fetch trending badges", "badges": []}


def test_badges_unparseable_body(client, backend):
    backend.routes["/api/badges"] = (200, "<html>maintenance</html>")

    r = client.get("/api/badges")

    assert r.status_code == 500
    assert r.json["badges"] == []


def test_history_relay(client):
    r = client.get("/api/history/neo")

    assert r.status_code == 200
    assert r.json["data"]["username"] == "neo"


def test_history_quotes_username(client, backend):
    client.get("/api/history/a%20b")
    assert backend.requests[-1].url.raw_path == b"/api/username/history/a%20b"


def test_history_remote_404(client):
    r = client.get("/api/history/ghost")

    assert r.status_code == 404
    assert r.json == {"success": False, "error": "API returned 404", "ownership_history": []}


# PROXY-007: one exit hook per Upstream, closing the client of every app
def test_upstream_closes_all_app_clients_with_one_hook(monkeypatch, backend):
    hooks = []
    monkeypatch.setattr(atexit, "register", hooks.append)

    upstream = Upstream()
    apps = []
    for _ in range(3):
        app = Flask(__name__)
        app.config.update(UPSTREAM_BASE_URL="https://backend.test", UPSTREAM_TRANSPORT=httpx.MockTransport(backend))
        upstream.init_app(app)
        apps.append(app)

    assert hooks == [upstream.close]

    upstream.close()

    assert all(app.extensions["upstream"].is_closed for app in apps)
