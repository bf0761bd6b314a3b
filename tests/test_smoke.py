def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["status"] == "ok"


def test_api_index(client):
    r = client.get("/api")
    assert r.status_code == 200
    assert "endpoints" in r.json
    assert "/badges/trending" in r.json["endpoints"]["badges"]


def test_request_id_is_echoed(client):
    r = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"


def test_unknown_api_route_is_json(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.json["error"]["code"] == "http_error"
