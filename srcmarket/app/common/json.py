from __future__ import annotations

from flask import jsonify

NO_STORE = "no-store"


def no_store(data, status=200):
    """JSON response that clients and intermediaries must not cache."""
    resp = jsonify(data)
    resp.status_code = status
    resp.headers["Cache-Control"] = NO_STORE
    return resp
