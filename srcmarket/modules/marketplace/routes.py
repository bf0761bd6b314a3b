from __future__ import annotations

from flask import Blueprint, request

from srcmarket.app.extensions import upstream
from srcmarket.app.common.errors import error_envelope
from srcmarket.app.common.json import no_store

bp = Blueprint("marketplace", __name__)


@bp.get("/marketplace")
def list_marketplace():
    """GET /api/marketplace - Username listings, relayed from the backend.

    Query params:
      - status: listing status filter (default: active)
    """
    status = (request.args.get("status") or "").strip() or "active"

    result = upstream.get_json("/api/username/marketplace", params={"status": status})
    if result.ok:
        return no_store(result.body)

    if result.status_code is not None:
        return no_store(error_envelope(result.error_message, "listings"), result.status_code)
    return no_store(error_envelope("Failed to fetch marketplace", "listings"), 500)
