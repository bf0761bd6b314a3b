from __future__ import annotations

from urllib.parse import quote

from flask import Blueprint

from srcmarket.app.extensions import upstream
from srcmarket.app.common.errors import error_envelope
from srcmarket.app.common.json import no_store

bp = Blueprint("history", __name__)


@bp.get("/history/<username>")
def ownership_history(username: str):
    """GET /api/history/<username> - Past transfers of a username."""
    result = upstream.get_json(f"/api/username/history/{quote(username, safe='')}")
    if result.ok:
        return no_store(result.body)

    if result.status_code is not None:
        return no_store(error_envelope(result.error_message, "ownership_history"), result.status_code)
    return no_store(error_envelope("Failed to fetch history", "ownership_history"), 500)
