from __future__ import annotations

from flask import Blueprint

from srcmarket.app.extensions import upstream
from srcmarket.app.common.errors import error_envelope
from srcmarket.app.common.json import no_store

bp = Blueprint("badges", __name__)


def _relay(path: str, failure_message: str):
    result = upstream.get_json(path)
    if result.ok:
        return no_store(result.body)
    if result.status_code is not None:
        return no_store(error_envelope(result.error_message, "badges"), result.status_code)
    return no_store(error_envelope(failure_message, "badges"), 500)


@bp.get("/badges")
def list_badges():
    """GET /api/badges - All badges in the shop."""
    return _relay("/api/badges", "Failed to fetch badges")


@bp.get("/badges/trending")
def list_trending_badges():
    """GET /api/badges/trending - Backend-curated trending subset."""
    return _relay("/api/badges/trending", "Failed to fetch trending badges")
