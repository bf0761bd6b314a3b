from __future__ import annotations

from typing import Any, Dict, Iterable
from flask import request

from srcmarket.app.common.errors import abort_json


def get_payload() -> Dict[str, Any]:
    """Read a JSON body or, failing that, submitted form fields."""
    if request.is_json:
        data = request.get_json(silent=True)
        if data is None or not isinstance(data, dict):
            abort_json(400, "invalid_json", "Malformed JSON body")
        return data
    return request.form.to_dict()


def require_fields(data: Dict[str, Any], fields: Iterable[str]) -> None:
    missing = [f for f in fields if data.get(f) in (None, "")]
    if missing:
        abort_json(400, "validation_error", "Missing required fields", {"missing": missing})


def as_int(data: Dict[str, Any], field: str) -> int:
    try:
        return int(data[field])
    except (KeyError, TypeError, ValueError):
        abort_json(400, "validation_error", f"{field} must be an integer", {"field": field})


def safe_next(target: str | None, default: str = "/") -> str:
    # Only local paths; no scheme-relative or absolute redirects.
    if not target or not target.startswith("/") or target.startswith("//"):
        return default
    return target
