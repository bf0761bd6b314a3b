"""Server-rendered market page."""

from __future__ import annotations

import asyncio
from urllib.parse import urlencode

from flask import Blueprint, current_app, render_template, request

from srcmarket.app.config import storefront_base
from srcmarket.catalog.cart import display_label, thumbnail
from srcmarket.catalog.formatting import format_date, format_date_full, format_price
from srcmarket.catalog.loader import CatalogLoader
from srcmarket.catalog.models import CartKind
from srcmarket.catalog.selectors import SORT_LABELS, SortKey
from srcmarket.catalog.state import CatalogState, Tab
from srcmarket.modules.cart.routes import get_session_cart

ui_bp = Blueprint("ui", __name__)

VIEW_ARGS = ("tab", "q", "sort", "listing", "badge", "cart")


def _int_arg(name: str) -> int | None:
    try:
        return int(request.args[name])
    except (KeyError, ValueError):
        return None


def build_loader() -> CatalogLoader:
    base = storefront_base(current_app.config)
    return CatalogLoader(
        base,
        timeout_seconds=current_app.config.get("UPSTREAM_TIMEOUT", 10.0),
        transport=current_app.config.get("STOREFRONT_TRANSPORT"),
    )


@ui_bp.app_template_global()
def page_url(**overrides) -> str:
    """Current page URL with some view args replaced (None drops one)."""
    args = {k: request.args[k] for k in VIEW_ARGS if request.args.get(k)}
    for key, value in overrides.items():
        if value is None:
            args.pop(key, None)
        else:
            args[key] = value
    return "/?" + urlencode(args) if args else "/"


@ui_bp.app_template_global()
def request_path() -> str:
    return request.full_path.rstrip("?")


@ui_bp.get("/")
def market():
    state = CatalogState(
        tab=Tab.parse(request.args.get("tab")),
        search=(request.args.get("q") or "").strip(),
        sort=SortKey.parse(request.args.get("sort")),
        cart=get_session_cart(),
        cart_open=request.args.get("cart") == "open",
    )
    asyncio.run(build_loader().open(state, listing_id=_int_arg("listing"), badge_id=_int_arg("badge")))

    return render_template(
        "market.html",
        state=state,
        items=state.visible(),
        stats=state.stats,
        sort_labels=SORT_LABELS,
        image_base=current_app.config["IMAGE_BASE_URL"],
    )


def register_template_helpers(app) -> None:
    app.jinja_env.filters["price"] = format_price
    app.jinja_env.filters["date"] = format_date
    app.jinja_env.filters["date_full"] = format_date_full
    app.jinja_env.globals["cart_label"] = display_label
    app.jinja_env.globals["cart_thumbnail"] = thumbnail
    app.jinja_env.globals["CartKind"] = CartKind
