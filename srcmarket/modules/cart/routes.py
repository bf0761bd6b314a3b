from __future__ import annotations

from flask import Blueprint, redirect, request, session

from srcmarket.app.common.errors import abort_json
from srcmarket.app.common.validation import as_int, get_payload, require_fields, safe_next
from srcmarket.catalog.cart import Cart, display_label, item_from_dict, item_to_dict
from srcmarket.catalog.models import CartKind

bp = Blueprint("cart", __name__)


# the cart lives in the (non-permanent) session cookie only
def get_session_cart() -> Cart:
    return Cart.from_session(session.get("cart", []))


def set_session_cart(cart: Cart) -> None:
    session["cart"] = cart.to_session()


def _parse_kind(raw) -> CartKind:
    try:
        return CartKind(raw)
    except ValueError:
        abort_json(400, "validation_error", "kind must be 'username' or 'badge'", {"kind": raw})


def _cart_response(cart: Cart):
    return {
        "items": [dict(item_to_dict(i), label=display_label(i)) for i in cart],
        "count": len(cart),
        "total": cart.total,
    }


def _done(cart: Cart, data: dict, status: int = 200):
    # browser form posts go back to the page they came from
    if not request.is_json:
        return redirect(safe_next(data.get("next")))
    return _cart_response(cart), status


@bp.get("/cart")
def get_cart():
    return _cart_response(get_session_cart()), 200


@bp.post("/cart/add")
def add_to_cart():
    data = get_payload()
    require_fields(data, ["kind", "id", "name", "price"])
    kind = _parse_kind(data["kind"])
    row = dict(data, type=kind.value, id=as_int(data, "id"), price=as_int(data, "price"))

    cart = get_session_cart()
    changed = cart.add(item_from_dict(row))
    if changed:
        set_session_cart(cart)
    return _done(cart, data, 201 if changed else 200)


@bp.post("/cart/remove")
def remove_from_cart():
    data = get_payload()
    require_fields(data, ["kind", "id"])
    kind = _parse_kind(data["kind"])

    cart = get_session_cart()
    if cart.remove(as_int(data, "id"), kind):
        set_session_cart(cart)
    return _done(cart, data)
