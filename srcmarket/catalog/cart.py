from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from srcmarket.catalog.models import BadgeCartItem, CartItem, CartKind, UsernameCartItem


def item_to_dict(item: CartItem) -> Dict[str, Any]:
    if isinstance(item, UsernameCartItem):
        return {"type": CartKind.USERNAME.value, "id": item.id, "name": item.name,
                "price": item.price, "purchase_url": item.purchase_url}
    if isinstance(item, BadgeCartItem):
        return {"type": CartKind.BADGE.value, "id": item.id, "name": item.name,
                "price": item.price, "image": item.image, "purchase_url": item.purchase_url}
    raise TypeError(f"unknown cart item: {item!r}")


def item_from_dict(row: Dict[str, Any]) -> CartItem:
    """Build a cart entry from a session row or submitted form. Raises ValueError on bad input."""
    kind = CartKind(row.get("type") or row.get("kind"))
    item_id = int(row["id"])
    name = str(row.get("name") or "")
    price = int(row.get("price") or 0)
    purchase_url = row.get("purchase_url") or None
    if kind is CartKind.USERNAME:
        return UsernameCartItem(id=item_id, name=name, price=price, purchase_url=purchase_url)
    if kind is CartKind.BADGE:
        return BadgeCartItem(id=item_id, name=name, price=price,
                             image=row.get("image") or None, purchase_url=purchase_url)
    raise ValueError(f"unknown cart kind: {kind}")


def display_label(item: CartItem) -> str:
    if item.kind is CartKind.USERNAME:
        return f"@{item.name}"
    if item.kind is CartKind.BADGE:
        return item.name
    raise ValueError(f"unknown cart kind: {item.kind}")


def thumbnail(item: CartItem, image_base: str) -> Optional[str]:
    """Image URL for the cart row, or None when the row shows the "@" tile."""
    if isinstance(item, BadgeCartItem) and item.image:
        return f"{image_base}/static/uploads/badges/{item.image}"
    return None


class Cart:
    """Ordered selection of items pending external purchase. One entry per (kind, id)."""

    def __init__(self, items: Optional[List[CartItem]] = None):
        self._items: List[CartItem] = []
        for item in items or []:
            self.add(item)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    def contains(self, item_id: int, kind: CartKind) -> bool:
        return any(c.id == item_id and c.kind is kind for c in self._items)

    def add(self, item: CartItem) -> bool:
        """Append unless already present. Returns True if the cart changed."""
        if self.contains(item.id, item.kind):
            return False
        self._items.append(item)
        return True

    def remove(self, item_id: int, kind: CartKind) -> bool:
        before = len(self._items)
        self._items = [c for c in self._items if not (c.id == item_id and c.kind is kind)]
        return len(self._items) != before

    @property
    def total(self) -> int:
        return sum(c.price for c in self._items)

    # session (de)serialisation
    def to_session(self) -> List[Dict[str, Any]]:
        return [item_to_dict(c) for c in self._items]

    @classmethod
    def from_session(cls, rows: Any) -> "Cart":
        items: List[CartItem] = []
        for row in rows if isinstance(rows, list) else []:
            if not isinstance(row, dict):
                continue
            try:
                items.append(item_from_dict(row))
            except (KeyError, TypeError, ValueError):
                # tampered or outdated cookie entry
                continue
        return cls(items)
