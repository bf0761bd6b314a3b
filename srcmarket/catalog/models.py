from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

# ---------------------------------------------
# Helpers
# ---------------------------------------------

def _as_int(x, default=0) -> int:
    try:
        return int(x)
    except (TypeError, ValueError):
        return default

def _opt_int(x) -> Optional[int]:
    return _as_int(x, None) if x is not None else None

def _as_str(x, default="") -> str:
    return x if isinstance(x, str) else default

def _opt_str(x) -> Optional[str]:
    return x if isinstance(x, str) and x else None

def _as_dict(x) -> dict:
    return x if isinstance(x, dict) else {}

def _as_list(x) -> list:
    return x if isinstance(x, list) else []


# ---------------------------------------------
# Backend records (read-only)
# ---------------------------------------------

@dataclass
class UserRef:
    id: int
    username: str
    name: str
    photo: Optional[str] = None
    avatar_url: Optional[str] = None
    is_verified: bool = False

    @classmethod
    def from_dict(cls, row: Any) -> "UserRef":
        row = _as_dict(row)
        return cls(
            id=_as_int(row.get("id")),
            username=_as_str(row.get("username")),
            name=_as_str(row.get("name")),
            photo=_opt_str(row.get("photo")),
            avatar_url=_opt_str(row.get("avatar_url")),
            is_verified=bool(row.get("is_verified")),
        )

    @property
    def avatar(self) -> Optional[str]:
        return self.photo or self.avatar_url

    def initial(self, fallback: str = "U") -> str:
        return self.name[:1] or fallback


@dataclass
class Listing:
    id: int
    username: str
    price: int
    seller_id: int
    seller: UserRef
    status: str
    created_at: str
    updated_at: str = ""
    buyer_id: Optional[int] = None
    buyer: Optional[UserRef] = None
    sold_at: Optional[str] = None
    purchase_url: Optional[str] = None

    @classmethod
    def from_dict(cls, row: Any) -> "Listing":
        row = _as_dict(row)
        buyer = row.get("buyer")
        return cls(
            id=_as_int(row.get("id")),
            username=_as_str(row.get("username")),
            price=_as_int(row.get("price")),
            seller_id=_as_int(row.get("seller_id")),
            seller=UserRef.from_dict(row.get("seller")),
            status=_as_str(row.get("status")),
            created_at=_as_str(row.get("created_at")),
            updated_at=_as_str(row.get("updated_at")),
            buyer_id=_opt_int(row.get("buyer_id")),
            buyer=UserRef.from_dict(buyer) if isinstance(buyer, dict) else None,
            sold_at=_opt_str(row.get("sold_at")),
            purchase_url=_opt_str(row.get("purchase_url")),
        )

    @property
    def is_active(self) -> bool:
        return self.status == "active"


@dataclass
class BadgePurchase:
    buyer_id: int
    buyer: UserRef
    purchase_date: str

    @classmethod
    def from_dict(cls, row: Any) -> "BadgePurchase":
        row = _as_dict(row)
        return cls(
            buyer_id=_as_int(row.get("buyer_id")),
            buyer=UserRef.from_dict(row.get("buyer")),
            purchase_date=_as_str(row.get("purchase_date")),
        )


@dataclass
class Badge:
    id: int
    name: str
    description: str
    image_path: str
    price: int
    creator_id: int
    creator: UserRef
    copies_sold: int = 0
    max_copies: int = 0              # 0 = unlimited supply
    is_sold_out: bool = False
    upgrade: Optional[str] = None
    color_upgrade: Optional[str] = None
    purchases: List[BadgePurchase] = field(default_factory=list)
    purchase_url: Optional[str] = None

    @classmethod
    def from_dict(cls, row: Any) -> "Badge":
        row = _as_dict(row)
        return cls(
            id=_as_int(row.get("id")),
            name=_as_str(row.get("name")),
            description=_as_str(row.get("description")),
            image_path=_as_str(row.get("image_path")),
            price=_as_int(row.get("price")),
            creator_id=_as_int(row.get("creator_id")),
            creator=UserRef.from_dict(row.get("creator")),
            copies_sold=_as_int(row.get("copies_sold")),
            max_copies=_as_int(row.get("max_copies")),
            is_sold_out=bool(row.get("is_sold_out")),
            upgrade=_opt_str(row.get("upgrade")),
            color_upgrade=_opt_str(row.get("color_upgrade")),
            purchases=[BadgePurchase.from_dict(p) for p in _as_list(row.get("purchases"))],
            purchase_url=_opt_str(row.get("purchase_url")),
        )

    @property
    def is_limited(self) -> bool:
        return self.max_copies > 0

    @property
    def progress(self) -> Optional[float]:
        """Percent of the supply sold; None for unlimited badges."""
        if not self.is_limited:
            return None
        return self.copies_sold / self.max_copies * 100

    @property
    def remaining(self) -> Optional[int]:
        if not self.is_limited:
            return None
        return max(self.max_copies - self.copies_sold, 0)

    @property
    def sold_out(self) -> bool:
        # Unlimited badges can't sell out, whatever the backend flag says.
        if not self.is_limited:
            return False
        return self.is_sold_out or self.copies_sold >= self.max_copies

    def image_url(self, image_base: str) -> Optional[str]:
        if not self.image_path:
            return None
        return f"{image_base}/static/uploads/badges/{self.image_path}"


@dataclass
class OwnershipRecord:
    timestamp: str
    price: int
    buyer_id: int
    buyer_username: str
    seller_id: Optional[int] = None      # None for the initial mint
    seller_username: str = ""

    @classmethod
    def from_dict(cls, row: Any) -> "OwnershipRecord":
        row = _as_dict(row)
        return cls(
            timestamp=_as_str(row.get("timestamp")),
            price=_as_int(row.get("price")),
            buyer_id=_as_int(row.get("buyer_id")),
            buyer_username=_as_str(row.get("buyer_username")),
            seller_id=_opt_int(row.get("seller_id")),
            seller_username=_as_str(row.get("seller_username")),
        )


@dataclass
class OwnershipHistory:
    username: str
    current_owner: UserRef
    records: List[OwnershipRecord] = field(default_factory=list)
    users: Dict[str, UserRef] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, row: Any) -> "OwnershipHistory":
        row = _as_dict(row)
        return cls(
            username=_as_str(row.get("username")),
            current_owner=UserRef.from_dict(row.get("current_owner")),
            records=[OwnershipRecord.from_dict(r) for r in _as_list(row.get("ownership_history"))],
            users={str(k): UserRef.from_dict(v) for k, v in _as_dict(row.get("users")).items()},
        )

    def buyer_of(self, record: OwnershipRecord) -> Optional[UserRef]:
        return self.users.get(str(record.buyer_id))


# ---------------------------------------------
# Cart entries (local only)
# ---------------------------------------------

class CartKind(str, Enum):
    USERNAME = "username"
    BADGE = "badge"


@dataclass(frozen=True)
class UsernameCartItem:
    id: int
    name: str
    price: int
    purchase_url: Optional[str] = None
    kind: CartKind = field(default=CartKind.USERNAME, init=False)

    @classmethod
    def from_listing(cls, listing: Listing) -> "UsernameCartItem":
        return cls(id=listing.id, name=listing.username, price=listing.price, purchase_url=listing.purchase_url)


@dataclass(frozen=True)
class BadgeCartItem:
    id: int
    name: str
    price: int
    image: Optional[str] = None
    purchase_url: Optional[str] = None
    kind: CartKind = field(default=CartKind.BADGE, init=False)

    @classmethod
    def from_badge(cls, badge: Badge) -> "BadgeCartItem":
        return cls(
            id=badge.id,
            name=badge.name,
            price=badge.price,
            image=badge.image_path or None,
            purchase_url=badge.purchase_url,
        )


CartItem = Union[UsernameCartItem, BadgeCartItem]
