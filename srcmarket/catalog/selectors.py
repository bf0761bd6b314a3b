"""Pure projections over the catalog state. Inputs are never mutated."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from srcmarket.catalog.formatting import parse_timestamp
from srcmarket.catalog.models import Badge, Listing


class SortKey(str, Enum):
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NEWEST = "newest"
    POPULAR = "popular"

    @classmethod
    def parse(cls, raw: str | None, default: "SortKey | None" = None) -> "SortKey":
        try:
            return cls(raw)
        except ValueError:
            return default or cls.NEWEST


SORT_LABELS = {
    SortKey.NEWEST: "Сначала новые",
    SortKey.PRICE_ASC: "Сначала дешевые",
    SortKey.PRICE_DESC: "Сначала дорогие",
    SortKey.POPULAR: "Популярные",
}


@dataclass(frozen=True)
class MarketStats:
    username_count: int
    badge_count: int
    total_value: int
    trending_count: int


def _matches(needle: str, *fields: str) -> bool:
    return any(needle in (f or "").lower() for f in fields)


def _created_key(listing: Listing) -> float:
    ts = parse_timestamp(listing.created_at)
    # unparseable timestamps go last under newest-first
    return ts.timestamp() if ts else float("-inf")


def filter_listings(listings: Sequence[Listing], search: str, sort: SortKey) -> List[Listing]:
    needle = (search or "").lower()
    filtered = [l for l in listings if _matches(needle, l.username, l.seller.name)]

    if sort is SortKey.PRICE_ASC:
        filtered.sort(key=lambda l: l.price)
    elif sort is SortKey.PRICE_DESC:
        filtered.sort(key=lambda l: l.price, reverse=True)
    elif sort is SortKey.NEWEST:
        filtered.sort(key=_created_key, reverse=True)
    elif sort is SortKey.POPULAR:
        # short usernames are the sought-after ones
        filtered.sort(key=lambda l: len(l.username))
    return filtered


def filter_badges(badges: Sequence[Badge], search: str, sort: SortKey) -> List[Badge]:
    needle = (search or "").lower()
    filtered = [b for b in badges if _matches(needle, b.name, b.creator.name)]

    if sort is SortKey.PRICE_ASC:
        filtered.sort(key=lambda b: b.price)
    elif sort is SortKey.PRICE_DESC:
        filtered.sort(key=lambda b: b.price, reverse=True)
    elif sort is SortKey.POPULAR:
        filtered.sort(key=lambda b: b.copies_sold, reverse=True)
    # NEWEST: badges carry no creation time, keep fetch order
    return filtered


def compute_stats(listings: Sequence[Listing], badges: Sequence[Badge], trending: Sequence[Badge]) -> MarketStats:
    username_value = sum(l.price for l in listings)
    badge_value = sum(b.price for b in badges)
    return MarketStats(
        username_count=len(listings),
        badge_count=len(badges),
        total_value=username_value + badge_value,
        trending_count=len(trending),
    )
