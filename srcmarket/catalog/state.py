from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union

from srcmarket.catalog.cart import Cart
from srcmarket.catalog.models import Badge, Listing, OwnershipHistory
from srcmarket.catalog.selectors import MarketStats, SortKey, compute_stats, filter_badges, filter_listings

logger = logging.getLogger(__name__)


class Tab(str, Enum):
    USERNAMES = "usernames"
    BADGES = "badges"

    @classmethod
    def parse(cls, raw: str | None) -> "Tab":
        try:
            return cls(raw)
        except ValueError:
            return cls.USERNAMES


@dataclass
class HistoryView:
    """Ownership-history sub-state of the listing detail view."""

    generation: int = 0
    loading: bool = False
    data: Optional[OwnershipHistory] = None


@dataclass
class CatalogState:
    # datasets
    listings: List[Listing] = field(default_factory=list)
    badges: List[Badge] = field(default_factory=list)
    trending: List[Badge] = field(default_factory=list)
    loading: bool = True

    # view state
    tab: Tab = Tab.USERNAMES
    search: str = ""
    sort: SortKey = SortKey.NEWEST
    selected_listing: Optional[Listing] = None
    selected_badge: Optional[Badge] = None
    history: HistoryView = field(default_factory=HistoryView)
    cart: Cart = field(default_factory=Cart)
    cart_open: bool = False

    # --- derived ---
    def visible_listings(self) -> List[Listing]:
        return filter_listings(self.listings, self.search, self.sort)

    def visible_badges(self) -> List[Badge]:
        return filter_badges(self.badges, self.search, self.sort)

    def visible(self) -> List[Union[Listing, Badge]]:
        if self.tab is Tab.BADGES:
            return list(self.visible_badges())
        return list(self.visible_listings())

    @property
    def stats(self) -> MarketStats:
        return compute_stats(self.listings, self.badges, self.trending)

    # --- detail view ---
    def select_listing(self, listing_id: int) -> Optional[Listing]:
        listing = next((l for l in self.listings if l.id == listing_id), None)
        self.deselect()
        if listing is None:
            return None
        self.selected_listing = listing
        self.history.loading = True
        return listing

    def select_badge(self, badge_id: int) -> Optional[Badge]:
        badge = next((b for b in self.badges if b.id == badge_id), None)
        if badge is None:
            badge = next((b for b in self.trending if b.id == badge_id), None)
        self.deselect()
        self.selected_badge = badge
        return badge

    def deselect(self) -> None:
        self.selected_listing = None
        self.selected_badge = None
        # any in-flight history response becomes stale
        self.history = HistoryView(generation=self.history.generation + 1)

    def apply_history(self, generation: int, body: Any) -> bool:
        """Apply a history response if it still belongs to the open listing."""
        if generation != self.history.generation or self.selected_listing is None:
            logger.debug("discarding stale history response (generation %s)", generation)
            return False
        self.history.loading = False
        if isinstance(body, dict) and body.get("success") and isinstance(body.get("data"), dict):
            self.history.data = OwnershipHistory.from_dict(body["data"])
        return True

    # --- purchase ---
    def purchase_url(self) -> Optional[str]:
        """External URL that completes the purchase of the open item, if any."""
        if self.selected_listing is not None:
            return self.selected_listing.purchase_url
        if self.selected_badge is not None and not self.selected_badge.sold_out:
            return self.selected_badge.purchase_url
        return None
