from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx

from srcmarket.catalog.models import Badge, Listing
from srcmarket.catalog.state import CatalogState

logger = logging.getLogger(__name__)


class CatalogLoader:
    """
    Fetches catalog datasets from the storefront's own /api proxy routes.

    Each fetch isolates its failure: it is logged and the affected dataset
    keeps its previous value.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    async def _fetch(self, client: httpx.AsyncClient, path: str, params: Optional[Mapping[str, str]] = None) -> Any:
        try:
            resp = await client.get(path, params=dict(params or {}))
            # error envelopes are JSON too; the shape check decides
            return resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("error fetching %s: %s", path, e)
            return None

    async def load(self, state: CatalogState) -> None:
        state.loading = True
        try:
            async with self._client() as client:
                listings, badges, trending = await asyncio.gather(
                    self._fetch(client, "/api/marketplace", {"status": "active"}),
                    self._fetch(client, "/api/badges"),
                    self._fetch(client, "/api/badges/trending"),
                )
        finally:
            state.loading = False

        if isinstance(listings, dict) and listings.get("success") and isinstance(listings.get("listings"), list):
            state.listings = [Listing.from_dict(r) for r in listings["listings"]]
        if isinstance(badges, dict) and isinstance(badges.get("badges"), list):
            state.badges = [Badge.from_dict(r) for r in badges["badges"]]
        if isinstance(trending, dict) and isinstance(trending.get("badges"), list):
            state.trending = [Badge.from_dict(r) for r in trending["badges"]]

        logger.info(
            "catalog loaded: %d listings, %d badges, %d trending",
            len(state.listings), len(state.badges), len(state.trending),
        )

    async def load_history(self, state: CatalogState) -> bool:
        """Fetch ownership history for the open listing. Returns False if the response went stale."""
        listing = state.selected_listing
        if listing is None:
            return False
        generation = state.history.generation
        async with self._client() as client:
            body = await self._fetch(client, f"/api/history/{quote(listing.username, safe='')}")
        return state.apply_history(generation, body)

    async def open(
        self,
        state: CatalogState,
        listing_id: Optional[int] = None,
        badge_id: Optional[int] = None,
    ) -> CatalogState:
        """Page mount: load datasets, then open the requested detail view."""
        await self.load(state)
        if listing_id is not None:
            if state.select_listing(listing_id) is not None:
                await self.load_history(state)
        elif badge_id is not None:
            state.select_badge(badge_id)
        return state
