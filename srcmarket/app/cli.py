from __future__ import annotations

import asyncio

import click
from flask import Blueprint, current_app

from srcmarket.app.config import storefront_base
from srcmarket.catalog.formatting import format_price
from srcmarket.catalog.loader import CatalogLoader
from srcmarket.catalog.state import CatalogState

cli_bp = Blueprint("cli", __name__, cli_group=None)


@cli_bp.cli.command("market-stats")
@click.option("--api-base", default=None, help="Storefront base URL (defaults to the local server).")
def market_stats(api_base: str | None) -> None:
    """Load the catalog once and print the aggregate stats."""
    base = api_base or storefront_base(current_app.config)
    loader = CatalogLoader(
        base,
        timeout_seconds=current_app.config.get("UPSTREAM_TIMEOUT", 10.0),
        transport=current_app.config.get("STOREFRONT_TRANSPORT"),
    )
    state = CatalogState()
    asyncio.run(loader.load(state))

    stats = state.stats
    print(f"Usernames:   {stats.username_count}")
    print(f"Badges:      {stats.badge_count}")
    print(f"Total value: {format_price(stats.total_value)}")
    print(f"Trending:    {stats.trending_count}")
