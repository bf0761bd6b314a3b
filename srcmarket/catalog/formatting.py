"""Display formatting for prices and dates (ru-RU conventions)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

PRICE_UNIT = "b"
GROUP_SEPARATOR = "\u00a0"

_MONTHS_SHORT = ["янв.", "февр.", "мар.", "апр.", "мая", "июн.",
                 "июл.", "авг.", "сент.", "окт.", "нояб.", "дек."]
_MONTHS_LONG = ["января", "февраля", "марта", "апреля", "мая", "июня",
                "июля", "августа", "сентября", "октября", "ноября", "декабря"]


def format_price(price: int) -> str:
    """12345 -> '12 345 b' (non-breaking space grouping)."""
    return f"{int(price):,}".replace(",", GROUP_SEPARATOR) + f" {PRICE_UNIT}"


def parse_timestamp(raw: str | None) -> Optional[datetime]:
    if not raw:
        return None
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(value)
    except ValueError:
        return None
    # render in the server's local zone; naive values are taken as local already
    return ts.astimezone() if ts.tzinfo is not None else ts


def format_date(raw: str | None) -> str:
    ts = parse_timestamp(raw)
    if ts is None:
        return raw or ""
    return f"{ts.day} {_MONTHS_SHORT[ts.month - 1]} {ts.year} г."


def format_date_full(raw: str | None) -> str:
    ts = parse_timestamp(raw)
    if ts is None:
        return raw or ""
    return f"{ts.day} {_MONTHS_LONG[ts.month - 1]} {ts.year} г. в {ts:%H:%M}"
