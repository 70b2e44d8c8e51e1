# src/models/watchlist_item.py

"""Watchlist item model for inter-module data flow."""

from dataclasses import dataclass


@dataclass
class WatchlistItem:
    """A tracked page: where to look, what to read, when to alert."""

    name: str
    url: str
    max_price: float
    price_selector: str | None = None

    @property
    def has_selector(self) -> bool:
        """True when a non-blank selector is configured."""
        return bool(self.price_selector and self.price_selector.strip())
