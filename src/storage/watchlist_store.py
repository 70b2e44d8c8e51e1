# src/storage/watchlist_store.py

"""JSON-backed watchlist: what to track and when to alert."""

import logging
import math
from pathlib import Path
from typing import cast

from src.config.settings import Settings
from src.errors import ConfigError
from src.models.watchlist_item import WatchlistItem
from src.storage.file_manager import read_json, write_json_atomic

logger = logging.getLogger("price_tracker.watchlist")

# Older watchlists used "selector" instead of "priceSelector"
_SELECTOR_KEYS: tuple[str, ...] = ("priceSelector", "selector")


def _parse_item(index: int, raw: object) -> WatchlistItem:
    """Validate one raw watchlist entry, naming the bad field on failure."""
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Watchlist item #{index}: expected an object, "
            f"got {type(raw).__name__}"
        )
    entry = cast(dict[str, object], raw)

    name = entry.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(
            f"Watchlist item #{index}: field 'name' must be a "
            "non-empty string"
        )
    where = f"Watchlist item #{index} ('{name}')"

    url = entry.get("url")
    if not isinstance(url, str) or not url.strip():
        raise ConfigError(f"{where}: field 'url' must be a non-empty string")

    max_price = entry.get("maxPrice")
    if (
        not isinstance(max_price, (int, float))
        or isinstance(max_price, bool)
        or not math.isfinite(max_price)
        or max_price < 0
    ):
        raise ConfigError(
            f"{where}: field 'maxPrice' must be a finite non-negative "
            f"number, got {max_price!r}"
        )

    selector: str | None = None
    for key in _SELECTOR_KEYS:
        value = entry.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ConfigError(
                f"{where}: field '{key}' must be a string, "
                f"got {type(value).__name__}"
            )
        selector = value.strip() or None
        break

    return WatchlistItem(
        name=name,
        url=url.strip(),
        max_price=float(max_price),
        price_selector=selector,
    )


class WatchlistStore:
    """Loads the watchlist and writes back discovered selectors."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or Settings.WATCHLIST_PATH

    def _read_entries(self) -> list[object]:
        data = read_json(self.path, label="Watchlist")
        if not isinstance(data, list):
            raise ConfigError(
                f"Watchlist file {self.path} must hold a JSON list "
                "of items"
            )
        return cast(list[object], data)

    def load(self) -> list[WatchlistItem]:
        """Parse and validate every item.

        Raises:
            ConfigError: missing/unparseable file, a bad field, or a
                duplicated item name.
        """
        items: list[WatchlistItem] = []
        seen: set[str] = set()
        for index, raw in enumerate(self._read_entries()):
            item = _parse_item(index, raw)
            if item.name in seen:
                raise ConfigError(
                    f"Watchlist item #{index}: duplicate name "
                    f"'{item.name}'"
                )
            seen.add(item.name)
            items.append(item)

        logger.info(
            "Loaded %d watchlist items from %s", len(items), self.path,
        )
        return items

    def persist_selectors(self, items: list[WatchlistItem]) -> int:
        """Write selector values back, leaving everything else as-is.

        The file is re-read so that any other field, unknown keys
        included, and the item order survive untouched.  Returns the
        number of entries whose selector changed.
        """
        selectors = {
            item.name: item.price_selector
            for item in items
            if item.has_selector
        }
        entries = self._read_entries()

        changed = 0
        for raw in entries:
            if not isinstance(raw, dict):
                continue
            entry = cast(dict[str, object], raw)
            name = entry.get("name")
            if not isinstance(name, str) or name not in selectors:
                continue
            key = next(
                (k for k in _SELECTOR_KEYS if k in entry),
                "priceSelector",
            )
            if entry.get(key) == selectors[name]:
                continue
            entry[key] = selectors[name]
            changed += 1

        if changed:
            write_json_atomic(self.path, entries)
            logger.info(
                "Updated %s with %d new selectors", self.path, changed,
            )
        return changed
