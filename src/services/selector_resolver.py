# src/services/selector_resolver.py

"""Fill in missing price selectors by asking a human to click the price."""

import logging

from src.config.settings import Settings
from src.errors import PriceTrackerError
from src.models.watchlist_item import WatchlistItem
from src.scrapers.base_provider import PageProvider
from src.storage.watchlist_store import WatchlistStore

logger = logging.getLogger("price_tracker.selectors")


class SelectorResolver:
    """Runs the interactive picker for every item that lacks a selector.

    Items are handled one at a time since each needs a human.  Discovered
    selectors are written back in a single batch at the end of the pass,
    or when the pass is interrupted, so nothing already picked is lost.
    """

    def __init__(
        self,
        provider: PageProvider,
        store: WatchlistStore,
        navigation_timeout_ms: int | None = None,
        picker_timeout_s: float | None = None,
    ) -> None:
        self.provider = provider
        self.store = store
        self.navigation_timeout_ms = (
            navigation_timeout_ms or Settings.NAVIGATION_TIMEOUT_MS
        )
        self.picker_timeout_s = (
            picker_timeout_s or Settings.PICKER_TIMEOUT_SECONDS
        )

    async def _discover(self, item: WatchlistItem) -> str | None:
        """Open the item's page and wait for a pick. Errors are per-item."""
        logger.warning(
            "No selector for '%s'. Opening page for selection...",
            item.name,
        )
        try:
            async with self.provider.session(
                item.url, self.navigation_timeout_ms,
            ) as page:
                return await self.provider.pick_element(
                    page, self.picker_timeout_s,
                )
        except Exception as exc:
            logger.error(
                "Failed to pick a selector for '%s': %s",
                item.name,
                exc,
                exc_info=True,
            )
            return None

    def _persist(self, items: list[WatchlistItem]) -> None:
        """Write picked selectors back; a failed write is logged only."""
        try:
            self.store.persist_selectors(items)
        except (OSError, PriceTrackerError) as exc:
            logger.error(
                "Could not save picked selectors to %s: %s. They are used "
                "for this run and will be asked for again next time.",
                self.store.path,
                exc,
            )

    async def resolve(
        self, items: list[WatchlistItem],
    ) -> list[WatchlistItem]:
        """Discover missing selectors; return the items ready to check.

        Items still without a selector afterwards are left out of the
        returned list (and stay selector-less on disk for the next run).
        """
        missing = [item for item in items if not item.has_selector]
        if not missing:
            return list(items)

        if not self.provider.supports_picking or Settings.IS_CI:
            logger.warning(
                "Skipping selector discovery for %d item(s) "
                "(interactive picking unavailable): %s",
                len(missing),
                ", ".join(item.name for item in missing),
            )
            return [item for item in items if item.has_selector]

        discovered = 0
        try:
            for item in missing:
                selector = await self._discover(item)
                if selector:
                    item.price_selector = selector
                    discovered += 1
                    logger.info(
                        "Selector for '%s' picked: %s", item.name, selector,
                    )
                else:
                    logger.error(
                        "Selector for '%s' not selected. Skipping.",
                        item.name,
                    )
        finally:
            if discovered:
                self._persist(items)

        return [item for item in items if item.has_selector]
