# src/services/batch_scheduler.py

"""Bounded-concurrency price checks over the watchlist.

Each item runs through::

    START → NAVIGATE → WAIT_FOR_SELECTOR → DELAY_SETTLE → EXTRACT_TEXT
          → PARSE_PRICE → GATE_AND_NOTIFY → DONE

and any stage may end in ERROR.  A failed item yields a failure
:class:`CheckResult`; it never aborts or delays the other items.

Concurrency is a worker pool rather than fixed-size batches: ``K``
workers pull from a shared queue, and a worker takes the next item as
soon as its current check settles.  A slow page therefore occupies one
slot, not a whole batch, and at most ``K`` pages are open at any time.
Alerts are sent in the background and awaited once the pool drains.
"""

import asyncio
import logging
import re
from pathlib import Path

from src.config.settings import Settings
from src.errors import CheckError
from src.filters.price_extractor import PriceExtractor
from src.models.check_result import CheckResult, CheckStage
from src.models.watchlist_item import WatchlistItem
from src.scrapers.base_provider import PageProvider
from src.services.notification_gate import NotificationGate

logger = logging.getLogger("price_tracker.scheduler")


def _screenshot_name(item_name: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", item_name, flags=re.IGNORECASE) + ".png"


class BatchScheduler:
    """Runs one check per watchlist item with at most ``concurrency`` in flight."""

    def __init__(
        self,
        provider: PageProvider,
        gate: NotificationGate,
        extractor: PriceExtractor | None = None,
        concurrency: int | None = None,
        navigation_timeout_ms: int | None = None,
        selector_timeout_ms: int | None = None,
        settle_delay_s: float | None = None,
        errors_dir: Path | None = None,
    ) -> None:
        self.provider = provider
        self.gate = gate
        self.extractor = extractor or PriceExtractor(
            Settings.PRICE_MATCH_POLICY
        )
        self.concurrency = (
            Settings.MAX_CONCURRENT_CHECKS
            if concurrency is None
            else concurrency
        )
        if self.concurrency < 1:
            msg = f"concurrency must be >= 1, got {self.concurrency}"
            raise ValueError(msg)
        self.navigation_timeout_ms = (
            navigation_timeout_ms or Settings.NAVIGATION_TIMEOUT_MS
        )
        self.selector_timeout_ms = (
            selector_timeout_ms or Settings.SELECTOR_TIMEOUT_MS
        )
        self.settle_delay_s = (
            Settings.SETTLE_DELAY_SECONDS
            if settle_delay_s is None
            else settle_delay_s
        )
        self.errors_dir = errors_dir

    # ── Pool ─────────────────────────────────────────────

    async def run(self, items: list[WatchlistItem]) -> list[CheckResult]:
        """Check every item; results come back in completion order."""
        if not items:
            return []

        queue: asyncio.Queue[WatchlistItem] = asyncio.Queue()
        for item in items:
            queue.put_nowait(item)
        results: list[CheckResult] = []

        async def worker() -> None:
            while True:
                try:
                    item = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                results.append(await self.check_item(item))

        workers = min(self.concurrency, len(items))
        logger.info(
            "Checking %d items with %d workers", len(items), workers,
        )
        await asyncio.gather(*(worker() for _ in range(workers)))

        if self.gate.pending:
            logger.info("Waiting for %d alert(s) to send", self.gate.pending)
        await self.gate.drain()
        return results

    # ── Single item ──────────────────────────────────────

    async def check_item(self, item: WatchlistItem) -> CheckResult:
        """Run one item through every stage; never raises for item errors."""
        stage = CheckStage.START
        selector = item.price_selector or ""
        logger.info("Checking: %s", item.name)
        try:
            stage = CheckStage.NAVIGATE
            async with self.provider.session(
                item.url, self.navigation_timeout_ms,
            ) as page:
                try:
                    stage = CheckStage.WAIT_FOR_SELECTOR
                    await self.provider.wait_for_selector(
                        page, selector, self.selector_timeout_ms,
                    )
                    stage = CheckStage.DELAY_SETTLE
                    await asyncio.sleep(self.settle_delay_s)
                    stage = CheckStage.EXTRACT_TEXT
                    text = await self.provider.read_text(page, selector)
                    stage = CheckStage.PARSE_PRICE
                    price = self.extractor.extract(text)
                except Exception:
                    await self._capture_failure(page, item)
                    raise

            stage = CheckStage.GATE_AND_NOTIFY
            decision = await self.gate.evaluate(item, price)
        except CheckError as exc:
            logger.error(
                "[%s] %s during %s: %s",
                item.name,
                exc.reason,
                stage.value,
                exc,
            )
            return CheckResult.failure(
                item.name, exc.reason, stage, str(exc),
            )
        except Exception as exc:
            logger.error(
                "[%s] Error during %s: %s",
                item.name,
                stage.value,
                exc,
                exc_info=True,
            )
            return CheckResult.failure(
                item.name, type(exc).__name__, stage, str(exc),
            )

        return CheckResult.success(
            item.name, price, decision.notify, decision.movement,
        )

    async def _capture_failure(
        self, page: object, item: WatchlistItem,
    ) -> None:
        """Best-effort screenshot of the page an item failed on."""
        if self.errors_dir is None:
            return
        path = self.errors_dir / _screenshot_name(item.name)
        try:
            saved = await self.provider.capture_screenshot(page, path)
        except Exception as exc:
            logger.warning(
                "[%s] Could not save failure screenshot: %s",
                item.name,
                exc,
            )
            return
        if saved is not None:
            logger.info("[%s] Failure screenshot: %s", item.name, saved)
