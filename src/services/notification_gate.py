# src/services/notification_gate.py

"""Decide whether a price observation warrants an alert, then send it.

The decision is a pure function of the current price, the price recorded
immediately before it, and the item's threshold.  An alert fires only on
a strict drop that also lands under the threshold, so a price that stays
flat below the threshold alerts once, on the run where it first dropped.

Delivery runs in background tasks so a slow SMTP server or desktop
backend never holds a check slot; whoever drives the checks awaits
:meth:`NotificationGate.drain` once they have all settled.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from src.errors import TransportError
from src.models.check_result import PriceMovement
from src.models.watchlist_item import WatchlistItem
from src.services.notifier import Notifier
from src.storage.history_store import HistoryStore

logger = logging.getLogger("price_tracker.gate")


@dataclass
class GateDecision:
    """Outcome of :func:`decide`."""

    notify: bool
    movement: PriceMovement
    title: str = ""
    message: str = ""


def _fmt(price: float) -> str:
    return f"${price:,.2f}"


def decide(
    name: str,
    current: float,
    previous: float | None,
    max_price: float,
) -> GateDecision:
    """Classify an observation and decide whether to alert."""
    if previous is None:
        return GateDecision(False, PriceMovement.FIRST_SEEN)

    if current < max_price and current < previous:
        return GateDecision(
            True,
            PriceMovement.DROPPED_BELOW_THRESHOLD,
            title=f"Price Drop Alert! - {name}",
            message=(
                f"{name} price dropped to {_fmt(current)} "
                f"(was {_fmt(previous)})"
            ),
        )

    if current > previous:
        movement = PriceMovement.INCREASED
    elif current == previous:
        movement = PriceMovement.UNCHANGED
    else:
        movement = PriceMovement.DROPPED_ABOVE_THRESHOLD
    return GateDecision(False, movement)


_MOVEMENT_NOTES: dict[PriceMovement, str] = {
    PriceMovement.FIRST_SEEN: "first time seen",
    PriceMovement.INCREASED: "increased from {previous}",
    PriceMovement.UNCHANGED: "no change",
    PriceMovement.DROPPED_ABOVE_THRESHOLD: (
        "dropped from {previous}, but not below threshold {threshold}"
    ),
}


class NotificationGate:
    """Records observations and dispatches alerts the decision calls for."""

    def __init__(self, history: HistoryStore, notifier: Notifier) -> None:
        self.history = history
        self.notifier = notifier
        self._pending: set[asyncio.Task[None]] = set()

    async def evaluate(
        self,
        item: WatchlistItem,
        price: float,
        timestamp: datetime | None = None,
    ) -> GateDecision:
        """Compare against the last recorded price, record, maybe alert.

        Alerts are only scheduled here; delivery failures are logged
        and never propagate, since the price observation itself has
        already succeeded.
        """
        previous = self.history.get_previous(item.name)
        decision = decide(item.name, price, previous, item.max_price)
        self.history.record(item.name, price, timestamp)

        if not decision.notify:
            note = _MOVEMENT_NOTES[decision.movement].format(
                previous=_fmt(previous) if previous is not None else "",
                threshold=_fmt(item.max_price),
            )
            logger.info("[PRICE] %s: %s (%s)", item.name, _fmt(price), note)
            return decision

        task = asyncio.create_task(
            self._dispatch(item.name, decision),
            name=f"alert:{item.name}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        logger.info("%s (notified)", decision.message)
        return decision

    @property
    def pending(self) -> int:
        """Alerts scheduled but not yet delivered."""
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled alert; failures are logged only."""
        while self._pending:
            tasks = list(self._pending)
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for task, result in zip(tasks, results):
                if isinstance(result, Exception):
                    logger.error(
                        "Alert task %s failed: %s",
                        task.get_name(),
                        result,
                        exc_info=result,
                    )

    async def _dispatch(self, name: str, decision: GateDecision) -> None:
        """Send desktop + email once each, swallowing transport failures."""
        try:
            await asyncio.to_thread(
                self.notifier.notify_desktop, decision.title, decision.message,
            )
        except TransportError as exc:
            logger.warning("[%s] %s", name, exc)
        try:
            await self.notifier.notify_email(decision.title, decision.message)
        except TransportError as exc:
            logger.warning("[%s] %s", name, exc)
