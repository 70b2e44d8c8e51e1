# src/models/check_result.py

"""Per-item outcome of one scheduler pass."""

from dataclasses import dataclass
from enum import Enum


class CheckStage(str, Enum):
    """Stages of a single item check, in execution order."""

    START = "start"
    NAVIGATE = "navigate"
    WAIT_FOR_SELECTOR = "wait_for_selector"
    DELAY_SETTLE = "delay_settle"
    EXTRACT_TEXT = "extract_text"
    PARSE_PRICE = "parse_price"
    GATE_AND_NOTIFY = "gate_and_notify"
    DONE = "done"
    ERROR = "error"


class PriceMovement(str, Enum):
    """How a new observation relates to the previous one."""

    FIRST_SEEN = "first_seen"
    DROPPED_BELOW_THRESHOLD = "dropped_below_threshold"
    DROPPED_ABOVE_THRESHOLD = "dropped_above_threshold"
    INCREASED = "increased"
    UNCHANGED = "unchanged"


@dataclass
class CheckResult:
    """Outcome of checking one watchlist item.

    A successful check carries ``price``, ``notified`` and ``movement``;
    a failed one carries ``reason`` and the ``stage`` it failed in.
    """

    item: str
    price: float | None = None
    notified: bool = False
    movement: PriceMovement | None = None
    reason: str | None = None
    detail: str = ""
    stage: CheckStage = CheckStage.DONE

    @property
    def succeeded(self) -> bool:
        """True when the check produced a price."""
        return self.reason is None

    @classmethod
    def success(
        cls,
        item: str,
        price: float,
        notified: bool,
        movement: PriceMovement,
    ) -> "CheckResult":
        return cls(
            item=item,
            price=price,
            notified=notified,
            movement=movement,
        )

    @classmethod
    def failure(
        cls,
        item: str,
        reason: str,
        stage: CheckStage,
        detail: str = "",
    ) -> "CheckResult":
        return cls(
            item=item,
            reason=reason,
            detail=detail,
            stage=stage,
        )
