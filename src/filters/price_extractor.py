# src/filters/price_extractor.py

"""Currency text → numeric price.

Pages often render more than one dollar amount inside the selected
element (a struck-through list price next to the sale price, a
"save $5" badge, ...).  Which amount counts is a :class:`MatchPolicy`:

    first    leftmost amount wins (default)
    last     rightmost amount wins
    lowest   smallest amount wins
    highest  largest amount wins

Narrowing the selector itself is the third way to disambiguate and
happens upstream, in the page provider.
"""

import logging
import re
from enum import Enum

from src.errors import ParseError

logger = logging.getLogger("price_tracker.extractor")

# "$" + digits with optional ",ddd" groups + optional ".dd" fraction
_PRICE_RE = re.compile(
    r"\$(\d{1,3}(?:,\d{3})+|\d+)(\.\d{2})?(?!\d)"
)


class MatchPolicy(str, Enum):
    """Which amount to keep when the text holds several."""

    FIRST = "first"
    LAST = "last"
    LOWEST = "lowest"
    HIGHEST = "highest"


def find_prices(text: str) -> list[float]:
    """Return every dollar amount in *text*, in document order."""
    amounts: list[float] = []
    for match in _PRICE_RE.finditer(text):
        whole, fraction = match.group(1), match.group(2) or ""
        amounts.append(float(whole.replace(",", "") + fraction))
    return amounts


class PriceExtractor:
    """Parse a price out of raw element text using a match policy."""

    def __init__(
        self, policy: MatchPolicy | str = MatchPolicy.FIRST,
    ) -> None:
        try:
            self.policy = MatchPolicy(policy)
        except ValueError as exc:
            valid = ", ".join(p.value for p in MatchPolicy)
            msg = f"Unknown price match policy '{policy}' (valid: {valid})"
            raise ValueError(msg) from exc

    def extract(self, text: str | None) -> float:
        """Return the price selected by the policy.

        Raises:
            ParseError: when *text* holds no dollar amount.
        """
        amounts = find_prices(text or "")
        if not amounts:
            preview = (text or "").strip()[:60]
            raise ParseError(f"Price pattern not found in '{preview}'")

        if len(amounts) > 1:
            logger.debug(
                "Found %d amounts %s, applying '%s' policy",
                len(amounts),
                amounts,
                self.policy.value,
            )

        if self.policy is MatchPolicy.LAST:
            return amounts[-1]
        if self.policy is MatchPolicy.LOWEST:
            return min(amounts)
        if self.policy is MatchPolicy.HIGHEST:
            return max(amounts)
        return amounts[0]
