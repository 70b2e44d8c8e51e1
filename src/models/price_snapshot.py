# src/models/price_snapshot.py

"""Temporal price snapshot model for price history tracking."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class PriceSnapshot:
    """A single price observation for a tracked item at a point in time."""

    item_name: str
    price: float
    timestamp: datetime

    def to_dict(self) -> dict[str, object]:
        """Serialise to the on-disk history entry shape."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "price": self.price,
        }
