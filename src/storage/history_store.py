# src/storage/history_store.py

"""JSON-backed price history store.

On-disk layout (one append-only series per item, oldest first)::

    {
      "Widget": [
        {"timestamp": "2026-01-01T09:00:00+00:00", "price": 19.99},
        {"timestamp": "2026-01-02T09:00:00+00:00", "price": 15.0}
      ]
    }

Files written by older versions stored only the last price
(``{"Widget": 19.99}``); those load as a single observation stamped
with the file's modification time.
"""

import logging
import math
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import cast

from src.config.settings import Settings
from src.errors import ConfigError, HistoryWriteError
from src.models.price_snapshot import PriceSnapshot
from src.storage.file_manager import read_json, write_json_atomic

logger = logging.getLogger("price_tracker.history")


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so all comparisons are aware."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _valid_price(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value >= 0
    )


class HistoryStore:
    """In-memory price series with an explicit load / record / flush cycle."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or Settings.HISTORY_PATH
        self._series: dict[str, list[PriceSnapshot]] = {}
        self._lock = threading.Lock()

    # ── Loading ──────────────────────────────────────────

    def load(self) -> "HistoryStore":
        """Read the history file. A missing file means empty history."""
        if not self.path.exists():
            logger.info(
                "No history file at %s, starting fresh", self.path,
            )
            self._series = {}
            return self

        data = read_json(self.path, label="History")
        if not isinstance(data, dict):
            raise ConfigError(
                f"History file {self.path} must hold a JSON object "
                "mapping item names to prices"
            )

        legacy_stamp = datetime.fromtimestamp(
            self.path.stat().st_mtime, tz=timezone.utc,
        )
        raw = cast(dict[str, object], data)
        series: dict[str, list[PriceSnapshot]] = {}
        for name, entry in raw.items():
            series[name] = self._parse_entry(name, entry, legacy_stamp)

        self._series = series
        logger.debug(
            "Loaded history for %d items from %s",
            len(series),
            self.path,
        )
        return self

    def _parse_entry(
        self,
        name: str,
        entry: object,
        legacy_stamp: datetime,
    ) -> list[PriceSnapshot]:
        """Convert one on-disk entry into a validated snapshot list."""
        if _valid_price(entry):
            return [
                PriceSnapshot(name, float(cast(float, entry)), legacy_stamp)
            ]
        if not isinstance(entry, list):
            raise ConfigError(
                f"History entry '{name}': expected a price or a list "
                f"of observations, got {type(entry).__name__}"
            )

        snapshots: list[PriceSnapshot] = []
        for idx, obs in enumerate(cast(list[object], entry)):
            where = f"History entry '{name}' observation {idx}"
            if not isinstance(obs, dict):
                raise ConfigError(f"{where}: expected an object")
            record = cast(dict[str, object], obs)
            price = record.get("price")
            if not _valid_price(price):
                raise ConfigError(
                    f"{where}: field 'price' must be a non-negative "
                    f"number, got {price!r}"
                )
            try:
                stamp = _as_utc(
                    datetime.fromisoformat(str(record.get("timestamp")))
                )
            except ValueError as exc:
                raise ConfigError(
                    f"{where}: field 'timestamp' is not an ISO-8601 "
                    f"datetime ({record.get('timestamp')!r})"
                ) from exc
            snapshots.append(
                PriceSnapshot(name, float(cast(float, price)), stamp)
            )

        snapshots.sort(key=lambda s: s.timestamp)
        return snapshots

    # ── Reading ──────────────────────────────────────────

    def get_previous(self, name: str) -> float | None:
        """Latest recorded price for *name*, or ``None`` if never seen."""
        with self._lock:
            series = self._series.get(name)
            return series[-1].price if series else None

    def series(self, name: str) -> list[PriceSnapshot]:
        """All observations for *name*, oldest first."""
        with self._lock:
            return list(self._series.get(name, []))

    def items(self) -> dict[str, list[PriceSnapshot]]:
        """Copy of every series, keyed by item name."""
        with self._lock:
            return {
                name: list(series)
                for name, series in self._series.items()
            }

    # ── Recording ────────────────────────────────────────

    def record(
        self,
        name: str,
        price: float,
        timestamp: datetime | None = None,
    ) -> PriceSnapshot:
        """Append an observation. Repeated equal prices are all kept.

        A timestamp older than the series tail (clock skew, a history file
        from another machine) is moved up to the tail so the series stays
        in time order and the reading is still kept.
        """
        if not _valid_price(price):
            raise ValueError(
                f"Price for '{name}' must be a non-negative finite "
                f"number, got {price!r}"
            )
        stamp = _as_utc(timestamp or datetime.now(timezone.utc))

        with self._lock:
            series = self._series.setdefault(name, [])
            if series and stamp < series[-1].timestamp:
                logger.warning(
                    "Observation for '%s' at %s predates the last "
                    "recorded one (%s); recording it at that time instead",
                    name,
                    stamp.isoformat(),
                    series[-1].timestamp.isoformat(),
                )
                stamp = series[-1].timestamp
            snapshot = PriceSnapshot(name, float(price), stamp)
            series.append(snapshot)
        return snapshot

    # ── Persisting ───────────────────────────────────────

    def to_dict(self) -> dict[str, list[dict[str, object]]]:
        with self._lock:
            return {
                name: [s.to_dict() for s in series]
                for name, series in self._series.items()
            }

    def flush(self) -> Path:
        """Atomically persist the whole store.

        Raises:
            HistoryWriteError: when the file cannot be written.
        """
        try:
            write_json_atomic(self.path, self.to_dict())
        except OSError as exc:
            raise HistoryWriteError(
                f"Failed to write history to {self.path}: {exc}"
            ) from exc
        logger.info(
            "History saved for %d items to %s",
            len(self._series),
            self.path,
        )
        return self.path
