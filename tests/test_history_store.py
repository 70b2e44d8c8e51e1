# tests/test_history_store.py

"""Tests for the JSON price history store."""

import json
import math
import os
import tempfile
import threading
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

from src.errors import ConfigError, HistoryWriteError
from src.storage.history_store import HistoryStore

T0 = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


class _TmpDirMixin:
    """Temp directory holding the history file."""

    tmp_dir: Path
    path: Path

    def _setup_tmp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = Path(self._tmp.name)
        self.path = self.tmp_dir / "price-history.json"

    def _teardown_tmp(self) -> None:
        self._tmp.cleanup()


class TestHistoryRecording(_TmpDirMixin, unittest.TestCase):
    """In-memory behaviour of record / get_previous."""

    def setUp(self) -> None:
        self._setup_tmp()
        self.store = HistoryStore(self.path).load()

    def tearDown(self) -> None:
        self._teardown_tmp()

    def test_missing_file_is_empty_history(self) -> None:
        self.assertEqual(self.store.items(), {})
        self.assertIsNone(self.store.get_previous("Widget"))

    def test_get_previous_returns_latest(self) -> None:
        self.store.record("Widget", 19.99, T0)
        self.store.record("Widget", 15.0, T0 + timedelta(hours=1))
        self.assertEqual(self.store.get_previous("Widget"), 15.0)

    def test_equal_prices_are_appended(self) -> None:
        self.store.record("Widget", 10.0, T0)
        self.store.record("Widget", 10.0, T0 + timedelta(hours=1))
        self.assertEqual(len(self.store.series("Widget")), 2)

    def test_same_timestamp_allowed(self) -> None:
        self.store.record("Widget", 10.0, T0)
        self.store.record("Widget", 9.0, T0)
        self.assertEqual(self.store.get_previous("Widget"), 9.0)

    def test_earlier_timestamp_clamped_to_tail(self) -> None:
        """A reading behind the stored clock is kept, not rejected."""
        future = T0 + timedelta(minutes=5)
        self.store.record("Widget", 10.0, future)
        with self.assertLogs("price_tracker.history", level="WARNING"):
            snapshot = self.store.record("Widget", 9.0, T0)
        self.assertEqual(snapshot.timestamp, future)
        self.assertEqual(
            [(s.price, s.timestamp) for s in self.store.series("Widget")],
            [(10.0, future), (9.0, future)],
        )
        self.assertEqual(self.store.get_previous("Widget"), 9.0)

    def test_invalid_prices_rejected(self) -> None:
        for bad in (-1.0, math.inf, math.nan):
            with self.subTest(price=bad):
                with self.assertRaises(ValueError):
                    self.store.record("Widget", bad, T0)

    def test_default_timestamp_is_now(self) -> None:
        snapshot = self.store.record("Widget", 10.0)
        self.assertIsNotNone(snapshot.timestamp.tzinfo)

    def test_concurrent_records_are_not_lost(self) -> None:
        """Writers from several threads all land in the series."""

        def writer(offset: int) -> None:
            for i in range(200):
                self.store.record(f"item-{offset}", float(i), T0)

        threads = [
            threading.Thread(target=writer, args=(n,)) for n in range(4)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        for n in range(4):
            self.assertEqual(len(self.store.series(f"item-{n}")), 200)


class TestHistoryPersistence(_TmpDirMixin, unittest.TestCase):
    """Round-trips through the file system."""

    def setUp(self) -> None:
        self._setup_tmp()

    def tearDown(self) -> None:
        self._teardown_tmp()

    def test_round_trip(self) -> None:
        store = HistoryStore(self.path).load()
        store.record("Widget", 19.99, T0)
        store.record("Widget", 15.0, T0 + timedelta(days=1))
        store.record("Gadget", 5.0, T0)
        store.flush()

        reloaded = HistoryStore(self.path).load()
        self.assertEqual(reloaded.items(), store.items())

    def test_file_layout(self) -> None:
        store = HistoryStore(self.path).load()
        store.record("Widget", 19.99, T0)
        store.flush()
        data = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(
            data,
            {"Widget": [{"timestamp": T0.isoformat(), "price": 19.99}]},
        )

    def test_crash_before_rename_keeps_old_file(self) -> None:
        store = HistoryStore(self.path).load()
        store.record("Widget", 19.99, T0)
        store.flush()
        before = self.path.read_text(encoding="utf-8")

        store.record("Widget", 15.0, T0 + timedelta(days=1))
        with patch(
            "src.storage.file_manager.os.replace",
            side_effect=OSError("simulated crash"),
        ):
            with self.assertRaises(HistoryWriteError):
                store.flush()

        self.assertEqual(self.path.read_text(encoding="utf-8"), before)
        reloaded = HistoryStore(self.path).load()
        self.assertEqual(reloaded.get_previous("Widget"), 19.99)
        leftovers = [
            p for p in os.listdir(self.tmp_dir) if p.endswith(".tmp")
        ]
        self.assertEqual(leftovers, [])

    def test_legacy_last_price_schema(self) -> None:
        self.path.write_text(
            json.dumps({"Widget": 19.99, "Gadget": 5}), encoding="utf-8",
        )
        store = HistoryStore(self.path).load()
        self.assertEqual(store.get_previous("Widget"), 19.99)
        self.assertEqual(store.get_previous("Gadget"), 5.0)
        self.assertEqual(len(store.series("Widget")), 1)

    def test_naive_timestamps_treated_as_utc(self) -> None:
        self.path.write_text(
            json.dumps({
                "Widget": [
                    {"timestamp": "2026-01-01T09:00:00", "price": 3.0},
                ],
            }),
            encoding="utf-8",
        )
        store = HistoryStore(self.path).load()
        self.assertEqual(store.series("Widget")[0].timestamp, T0)

    def test_loaded_series_sorted_by_time(self) -> None:
        self.path.write_text(
            json.dumps({
                "Widget": [
                    {"timestamp": "2026-01-02T00:00:00+00:00", "price": 2.0},
                    {"timestamp": "2026-01-01T00:00:00+00:00", "price": 1.0},
                ],
            }),
            encoding="utf-8",
        )
        store = HistoryStore(self.path).load()
        self.assertEqual(store.get_previous("Widget"), 2.0)


class TestHistoryLoadErrors(_TmpDirMixin, unittest.TestCase):
    """Malformed history files are configuration errors."""

    def setUp(self) -> None:
        self._setup_tmp()

    def tearDown(self) -> None:
        self._teardown_tmp()

    def _load(self, content: str) -> None:
        self.path.write_text(content, encoding="utf-8")
        HistoryStore(self.path).load()

    def test_invalid_json(self) -> None:
        with self.assertRaises(ConfigError):
            self._load("{not json")

    def test_root_must_be_object(self) -> None:
        with self.assertRaises(ConfigError):
            self._load("[]")

    def test_bad_price_names_item(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            self._load(json.dumps({
                "Widget": [{"timestamp": T0.isoformat(), "price": "x"}],
            }))
        self.assertIn("Widget", str(ctx.exception))
        self.assertIn("price", str(ctx.exception))

    def test_bad_timestamp_names_field(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            self._load(json.dumps({
                "Widget": [{"timestamp": "yesterday", "price": 1.0}],
            }))
        self.assertIn("timestamp", str(ctx.exception))

    def test_negative_legacy_price(self) -> None:
        with self.assertRaises(ConfigError):
            self._load(json.dumps({"Widget": -3}))


if __name__ == "__main__":
    unittest.main()
