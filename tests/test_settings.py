# tests/test_settings.py

"""Tests for the Settings configuration class."""

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from src.config.settings import Settings, _env_float, _env_int


class TestSettings(unittest.TestCase):
    """Verify Settings constants and provider registry."""

    def test_timeouts_are_positive(self) -> None:
        self.assertGreater(Settings.NAVIGATION_TIMEOUT_MS, 0)
        self.assertGreater(Settings.SELECTOR_TIMEOUT_MS, 0)
        self.assertGreater(Settings.PICKER_TIMEOUT_SECONDS, 0)
        self.assertGreaterEqual(Settings.SETTLE_DELAY_SECONDS, 0)

    def test_concurrency_at_least_one(self) -> None:
        self.assertGreaterEqual(Settings.MAX_CONCURRENT_CHECKS, 1)

    def test_each_provider_has_required_keys(self) -> None:
        for provider in Settings.AVAILABLE_PROVIDERS:
            with self.subTest(provider=provider.get("id", "?")):
                self.assertIn("id", provider)
                self.assertIn("label", provider)
                self.assertIn("provider", provider)

    def test_provider_ids_are_unique(self) -> None:
        ids = [p["id"] for p in Settings.AVAILABLE_PROVIDERS]
        self.assertEqual(len(ids), len(set(ids)))

    def test_default_provider_is_registered(self) -> None:
        ids = {p["id"] for p in Settings.AVAILABLE_PROVIDERS}
        self.assertIn(Settings.PAGE_PROVIDER, ids)

    def test_default_match_policy(self) -> None:
        self.assertIn(
            Settings.PRICE_MATCH_POLICY,
            {"first", "last", "lowest", "highest"},
        )

    def test_path_constants_are_paths(self) -> None:
        for name in (
            "BASE_DIR", "DATA_DIR", "WATCHLIST_PATH", "HISTORY_PATH",
            "CHARTS_DIR", "ERRORS_DIR", "LOGS_DIR",
        ):
            with self.subTest(setting=name):
                self.assertIsInstance(getattr(Settings, name), Path)

    def test_impersonate_browser_is_string(self) -> None:
        self.assertIsInstance(Settings.IMPERSONATE_BROWSER, str)
        self.assertTrue(Settings.IMPERSONATE_BROWSER)

    def test_default_headers_has_accept_language(self) -> None:
        self.assertIn("Accept-Language", Settings.DEFAULT_HEADERS)


class TestEnvironmentOverrides(unittest.TestCase):
    """Numeric helpers reading the environment."""

    def test_env_int_override(self) -> None:
        with patch.dict(os.environ, {"MAX_CONCURRENT_CHECKS": "9"}):
            self.assertEqual(_env_int("MAX_CONCURRENT_CHECKS", 5), 9)

    def test_env_int_unset_uses_default(self) -> None:
        with patch.dict(os.environ, {"MAX_CONCURRENT_CHECKS": ""}):
            self.assertEqual(_env_int("MAX_CONCURRENT_CHECKS", 5), 5)

    def test_env_float_override(self) -> None:
        with patch.dict(os.environ, {"SETTLE_DELAY_SECONDS": "0.5"}):
            self.assertEqual(_env_float("SETTLE_DELAY_SECONDS", 5.0), 0.5)


if __name__ == "__main__":
    unittest.main()
