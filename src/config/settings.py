# src/config/settings.py

"""Central configuration for the price_tracker engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw else default


class Settings:
    """Central configuration for the price_tracker engine."""

    # --- Scheduling ---
    MAX_CONCURRENT_CHECKS: int = _env_int("MAX_CONCURRENT_CHECKS", 5)
    NAVIGATION_TIMEOUT_MS: int = _env_int("NAVIGATION_TIMEOUT_MS", 60_000)
    SELECTOR_TIMEOUT_MS: int = _env_int("SELECTOR_TIMEOUT_MS", 15_000)
    SETTLE_DELAY_SECONDS: float = _env_float("SETTLE_DELAY_SECONDS", 5.0)

    # --- Selector discovery ---
    PICKER_TIMEOUT_SECONDS: float = _env_float(
        "PICKER_TIMEOUT_SECONDS", 300.0
    )
    IS_CI: bool = os.getenv("CI", "").lower() == "true"

    # --- Extraction ---
    PRICE_MATCH_POLICY: str = os.getenv("PRICE_MATCH_POLICY", "first")

    # --- Page provider ---
    PAGE_PROVIDER: str = os.getenv("PAGE_PROVIDER", "browser")
    AVAILABLE_PROVIDERS: list[dict[str, str]] = [
        {
            "id": "browser",
            "label": "Chromium (Playwright)",
            "provider": "src.scrapers.browser_provider.BrowserPageProvider",
        },
        {
            "id": "static",
            "label": "Static HTTP (curl_cffi)",
            "provider": "src.scrapers.static_provider.StaticPageProvider",
        },
    ]
    CI_BROWSER_ARGS: list[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
    ]

    # --- Static fetching (browser impersonation) ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Notifications ---
    EMAIL_ADDRESS: str = os.getenv("EMAIL_ADDRESS", "")
    EMAIL_SECRET: str = os.getenv("EMAIL_SECRET", "")
    SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT: int = _env_int("SMTP_PORT", 587)
    EMAIL_SENDER_NAME: str = "Price Tracker"
    DESKTOP_APP_NAME: str = "Price Tracker"

    # --- Logging ---
    CONSOLE_LOG_LEVEL: str = os.getenv("CONSOLE_LOG_LEVEL", "INFO")

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    WATCHLIST_PATH: Path = DATA_DIR / "watchlist.json"
    HISTORY_PATH: Path = DATA_DIR / "price-history.json"
    CHARTS_DIR: Path = BASE_DIR / "output"
    ERRORS_DIR: Path = BASE_DIR / "errors"
    LOGS_DIR: Path = BASE_DIR / "logs"
