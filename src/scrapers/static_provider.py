# src/scrapers/static_provider.py

"""Plain-HTTP page provider for pages that render prices server-side.

Fetches with ``curl_cffi`` browser impersonation and falls back to
``cloudscraper`` when the primary fetch is blocked.  No JavaScript runs,
so the selector either matches the delivered HTML or never will.
"""

import asyncio
from dataclasses import dataclass
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests
from curl_cffi.requests.exceptions import RequestException, Timeout

from src.config.settings import Settings
from src.errors import NavigationError, NavigationTimeout, SelectorTimeout
from src.scrapers.base_provider import PageProvider


@dataclass
class StaticPage:
    """A fetched and parsed HTML document."""

    url: str
    soup: BeautifulSoup


class StaticPageProvider(PageProvider):
    """Fetches HTML over HTTP and queries it with CSS selectors."""

    provider_id = "static"

    def __init__(self) -> None:
        super().__init__()
        self.settings = Settings()
        self._http: Any = None

    async def start(self) -> None:
        self._http = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    async def stop(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None

    def _fetch(self, url: str, timeout_s: float) -> str:
        """GET *url*, falling back to cloudscraper when blocked."""
        if self._http is None:
            msg = "StaticPageProvider.start() has not been called"
            raise RuntimeError(msg)
        headers = dict(self.settings.DEFAULT_HEADERS)
        try:
            resp = self._http.get(url, headers=headers, timeout=timeout_s)
        except Timeout as exc:
            raise NavigationTimeout(
                f"Page did not load within {timeout_s:.0f}s: {url}"
            ) from exc
        except RequestException as exc:
            self.logger.warning(
                "[%s] Request error for %s: %s", self.provider_id, url, exc,
            )
            resp = None

        if resp is not None and resp.status_code == 200:
            return str(resp.text)

        if resp is not None:
            self.logger.warning(
                "[%s] HTTP %d for %s",
                self.provider_id,
                resp.status_code,
                url,
            )

        # Fallback: cloudscraper (JS challenge solver)
        self.logger.info(
            "[%s] curl_cffi failed, falling back to cloudscraper",
            self.provider_id,
        )
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            fallback: Any = scraper.get(
                url, headers=headers, timeout=timeout_s,
            )
        except Exception as exc:
            raise NavigationError(
                f"Failed to load {url}: {exc}"
            ) from exc
        if fallback.status_code != 200:
            raise NavigationError(
                f"Failed to load {url}: HTTP {fallback.status_code}"
            )
        return str(fallback.text)

    async def open_page(self, url: str, timeout_ms: int) -> StaticPage:
        html = await asyncio.to_thread(self._fetch, url, timeout_ms / 1000)
        return StaticPage(url=url, soup=BeautifulSoup(html, "lxml"))

    async def wait_for_selector(
        self, handle: StaticPage, selector: str, timeout_ms: int,
    ) -> None:
        if handle.soup.select_one(selector) is None:
            raise SelectorTimeout(
                f"Selector '{selector}' not present in {handle.url}"
            )

    async def read_text(self, handle: StaticPage, selector: str) -> str:
        element = handle.soup.select_one(selector)
        if element is None:
            raise SelectorTimeout(
                f"Selector '{selector}' not present in {handle.url}"
            )
        return element.get_text(" ", strip=True)

    async def close(self, handle: StaticPage) -> None:
        handle.soup.decompose()
