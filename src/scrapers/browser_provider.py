# src/scrapers/browser_provider.py

"""Chromium page provider backed by Playwright's async API."""

import asyncio
from pathlib import Path
from typing import Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.config.settings import Settings
from src.errors import NavigationError, NavigationTimeout, SelectorTimeout
from src.scrapers.base_provider import PageProvider
from src.scrapers.element_picker import PICKER_SCRIPT, TEARDOWN_SCRIPT


class BrowserPageProvider(PageProvider):
    """Renders pages in Chromium; one tab per open handle."""

    provider_id = "browser"
    supports_picking = True

    def __init__(
        self,
        headless: bool = True,
        launch_args: list[str] | None = None,
    ) -> None:
        super().__init__()
        self.headless = headless
        self.launch_args = launch_args or []
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    @classmethod
    def from_settings(cls, headless: bool = True) -> "BrowserPageProvider":
        args = Settings.CI_BROWSER_ARGS if Settings.IS_CI else []
        return cls(headless=headless, launch_args=list(args))

    # ── Lifecycle ────────────────────────────────────────

    async def start(self) -> None:
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless, args=self.launch_args,
        )
        # Headful windows use the real window size, like a normal browser
        self._context = await self._browser.new_context(
            no_viewport=not self.headless,
        )
        self.logger.info(
            "Chromium started (headless=%s)", self.headless,
        )

    async def stop(self) -> None:
        if self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        self.logger.debug("Chromium stopped")

    # ── Page operations ──────────────────────────────────

    async def open_page(self, url: str, timeout_ms: int) -> Page:
        if self._context is None:
            msg = "BrowserPageProvider.start() has not been called"
            raise RuntimeError(msg)
        page = await self._context.new_page()
        try:
            await page.goto(
                url, timeout=timeout_ms, wait_until="domcontentloaded",
            )
        except PlaywrightTimeoutError as exc:
            await self.close(page)
            raise NavigationTimeout(
                f"Page did not load within {timeout_ms}ms: {url}"
            ) from exc
        except PlaywrightError as exc:
            await self.close(page)
            raise NavigationError(
                f"Failed to load {url}: {exc.message}"
            ) from exc
        except BaseException:
            await self.close(page)
            raise
        return page

    async def wait_for_selector(
        self, handle: Page, selector: str, timeout_ms: int,
    ) -> None:
        try:
            await handle.wait_for_selector(
                selector, timeout=timeout_ms, state="attached",
            )
        except PlaywrightTimeoutError as exc:
            raise SelectorTimeout(
                f"Selector '{selector}' not found within {timeout_ms}ms"
            ) from exc

    async def read_text(self, handle: Page, selector: str) -> str:
        text: Any = await handle.eval_on_selector(
            selector, "el => el.innerText",
        )
        return str(text or "")

    async def close(self, handle: Page) -> None:
        try:
            await handle.close()
        except PlaywrightError as exc:
            self.logger.debug("Page already gone on close: %s", exc)

    async def pick_element(
        self, handle: Page, timeout_s: float,
    ) -> str | None:
        """Run the in-page picker until a click, Escape, or the timeout."""
        try:
            selector: Any = await asyncio.wait_for(
                handle.evaluate(PICKER_SCRIPT), timeout=timeout_s,
            )
        except asyncio.TimeoutError:
            self.logger.warning(
                "No element picked within %.0fs on %s",
                timeout_s,
                handle.url,
            )
            return None
        except PlaywrightError as exc:
            # Page closed or navigated away mid-pick
            self.logger.warning("Element picker interrupted: %s", exc.message)
            return None
        finally:
            await self._teardown_picker(handle)

        if isinstance(selector, str) and selector.strip():
            return selector.strip()
        return None

    async def _teardown_picker(self, handle: Page) -> None:
        """Remove picker listeners/overlay if the page is still open."""
        if handle.is_closed():
            return
        try:
            await handle.evaluate(TEARDOWN_SCRIPT)
        except PlaywrightError as exc:
            self.logger.debug("Picker teardown skipped: %s", exc.message)

    async def capture_screenshot(
        self, handle: Page, path: Path,
    ) -> Path | None:
        path.parent.mkdir(parents=True, exist_ok=True)
        await handle.screenshot(path=str(path), full_page=False)
        return path
