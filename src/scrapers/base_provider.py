# src/scrapers/base_provider.py

"""Abstract page-automation provider used by the scheduler and resolver."""

import importlib
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from types import TracebackType
from typing import Any

from src.config.settings import Settings


class PageProvider(ABC):
    """Opens pages, waits for selectors and reads element text.

    Handles returned by :meth:`open_page` are opaque to callers and must
    be released with :meth:`close`; :meth:`session` does that on every
    exit path.
    """

    provider_id: str = "base"
    supports_picking: bool = False

    def __init__(self) -> None:
        self.logger = logging.getLogger(
            f"price_tracker.provider.{self.provider_id}"
        )

    @classmethod
    def from_settings(cls, headless: bool = True) -> "PageProvider":
        """Build a provider configured from :class:`Settings`."""
        return cls()

    # ── Lifecycle ────────────────────────────────────────

    async def start(self) -> None:
        """Acquire long-lived resources (browser process, HTTP session)."""

    async def stop(self) -> None:
        """Release everything acquired in :meth:`start`."""

    async def __aenter__(self) -> "PageProvider":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()

    # ── Page operations ──────────────────────────────────

    @abstractmethod
    async def open_page(self, url: str, timeout_ms: int) -> Any:
        """Navigate to *url*.

        Raises:
            NavigationTimeout: the deadline passed before the page loaded.
            NavigationError: the page failed to load for another reason.
        """
        ...

    @abstractmethod
    async def wait_for_selector(
        self, handle: Any, selector: str, timeout_ms: int,
    ) -> None:
        """Block until *selector* matches, raising SelectorTimeout otherwise."""
        ...

    @abstractmethod
    async def read_text(self, handle: Any, selector: str) -> str:
        """Return the rendered text of the first element matching *selector*."""
        ...

    @abstractmethod
    async def close(self, handle: Any) -> None:
        """Release a page handle. Must not raise."""
        ...

    async def pick_element(
        self, handle: Any, timeout_s: float,
    ) -> str | None:
        """Let a human click the price element; ``None`` if unsupported."""
        self.logger.warning(
            "[%s] Interactive selector picking is not supported",
            self.provider_id,
        )
        return None

    async def capture_screenshot(
        self, handle: Any, path: Path,
    ) -> Path | None:
        """Save a screenshot of the page, if the provider can render one."""
        return None

    @asynccontextmanager
    async def session(
        self, url: str, timeout_ms: int,
    ) -> AsyncIterator[Any]:
        """Open a page and guarantee it is closed afterwards."""
        handle = await self.open_page(url, timeout_ms)
        try:
            yield handle
        finally:
            await self.close(handle)


def _load_provider_class(dotted_path: str) -> type[PageProvider]:
    """Dynamically import a provider class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[PageProvider] = getattr(module, class_name)
    return cls


def create_provider(
    provider_id: str | None = None, headless: bool = True,
) -> PageProvider:
    """Instantiate a registered provider by id (default: Settings.PAGE_PROVIDER)."""
    wanted = provider_id or Settings.PAGE_PROVIDER
    registry = {p["id"]: p for p in Settings.AVAILABLE_PROVIDERS}
    if wanted not in registry:
        valid = ", ".join(sorted(registry))
        msg = f"Unknown page provider '{wanted}' (valid: {valid})"
        raise ValueError(msg)
    cls = _load_provider_class(registry[wanted]["provider"])
    return cls.from_settings(headless=headless)
