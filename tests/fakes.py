# tests/fakes.py

"""In-memory stand-ins for the page provider and notification transport."""

import asyncio
from dataclasses import dataclass
from pathlib import Path

from src.errors import TransportError
from src.scrapers.base_provider import PageProvider
from src.services.notifier import Notifier


@dataclass
class FakePage:
    """Handle returned by FakeProvider.open_page."""

    url: str
    closed: bool = False


class FakeProvider(PageProvider):
    """Scriptable provider keyed by URL.

    ``delays`` simulate slow pages (seconds spent in wait_for_selector),
    ``nav_errors`` / ``selector_errors`` raise at the matching stage and
    ``picks`` are the selectors a "human" clicks.
    """

    provider_id = "fake"

    def __init__(
        self,
        texts: dict[str, str] | None = None,
        delays: dict[str, float] | None = None,
        nav_errors: dict[str, Exception] | None = None,
        selector_errors: dict[str, Exception] | None = None,
        picks: dict[str, str | None] | None = None,
        supports_picking: bool = True,
    ) -> None:
        super().__init__()
        self.texts = texts or {}
        self.delays = delays or {}
        self.nav_errors = nav_errors or {}
        self.selector_errors = selector_errors or {}
        self.picks = picks or {}
        self.supports_picking = supports_picking
        self.in_flight = 0
        self.max_in_flight = 0
        self.events: list[tuple[str, str]] = []
        self.pages: list[FakePage] = []
        self.started = False
        self.stopped = False
        self.screenshots: list[Path] = []

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def open_page(self, url: str, timeout_ms: int) -> FakePage:
        if url in self.nav_errors:
            raise self.nav_errors[url]
        page = FakePage(url)
        self.pages.append(page)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.events.append(("start", url))
        return page

    async def wait_for_selector(
        self, handle: FakePage, selector: str, timeout_ms: int,
    ) -> None:
        await asyncio.sleep(self.delays.get(handle.url, 0))
        if handle.url in self.selector_errors:
            raise self.selector_errors[handle.url]

    async def read_text(self, handle: FakePage, selector: str) -> str:
        return self.texts[handle.url]

    async def close(self, handle: FakePage) -> None:
        handle.closed = True
        self.in_flight -= 1
        self.events.append(("end", handle.url))

    async def pick_element(
        self, handle: FakePage, timeout_s: float,
    ) -> str | None:
        return self.picks.get(handle.url)

    async def capture_screenshot(
        self, handle: FakePage, path: Path,
    ) -> Path | None:
        self.screenshots.append(path)
        return path

    @property
    def open_pages(self) -> list[FakePage]:
        return [p for p in self.pages if not p.closed]


class FakeNotifier(Notifier):
    """Records alerts instead of sending them."""

    def __init__(
        self,
        fail_desktop: bool = False,
        fail_email: bool = False,
        email_delay: float = 0.0,
        events: list[tuple[str, str]] | None = None,
    ) -> None:
        super().__init__(
            email_address="me@example.com", email_secret="secret",
        )
        self.fail_desktop = fail_desktop
        self.fail_email = fail_email
        self.email_delay = email_delay
        self.events = events if events is not None else []
        self.desktop: list[tuple[str, str]] = []
        self.emails: list[tuple[str, str]] = []

    def notify_desktop(self, title: str, message: str) -> None:
        if self.fail_desktop:
            raise TransportError("desktop unavailable")
        self.desktop.append((title, message))

    async def notify_email(self, subject: str, message: str) -> None:
        await asyncio.sleep(self.email_delay)
        if self.fail_email:
            raise TransportError("smtp down")
        self.emails.append((subject, message))
        self.events.append(("email", subject))
