# src/cli/runner.py

"""Headless tracker run: load, resolve selectors, check, persist, report."""

import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.errors import ConfigError, HistoryWriteError
from src.models.check_result import CheckResult, CheckStage
from src.scrapers.base_provider import PageProvider, create_provider
from src.services.batch_scheduler import BatchScheduler
from src.services.notification_gate import NotificationGate
from src.services.notifier import Notifier
from src.services.result_reporter import (
    RunSummary,
    exit_code,
    format_summary,
    summarize,
)
from src.services.selector_resolver import SelectorResolver
from src.storage.history_store import HistoryStore
from src.storage.watchlist_store import WatchlistStore

logger = logging.getLogger("price_tracker.cli")

# Status output goes to stderr, alongside the log stream
_err = Console(stderr=True)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def _print_summary(summary: RunSummary) -> None:
    """Render the end-of-run summary as a Rich table."""
    table = Table(
        title="Price Check Summary",
        show_lines=False,
        title_style="bold cyan",
    )
    table.add_column("Item", style="bold")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Status", justify="center")
    table.add_column("Notes", style="dim")

    for r in summary.succeeded:
        status = (
            "[yellow]📣 Notified[/yellow]" if r.notified else "No alert"
        )
        movement = r.movement.value.replace("_", " ") if r.movement else ""
        table.add_row(r.item, f"${r.price:,.2f}", status, movement)
    for r in summary.failed:
        table.add_row(
            r.item,
            "—",
            f"[red]❌ {r.reason}[/red]",
            r.stage.value.replace("_", " "),
        )

    _err.print(table)
    _err.print(
        f"[bold]{len(summary.succeeded)}/{summary.total} succeeded, "
        f"{len(summary.notified)} notified[/bold]"
    )


async def run_tracker(
    watchlist_path: Path | None = None,
    history_path: Path | None = None,
    concurrency: int | None = None,
    provider_id: str | None = None,
    headful: bool = False,
    provider: PageProvider | None = None,
    notifier: Notifier | None = None,
) -> int:
    """Run one pass over the watchlist and return the process exit code."""
    watchlist = WatchlistStore(watchlist_path)
    history = HistoryStore(history_path)
    try:
        items = watchlist.load()
        history.load()
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        _err.print(f"[red]Configuration error: {exc}[/red]")
        return EXIT_CONFIG_ERROR

    if not items:
        _err.print("[yellow]Watchlist is empty, nothing to check.[/yellow]")
        return EXIT_FAILURE

    # A visible window is needed only when someone has to pick selectors,
    # which never happens in CI
    headless = not headful and (
        Settings.IS_CI or all(item.has_selector for item in items)
    )
    if provider is None:
        provider = create_provider(provider_id, headless=headless)
    gate = NotificationGate(history, notifier or Notifier())
    try:
        scheduler = BatchScheduler(
            provider,
            gate,
            concurrency=concurrency,
            errors_dir=Settings.ERRORS_DIR,
        )
    except ValueError as exc:
        # Bad MAX_CONCURRENT_CHECKS or PRICE_MATCH_POLICY
        logger.error("Configuration error: %s", exc)
        _err.print(f"[red]Configuration error: {exc}[/red]")
        return EXIT_CONFIG_ERROR

    async with provider:
        ready = await SelectorResolver(provider, watchlist).resolve(items)
        results = await scheduler.run(ready)

    ready_names = {item.name for item in ready}
    results.extend(
        CheckResult.failure(
            item.name,
            "MissingSelector",
            CheckStage.START,
            "No price selector configured",
        )
        for item in items
        if item.name not in ready_names
    )

    # Durability barrier: every check has settled by now
    try:
        history.flush()
    except HistoryWriteError as exc:
        logger.critical("%s", exc, exc_info=True)
        _err.print(f"[red]{exc}[/red]")
        return EXIT_FAILURE

    summary = summarize(results)
    logger.info("Run summary:\n%s", format_summary(summary))
    _print_summary(summary)
    return exit_code(summary)


def run_chart_export(
    history_path: Path | None = None,
    open_browser: bool = True,
) -> int:
    """Render the stored history as an HTML chart."""
    from src.storage.chart_exporter import export_history_chart

    history = HistoryStore(history_path)
    try:
        history.load()
    except ConfigError as exc:
        _err.print(f"[red]Configuration error: {exc}[/red]")
        return EXIT_CONFIG_ERROR

    path = export_history_chart(history, open_browser=open_browser)
    if path is None:
        _err.print("[yellow]No price history to chart yet.[/yellow]")
        return EXIT_FAILURE
    _err.print(f"[green]✓ Chart saved → {path}[/green]")
    return EXIT_OK
