# src/services/result_reporter.py

"""Summarise one scheduler pass for logging and the process exit status."""

from dataclasses import dataclass, field

from src.models.check_result import CheckResult


@dataclass
class RunSummary:
    """Aggregate outcome of a pass, ordered by item name."""

    total: int = 0
    succeeded: list[CheckResult] = field(
        default_factory=lambda: list[CheckResult]()
    )
    failed: list[CheckResult] = field(
        default_factory=lambda: list[CheckResult]()
    )

    @property
    def notified(self) -> list[str]:
        return [r.item for r in self.succeeded if r.notified]

    @property
    def failed_names(self) -> list[str]:
        return [r.item for r in self.failed]

    @property
    def succeeded_names(self) -> list[str]:
        return [r.item for r in self.succeeded]


def summarize(results: list[CheckResult]) -> RunSummary:
    """Split results into successes and failures."""
    ordered = sorted(results, key=lambda r: r.item)
    return RunSummary(
        total=len(ordered),
        succeeded=[r for r in ordered if r.succeeded],
        failed=[r for r in ordered if not r.succeeded],
    )


def exit_code(summary: RunSummary) -> int:
    """1 when nothing succeeded (total failure), else 0."""
    return 0 if summary.succeeded else 1


def format_summary(summary: RunSummary) -> str:
    """Render a plain-text summary; identical input gives identical text."""
    lines = [
        f"Checked {summary.total} items: "
        f"{len(summary.succeeded)} succeeded, "
        f"{len(summary.failed)} failed, "
        f"{len(summary.notified)} notified",
    ]
    for r in summary.succeeded:
        status = "Notified" if r.notified else "No alert"
        lines.append(f"  OK    {r.item}: ${r.price:,.2f} ({status})")
    for r in summary.failed:
        lines.append(f"  FAIL  {r.item}: {r.reason} ({r.stage.value})")
    return "\n".join(lines)
