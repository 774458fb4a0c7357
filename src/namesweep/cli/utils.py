"""
CLI utility helpers: consoles and summary rendering.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from namesweep.execution.models import SweepStats

# Records may go to stdout, so everything the CLI says goes to stderr
console = Console(stderr=True)
err_console = Console(stderr=True)

_SUMMARY_ROWS = (
    ("candidates", "Candidates"),
    ("requests", "Requests"),
    ("found", "Found"),
    ("written", "Written"),
    ("ignored_suppressed", "Ignored (hidden)"),
    ("ignored_shown", "Ignored (shown)"),
    ("not_found", "Not found"),
    ("transient_errors", "Failed lookups"),
    ("fatal_errors", "Fatal errors"),
    ("skipped", "Skipped"),
    ("cancelled", "Cancelled"),
)


def print_summary(stats: SweepStats, *, title: str = "Sweep summary") -> None:
    """Render sweep counters as a Rich table."""
    data = stats.to_dict()
    table = Table(title=title, show_header=False, pad_edge=False)
    table.add_column("metric", style="cyan")
    table.add_column("value", justify="right")
    for key, label in _SUMMARY_ROWS:
        value = data[key]
        if key in ("skipped", "cancelled", "fatal_errors") and not value:
            continue
        table.add_row(label, str(value))
    console.print(table)
    if stats.stopped_early:
        console.print("[yellow]Sweep stopped before the wordlist was exhausted[/yellow]")


def format_progress(stats: SweepStats) -> str:
    """One-line live status: ``reqs: N | found: W (F total)``."""
    return f"reqs: {stats.requests} | found: {stats.written} ({stats.found} total)"
