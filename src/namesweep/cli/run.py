"""
CLI: ``namesweep run``: resolve a wordlist into UUIDs.
"""

from __future__ import annotations

import asyncio

import typer
from pydantic import ValidationError
from rich.progress import Progress, SpinnerColumn, TextColumn

from namesweep.cli.utils import console, err_console, format_progress, print_summary
from namesweep.core.errors import SweepError


def run(
    wordlist_path: str = typer.Option(
        ...,
        "--wordlist-path",
        "-w",
        help="File to pull names from. Characters that can't appear in a name are removed.",
    ),
    output_path: str = typer.Option(
        ..., "--output-path", "-o", help="Where to append found UUIDs ('-' for stdout)."
    ),
    threads: int | None = typer.Option(  # noqa: UP007
        None, "--threads", "-t", help="Concurrent lookups [default: NAMESWEEP_DEFAULT_THREADS or 80]."
    ),
    ignored: str | None = typer.Option(  # noqa: UP007
        None, "--ignored", "-i", help="UUIDs to ignore if found (full or truncated)."
    ),
    ignored_truncation: int | None = typer.Option(  # noqa: UP007
        None,
        "--ignored-truncation",
        "-r",
        help="Hex digits to keep from UUIDs when matching ignores (8 for laby). No truncation if not given.",
    ),
    suffixes: str | None = typer.Option(  # noqa: UP007
        None,
        "--suffixes",
        "-s",
        help="Suffixes to append to each word. Bare words are not kept when given.",
    ),
    print_ignored: bool = typer.Option(
        False, "--print-ignored", "-a", help="Write ignored UUIDs too, greyed out (or '# '-prefixed in files)."
    ),
    uuids_only: bool = typer.Option(False, "--uuids-only", help="Write only the UUID, not UUID:name."),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR."),  # noqa: UP007
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines on stderr."),
) -> None:
    """Resolve every candidate name in a wordlist and write the UUIDs found.

    Example::

        namesweep run -w words.txt -o found.txt -t 80
        namesweep run -w words.txt -s regions.txt -i laby.txt -r 8 -o found.txt -a
    """
    from namesweep.core.config import SweepConfig
    from namesweep.core.logging import configure_logging
    from namesweep.core.settings import get_settings
    from namesweep.pipeline.runner import run_sweep

    try:
        settings = get_settings()
        configure_logging(
            level=log_level or settings.log_level,
            json_format=json_logs or settings.log_format == "json",
            force=True,
        )
        config = SweepConfig.build(
            settings,
            wordlist_path=wordlist_path,
            output_path=output_path,
            threads=threads,
            ignore_path=ignored,
            ignore_truncation=ignored_truncation,
            suffix_path=suffixes,
            show_ignored=print_ignored,
            uuids_only=uuids_only,
        )
        console.print(
            f"[bold green]Starting sweep[/bold green] "
            f"(threads={config.threads}, endpoint={config.api_url})"
        )
        with Progress(SpinnerColumn(), TextColumn("{task.description}"), console=console, transient=True) as progress:
            task = progress.add_task("starting")
            stats = asyncio.run(
                run_sweep(config, on_progress=lambda s: progress.update(task, description=format_progress(s)))
            )
    except SweepError as exc:
        err_console.print(f"[bold red]Error[/bold red] ({exc.category.value}): {exc.message}")
        raise typer.Exit(code=1)
    except ValidationError as exc:
        err_console.print(f"[bold red]Invalid settings[/bold red]: {exc}")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Sweep interrupted[/yellow]")
        raise typer.Exit(code=130)

    print_summary(stats)
    if stats.fatal_errors:
        raise typer.Exit(code=1)
