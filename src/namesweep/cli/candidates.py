"""
CLI: ``namesweep candidates``: preview generated names without any lookups.
"""

from __future__ import annotations

import typer

from namesweep.cli.utils import err_console
from namesweep.core.errors import SweepError


def candidates(
    wordlist_path: str = typer.Option(..., "--wordlist-path", "-w", help="Wordlist to sanitize."),
    suffixes: str | None = typer.Option(None, "--suffixes", "-s", help="Suffix list to expand with."),  # noqa: UP007
    count: bool = typer.Option(False, "--count", help="Print only the number of candidates."),
) -> None:
    """Print the candidates a sweep would look up, one per line, to stdout."""
    from namesweep.core.config import SweepConfig
    from namesweep.core.logging import configure_logging
    from namesweep.core.settings import get_settings
    from namesweep.pipeline.runner import iter_candidates

    try:
        settings = get_settings()
        # candidates own stdout; diagnostics stay on stderr
        configure_logging(level=settings.log_level, json_format=settings.log_format == "json", force=True)
        config = SweepConfig.build(
            settings,
            wordlist_path=wordlist_path,
            output_path="-",
            suffix_path=suffixes,
        )
        if count:
            typer.echo(sum(1 for _ in iter_candidates(config)))
            return
        for name in iter_candidates(config):
            typer.echo(name)
    except SweepError as exc:
        err_console.print(f"[bold red]Error[/bold red] ({exc.category.value}): {exc.message}")
        raise typer.Exit(code=1)
