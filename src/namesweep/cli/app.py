"""
Root Typer application for the namesweep CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from namesweep.cli.candidates import candidates
from namesweep.cli.run import run

app = Typer(
    name="namesweep",
    help="namesweep: resolve wordlists of player names into UUIDs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("namesweep")
        except PackageNotFoundError:
            from namesweep import __version__ as v
        typer.echo(f"namesweep {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """namesweep CLI: sweep wordlists against the profile lookup API."""


app.command("run")(run)
app.command("candidates")(candidates)
