"""
Root Typer application for the sample-services CLI.

Sub-commands import their service lazily so ``--help`` stays fast.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="sample-services",
    help="sample-services - demo API and worker with traced, metered, correlated telemetry.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from sample_services import __version__

        typer.echo(f"sample-services {__version__}")
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
    """sample-services CLI - run the sample API or the sample worker."""


# ── Sub-command registration ─────────────────────────────────────────────

from sample_services.cli.api import app as api_app  # noqa: E402
from sample_services.cli.worker import app as worker_app  # noqa: E402

app.add_typer(api_app, name="api", help="Sample HTTP API.")
app.add_typer(worker_app, name="worker", help="Background worker.")
