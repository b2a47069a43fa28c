"""
CLI: ``sample-services api`` - start the sample API.
"""

from __future__ import annotations

import typer

from sample_services.cli.utils import console, err_console, overrides

app = typer.Typer(no_args_is_help=True)


@app.command("start")
def start(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (env: HOST)"),  # noqa: UP007
    port: int | None = typer.Option(None, "--port", "-p", help="API port (env: PORT)"),  # noqa: UP007
    metrics_port: int | None = typer.Option(None, "--metrics-port", help="Metrics port (env: METRICS_PORT)"),  # noqa: UP007
    log_level: str | None = typer.Option(None, "--log-level", help="Log level (env: LOG_LEVEL)"),  # noqa: UP007
) -> None:
    """Start the sample API and its /metrics listener.

    Example::

        sample-services api start --port 8080 --metrics-port 9090
    """
    from sample_services.api.server import run_api
    from sample_services.core.settings import ApiSettings

    settings = ApiSettings(**overrides(host=host, port=port, metrics_port=metrics_port, log_level=log_level))
    console.print(
        f"[bold green]Starting sample API[/bold green] on {settings.host}:{settings.port} "
        f"(metrics :{settings.metrics_port})"
    )

    code = run_api(settings)
    if code != 0:
        err_console.print("[red]API exited with an error[/red]")
        raise typer.Exit(code=code)
