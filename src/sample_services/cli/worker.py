"""
CLI: ``sample-services worker`` - start the background worker.
"""

from __future__ import annotations

import typer

from sample_services.cli.utils import console, err_console, overrides

app = typer.Typer(no_args_is_help=True)


@app.command("start")
def start(
    interval: str | None = typer.Option(None, "--interval", "-i", help="Pause between jobs, e.g. 10s (env: WORKER_INTERVAL)"),  # noqa: UP007
    job: str | None = typer.Option(None, "--job", "-j", help="email or task (env: WORKER_JOB)"),  # noqa: UP007
    metrics_port: int | None = typer.Option(None, "--metrics-port", help="Metrics port (env: METRICS_PORT)"),  # noqa: UP007
    fail_simulate: bool | None = typer.Option(None, "--fail-simulate/--no-fail-simulate", help="Force the send/save step to fail"),  # noqa: UP007
    log_level: str | None = typer.Option(None, "--log-level", help="Log level (env: LOG_LEVEL)"),  # noqa: UP007
) -> None:
    """Start the worker loop. Runs until SIGINT/SIGTERM.

    Example::

        sample-services worker start --interval 5s
        sample-services worker start --job task --fail-simulate
    """
    from pydantic import ValidationError as SettingsValidationError

    from sample_services.core.settings import WorkerSettings
    from sample_services.worker.main import run_worker

    try:
        settings = WorkerSettings(
            **overrides(
                worker_interval=interval,
                worker_job=job,
                metrics_port=metrics_port,
                fail_simulate_enabled=fail_simulate,
                log_level=log_level,
            )
        )
    except SettingsValidationError as exc:
        err_console.print(f"[red]Invalid worker settings:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    console.print(
        f"[bold green]Starting sample worker[/bold green] "
        f"(job={settings.worker_job}, metrics :{settings.metrics_port})"
    )

    code = run_worker(settings)
    if code != 0:
        err_console.print("[red]Worker exited with an error[/red]")
        raise typer.Exit(code=code)
    console.print("[yellow]Worker stopped[/yellow]")
