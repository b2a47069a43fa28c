"""Background worker loop: one simulated job per tick.

The loop runs jobs strictly one after another:

    check shutdown → job N → wait(interval) → check shutdown → job N+1 → …

SIGINT / SIGTERM set a ``threading.Event``. The job in flight runs to
completion; the interval wait wakes immediately; the loop exits and flushes
tracing before :meth:`WorkerLoop.start` returns.

Usage::

    worker = WorkerLoop(job, runner, interval=10.0, logger=log, tracing=tracing)
    worker.start()  # blocking, runs until SIGINT/SIGTERM
"""

from __future__ import annotations

import signal
import threading
import time
from dataclasses import dataclass
from typing import Any, Protocol

from opentelemetry.context import Context

from sample_services.core.durations import format_duration
from sample_services.core.result import Err, Result
from sample_services.observability.logging import error_fields
from sample_services.observability.metrics import PipelineMetricNames
from sample_services.observability.tracing import Tracing
from sample_services.pipeline.runner import PipelineOutcome, PipelineRunner


class Job(Protocol):
    """A unit of work the loop runs once per tick."""

    name: str
    pipeline_name: str
    metric_names: PipelineMetricNames

    def run(self, runner: PipelineRunner, ctx: Context | None, sequence: int) -> Result[PipelineOutcome]: ...


@dataclass
class WorkerStats:
    """Aggregate statistics for a worker."""

    total_processed: int = 0
    total_completed: int = 0
    total_failed: int = 0
    last_sequence: int = 0
    started_at: float | None = None

    @property
    def uptime_seconds(self) -> float:
        if self.started_at is None:
            return 0.0
        return time.monotonic() - self.started_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_processed": self.total_processed,
            "total_completed": self.total_completed,
            "total_failed": self.total_failed,
            "last_sequence": self.last_sequence,
            "uptime_seconds": round(self.uptime_seconds, 2),
        }


class WorkerLoop:
    """Runs ``job`` every ``interval`` seconds until stopped."""

    def __init__(
        self,
        job: Job,
        runner: PipelineRunner,
        *,
        interval: float,
        logger: Any,
        tracing: Tracing,
        install_signal_handlers: bool = True,
        max_runs: int | None = None,
    ):
        """
        Args:
            job: Unit of work, e.g. :class:`~sample_services.worker.email_job.EmailJob`.
            runner: Pipeline runner bound to the job's metrics.
            interval: Seconds to wait after each job.
            logger: Process logger.
            tracing: Flushed by :meth:`start` on the way out.
            install_signal_handlers: Register SIGINT/SIGTERM handlers in :meth:`start`.
            max_runs: Stop after this many jobs (``None`` = run forever).
        """
        self._job = job
        self._runner = runner
        self._interval = interval
        self._logger = logger
        self._tracing = tracing
        self._install_signal_handlers = install_signal_handlers
        self._max_runs = max_runs
        self._shutdown = threading.Event()
        self._sequence = 0
        self._stats = WorkerStats()

    @property
    def stats(self) -> WorkerStats:
        return self._stats

    @property
    def stopping(self) -> bool:
        return self._shutdown.is_set()

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def start(self) -> None:
        """Run the loop (blocking) and flush tracing once it exits."""
        self._logger.info(
            "worker_starting",
            job=self._job.name,
            interval=format_duration(self._interval),
        )
        self._stats.started_at = time.monotonic()

        if self._install_signal_handlers:
            try:
                signal.signal(signal.SIGINT, self._handle_signal)
                signal.signal(signal.SIGTERM, self._handle_signal)
            except (ValueError, OSError):
                # Not in main thread
                self._logger.debug("signal_handlers_skipped")

        try:
            self._run_loop()
        finally:
            self._cleanup()

    def stop(self) -> None:
        """Request graceful shutdown. The job in flight is not interrupted."""
        self._shutdown.set()

    def _handle_signal(self, signum: int, frame: Any) -> None:
        self._logger.info("shutdown_signal_received", signal=signal.Signals(signum).name)
        self.stop()

    # ------------------------------------------------------------------ #
    # Main loop
    # ------------------------------------------------------------------ #

    def _run_loop(self) -> None:
        while not self._shutdown.is_set():
            self._sequence += 1
            self.run_once(self._sequence)

            if self._max_runs is not None and self._stats.total_processed >= self._max_runs:
                break
            self._shutdown.wait(self._interval)

    def run_once(self, sequence: int) -> Result[PipelineOutcome]:
        """Run one job. Failures are counted and logged, never raised."""
        try:
            result = self._job.run(self._runner, None, sequence)
        except Exception as e:
            self._logger.error("job_crashed", job=self._job.name, sequence=sequence, **error_fields(e))
            result = Err(e)

        self._stats.total_processed += 1
        self._stats.last_sequence = sequence
        if result.is_ok():
            self._stats.total_completed += 1
        else:
            self._stats.total_failed += 1
        return result

    def _cleanup(self) -> None:
        self._logger.info("worker_shutting_down", job=self._job.name, **self._stats.to_dict())
        try:
            self._tracing.shutdown()
        except Exception as e:
            self._logger.error("tracing_shutdown_failed", **error_fields(e))


__all__ = ["Job", "WorkerStats", "WorkerLoop"]
